"""
Page Object 基底類別

所有 Page Object 都繼承此類，提供通用的元素操作方法。
元素以 LocatorDescriptor 描述，查找一律經過 SelfHealingLocator，
所有策略都失敗時拋出 ElementNotFoundError。
"""

from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support.ui import WebDriverWait

from config.config import Config
from core.exceptions import ElementNotFoundError, PageNotLoadedError
from core.self_healing import LocatorDescriptor, SelfHealingLocator
from utils.logger import logger
from utils.screenshot import take_screenshot


class BasePage:
    """
    Page Object 基底類別

    提供：
    - 導航與 DOM 載入等待
    - 多策略元素查找
    - 點擊、輸入、取文字等通用操作
    - 不拋例外的存在 / 隱藏判斷
    """

    def __init__(self, driver, timeout: int | None = None):
        self.driver = driver
        self.timeout = timeout or Config.EXPLICIT_WAIT
        self.locator = SelfHealingLocator(driver, timeout=self.timeout)

    # ── 導航 ──

    def open(self, url: str) -> None:
        logger.info(f"開啟頁面: {url}")
        self.driver.get(url)
        self.wait_for_dom_ready()

    def wait_for_dom_ready(self, timeout: float | None = None) -> None:
        """等待 document.readyState 至少為 interactive（相當於 domcontentloaded）"""
        try:
            WebDriverWait(self.driver, timeout or self.timeout).until(
                lambda d: d.execute_script("return document.readyState")
                in ("interactive", "complete")
            )
        except TimeoutException as e:
            raise PageNotLoadedError(type(self).__name__) from e

    @property
    def current_url(self) -> str:
        return self.driver.current_url

    # ── 元素查找 ──

    def find(self, descriptor: LocatorDescriptor, timeout: float | None = None) -> WebElement:
        """依序嘗試 descriptor 的所有策略，找不到時拋出 ElementNotFoundError"""
        return self.locator.locate(descriptor, timeout)

    def is_present(self, descriptor: LocatorDescriptor, timeout: float = 3) -> bool:
        """判斷元素是否可見（不拋出例外）"""
        return self.locator.exists(descriptor, timeout)

    def is_hidden(self, descriptor: LocatorDescriptor, timeout: float = 1) -> bool:
        """元素不存在或不可見"""
        return not self.is_present(descriptor, timeout)

    # ── 元素操作 ──

    def click(self, descriptor: LocatorDescriptor) -> None:
        logger.info(f"點擊元素: {descriptor.identifier}")
        self.find(descriptor).click()

    def input_text(self, descriptor: LocatorDescriptor, text: str) -> None:
        """清除後輸入文字"""
        logger.info(f"輸入文字: '{text}' -> {descriptor.identifier}")
        element = self.find(descriptor)
        element.clear()
        element.send_keys(text)

    def clear(self, descriptor: LocatorDescriptor) -> None:
        self.find(descriptor).clear()

    def get_text(self, descriptor: LocatorDescriptor) -> str:
        return (self.find(descriptor).text or "").strip()

    def get_value(self, descriptor: LocatorDescriptor) -> str:
        return self.find(descriptor).get_property("value") or ""

    def is_enabled(self, descriptor: LocatorDescriptor) -> bool:
        try:
            return self.find(descriptor).is_enabled()
        except ElementNotFoundError:
            return False

    # ── 頁面狀態 ──

    def get_page_source(self) -> str:
        """取得頁面原始碼"""
        try:
            return self.driver.page_source
        except WebDriverException as e:
            logger.warning(f"無法取得頁面原始碼: {e}")
            return ""

    def screenshot(self, name: str, directory=None) -> str:
        """截圖並回傳檔案路徑"""
        return take_screenshot(self.driver, name, directory)

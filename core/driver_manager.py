"""
Driver 生命週期管理

負責建立、取得、關閉 Selenium WebDriver，確保每個測試獨立。

支援：
- 執行緒安全（pytest-xdist 平行測試時每個 worker 獨立 driver）
- Chrome / Firefox / Edge，預設 headless
- 啟用 ZAP 時讓瀏覽器流量經過 ZAP proxy（並接受 ZAP 的自簽憑證）
- 啟動失敗自動重試（指數退避）
"""

import threading
import time

from selenium import webdriver
from selenium.webdriver.remote.webdriver import WebDriver

from config.config import Config
from core.exceptions import DriverConnectionError, DriverNotInitializedError
from utils.logger import logger


class DriverManager:
    """
    管理 Selenium WebDriver 的建立與銷毀

    使用 thread-local storage 確保平行測試時各 worker 的 driver 互不干擾。
    """

    _local = threading.local()

    # ── Options ──

    @classmethod
    def build_options(
        cls,
        browser: str,
        headless: bool | None = None,
        proxy: str | None = None,
    ):
        """
        建立瀏覽器 options。

        Args:
            browser: 'chrome' / 'firefox' / 'edge'
            headless: 預設讀取 Config.HEADLESS
            proxy: proxy 位址（例如 ZAP 的 http://localhost:8080）
        """
        headless = Config.HEADLESS if headless is None else headless
        width, height = Config.WINDOW_SIZE.split(",")

        if browser == "chrome":
            options = webdriver.ChromeOptions()
        elif browser == "edge":
            options = webdriver.EdgeOptions()
        elif browser == "firefox":
            options = webdriver.FirefoxOptions()
        else:
            raise ValueError(f"不支援的瀏覽器: {browser}")

        if browser == "firefox":
            if headless:
                options.add_argument("-headless")
            options.add_argument(f"--width={width}")
            options.add_argument(f"--height={height}")
        else:
            if headless:
                options.add_argument("--headless=new")
            options.add_argument(f"--window-size={width},{height}")
            options.add_argument("--no-sandbox")
            options.add_argument("--disable-dev-shm-usage")

        if proxy:
            options.proxy = webdriver.Proxy({
                "proxyType": "manual",
                "httpProxy": proxy.split("://", 1)[-1],
                "sslProxy": proxy.split("://", 1)[-1],
            })
            options.accept_insecure_certs = True

        return options

    # ── Driver 建立 ──

    @classmethod
    def create_driver(
        cls,
        browser: str | None = None,
        max_retries: int = 2,
        retry_delay: float = 2.0,
    ) -> WebDriver:
        """
        建立 WebDriver，支援自動重試。

        Args:
            browser: 'chrome' / 'firefox' / 'edge'，預設讀取 Config.BROWSER
            max_retries: 啟動失敗時最多嘗試次數
            retry_delay: 首次重試等待秒數（後續指數退避）

        Returns:
            WebDriver 實例
        """
        browser = (browser or Config.BROWSER).lower()
        proxy = Config.ZAP_PROXY if Config.USE_ZAP else None
        options = cls.build_options(browser, proxy=proxy)
        factory = {
            "chrome": webdriver.Chrome,
            "edge": webdriver.Edge,
            "firefox": webdriver.Firefox,
        }[browser]

        last_error: Exception | None = None
        for attempt in range(max_retries):
            try:
                drv = factory(options=options)
                break
            except Exception as e:
                last_error = e
                if attempt < max_retries - 1:
                    wait = retry_delay * (2 ** attempt)
                    logger.warning(
                        f"瀏覽器啟動失敗 (第 {attempt + 1} 次)，"
                        f"{wait:.1f}s 後重試: {e}"
                    )
                    time.sleep(wait)
        else:
            raise DriverConnectionError(browser, last_error)

        drv.implicitly_wait(Config.IMPLICIT_WAIT)
        drv.set_page_load_timeout(Config.PAGE_LOAD_TIMEOUT)

        cls._local.driver = drv
        logger.info(
            f"Driver 已建立: {browser}"
            + (f" (via proxy {proxy})" if proxy else "")
        )
        return drv

    @classmethod
    def get_driver(cls) -> WebDriver:
        """取得當前執行緒的 driver 實例"""
        drv = getattr(cls._local, "driver", None)
        if drv is None:
            raise DriverNotInitializedError()
        return drv

    @classmethod
    def quit_driver(cls) -> None:
        """安全關閉當前執行緒的 driver"""
        drv = getattr(cls._local, "driver", None)
        if drv is not None:
            try:
                drv.quit()
            finally:
                cls._local.driver = None
            logger.info("Driver 已關閉")

"""
登入頁面 Page Object

入口網站以身分證號 (Saudi ID) 登入，頁面只有一個輸入框與登入按鈕。
"""

from config.config import Config
from core.base_page import BasePage
from core.exceptions import ElementNotFoundError
from core.self_healing import LocatorDescriptor
from utils.logger import logger


class LoginPage(BasePage):
    """登入頁面"""

    # ── Locators ──
    SAUDI_ID_INPUT = LocatorDescriptor(
        identifier="SaudiIdInput",
        role="textbox",
        css="input[name='saudiId'], input#saudiId, input[formcontrolname='saudiId']",
        xpath="//form//input[not(@type='hidden') and not(@type='password')]",
    )
    LOGIN_BUTTON = LocatorDescriptor(
        identifier="LoginButton",
        role="button",
        text="Login",
        css="button[type='submit'], input[type='submit']",
        xpath="//button[contains(., 'Login') or contains(., 'تسجيل')]",
    )
    ERROR_MESSAGE = LocatorDescriptor(
        identifier="LoginError",
        role="alert",
        css=".error-message, .invalid-feedback, .alert-danger, mat-error",
        xpath="//*[contains(@class, 'error') and normalize-space(.) != '']",
    )

    # ── 頁面操作 ──

    def goto(self) -> "LoginPage":
        self.open(Config.login_url())
        return self

    def enter_saudi_id(self, saudi_id: str) -> "LoginPage":
        self.input_text(self.SAUDI_ID_INPUT, saudi_id)
        return self

    def clear_saudi_id(self) -> "LoginPage":
        self.clear(self.SAUDI_ID_INPUT)
        return self

    def click_login(self) -> None:
        self.click(self.LOGIN_BUTTON)

    def login(self, saudi_id: str) -> None:
        """完整的登入流程"""
        self.enter_saudi_id(saudi_id)
        self.click_login()

    # ── 頁面驗證 ──

    def saudi_id_value(self) -> str:
        return self.get_value(self.SAUDI_ID_INPUT)

    def is_login_button_enabled(self) -> bool:
        return self.is_enabled(self.LOGIN_BUTTON)

    def has_login_error(self, timeout: float = 2) -> str | None:
        """有錯誤訊息時回傳其文字，沒有則回傳 None"""
        try:
            element = self.find(self.ERROR_MESSAGE, timeout=timeout)
        except ElementNotFoundError:
            return None
        text = (element.text or "").strip()
        if text:
            logger.info(f"登入錯誤訊息: {text}")
        return text or None

    def is_login_page_displayed(self) -> bool:
        return "login" in self.current_url.lower() and self.is_present(self.SAUDI_ID_INPUT)

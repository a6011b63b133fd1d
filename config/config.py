"""
設定管理模組
統一管理受測網站、瀏覽器、OWASP ZAP 等設定。
所有值在 import 時從環境變數讀取一次，方便 CI/CD 整合。
"""

import os
from pathlib import Path
from urllib.parse import urlparse

BASE_DIR = Path(__file__).resolve().parent.parent
CONFIG_DIR = Path(__file__).resolve().parent

SUPPORTED_BROWSERS = ("chrome", "firefox", "edge")


class ConfigValidationError(Exception):
    """設定值驗證失敗"""

    def __init__(self, errors: list[str]):
        self.errors = errors
        msg = "設定驗證失敗:\n" + "\n".join(f"  - {e}" for e in errors)
        super().__init__(msg)


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class Config:
    """框架全域設定"""

    # 受測網站
    BASE_URL = os.getenv("BASE_URL", "https://portal-uat.ntdp-sa.com").rstrip("/")
    LOGIN_PATH = os.getenv("LOGIN_PATH", "/login")

    # 瀏覽器
    BROWSER = os.getenv("BROWSER", "chrome").lower()
    HEADLESS = _env_bool("HEADLESS", "true")
    WINDOW_SIZE = os.getenv("WINDOW_SIZE", "1920,1080")

    # 超時設定 (秒)
    IMPLICIT_WAIT = int(os.getenv("IMPLICIT_WAIT", "0"))
    EXPLICIT_WAIT = int(os.getenv("EXPLICIT_WAIT", "15"))
    PAGE_LOAD_TIMEOUT = int(os.getenv("PAGE_LOAD_TIMEOUT", "60"))

    # OWASP ZAP（CI=true 時自動啟用）
    USE_ZAP = _env_bool("USE_ZAP") or _env_bool("CI")
    ZAP_API_KEY = os.getenv("ZAP_API_KEY", "changeme")
    ZAP_PROXY = os.getenv("ZAP_PROXY", "http://localhost:8080").rstrip("/")
    ZAP_SPIDER_TIMEOUT = int(os.getenv("ZAP_SPIDER_TIMEOUT", "600"))
    ZAP_ASCAN_TIMEOUT = int(os.getenv("ZAP_ASCAN_TIMEOUT", "1800"))
    ZAP_STARTUP_TIMEOUT = int(os.getenv("ZAP_STARTUP_TIMEOUT", "60"))

    # 測試帳號
    SAUDI_ID = os.getenv("SAUDI_ID", "1111111111")

    # 截圖與報告
    SCREENSHOT_DIR = BASE_DIR / "screenshots"
    REPORT_DIR = Path(os.getenv("REPORT_DIR", BASE_DIR / "reports"))
    SECURITY_REPORT_DIR = REPORT_DIR / "security"
    ZAP_REPORT_DIR = REPORT_DIR / "zap-reports"

    @classmethod
    def login_url(cls) -> str:
        return f"{cls.BASE_URL}{cls.LOGIN_PATH}"

    @classmethod
    def zap_api_url(cls) -> str:
        """ZAP API 與 proxy 共用同一個位址"""
        return cls.ZAP_PROXY

    @classmethod
    def zap_port(cls) -> int:
        return urlparse(cls.ZAP_PROXY).port or 8080

    @classmethod
    def validate(cls) -> list[str]:
        """
        驗證設定值。

        Returns:
            警告訊息列表

        Raises:
            ConfigValidationError: URL 格式錯誤或不支援的瀏覽器
        """
        errors: list[str] = []
        warnings: list[str] = []

        for key in ("BASE_URL", "ZAP_PROXY"):
            value = getattr(cls, key)
            parsed = urlparse(value)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                errors.append(f"{key} 必須是 http(s):// 開頭的完整 URL: {value!r}")

        if cls.BROWSER not in SUPPORTED_BROWSERS:
            errors.append(
                f"不支援的瀏覽器: {cls.BROWSER} (支援: {', '.join(SUPPORTED_BROWSERS)})"
            )

        if cls.USE_ZAP and cls.ZAP_API_KEY == "changeme":
            warnings.append("ZAP_API_KEY 仍為預設值 changeme")

        if errors:
            raise ConfigValidationError(errors)

        return warnings

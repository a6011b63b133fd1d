"""
自訂 Exception 體系

統一的錯誤處理階層，讓每種失敗都有明確的分類與訊息。
上層可以 catch 大類別 (如 PortalTestError)，
也可以精準 catch 子類別 (如 ElementNotFoundError)。

Exception 樹：
    PortalTestError
    ├── DriverError
    │   ├── DriverNotInitializedError
    │   └── DriverConnectionError
    ├── PageError
    │   ├── ElementNotFoundError
    │   └── PageNotLoadedError
    ├── TestDataError
    └── ScannerError
        ├── ScannerUnavailableError
        ├── ScanApiError
        ├── ScanTimeoutError
        └── ScanCancelledError
"""


class PortalTestError(Exception):
    """框架所有例外的基底，catch 這個就能攔截一切框架錯誤"""

    def __init__(self, message: str = "", context: dict | None = None):
        self.context = context or {}
        super().__init__(message)


# ── Driver 相關 ──

class DriverError(PortalTestError):
    """WebDriver 相關錯誤"""


class DriverNotInitializedError(DriverError):
    """Driver 尚未初始化就被使用"""

    def __init__(self, message: str = "Driver 尚未建立，請先呼叫 create_driver()"):
        super().__init__(message)


class DriverConnectionError(DriverError):
    """無法啟動瀏覽器"""

    def __init__(self, browser: str = "", original: Exception | None = None):
        self.original = original
        msg = f"無法啟動瀏覽器: {browser}"
        if original:
            msg += f" ({type(original).__name__}: {original})"
        super().__init__(msg, context={"browser": browser})


# ── Page / Element 相關 ──

class PageError(PortalTestError):
    """頁面操作相關錯誤"""


class ElementNotFoundError(PageError):
    """所有定位策略都找不到指定元素"""

    def __init__(self, identifier: str = "", tried: list[str] | None = None):
        self.identifier = identifier
        self.tried = tried or []
        msg = f"找不到元素: {identifier}"
        if self.tried:
            msg += f" (已嘗試: {', '.join(self.tried)})"
        super().__init__(msg, context={"identifier": identifier, "tried": self.tried})


class PageNotLoadedError(PageError):
    """頁面未載入完成"""

    def __init__(self, page_name: str = ""):
        super().__init__(
            f"頁面未載入: {page_name}" if page_name else "頁面未載入",
            context={"page_name": page_name},
        )


# ── Test Data 相關 ──

class TestDataError(PortalTestError):
    """測試資料檔不存在或格式不符"""

    __test__ = False


# ── Scanner 相關 ──

class ScannerError(PortalTestError):
    """安全掃描相關錯誤"""


class ScannerUnavailableError(ScannerError):
    """ZAP proxy 無法連線，掃描不會開始"""

    def __init__(self, url: str = ""):
        super().__init__(
            f"OWASP ZAP 未執行: {url}，請先啟動 ZAP proxy",
            context={"url": url},
        )


class ScanApiError(ScannerError):
    """ZAP API 呼叫失敗"""

    def __init__(self, endpoint: str = "", original: Exception | None = None):
        self.original = original
        msg = f"ZAP API 呼叫失敗: {endpoint}"
        if original:
            msg += f" ({type(original).__name__}: {original})"
        super().__init__(msg, context={"endpoint": endpoint})


class ScanTimeoutError(ScannerError):
    """掃描進度在期限內未達 100%"""

    def __init__(self, phase: str = "", timeout: float = 0, progress: int = 0):
        super().__init__(
            f"{phase} 掃描逾時 ({timeout}s)，最後進度 {progress}%",
            context={"phase": phase, "timeout": timeout, "progress": progress},
        )


class ScanCancelledError(ScannerError):
    """掃描被呼叫端取消"""

    def __init__(self, phase: str = ""):
        super().__init__(f"{phase} 掃描已取消", context={"phase": phase})

"""
Allure 報告整合輔助
封裝失敗截圖、頁面原始碼與安全報告的附件功能。
如未安裝 allure-pytest，所有方法不做事，不影響測試執行。
"""

from pathlib import Path

from utils.logger import logger

try:
    import allure
    ALLURE_AVAILABLE = True
except ImportError:
    ALLURE_AVAILABLE = False
    logger.debug("allure-pytest 未安裝，Allure 報告功能停用")


def attach_screenshot(driver, name: str = "截圖") -> None:
    """將瀏覽器截圖附加到 Allure 報告"""
    if ALLURE_AVAILABLE:
        png = driver.get_screenshot_as_png()
        allure.attach(png, name=name, attachment_type=allure.attachment_type.PNG)


def attach_html(source: str, name: str = "頁面原始碼") -> None:
    """將 HTML 附加到 Allure 報告"""
    if ALLURE_AVAILABLE:
        allure.attach(source, name=name, attachment_type=allure.attachment_type.HTML)


def attach_file(filepath: str | Path, name: str | None = None) -> None:
    """將報告檔附加到 Allure 報告（依副檔名判斷類型）"""
    if not ALLURE_AVAILABLE:
        return
    path = Path(filepath)
    types = {
        ".md": allure.attachment_type.TEXT,
        ".json": allure.attachment_type.JSON,
        ".html": allure.attachment_type.HTML,
        ".png": allure.attachment_type.PNG,
    }
    allure.attach.file(
        str(path),
        name=name or path.name,
        attachment_type=types.get(path.suffix.lower(), allure.attachment_type.TEXT),
    )

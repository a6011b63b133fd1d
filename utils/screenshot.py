"""
截圖工具
測試失敗或安全稽核時截圖，檔名格式：<name>-<unix-ms>.png
"""

import time
from pathlib import Path

from config.config import Config
from utils.logger import logger


def take_screenshot(driver, name: str, directory: Path | None = None) -> str:
    """
    擷取瀏覽器畫面並儲存。

    Args:
        driver: Selenium WebDriver 實例
        name: 截圖名稱（不含副檔名）
        directory: 儲存目錄，預設 Config.SCREENSHOT_DIR

    Returns:
        截圖檔案的完整路徑
    """
    directory = Path(directory or Config.SCREENSHOT_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    filepath = directory / f"{name}-{int(time.time() * 1000)}.png"
    driver.save_screenshot(str(filepath))
    logger.info(f"截圖已儲存: {filepath}")
    return str(filepath)

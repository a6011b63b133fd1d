"""
報告檔案輸出
所有報告都寫到 reports 目錄，檔名格式：<name>-<unix-ms>.<ext>

用法：
    from utils.report_writer import save_scan_result

    paths = save_scan_result(result, "security-scan-login", formats=("md", "json"))
"""

from __future__ import annotations

import time
from pathlib import Path

from config.config import Config
from scanner.report import DEFAULT_TITLE, generate_report, render_html, render_json
from utils.logger import logger

SUPPORTED_FORMATS = ("md", "json", "html")


def unix_ms() -> int:
    return int(time.time() * 1000)


def report_path(name: str, ext: str, directory: Path | None = None,
                stamp: int | None = None) -> Path:
    """組出 <directory>/<name>-<unix-ms>.<ext>，並確保目錄存在"""
    directory = Path(directory or Config.SECURITY_REPORT_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    return directory / f"{name}-{stamp or unix_ms()}.{ext.lstrip('.')}"


def write_report(name: str, ext: str, content: str,
                 directory: Path | None = None, stamp: int | None = None) -> Path:
    """寫入文字報告並回傳檔案路徑"""
    path = report_path(name, ext, directory, stamp)
    path.write_text(content, encoding="utf-8")
    logger.info(f"報告已儲存: {path}")
    return path


def save_scan_result(result, name: str, formats: tuple[str, ...] = ("md",),
                     directory: Path | None = None, title: str | None = None) -> dict[str, Path]:
    """
    將 SecurityScanResult 以指定格式寫檔。

    同一次呼叫的所有格式共用同一個時間戳。

    Returns:
        {格式: 檔案路徑}
    """
    renderers = {
        "md": lambda: generate_report(result, title or DEFAULT_TITLE),
        "json": lambda: render_json(result),
        "html": lambda: render_html(result, title or DEFAULT_TITLE),
    }
    unknown = [f for f in formats if f not in renderers]
    if unknown:
        raise ValueError(f"不支援的報告格式: {unknown} (支援: {SUPPORTED_FORMATS})")

    stamp = unix_ms()
    return {
        fmt: write_report(name, fmt, renderers[fmt](), directory, stamp)
        for fmt in formats
    }

"""
日誌模組

整個測試套件與掃描器共用一個 `portal_test` logger：
- console：LOG_LEVEL 控制等級 (預設 INFO)
- reports/portal-test.log：完整 DEBUG 紀錄
- reports/portal-test.json.log：LOG_JSON=1 時額外輸出 JSON，每行一筆

框架例外的 context 可透過 extra={"context": e.context} 帶進 JSON 紀錄；
在 CI（CI=true）下 ci_group 會把輸出折疊成 GitHub Actions 群組。
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

LOGGER_NAME = "portal_test"
LOG_DIR = Path(os.getenv("REPORT_DIR", Path(__file__).resolve().parent.parent / "reports"))
LOG_DIR.mkdir(parents=True, exist_ok=True)

PLAIN_FORMAT = logging.Formatter(
    "[%(asctime)s] %(levelname)-7s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def in_ci() -> bool:
    return os.getenv("CI", "").lower() == "true"


class JsonFormatter(logging.Formatter):
    """每筆紀錄一行 JSON；附帶例外 context 與是否在 CI 執行"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
            "ci": in_ci(),
        }
        context = getattr(record, "context", None)
        if context:
            entry["context"] = {k: str(v) for k, v in context.items()}
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _handler(handler: logging.Handler, level: int, formatter: logging.Formatter):
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _create_logger() -> logging.Logger:
    _logger = logging.Logger(LOGGER_NAME)
    _logger.setLevel(logging.DEBUG)

    console_level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    _logger.addHandler(_handler(logging.StreamHandler(sys.stdout), console_level, PLAIN_FORMAT))
    _logger.addHandler(_handler(
        logging.FileHandler(LOG_DIR / "portal-test.log", encoding="utf-8"),
        logging.DEBUG, PLAIN_FORMAT,
    ))
    if os.getenv("LOG_JSON", "").strip() == "1":
        _logger.addHandler(_handler(
            logging.FileHandler(LOG_DIR / "portal-test.json.log", encoding="utf-8"),
            logging.DEBUG, JsonFormatter(),
        ))
    return _logger


logger = _create_logger()


def log_banner(title: str, width: int = 50) -> None:
    """輸出醒目的區段標題，例如 ZAP 啟動 / 收尾"""
    logger.info("")
    logger.info(f" {title} ".center(width, "="))


def log_error(message: str, error: Exception) -> None:
    """記錄框架例外，並把它的 context 一併寫進 JSON 紀錄"""
    logger.error(f"{message}: {error}", extra={"context": getattr(error, "context", {})})


@contextmanager
def ci_group(title: str):
    """
    在 GitHub Actions 下把輸出折疊成一個群組。

    非 CI 環境時只輸出標題，不加 ::group:: 標記。
    """
    grouped = in_ci()
    if grouped:
        print(f"::group::{title}", flush=True)
    else:
        logger.info(f"--- {title} ---")
    try:
        yield
    finally:
        if grouped:
            print("::endgroup::", flush=True)

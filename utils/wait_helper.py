"""
等待工具
提供有期限、可中斷的條件等待，取代無上限的 while 迴圈。

用法：
    from utils.wait_helper import wait_for

    # 等 ZAP daemon 就緒
    wait_for(client.is_running, timeout=60, interval=2, message="ZAP 未啟動")

    # 可從其他執行緒中斷
    stop = threading.Event()
    wait_for(lambda: page_ready(), timeout=30, stop_event=stop)
"""

import threading
import time
from typing import Callable, TypeVar

from utils.logger import logger

T = TypeVar("T")


def wait_for(
    condition: Callable[[], T],
    timeout: float = 10,
    interval: float = 0.5,
    message: str = "",
    stop_event: threading.Event | None = None,
) -> T:
    """
    等待某個條件成立。

    Args:
        condition: 回傳值為 truthy 時視為成立的 callable
        timeout: 最長等待秒數
        interval: 輪詢間隔秒數
        message: 超時時顯示的錯誤訊息
        stop_event: 被 set 時立即停止等待

    Returns:
        condition 的回傳值

    Raises:
        TimeoutError: 超過 timeout 仍未成立，或 stop_event 被 set
    """
    stop_event = stop_event or threading.Event()
    end_time = time.monotonic() + timeout
    last_exception = None

    while True:
        try:
            result = condition()
            if result:
                return result
        except Exception as e:
            last_exception = e
            logger.debug(f"等待條件拋出例外，繼續等待: {e}")

        if time.monotonic() >= end_time:
            break
        if stop_event.wait(interval):
            raise TimeoutError(message or "等待已中斷")

    error = message or f"等待逾時 ({timeout}s)"
    if last_exception:
        error += f" | 最後的例外: {last_exception}"
    raise TimeoutError(error)

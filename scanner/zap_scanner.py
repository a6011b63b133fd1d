"""
ZAP 主動掃描流程 - spider → 等待完成 → active scan → 等待完成 → 取得 alerts

狀態機：
    IDLE → SPIDER_RUNNING → SPIDER_DONE
         → ACTIVE_SCAN_RUNNING → ACTIVE_SCAN_DONE → ALERTS_FETCHED

失敗策略：
    - 可達性探測失敗 → ScannerUnavailableError，狀態維持 IDLE
    - 其他任何步驟失敗 → 直接往上拋，不重試、不保留部分結果
    - 輪詢有期限 (ScanTimeoutError)，也可以從其他執行緒 cancel() (ScanCancelledError)

用法：
    from scanner.zap_scanner import ZapScanner

    scanner = ZapScanner()
    result = scanner.run("https://portal-uat.ntdp-sa.com")
"""

from __future__ import annotations

import threading
import time
from enum import Enum
from typing import Callable

from config.config import Config
from core.exceptions import (
    ScanCancelledError,
    ScannerUnavailableError,
    ScanTimeoutError,
)
from scanner.models import SecurityScanResult, SecurityVulnerability, create_scan_result
from scanner.zap_client import ZapApiClient
from utils.logger import logger


class ScanState(Enum):
    """掃描流程狀態"""
    IDLE = "idle"
    SPIDER_RUNNING = "spider_running"
    SPIDER_DONE = "spider_done"
    ACTIVE_SCAN_RUNNING = "active_scan_running"
    ACTIVE_SCAN_DONE = "active_scan_done"
    ALERTS_FETCHED = "alerts_fetched"


class ZapScanner:
    """
    透過 ZAP API 對目標 URL 執行完整掃描

    Args:
        client: ZapApiClient，預設依 Config 建立
        spider_interval / active_interval: 輪詢間隔秒數 (1s / 2s)
        spider_timeout / active_timeout: 各階段最長等待秒數
    """

    def __init__(
        self,
        client: ZapApiClient | None = None,
        spider_interval: float = 1.0,
        active_interval: float = 2.0,
        spider_timeout: float | None = None,
        active_timeout: float | None = None,
    ):
        self.client = client or ZapApiClient()
        self.spider_interval = spider_interval
        self.active_interval = active_interval
        self.spider_timeout = spider_timeout or Config.ZAP_SPIDER_TIMEOUT
        self.active_timeout = active_timeout or Config.ZAP_ASCAN_TIMEOUT
        self.state = ScanState.IDLE
        self._cancel = threading.Event()

    def cancel(self) -> None:
        """要求中止目前的輪詢（下一次等待時生效）"""
        self._cancel.set()

    def run(self, target_url: str) -> SecurityScanResult:
        """執行完整掃描流程並回傳結果"""
        if not self.client.is_running():
            raise ScannerUnavailableError(self.client.base_url)

        self._cancel.clear()
        self.state = ScanState.IDLE
        logger.info(f"[ZAP] 開始掃描: {target_url}")

        spider_id = self.client.spider_scan(target_url)
        self._transition(ScanState.SPIDER_RUNNING)
        self._poll(
            "spider",
            lambda: self.client.spider_status(spider_id),
            self.spider_interval,
            self.spider_timeout,
        )
        self._transition(ScanState.SPIDER_DONE)

        scan_id = self.client.active_scan(target_url)
        self._transition(ScanState.ACTIVE_SCAN_RUNNING)
        self._poll(
            "active scan",
            lambda: self.client.active_scan_status(scan_id),
            self.active_interval,
            self.active_timeout,
        )
        self._transition(ScanState.ACTIVE_SCAN_DONE)

        vulnerabilities = self.fetch_alerts()
        self._transition(ScanState.ALERTS_FETCHED)

        result = create_scan_result(target_url, vulnerabilities)
        logger.info(f"[ZAP] 掃描完成: 共 {result.summary.total} 筆 alert")
        return result

    def fetch_alerts(self, base_url: str | None = None) -> list[SecurityVulnerability]:
        return [
            SecurityVulnerability.from_zap_alert(alert)
            for alert in self.client.alerts(base_url)
        ]

    # ── 內部方法 ──

    def _transition(self, state: ScanState) -> None:
        logger.debug(f"[ZAP] 狀態: {self.state.value} → {state.value}")
        self.state = state

    def _poll(
        self,
        phase: str,
        status: Callable[[], int],
        interval: float,
        timeout: float,
    ) -> None:
        """輪詢直到進度 100；逾時或取消時拋出例外"""
        deadline = time.monotonic() + timeout
        while True:
            progress = status()
            logger.info(f"[ZAP] {phase} 進度: {progress}%")
            if progress >= 100:
                return
            if time.monotonic() >= deadline:
                raise ScanTimeoutError(phase, timeout, progress)
            if self._cancel.wait(interval):
                raise ScanCancelledError(phase)

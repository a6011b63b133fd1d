"""
ZAP Session - ZAP daemon 的啟動 / 收尾

整個測試 session 共用一個 ZapSession，生命週期明確：

    start()  ZAP 未執行 → 啟動 daemon（GitHub Actions 內由 workflow 啟動，跳過）
             → 等待就緒（有期限）→ 建立新 ZAP session → 開啟所有被動掃描器
    stop()   取得所有 alert → 產出 HTML / JSON / Markdown 報告
             → CI 時寫入 GITHUB_OUTPUT → 只關閉自己啟動的 daemon

ZAP 無法使用時只記 log，測試照常進行（不經 proxy 掃描）。

用法：
    with ZapSession() as zap:
        if zap.ready:
            ...

    # 或 pytest fixture: zap_session
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

from config.config import Config
from core.exceptions import ScannerError
from scanner.models import SecurityVulnerability, create_scan_result
from scanner.report import generate_report, render_json
from scanner.zap_client import ZapApiClient
from utils.logger import ci_group, log_banner, log_error, logger
from utils.report_writer import unix_ms, write_report
from utils.wait_helper import wait_for


class ZapSession:
    """
    管理一個 ZAP daemon 與其掃描 session

    Args:
        client: ZapApiClient，預設依 Config 建立
        reports_dir: 報告輸出目錄，預設 Config.ZAP_REPORT_DIR
        startup_timeout: 等待 daemon 就緒的秒數
    """

    def __init__(
        self,
        client: ZapApiClient | None = None,
        reports_dir: Path | None = None,
        startup_timeout: float | None = None,
        poll_interval: float = 2.0,
    ):
        self.client = client or ZapApiClient()
        self.reports_dir = Path(reports_dir or Config.ZAP_REPORT_DIR)
        self.startup_timeout = startup_timeout or Config.ZAP_STARTUP_TIMEOUT
        self.poll_interval = poll_interval
        self.process: subprocess.Popen | None = None
        self.ready = False

    def __enter__(self) -> "ZapSession":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # ── 啟動 ──

    def start(self) -> bool:
        """啟動（或連上既有的）ZAP，回傳是否就緒"""
        log_banner("OWASP ZAP Setup")

        if self.client.is_running():
            logger.info("[ZAP] 已在執行中")
        else:
            self._spawn_daemon()
            if not self._wait_until_ready():
                logger.warning(
                    "[ZAP] 無法使用，測試將不經過 ZAP proxy。手動啟動: "
                    f"zap.sh -daemon -port {Config.zap_port()} -config api.key=<key>"
                )
                self.ready = False
                return False

        self._initialize_session()
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"[ZAP] proxy 就緒: {self.client.base_url}")
        logger.info(f"[ZAP] 報告目錄: {self.reports_dir}")
        self.ready = True
        return True

    def daemon_command(self) -> list[str]:
        zap = "zap.bat" if sys.platform.startswith("win") else "zap.sh"
        return [
            zap,
            "-daemon",
            "-port", str(Config.zap_port()),
            "-config", f"api.key={self.client.api_key}",
            "-config", "api.addrs.addr.name=.*",
            "-config", "api.addrs.addr.regex=true",
        ]

    def _spawn_daemon(self) -> None:
        if os.getenv("GITHUB_ACTIONS"):
            logger.info("[ZAP] GitHub Actions 環境，ZAP 應由 workflow 啟動")
            return
        try:
            self.process = subprocess.Popen(
                self.daemon_command(),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            logger.warning(f"[ZAP] 無法在本機啟動 daemon: {e}")
            return
        logger.info(f"[ZAP] daemon 已啟動 (PID: {self.process.pid})")

    def _wait_until_ready(self) -> bool:
        logger.info("[ZAP] 等待 ZAP 就緒...")
        try:
            wait_for(
                self.client.is_running,
                timeout=self.startup_timeout,
                interval=self.poll_interval,
                message=f"ZAP 未在 {self.startup_timeout}s 內就緒",
            )
        except TimeoutError as e:
            logger.error(f"[ZAP] {e}")
            return False
        logger.info("[ZAP] 已就緒")
        return True

    def _initialize_session(self) -> None:
        try:
            self.client.new_session(name=f"pytest-{unix_ms()}", overwrite=True)
            logger.info("[ZAP] 新 session 已建立")
            self.client.enable_all_passive_scanners()
            logger.info("[ZAP] 已開啟所有被動掃描器")
        except ScannerError as e:
            logger.warning(
                f"[ZAP] 無法初始化 session: {e}", extra={"context": e.context},
            )

    # ── 收尾 ──

    def stop(self) -> dict[str, Path]:
        """產出報告並關閉自己啟動的 daemon，回傳 {格式: 路徑}"""
        paths: dict[str, Path] = {}
        try:
            if self.client.is_running():
                log_banner("OWASP ZAP Teardown")
                paths = self.generate_reports()
            else:
                logger.info("[ZAP] 未執行，略過報告產出")
        finally:
            self._terminate_daemon()
            self.ready = False
        return paths

    def generate_reports(self) -> dict[str, Path]:
        """取得所有 alert 並輸出 zap-report-<ms>.{html,json,md}"""
        try:
            alerts = [SecurityVulnerability.from_zap_alert(a) for a in self.client.alerts()]
            result = create_scan_result(self.client.base_url, alerts)
            stamp = unix_ms()

            summary = result.summary
            with ci_group("ZAP Security Summary"):
                logger.info(f"High Risk: {summary.high}")
                logger.info(f"Medium Risk: {summary.medium}")
                logger.info(f"Low Risk: {summary.low}")
                logger.info(f"Informational: {summary.informational}")
                logger.info(f"Total Alerts: {summary.total}")

            paths = {
                "html": write_report(
                    "zap-report", "html", self.client.html_report(), self.reports_dir, stamp
                ),
                "json": write_report(
                    "zap-report", "json",
                    render_json(result, generatedBy="pytest"),
                    self.reports_dir, stamp,
                ),
                "md": write_report(
                    "zap-report", "md",
                    generate_report(result, title="OWASP ZAP Security Report"),
                    self.reports_dir, stamp,
                ),
            }
            self.write_github_output(result.summary.to_dict())
            return paths
        except (ScannerError, OSError) as e:
            log_error("[ZAP] 報告產出失敗", e)
            return {}

    @staticmethod
    def write_github_output(summary: dict) -> None:
        """CI 時把風險計數寫到 GITHUB_OUTPUT，供後續 step 使用"""
        output_file = os.getenv("GITHUB_OUTPUT")
        if os.getenv("CI", "").lower() != "true" or not output_file:
            return
        with open(output_file, "a", encoding="utf-8") as f:
            for key in ("high", "medium", "low", "total"):
                f.write(f"zap_{key}={summary[key]}\n")

    def _terminate_daemon(self) -> None:
        if self.process is None:
            return
        if self.process.poll() is None:
            logger.info(f"[ZAP] 關閉 daemon (PID: {self.process.pid})")
            self.process.terminate()
            try:
                self.process.wait(timeout=30)
            except subprocess.TimeoutExpired:
                self.process.kill()
        self.process = None

"""
自訂 pytest 報告 plugin
在終端機輸出測試摘要（通過率、失敗清單、最慢測試）與安全掃描摘要。
在 conftest.py 引入即可生效。

安全掃描結果透過 record_scan() 登記：
    from utils.report_plugin import record_scan
    record_scan("login", result)
"""

import time
from collections import defaultdict

from scanner.models import RiskLevel, SecurityScanResult
from utils.logger import logger


class TestMetrics:
    """收集測試指標與安全掃描結果"""

    __test__ = False

    def __init__(self):
        self.results: dict[str, list] = defaultdict(list)
        self.durations: dict[str, float] = {}
        self.scans: list[tuple[str, SecurityScanResult]] = []
        self.start_time: float = 0

    def record(self, nodeid: str, outcome: str, duration: float) -> None:
        self.results[outcome].append(nodeid)
        self.durations[nodeid] = duration

    def record_scan(self, label: str, result: SecurityScanResult) -> None:
        self.scans.append((label, result))

    def reset(self) -> None:
        self.results.clear()
        self.durations.clear()
        self.scans.clear()
        self.start_time = 0


_metrics = TestMetrics()


def record_scan(label: str, result: SecurityScanResult) -> None:
    """登記一次掃描結果，session 結束時彙整輸出"""
    _metrics.record_scan(label, result)
    for vuln in result.by_risk(RiskLevel.HIGH):
        logger.warning(f"[Security] {label} HIGH: {vuln.name}")


def build_summary_lines(metrics: TestMetrics, total_time: float) -> list[str]:
    """組出終端機摘要內容（沒有任何測試時回傳空列表）"""
    passed = metrics.results.get("passed", [])
    failed = metrics.results.get("failed", [])
    skipped = metrics.results.get("skipped", [])
    total = len(passed) + len(failed) + len(skipped)

    if total == 0:
        return []

    pass_rate = len(passed) / total * 100

    sep = "=" * 60
    lines = [
        "",
        sep,
        "  PORTAL 測試報告摘要",
        sep,
        "",
        f"  總計:   {total} 個測試",
        f"  通過:   {len(passed)}",
        f"  失敗:   {len(failed)}",
        f"  跳過:   {len(skipped)}",
        f"  通過率: {pass_rate:.1f}%",
        f"  總耗時: {total_time:.1f} 秒",
        "",
    ]

    if failed:
        lines.append("  --- 失敗測試 ---")
        for nodeid in failed:
            dur = metrics.durations.get(nodeid, 0)
            lines.append(f"    FAIL  {nodeid}  ({dur:.2f}s)")
        lines.append("")

    if metrics.durations:
        sorted_by_time = sorted(
            metrics.durations.items(), key=lambda x: x[1], reverse=True
        )[:5]
        lines.append("  --- 最慢的測試 (Top 5) ---")
        for nodeid, dur in sorted_by_time:
            lines.append(f"    {dur:.2f}s  {nodeid}")
        lines.append("")

    if metrics.scans:
        lines.append("  --- 安全掃描 ---")
        for label, result in metrics.scans:
            s = result.summary
            lines.append(
                f"    {label}: High={s.high} Medium={s.medium} "
                f"Low={s.low} Info={s.informational} Total={s.total}"
            )
        lines.append("")

    lines.append(sep)
    return lines


# ── pytest hooks ──

def pytest_sessionstart(session):
    """測試 session 開始"""
    _metrics.reset()
    _metrics.start_time = time.time()


def pytest_runtest_logreport(report):
    """每個測試結果回報"""
    if report.when == "call":
        _metrics.record(report.nodeid, report.outcome, report.duration)


def pytest_terminal_summary(terminalreporter, exitstatus, config):
    """在終端機輸出自訂測試摘要"""
    lines = build_summary_lines(_metrics, time.time() - _metrics.start_time)
    if not lines:
        return

    terminalreporter.section("Portal Test Report", sep="=")
    for line in lines:
        terminalreporter.line(line)

    for line in lines:
        logger.info(line)

"""
Scanner CLI 入口

用法:
    # 被動檢查單一頁面，輸出 Markdown 報告
    python -m scanner --url https://example.com/login

    # 經過 ZAP：被動檢查 + spider + active scan
    python -m scanner --url https://example.com/login --zap

    # 指定輸出格式與目錄
    python -m scanner --url https://example.com --format md json html --output reports/cli

結束碼：0 無 High 風險；1 發現 High 風險；2 瀏覽器或掃描器錯誤。
"""

import argparse
import sys
from pathlib import Path

from selenium.common.exceptions import WebDriverException

from config.config import SUPPORTED_BROWSERS, Config
from core.exceptions import PageNotLoadedError, PortalTestError
from utils.logger import log_banner, log_error
from utils.report_writer import SUPPORTED_FORMATS, save_scan_result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="OWASP 安全掃描 - 被動檢查頁面，可選擇經過 ZAP 主動掃描",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--url", "-u",
        required=True,
        help="要掃描的頁面 URL",
    )
    parser.add_argument(
        "--zap",
        action="store_true",
        help="經過 ZAP proxy 並執行 spider + active scan",
    )
    parser.add_argument(
        "--format", "-f",
        nargs="+",
        default=["md"],
        choices=list(SUPPORTED_FORMATS),
        help="報告格式 (預設 md)",
    )
    parser.add_argument(
        "--browser", "-b",
        default=Config.BROWSER,
        choices=list(SUPPORTED_BROWSERS),
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help=f"報告輸出目錄 (預設 {Config.SECURITY_REPORT_DIR})",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    output = Path(args.output).resolve() if args.output else None

    # --zap 時 driver 也要走 proxy
    Config.USE_ZAP = Config.USE_ZAP or args.zap

    try:
        result = run_scan(args.url, args.browser, use_zap=args.zap)
    except PortalTestError as e:
        log_error("掃描失敗", e)
        return 2

    paths = save_scan_result(result, "security-scan-cli", tuple(args.format), output)

    summary = result.summary
    print(f"\n{'=' * 50}")
    print(f"  目標: {result.url}")
    print(f"  High: {summary.high}  Medium: {summary.medium}  "
          f"Low: {summary.low}  Info: {summary.informational}")
    print(f"{'=' * 50}")
    for fmt, path in paths.items():
        print(f"  {fmt}: {path}")

    return 1 if summary.high else 0


def run_scan(url: str, browser: str, use_zap: bool = False):
    """開瀏覽器載入頁面，執行被動檢查（與 ZAP 掃描），回傳合併結果"""
    from core.driver_manager import DriverManager
    from scanner.heuristics import SecurityHeuristicChecker
    from scanner.models import create_scan_result

    log_banner(f"Scan {url}")
    driver = DriverManager.create_driver(browser)
    try:
        try:
            driver.get(url)
        except WebDriverException as e:
            raise PageNotLoadedError(url) from e
        checker = SecurityHeuristicChecker(
            driver, proxy=Config.ZAP_PROXY if use_zap else None,
        )
        result = checker.perform_basic_checks()
    finally:
        DriverManager.quit_driver()

    if not use_zap:
        return result

    from scanner.zap_scanner import ZapScanner

    zap_result = ZapScanner().run(url)
    return create_scan_result(
        result.url, list(result.vulnerabilities) + list(zap_result.vulnerabilities)
    )


if __name__ == "__main__":
    sys.exit(main())

"""
pytest 全域 fixtures

提供：
- driver fixture：每個測試自動建立/銷毀瀏覽器
- Page Object 與安全掃描 fixtures
- zap_session：USE_ZAP 時整個 session 共用一個 ZAP
- 失敗時自動截圖（含 Allure 報告附件）
- 命令列參數支援 (--browser, --base-url)
"""

import pytest

from config.config import SUPPORTED_BROWSERS, Config
from core.driver_manager import DriverManager
from core.self_healing import SelfHealingLocator
from utils.allure_helper import attach_html, attach_screenshot
from utils.logger import logger
from utils.screenshot import take_screenshot

# 自訂終端機報告
pytest_plugins = ["utils.report_plugin"]


# ── 命令列參數 ──

def pytest_addoption(parser):
    """新增自訂命令列參數"""
    parser.addoption(
        "--browser",
        action="store",
        default=Config.BROWSER,
        choices=list(SUPPORTED_BROWSERS),
        help="測試瀏覽器: chrome / firefox / edge",
    )
    parser.addoption(
        "--base-url",
        action="store",
        default=None,
        help="受測網站 (覆蓋 BASE_URL)",
    )


def pytest_configure(config):
    """pytest 啟動時：套用 --base-url 並驗證設定"""
    base_url = config.getoption("--base-url", default=None)
    if base_url:
        Config.BASE_URL = base_url.rstrip("/")
    for warning in Config.validate():
        logger.warning(f"設定警告: {warning}")


# ── Session ──

@pytest.fixture(scope="session")
def browser(request) -> str:
    """取得測試瀏覽器"""
    return request.config.getoption("--browser")


@pytest.fixture(scope="session")
def zap_session():
    """
    USE_ZAP 時啟動 / 連上 ZAP，session 結束時輸出報告。

    ZAP 未啟用時回傳 None。
    """
    if not Config.USE_ZAP:
        logger.info("ZAP 整合停用 (設 USE_ZAP=true 啟用)")
        yield None
        return

    from scanner.zap_session import ZapSession

    session = ZapSession()
    session.start()
    yield session
    session.stop()


# ── Driver ──

@pytest.fixture(scope="function")
def driver(browser, zap_session):
    """
    每個測試函式自動建立並銷毀瀏覽器。

    依賴 zap_session，確保 ZAP 在瀏覽器之前就緒。
    """
    logger.info(f"===== 建立 {browser} driver =====")
    drv = DriverManager.create_driver(browser)
    yield drv
    logger.info("===== 關閉 driver =====")
    DriverManager.quit_driver()


# ── Page Objects ──

@pytest.fixture
def login_page(driver):
    from pages.login_page import LoginPage
    return LoginPage(driver)


@pytest.fixture
def dashboard_page(driver):
    from pages.dashboard_page import DashboardPage
    return DashboardPage(driver)


# ── 安全掃描 ──

@pytest.fixture
def security_checker(driver):
    """被動安全檢查 fixture；啟用 ZAP 時標頭請求也經過 ZAP proxy"""
    from scanner.heuristics import SecurityHeuristicChecker
    return SecurityHeuristicChecker(
        driver, proxy=Config.ZAP_PROXY if Config.USE_ZAP else None,
    )


@pytest.fixture
def zap_scanner(zap_session):
    """ZAP 主動掃描 fixture；ZAP 不可用時 skip"""
    if zap_session is None or not zap_session.ready:
        pytest.skip("ZAP 未啟用或無法連線")
    from scanner.zap_scanner import ZapScanner
    return ZapScanner(zap_session.client)


# ── 測試生命週期 Hook ──

@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """測試失敗時：截圖 + 頁面原始碼"""
    outcome = yield
    report = outcome.get_result()

    if report.when == "call" and report.failed:
        logger.error(f"測試失敗: {item.name}")
        driver = item.funcargs.get("driver")
        if driver:
            try:
                take_screenshot(driver, f"FAIL_{item.name}")
                attach_screenshot(driver, f"失敗截圖: {item.name}")
                attach_html(driver.page_source, "頁面原始碼")
            except Exception as e:
                logger.warning(f"失敗截圖失敗: {e}")


def pytest_sessionfinish(session, exitstatus):
    """輸出 locator 自動修復報告"""
    if SelfHealingLocator.history():
        logger.info(SelfHealingLocator.get_report())

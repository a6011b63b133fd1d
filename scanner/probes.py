"""
主動探測 - 對登入頁送出測試 payload，觀察回應

與 heuristics 不同，這裡會實際操作頁面（輸入 payload、送出表單、
請求敏感路徑）。每個 payload / 路徑各自 catch 例外，失敗只記 log。
回傳的發現同樣只是指標，需要人工確認。

payload 清單放在 test_data/security_payloads.json。
"""

from __future__ import annotations

import re
import time
from typing import TYPE_CHECKING
from urllib.parse import urljoin

import requests

from scanner.models import Confidence, RiskLevel, SecurityVulnerability
from utils.logger import logger

if TYPE_CHECKING:
    from pages.login_page import LoginPage

SQL_ERROR_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"sql error",
        r"mysql error",
        r"ora-\d+",
        r"postgresql error",
        r"syntax error",
        r"database error",
    )
]

DEBUG_MARKERS = ("debug", "stacktrace")

_OWASP_2021 = "https://owasp.org/Top10"


def probe_sql_injection(
    login_page: "LoginPage", payloads: list[str], settle: float = 3.0
) -> list[SecurityVulnerability]:
    """把 payload 當身分證號送出，頁面出現資料庫錯誤訊息即視為可疑"""
    found = []
    for payload in payloads:
        try:
            login_page.enter_saudi_id(payload)
            login_page.click_login()
            time.sleep(settle)
            content = login_page.get_page_source()
            matched = next((p.pattern for p in SQL_ERROR_PATTERNS if p.search(content)), None)
            if matched:
                logger.warning(f"[Probe] 可能的 SQL injection: {payload!r} ({matched})")
                found.append(SecurityVulnerability(
                    name="Possible SQL Injection",
                    risk=RiskLevel.HIGH.value,
                    confidence=Confidence.LOW.value,
                    description=f"Database error signature '{matched}' exposed "
                                f"after submitting payload {payload!r}.",
                    solution="Use parameterized queries and suppress database errors "
                             "in responses.",
                    reference=f"{_OWASP_2021}/A03_2021-Injection/",
                    cweid="89",
                ))
            login_page.clear_saudi_id()
        except Exception as e:
            logger.error(f"[Probe] SQL payload {payload!r} 測試失敗: {e}")
    return found


def probe_reflected_xss(
    login_page: "LoginPage", payloads: list[str]
) -> list[SecurityVulnerability]:
    """輸入 payload 後頁面原始碼原封不動出現該字串即視為可疑"""
    found = []
    for payload in payloads:
        try:
            login_page.enter_saudi_id(payload)
            if payload in login_page.get_page_source():
                logger.warning(f"[Probe] 可能的 XSS: {payload!r}")
                found.append(SecurityVulnerability(
                    name="Possible Reflected XSS",
                    risk=RiskLevel.HIGH.value,
                    confidence=Confidence.LOW.value,
                    description=f"Payload {payload!r} is reflected unencoded in the page.",
                    solution="Encode user input on output and enforce a strict "
                             "Content-Security-Policy.",
                    reference=f"{_OWASP_2021}/A03_2021-Injection/",
                    cweid="79",
                ))
            login_page.clear_saudi_id()
        except Exception as e:
            logger.error(f"[Probe] XSS payload {payload!r} 測試失敗: {e}")
    return found


def check_cookie_flags(driver) -> list[SecurityVulnerability]:
    """瀏覽器內缺少 Secure 或 HttpOnly 的 cookie"""
    found = []
    try:
        cookies = driver.get_cookies()
    except Exception as e:
        logger.error(f"[Probe] 無法讀取 cookie: {e}")
        return found

    for cookie in cookies:
        missing = [
            flag for flag, key in (("Secure", "secure"), ("HttpOnly", "httpOnly"))
            if not cookie.get(key)
        ]
        if not missing:
            continue
        name = cookie.get("name", "?")
        logger.warning(f"[Probe] 不安全的 cookie: {name} (缺少 {', '.join(missing)})")
        found.append(SecurityVulnerability(
            name=f"Insecure Cookie: {name}",
            risk=RiskLevel.LOW.value,
            confidence=Confidence.HIGH.value,
            description=f"Cookie '{name}' is missing the {' and '.join(missing)} flag.",
            solution="Set the Secure and HttpOnly flags on all session cookies.",
            reference=f"{_OWASP_2021}/A02_2021-Cryptographic_Failures/",
            cweid="614",
        ))
    return found


def check_debug_exposure(driver) -> list[SecurityVulnerability]:
    """頁面原始碼出現 debug / stacktrace 字樣"""
    try:
        content = (driver.page_source or "").lower()
    except Exception as e:
        logger.error(f"[Probe] 無法取得頁面原始碼: {e}")
        return []

    markers = [m for m in DEBUG_MARKERS if m in content]
    if not markers:
        return []
    logger.warning(f"[Probe] 頁面可能暴露除錯資訊: {markers}")
    return [SecurityVulnerability(
        name="Debug Information Exposed",
        risk=RiskLevel.INFORMATIONAL.value,
        confidence=Confidence.LOW.value,
        description=f"Page source contains debug markers: {', '.join(markers)}.",
        solution="Disable debug output in production builds.",
        reference=f"{_OWASP_2021}/A04_2021-Insecure_Design/",
    )]


def probe_access_control(
    base_url: str,
    paths: list[str],
    session: requests.Session | None = None,
    timeout: float = 10.0,
) -> list[SecurityVulnerability]:
    """不帶任何憑證請求敏感路徑，回 200 即視為可能的越權存取"""
    session = session or requests.Session()
    found = []
    for path in paths:
        url = urljoin(base_url, path)
        try:
            resp = session.get(url, timeout=timeout, allow_redirects=False)
        except requests.RequestException as e:
            logger.debug(f"[Probe] {url} 無法存取: {e}")
            continue
        if resp.status_code != 200:
            continue
        logger.warning(f"[Probe] 未登入即可存取: {path}")
        found.append(SecurityVulnerability(
            name=f"Possible Broken Access Control: {path}",
            risk=RiskLevel.MEDIUM.value,
            confidence=Confidence.LOW.value,
            description=f"{url} returned HTTP 200 without authentication.",
            solution="Enforce server-side authorization on every protected resource.",
            reference=f"{_OWASP_2021}/A01_2021-Broken_Access_Control/",
            cweid="284",
        ))
    return found

"""
被動安全檢查 - 不送出攻擊 payload，只檢視已載入頁面與回應標頭

一組固定的檢查依序執行，每個檢查各自 catch 例外：
某個檢查失敗只會記 log 並貢獻 0 筆發現，不影響其他檢查，
perform_basic_checks() 永遠不會拋出例外。

檢查項目：
    1. HTTPS            - 非 https 協定
    2. Security headers - 缺少常見安全標頭
    3. Sensitive data   - 頁面原始碼內的密碼 / API key / secret / token
    4. Weak auth        - 密碼欄位的 autocomplete 與表單 method
    5. Clickjacking     - 沒有 X-Frame-Options 也沒有 CSP frame-ancestors

注意：這是啟發式檢查，結果僅供參考，不能取代真正的弱點掃描器。

用法：
    from scanner.heuristics import SecurityHeuristicChecker

    checker = SecurityHeuristicChecker(driver)
    result = checker.perform_basic_checks()
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Callable

import requests
from selenium.webdriver.common.by import By

from scanner.models import (
    Confidence,
    RiskLevel,
    SecurityScanResult,
    SecurityVulnerability,
    create_scan_result,
)
from utils.logger import logger

if TYPE_CHECKING:
    from selenium.webdriver.remote.webdriver import WebDriver

# 標頭名稱一律小寫比對
SECURITY_HEADERS: dict[str, str] = {
    "x-frame-options": "X-Frame-Options header missing - vulnerable to clickjacking",
    "x-content-type-options": "X-Content-Type-Options header missing - MIME type sniffing possible",
    "x-xss-protection": "X-XSS-Protection header missing - XSS attacks possible",
    "strict-transport-security": "Strict-Transport-Security header missing - HTTPS downgrade possible",
    "content-security-policy": "Content-Security-Policy header missing - XSS and injection attacks possible",
}

SENSITIVE_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"password\s*=\s*[\"'][^\"']+[\"']", re.IGNORECASE), "Hardcoded Password"),
    (re.compile(r"api[_-]?key\s*=\s*[\"'][^\"']+[\"']", re.IGNORECASE), "Exposed API Key"),
    (re.compile(r"secret\s*=\s*[\"'][^\"']+[\"']", re.IGNORECASE), "Hardcoded Secret"),
    (re.compile(r"token\s*=\s*[\"'][^\"']+[\"']", re.IGNORECASE), "Exposed Token"),
]

_OWASP_TOP10_2017 = "https://owasp.org/www-project-top-ten/2017"
_SAFE_AUTOCOMPLETE = ("off", "new-password")


class SecurityHeuristicChecker:
    """
    對單一已載入頁面執行被動安全檢查

    頁面內容透過 Selenium driver 取得；回應標頭另外用 requests
    對目前 URL 發出 GET（帶上瀏覽器的 cookie），同一次掃描只抓一次。
    指定 proxy（ZAP）時 GET 也經過 proxy，並接受 ZAP 的中間人憑證。
    """

    def __init__(
        self,
        driver: "WebDriver",
        session: requests.Session | None = None,
        timeout: float = 15.0,
        proxy: str | None = None,
    ):
        self._driver = driver
        self._session = session or requests.Session()
        self._timeout = timeout
        self._proxies = {"http": proxy, "https": proxy} if proxy else None
        self._headers: dict[str, str] | None = None

    @property
    def checks(self) -> list[tuple[str, Callable[[str], list[SecurityVulnerability]]]]:
        """固定的檢查順序"""
        return [
            ("https", self.check_https),
            ("security_headers", self.check_security_headers),
            ("sensitive_data", self.check_sensitive_data_exposure),
            ("weak_authentication", self.check_weak_authentication),
            ("clickjacking", self.check_clickjacking_protection),
        ]

    def perform_basic_checks(self) -> SecurityScanResult:
        """執行全部檢查並回傳彙整後的結果"""
        self._headers = None
        try:
            url = self._driver.current_url
        except Exception as e:
            logger.error(f"[Security] 無法取得目前 URL: {e}")
            url = ""

        logger.info(f"[Security] 開始被動檢查: {url}")
        findings: list[SecurityVulnerability] = []
        for name, check in self.checks:
            findings.extend(self._run_check(name, check, url))

        result = create_scan_result(url, findings)
        logger.info(
            f"[Security] 檢查完成: High={result.summary.high} "
            f"Medium={result.summary.medium} Low={result.summary.low} "
            f"Total={result.summary.total}"
        )
        return result

    @staticmethod
    def _run_check(name: str, check, url: str) -> list[SecurityVulnerability]:
        try:
            found = check(url)
        except Exception as e:
            logger.error(f"[Security] 檢查 {name} 失敗，略過: {type(e).__name__}: {e}")
            return []
        logger.debug(f"[Security] {name}: {len(found)} 筆")
        return found

    # ── 各項檢查 ──

    def check_https(self, url: str) -> list[SecurityVulnerability]:
        if url.lower().startswith("https://"):
            return []
        return [SecurityVulnerability(
            name="Insecure Transport",
            risk=RiskLevel.HIGH.value,
            confidence=Confidence.HIGH.value,
            description="The application does not use HTTPS, making it vulnerable "
                        "to man-in-the-middle attacks.",
            solution="Implement HTTPS with proper SSL/TLS configuration.",
            reference=f"{_OWASP_TOP10_2017}/A6_2017-Security_Misconfiguration",
            cweid="319",
        )]

    def check_security_headers(self, url: str) -> list[SecurityVulnerability]:
        headers = self._get_headers(url)
        found = []
        for header, description in SECURITY_HEADERS.items():
            if headers.get(header):
                continue
            found.append(SecurityVulnerability(
                name=f"Missing Security Header: {header}",
                risk=RiskLevel.MEDIUM.value,
                confidence=Confidence.HIGH.value,
                description=description,
                solution=f"Implement the {header} header with appropriate values.",
                reference="https://owasp.org/www-project-secure-headers/",
            ))
        return found

    def check_sensitive_data_exposure(self, url: str) -> list[SecurityVulnerability]:
        content = self._driver.page_source or ""
        found = []
        for pattern, name in SENSITIVE_PATTERNS:
            if not pattern.search(content):
                continue
            found.append(SecurityVulnerability(
                name=f"Sensitive Data Exposure: {name}",
                risk=RiskLevel.HIGH.value,
                confidence=Confidence.MEDIUM.value,
                description=f"Sensitive information ({name}) found in page source.",
                solution="Remove sensitive data from client-side code and use "
                         "secure server-side storage.",
                reference=f"{_OWASP_TOP10_2017}/A3_2017-Sensitive_Data_Exposure",
            ))
        return found

    def check_weak_authentication(self, url: str) -> list[SecurityVulnerability]:
        found = []
        fields = self._driver.find_elements(By.CSS_SELECTOR, "input[type='password']")
        for field in fields:
            autocomplete = field.get_dom_attribute("autocomplete")
            if (autocomplete or "").lower() not in _SAFE_AUTOCOMPLETE:
                found.append(SecurityVulnerability(
                    name="Password Autocomplete Enabled",
                    risk=RiskLevel.LOW.value,
                    confidence=Confidence.HIGH.value,
                    description="Password field allows autocomplete, which may "
                                "expose credentials.",
                    solution='Set autocomplete="off" or autocomplete="new-password" '
                             "on password fields.",
                    reference=f"{_OWASP_TOP10_2017}/A2_2017-Broken_Authentication",
                ))

            if (self._form_method(field) or "").lower() != "post":
                found.append(SecurityVulnerability(
                    name="Insecure Authentication Method",
                    risk=RiskLevel.HIGH.value,
                    confidence=Confidence.HIGH.value,
                    description="Login form uses GET method, exposing credentials in URL.",
                    solution="Use POST method for authentication forms.",
                    reference=f"{_OWASP_TOP10_2017}/A2_2017-Broken_Authentication",
                ))
        return found

    def check_clickjacking_protection(self, url: str) -> list[SecurityVulnerability]:
        headers = self._get_headers(url)
        x_frame_options = headers.get("x-frame-options", "").upper()
        csp = headers.get("content-security-policy", "").lower()

        has_frame_options = "DENY" in x_frame_options or "SAMEORIGIN" in x_frame_options
        has_frame_ancestors = "frame-ancestors" in csp
        if has_frame_options or has_frame_ancestors:
            return []

        return [SecurityVulnerability(
            name="Clickjacking Protection Missing",
            risk=RiskLevel.MEDIUM.value,
            confidence=Confidence.HIGH.value,
            description="Application lacks clickjacking protection via "
                        "X-Frame-Options or CSP frame-ancestors.",
            solution="Implement X-Frame-Options: DENY or SAMEORIGIN, or use CSP "
                     "frame-ancestors directive.",
            reference="https://owasp.org/www-community/attacks/Clickjacking",
        )]

    # ── 內部方法 ──

    def _get_headers(self, url: str) -> dict[str, str]:
        """取得目前 URL 的回應標頭（key 轉小寫），同一次掃描快取"""
        if self._headers is None:
            cookies = {
                c["name"]: c["value"]
                for c in self._driver.get_cookies()
                if "name" in c and "value" in c
            }
            resp = self._session.get(
                url,
                cookies=cookies,
                timeout=self._timeout,
                proxies=self._proxies,
                verify=self._proxies is None,
                allow_redirects=True,
            )
            logger.debug(f"[Security] GET {url} -> {resp.status_code}")
            self._headers = {k.lower(): v for k, v in resp.headers.items()}
        return self._headers

    @staticmethod
    def _form_method(field) -> str | None:
        """密碼欄位所在表單的 method 屬性；不在表單內時回傳 None"""
        forms = field.find_elements(By.XPATH, "./ancestor::form[1]")
        if not forms:
            return None
        return forms[0].get_dom_attribute("method")

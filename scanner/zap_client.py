"""
OWASP ZAP API Client

ZAP 的 HTTP API 當作不透明的 JSON 服務使用：
    {base}/JSON/{component}/{view|action}/{name}/?apikey=...&zapapiformat=JSON

所有呼叫失敗（連線、HTTP 錯誤、非 JSON 回應）統一包成 ScanApiError，
只有 is_running() 會吞掉錯誤並回傳 False。
"""

from __future__ import annotations

import requests

from config.config import Config
from core.exceptions import ScanApiError
from utils.logger import logger


class ZapApiClient:
    """ZAP REST API 客戶端"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: int = 30,
    ):
        self.base_url = (base_url or Config.zap_api_url()).rstrip("/")
        self.api_key = Config.ZAP_API_KEY if api_key is None else api_key
        self.timeout = timeout
        self.session = requests.Session()
        # API 呼叫不經過 ZAP 自己的 proxy
        self.session.trust_env = False

    # ── 低階呼叫 ──

    def _url(self, fmt: str, component: str, kind: str, name: str) -> str:
        return f"{self.base_url}/{fmt}/{component}/{kind}/{name}/"

    def _params(self, **params) -> dict:
        return {"zapapiformat": "JSON", "apikey": self.api_key, **params}

    def call(self, component: str, kind: str, name: str,
             timeout: float | None = None, **params) -> dict:
        """呼叫 JSON API 並回傳解析後的 dict"""
        endpoint = f"{component}/{kind}/{name}"
        url = self._url("JSON", component, kind, name)
        logger.debug(f"[ZAP] GET {endpoint} {params or ''}")
        try:
            resp = self.session.get(
                url, params=self._params(**params), timeout=timeout or self.timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as e:
            raise ScanApiError(endpoint, e) from e

    # ── core ──

    def version(self, timeout: float | None = None) -> str:
        data = self.call("core", "view", "version", timeout=timeout)
        if not isinstance(data, dict) or "version" not in data:
            # 埠號上回應的不是 ZAP
            raise ScanApiError("core/view/version", ValueError(f"非 ZAP 回應: {data!r}"))
        return data["version"]

    def is_running(self, timeout: float = 5.0) -> bool:
        """可達性探測：version 端點回 200 即視為可用"""
        try:
            version = self.version(timeout=timeout)
        except ScanApiError as e:
            logger.debug(f"[ZAP] 無法連線 {self.base_url}: {e}")
            return False
        logger.debug(f"[ZAP] 已連線 {self.base_url} (version {version})")
        return True

    def new_session(self, name: str, overwrite: bool = True) -> dict:
        return self.call(
            "core", "action", "newSession",
            name=name, overwrite=str(overwrite).lower(),
        )

    def alerts(self, base_url: str | None = None) -> list[dict]:
        params = {"baseurl": base_url} if base_url else {}
        return self.call("core", "view", "alerts", **params).get("alerts", [])

    def html_report(self) -> str:
        """core/other/htmlreport 回傳的是 HTML 而不是 JSON"""
        endpoint = "core/other/htmlreport"
        try:
            resp = self.session.get(
                self._url("OTHER", "core", "other", "htmlreport"),
                params={"apikey": self.api_key},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.text
        except requests.RequestException as e:
            raise ScanApiError(endpoint, e) from e

    # ── passive scan ──

    def enable_all_passive_scanners(self) -> dict:
        return self.call("pscan", "action", "enableAllScanners")

    # ── spider ──

    def spider_scan(self, url: str) -> str:
        """啟動 spider，回傳 scan id"""
        return str(self.call("spider", "action", "scan", url=url).get("scan", ""))

    def spider_status(self, scan_id: str = "") -> int:
        params = {"scanId": scan_id} if scan_id else {}
        return int(self.call("spider", "view", "status", **params)["status"])

    # ── active scan ──

    def active_scan(self, url: str) -> str:
        """啟動 active scan，回傳 scan id"""
        return str(self.call("ascan", "action", "scan", url=url).get("scan", ""))

    def active_scan_status(self, scan_id: str = "") -> int:
        params = {"scanId": scan_id} if scan_id else {}
        return int(self.call("ascan", "view", "status", **params)["status"])

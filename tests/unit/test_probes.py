"""
scanner/probes.py 單元測試
"""

from unittest.mock import MagicMock

import pytest
import requests

from scanner.models import RiskLevel
from scanner.probes import (
    check_cookie_flags,
    check_debug_exposure,
    probe_access_control,
    probe_reflected_xss,
    probe_sql_injection,
)


def make_login_page(sources):
    page = MagicMock()
    page.get_page_source.side_effect = list(sources)
    return page


@pytest.mark.unit
class TestSqlInjection:

    @pytest.mark.unit
    def test_database_error_flagged(self):
        page = make_login_page(["<p>ORA-00933: SQL command not properly ended</p>", "<p>ok</p>"])
        found = probe_sql_injection(page, ["1' OR '1'='1", "1;--"], settle=0)

        assert len(found) == 1
        assert found[0].name == "Possible SQL Injection"
        assert found[0].risk_level is RiskLevel.HIGH
        assert found[0].cweid == "89"
        assert page.clear_saudi_id.call_count == 2

    @pytest.mark.unit
    def test_payload_failure_continues(self):
        page = make_login_page(["<p>ok</p>"])
        page.enter_saudi_id.side_effect = [RuntimeError("stale"), None]
        assert probe_sql_injection(page, ["a", "b"], settle=0) == []
        assert page.enter_saudi_id.call_count == 2


@pytest.mark.unit
class TestReflectedXss:

    @pytest.mark.unit
    def test_reflected_payload(self):
        payload = "<script>alert('XSS')</script>"
        page = make_login_page([f"<div>{payload}</div>"])
        found = probe_reflected_xss(page, [payload])
        assert [v.cweid for v in found] == ["79"]

    @pytest.mark.unit
    def test_encoded_payload_not_flagged(self):
        page = make_login_page(["<div>&lt;script&gt;</div>"])
        assert probe_reflected_xss(page, ["<script>"]) == []


@pytest.mark.unit
class TestCookieFlags:

    @pytest.mark.unit
    def test_missing_flags(self):
        driver = MagicMock()
        driver.get_cookies.return_value = [
            {"name": "sid", "secure": True, "httpOnly": True},
            {"name": "pref", "secure": False, "httpOnly": False},
        ]
        found = check_cookie_flags(driver)
        assert [v.name for v in found] == ["Insecure Cookie: pref"]
        assert "Secure and HttpOnly" in found[0].description
        assert found[0].risk_level is RiskLevel.LOW

    @pytest.mark.unit
    def test_cookie_read_failure(self):
        driver = MagicMock()
        driver.get_cookies.side_effect = RuntimeError("no session")
        assert check_cookie_flags(driver) == []


@pytest.mark.unit
class TestDebugExposure:

    @pytest.mark.unit
    def test_markers_found(self):
        driver = MagicMock(page_source="<pre>StackTrace: at Foo()</pre>")
        found = check_debug_exposure(driver)
        assert found[0].risk_level is RiskLevel.INFORMATIONAL
        assert "stacktrace" in found[0].description

    @pytest.mark.unit
    def test_clean_page(self):
        assert check_debug_exposure(MagicMock(page_source="<p>hi</p>")) == []


@pytest.mark.unit
class TestAccessControl:

    @pytest.mark.unit
    def test_only_200_flagged(self):
        session = MagicMock()
        session.get.side_effect = [
            MagicMock(status_code=200),
            MagicMock(status_code=302),
            requests.ConnectionError("refused"),
        ]
        found = probe_access_control(
            "https://example.com", ["/admin", "/dashboard", "/api/users"], session=session
        )

        assert [v.name for v in found] == ["Possible Broken Access Control: /admin"]
        assert found[0].risk_level is RiskLevel.MEDIUM
        first_call = session.get.call_args_list[0]
        assert first_call.args[0] == "https://example.com/admin"
        assert first_call.kwargs["allow_redirects"] is False

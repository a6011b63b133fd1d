"""
scanner/models.py 單元測試

驗證風險分類、計數一致性、ZAP alert 轉換與序列化。
"""

import pytest

from scanner.models import (
    RiskLevel,
    ScanSummary,
    SecurityVulnerability,
    create_scan_result,
)


def make_vuln(name="Issue", risk="High", **kwargs) -> SecurityVulnerability:
    defaults = dict(
        confidence="High",
        description="desc",
        solution="fix it",
        reference="https://owasp.org",
    )
    defaults.update(kwargs)
    return SecurityVulnerability(name=name, risk=risk, **defaults)


@pytest.mark.unit
class TestRiskLevelClassify:
    """RiskLevel.classify - 包含字串、不分大小寫"""

    @pytest.mark.unit
    @pytest.mark.parametrize("label, expected", [
        ("High", RiskLevel.HIGH),
        ("HIGH", RiskLevel.HIGH),
        ("high (medium)", RiskLevel.HIGH),
        ("Medium", RiskLevel.MEDIUM),
        ("Low", RiskLevel.LOW),
        ("Informational", RiskLevel.INFORMATIONAL),
        ("", RiskLevel.INFORMATIONAL),
        (None, RiskLevel.INFORMATIONAL),
        ("Critical", RiskLevel.INFORMATIONAL),
    ])
    def test_classify(self, label, expected):
        assert RiskLevel.classify(label) is expected

    @pytest.mark.unit
    def test_severity_order(self):
        """High 最嚴重"""
        assert (
            RiskLevel.HIGH.severity
            < RiskLevel.MEDIUM.severity
            < RiskLevel.LOW.severity
            < RiskLevel.INFORMATIONAL.severity
        )

    @pytest.mark.unit
    def test_bucket_matches_summary_field(self):
        for level in RiskLevel:
            assert hasattr(ScanSummary(), level.bucket)


@pytest.mark.unit
class TestCreateScanResult:
    """create_scan_result - summary 由發現列表推導"""

    @pytest.mark.unit
    def test_mixed_risks(self):
        """2 High + 1 Medium + 1 Low → 2/1/1/0，total 4"""
        findings = [
            make_vuln("a", "High"),
            make_vuln("b", "Medium"),
            make_vuln("c", "High"),
            make_vuln("d", "Low"),
        ]
        result = create_scan_result("https://example.com", findings)

        assert result.summary == ScanSummary(high=2, medium=1, low=1, informational=0)
        assert result.summary.total == 4
        assert [v.name for v in result.vulnerabilities] == ["a", "b", "c", "d"]

    @pytest.mark.unit
    def test_empty(self):
        result = create_scan_result("https://example.com", [])
        assert result.summary.total == 0
        assert result.vulnerabilities == ()

    @pytest.mark.unit
    def test_total_equals_length(self):
        """total 一定等於發現數量，未知風險歸到 informational"""
        findings = [make_vuln(risk=r) for r in ("High", "weird", "low", "MEDIUM", "")]
        result = create_scan_result("u", findings)
        assert result.summary.total == len(findings)
        assert result.summary.informational == 2

    @pytest.mark.unit
    def test_timestamp_is_iso_utc(self):
        result = create_scan_result("u", [])
        assert "T" in result.timestamp
        assert result.timestamp.endswith("+00:00")

    @pytest.mark.unit
    def test_by_risk(self):
        findings = [make_vuln("a", "High"), make_vuln("b", "Low"), make_vuln("c", "High")]
        result = create_scan_result("u", findings)
        assert [v.name for v in result.by_risk(RiskLevel.HIGH)] == ["a", "c"]
        assert result.by_risk(RiskLevel.MEDIUM) == []

    @pytest.mark.unit
    def test_result_is_immutable(self):
        result = create_scan_result("u", [])
        with pytest.raises(AttributeError):
            result.url = "other"


@pytest.mark.unit
class TestFromZapAlert:
    """SecurityVulnerability.from_zap_alert"""

    @pytest.mark.unit
    def test_field_mapping(self):
        alert = {
            "name": "Cross Site Scripting (Reflected)",
            "risk": "High",
            "confidence": "Medium",
            "description": "XSS",
            "solution": "Encode output",
            "reference": "https://owasp.org/xss",
            "cweid": "79",
            "wascid": "8",
        }
        vuln = SecurityVulnerability.from_zap_alert(alert)
        assert vuln.name == "Cross Site Scripting (Reflected)"
        assert vuln.risk_level is RiskLevel.HIGH
        assert vuln.cweid == "79"
        assert vuln.wascid == "8"

    @pytest.mark.unit
    def test_falls_back_to_alert_key(self):
        """舊版 ZAP 只有 alert 欄位"""
        vuln = SecurityVulnerability.from_zap_alert({"alert": "Old Name", "risk": "Low"})
        assert vuln.name == "Old Name"

    @pytest.mark.unit
    def test_empty_ids_become_none(self):
        vuln = SecurityVulnerability.from_zap_alert({"name": "x", "cweid": "", "wascid": ""})
        assert vuln.cweid is None
        assert vuln.wascid is None


@pytest.mark.unit
class TestSerialization:

    @pytest.mark.unit
    def test_vulnerability_to_dict_drops_none(self):
        data = make_vuln().to_dict()
        assert "cweid" not in data
        assert data["risk"] == "High"

    @pytest.mark.unit
    def test_result_to_dict(self):
        result = create_scan_result("https://example.com", [make_vuln(cweid="319")])
        data = result.to_dict()
        assert data["url"] == "https://example.com"
        assert data["summary"] == {
            "high": 1, "medium": 0, "low": 0, "informational": 0, "total": 1,
        }
        assert data["vulnerabilities"][0]["cweid"] == "319"

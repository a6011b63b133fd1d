"""
安全掃描資料模型

- SecurityVulnerability：單一發現（不可變）
- ScanSummary：依風險等級的計數
- SecurityScanResult：某個 URL 的完整掃描結果，summary 完全由發現列表推導

風險分類採「包含字串」比對（不分大小寫）：
    "High" / "high (medium)" → high
    "Medium"                 → medium
    "Low"                    → low
    其他（含 "Informational"）→ informational
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum


class RiskLevel(Enum):
    """風險等級；severity 供排序使用（越小越嚴重）"""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    INFORMATIONAL = "Informational"

    @classmethod
    def classify(cls, label: str | None) -> "RiskLevel":
        """把任意風險字串歸類到四個等級之一"""
        text = (label or "").lower()
        if "high" in text:
            return cls.HIGH
        if "medium" in text:
            return cls.MEDIUM
        if "low" in text:
            return cls.LOW
        return cls.INFORMATIONAL

    @property
    def severity(self) -> int:
        return _SEVERITY_ORDER.index(self)

    @property
    def bucket(self) -> str:
        """對應 ScanSummary 的欄位名稱"""
        return self.value.lower()


_SEVERITY_ORDER = [
    RiskLevel.HIGH,
    RiskLevel.MEDIUM,
    RiskLevel.LOW,
    RiskLevel.INFORMATIONAL,
]


class Confidence(Enum):
    """發現的可信度"""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


@dataclass(frozen=True)
class SecurityVulnerability:
    """一筆潛在安全弱點"""
    name: str
    risk: str
    confidence: str
    description: str
    solution: str
    reference: str
    cweid: str | None = None
    wascid: str | None = None

    @property
    def risk_level(self) -> RiskLevel:
        return RiskLevel.classify(self.risk)

    @classmethod
    def from_zap_alert(cls, alert: dict) -> "SecurityVulnerability":
        """ZAP core/view/alerts 的單筆記錄 → 本地格式（逐欄對應）"""
        return cls(
            name=alert.get("name") or alert.get("alert", ""),
            risk=alert.get("risk", ""),
            confidence=alert.get("confidence", ""),
            description=alert.get("description", ""),
            solution=alert.get("solution", ""),
            reference=alert.get("reference", ""),
            cweid=alert.get("cweid") or None,
            wascid=alert.get("wascid") or None,
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class ScanSummary:
    """各風險等級數量，total 一定等於四個桶的總和"""
    high: int = 0
    medium: int = 0
    low: int = 0
    informational: int = 0

    @property
    def total(self) -> int:
        return self.high + self.medium + self.low + self.informational

    @classmethod
    def from_vulnerabilities(
        cls, vulnerabilities: list[SecurityVulnerability] | tuple[SecurityVulnerability, ...]
    ) -> "ScanSummary":
        counts = {level.bucket: 0 for level in RiskLevel}
        for vuln in vulnerabilities:
            counts[vuln.risk_level.bucket] += 1
        return cls(**counts)

    def to_dict(self) -> dict:
        return {
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
            "informational": self.informational,
            "total": self.total,
        }


@dataclass(frozen=True)
class SecurityScanResult:
    """單一 URL 的掃描結果"""
    url: str
    vulnerabilities: tuple[SecurityVulnerability, ...]
    summary: ScanSummary
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def by_risk(self, level: RiskLevel) -> list[SecurityVulnerability]:
        """取出某個風險等級的發現（保留原順序）"""
        return [v for v in self.vulnerabilities if v.risk_level is level]

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "timestamp": self.timestamp,
            "summary": self.summary.to_dict(),
            "vulnerabilities": [v.to_dict() for v in self.vulnerabilities],
        }


def create_scan_result(
    url: str, findings: list[SecurityVulnerability]
) -> SecurityScanResult:
    """
    把發現列表整理成 SecurityScanResult。

    Args:
        url: 掃描目標
        findings: 發現列表（保留順序）

    Returns:
        含風險計數與當下 UTC 時間戳的結果
    """
    vulnerabilities = tuple(findings)
    return SecurityScanResult(
        url=url,
        vulnerabilities=vulnerabilities,
        summary=ScanSummary.from_vulnerabilities(vulnerabilities),
    )

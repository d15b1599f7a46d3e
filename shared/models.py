"""
Prism Data Models
==================

Pydantic v2 models shared by every Prism tool: the severity scale, single
findings, and the :class:`ScanResult` envelope each tool returns to its
CLI.

References:
    - SARIF v2.1.0 Specification (OASIS, 2020).
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

import datetime as _dt
import json as _json
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ========================== Enumerations ===================================


class Severity(str, Enum):
    """Finding severity level, most severe first."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"


# ========================== Core Models ====================================


class Finding(BaseModel):
    """A single observation produced by a Prism tool.

    Attributes:
        severity:       Qualitative severity rating.
        title:          Short, descriptive title.
        description:    Detailed explanation.
        evidence:       Raw data supporting the finding (dicts are JSON-encoded).
        recommendation: Suggested follow-up.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="ignore",
    )

    severity: Severity = Field(..., description="Severity level of this finding")
    title: str = Field(..., min_length=1, max_length=256, description="Short title")
    description: str = Field(..., min_length=1, description="Detailed explanation")
    evidence: str = Field(default="", description="Supporting evidence or raw data")
    recommendation: str = Field(default="", description="Suggested follow-up")

    @field_validator("evidence", mode="before")
    @classmethod
    def _coerce_evidence(cls, v: Any) -> str:
        """Auto-convert non-string evidence (dict, list) to JSON string."""
        if isinstance(v, str):
            return v
        if isinstance(v, (dict, list)):
            return _json.dumps(v, ensure_ascii=False, default=str)
        return str(v)


class ScanResult(BaseModel):
    """Aggregated result of a single tool run.

    Attributes:
        tool_name:  Name of the Prism tool.
        target:     What was analysed (usually a file path).
        start_time: UTC timestamp when the run started.
        end_time:   UTC timestamp when the run ended.
        findings:   Individual findings.
        summary:    Human-readable summary text.
        metadata:   Tool-specific payload.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="ignore",
    )

    tool_name: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)
    start_time: _dt.datetime = Field(
        default_factory=lambda: _dt.datetime.now(_dt.timezone.utc)
    )
    end_time: Optional[_dt.datetime] = None
    findings: list[Finding] = Field(default_factory=list)
    summary: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def severity_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {s.value: 0 for s in Severity}
        for finding in self.findings:
            counts[finding.severity.value] += 1
        return counts

    @property
    def finding_count(self) -> int:
        return len(self.findings)

    def finalize(self, summary: str | None = None) -> ScanResult:
        """Stamp *end_time* and set *summary* (a default is built from counts).

        Returns:
            ``self`` for fluent chaining.
        """
        self.end_time = _dt.datetime.now(_dt.timezone.utc)
        if summary is not None:
            self.summary = summary
        else:
            parts = [f"{sev}: {cnt}" for sev, cnt in self.severity_counts.items() if cnt]
            self.summary = (
                f"Scan complete. Findings: {len(self.findings)} "
                f"({', '.join(parts) if parts else 'none'})"
            )
        return self

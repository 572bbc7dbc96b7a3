from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List


class Severity(str, Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass
class Finding:
    """One step of a resolution or connectivity run."""
    step: str
    ok: bool
    detail: str
    severity: Severity = Severity.ERROR


@dataclass
class Report:
    title: str
    findings: List[Finding] = field(default_factory=list)

    def ok(self, step: str, detail: str) -> None:
        self.findings.append(Finding(step, True, detail, Severity.INFO))

    def warn(self, step: str, detail: str) -> None:
        self.findings.append(Finding(step, False, detail, Severity.WARN))

    def fail(self, step: str, detail: str) -> None:
        self.findings.append(Finding(step, False, detail, Severity.ERROR))

    def has_failures(self) -> bool:
        return any((not f.ok) and f.severity == Severity.ERROR for f in self.findings)

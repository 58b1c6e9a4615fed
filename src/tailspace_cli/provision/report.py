"""Run report collecting every phase outcome of a provisioning run."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field


@dataclass
class ReportEntry:
    phase: str  # tools, config, docker, cluster, ownership
    name: str
    outcome: str
    ok: bool = True
    detail: str | None = None


@dataclass
class RunReport:
    """Ordered outcomes of a best-effort run."""

    entries: list[ReportEntry] = field(default_factory=list)

    def add(
        self,
        phase: str,
        name: str,
        outcome: str,
        ok: bool = True,
        detail: str | None = None,
    ) -> ReportEntry:
        entry = ReportEntry(phase, name, outcome, ok, detail)
        self.entries.append(entry)
        return entry

    @property
    def failures(self) -> list[ReportEntry]:
        return [e for e in self.entries if not e.ok]

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def counts(self) -> dict[str, int]:
        """Number of entries per outcome."""
        return dict(Counter(e.outcome for e in self.entries))

    def outcomes(self, phase: str | None = None) -> list[str]:
        return [e.outcome for e in self.entries if phase is None or e.phase == phase]

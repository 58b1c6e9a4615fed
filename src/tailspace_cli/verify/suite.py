"""Repository verification suite.

Loads pass/fail checks from YAML and evaluates them against a repo
checkout: file presence, literal markers inside files, and membership
in the provisioning catalog.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from importlib.resources import files
from pathlib import Path
from typing import Any

import yaml

CHECK_KINDS = ("exists", "contains", "step")


@dataclass
class Check:
    """A single verification assertion."""

    description: str
    kind: str
    path: str | None = None
    text: str | None = None
    name: str | None = None

    def evaluate(self, root: Path, catalog: set[str]) -> bool:
        if self.kind == "step":
            return self.name in catalog
        target = root / (self.path or "")
        if not target.is_file():
            return False
        if self.kind == "exists":
            return True
        try:
            return (self.text or "") in target.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return False


@dataclass
class Section:
    title: str
    checks: list[Check] = field(default_factory=list)


@dataclass
class CheckResult:
    section: str
    description: str
    passed: bool


@dataclass
class VerificationReport:
    """Tally of a verification run."""

    results: list[CheckResult] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return len(self.results) - self.passed

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def ok(self) -> bool:
        return self.failed == 0


def _parse_check(raw: dict[str, Any]) -> Check:
    kind = raw.get("kind")
    if kind not in CHECK_KINDS:
        raise ValueError(f"Unknown check kind: {kind!r}")
    check = Check(
        description=str(raw["description"]),
        kind=kind,
        path=raw.get("path"),
        text=None if raw.get("text") is None else str(raw["text"]),
        name=raw.get("name"),
    )
    if kind == "step" and not check.name:
        raise ValueError(f"Check '{check.description}' needs a name")
    if kind != "step" and not check.path:
        raise ValueError(f"Check '{check.description}' needs a path")
    if kind == "contains" and check.text is None:
        raise ValueError(f"Check '{check.description}' needs text")
    return check


class VerificationSuite:
    """Ordered sections of checks."""

    def __init__(self, sections: list[Section]):
        self.sections = sections

    @classmethod
    def from_yaml(cls, source: str | Path | None = None) -> "VerificationSuite":
        """Load a suite from a YAML file (bundled checks by default).

        Raises:
            ValueError: If the document is malformed.
        """
        if source is None:
            text = files(__package__).joinpath("checks.yaml").read_text(encoding="utf-8")
        else:
            text = Path(source).read_text(encoding="utf-8")
        data = yaml.safe_load(text) or {}
        sections = []
        for raw in data.get("sections", []):
            checks = [_parse_check(c) for c in raw.get("checks", [])]
            sections.append(Section(str(raw["title"]), checks))
        return cls(sections)

    def run(
        self,
        root: Path,
        catalog: set[str],
        on_result: Callable[[CheckResult], None] | None = None,
        on_section: Callable[[Section], None] | None = None,
    ) -> VerificationReport:
        """Evaluate every check under ``root``.

        Args:
            root: Repository root.
            catalog: Step and artifact names for ``step`` checks.
            on_result: Called after each check.
            on_section: Called before each section.
        """
        report = VerificationReport()
        for section in self.sections:
            if on_section:
                on_section(section)
            for check in section.checks:
                passed = check.evaluate(root, catalog)
                result = CheckResult(section.title, check.description, passed)
                report.results.append(result)
                if on_result:
                    on_result(result)
        return report

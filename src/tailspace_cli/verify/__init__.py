"""Repository verification (`tailspace test`)."""

from .suite import Check, CheckResult, Section, VerificationReport, VerificationSuite

__all__ = [
    "Check",
    "CheckResult",
    "Section",
    "VerificationReport",
    "VerificationSuite",
]

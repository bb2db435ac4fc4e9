"""Validation result types shared by the validation engine and the CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Literal

Severity = Literal["error", "warning"]


class IssueType(StrEnum):
    """Kinds of structural problems reported by :func:`validate`."""

    MISSING_START = "MISSING_START"
    MULTIPLE_START = "MULTIPLE_START"
    ORPHAN_NODE = "ORPHAN_NODE"
    UNCONNECTED_OPTION = "UNCONNECTED_OPTION"
    EMPTY_OPTION = "EMPTY_OPTION"
    UNCONNECTED_OUTPUT = "UNCONNECTED_OUTPUT"
    DEAD_END = "DEAD_END"
    UNREACHABLE = "UNREACHABLE"


@dataclass
class ValidationIssue:
    """A single finding about the user's quest graph.

    Attributes:
        id: Sequential id within one validation call (``issue-1``, ...).
            Not stable across calls.
        severity: "error" for unplayable structure, "warning" otherwise.
        type: The kind of issue.
        message: Human-readable description.
        node_id: The node the issue concerns, if any.
        option_id: The option the issue concerns, if any.
    """

    id: str
    severity: Severity
    type: IssueType
    message: str
    node_id: str | None = None
    option_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting absent references."""
        data: dict[str, Any] = {
            "id": self.id,
            "severity": self.severity,
            "type": str(self.type),
            "message": self.message,
        }
        if self.node_id is not None:
            data["nodeId"] = self.node_id
        if self.option_id is not None:
            data["optionId"] = self.option_id
        return data


@dataclass
class ValidationReport:
    """Aggregated issues from one validation run.

    Attributes:
        issues: Issues in the order the checks produced them.
    """

    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def has_errors(self) -> bool:
        """True if any issue has severity 'error'."""
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        """True if any issue has severity 'warning'."""
        return bool(self.warnings)

    @property
    def summary(self) -> str:
        """Human-readable summary of all issues."""
        if not self.issues:
            return "no issues"

        parts: list[str] = []
        n_errors = len(self.errors)
        n_warnings = len(self.warnings)
        if n_errors:
            parts.append(f"{n_errors} error{'s' if n_errors != 1 else ''}")
        if n_warnings:
            parts.append(f"{n_warnings} warning{'s' if n_warnings != 1 else ''}")
        return ", ".join(parts)

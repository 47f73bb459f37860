"""Exception taxonomy and diagnostic rendering for command-line parsing."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from muparse.tokens import Token


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass
class Diagnostic:
    """A single diagnostic message, optionally pointing into the command line."""

    severity: Severity
    message: str
    start: int = -1  # offset of the offending text, -1 when unknown
    end: int = -1
    label: str = ""
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics against the command line they refer to."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def render(self, diag: Diagnostic, line: str | None = None) -> str:
        lines: list[str] = []
        color = _COLORS[diag.severity]

        # Header: error: message
        lines.append(
            f"{self._c(color)}{diag.severity.value}{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        if line is not None:
            lines.append(f"  {self._c(_BLUE)}|{self._c(_RESET)}")
            lines.append(f"  {self._c(_BLUE)}|{self._c(_RESET)} {line}")
            # A missing position means the input ended too early
            start = diag.start if diag.start >= 0 else len(line)
            end = diag.end if diag.end > start else start + 1
            padding = " " * start
            carets = "^" * (end - start)
            lines.append(
                f"  {self._c(_BLUE)}|{self._c(_RESET)} "
                f"{padding}{self._c(color)}{carets}{self._c(_RESET)}"
            )
            if diag.label:
                lines.append(
                    f"  {self._c(_BLUE)}|{self._c(_RESET)} "
                    f"{padding}{self._c(color)}{diag.label}{self._c(_RESET)}"
                )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        return "\n".join(lines)


class MuParseError(Exception):
    """Base class for everything raised by muparse."""

    def diagnostic(self) -> Diagnostic:
        return Diagnostic(severity=Severity.ERROR, message=str(self))


class SyntaxRejection(MuParseError):
    """An argument refused a token value.

    Raised by ``Argument.accept`` and turned into a backtrack by the matcher.
    """


class SyntaxFailure(MuParseError):
    """A parse could not match the command line against its syntax."""

    def __init__(self, reason: str, token: Token | None = None) -> None:
        self.reason = reason
        self.token = token
        super().__init__(reason)

    def diagnostic(self) -> Diagnostic:
        if self.token is None:
            return Diagnostic(
                severity=Severity.ERROR,
                message=f"invalid command line: {self.reason}",
                label="incomplete command",
            )
        return Diagnostic(
            severity=Severity.ERROR,
            message=f"invalid command line: {self.reason}",
            start=self.token.start,
            end=self.token.end,
            label=f"unexpected {self.token.text!r}",
        )


class GrammarError(SyntaxFailure):
    """The syntax graph itself is malformed.

    Never recovered from by backtracking.
    """

    def diagnostic(self) -> Diagnostic:
        return Diagnostic(
            severity=Severity.ERROR,
            message=f"bad syntax definition: {self.reason}",
        )


class StepLimitExceeded(MuParseError):
    """The parse ran past its step limit."""

    def __init__(self, step_limit: int) -> None:
        self.step_limit = step_limit
        super().__init__(
            f"parse exceeded the step limit ({step_limit}); either the command "
            "line is too large, or the syntax is too complex (or pathological)"
        )

    def diagnostic(self) -> Diagnostic:
        return Diagnostic(
            severity=Severity.ERROR,
            message="command line too complex",
            notes=[str(self)],
        )


class LexError(MuParseError):
    """The command line could not be split into tokens."""

    def __init__(self, message: str, offset: int) -> None:
        self.offset = offset
        super().__init__(message)

    def diagnostic(self) -> Diagnostic:
        return Diagnostic(
            severity=Severity.ERROR,
            message=str(self),
            start=self.offset,
            end=self.offset + 1,
        )


class ConfigError(MuParseError):
    """A muparse.toml value has the wrong type or shape."""

    def diagnostic(self) -> Diagnostic:
        return Diagnostic(
            severity=Severity.ERROR,
            message=f"invalid muparse.toml: {self}",
        )

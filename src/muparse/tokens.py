"""Token representation and the token source contract used by the matcher."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Token:
    """A word of the command line.

    ``start``/``end`` are offsets into the original line (end exclusive).
    Synthetic tokens, such as preset values, have both set to -1.
    """

    text: str
    start: int = -1
    end: int = -1

    def __str__(self) -> str:
        return self.text


class TokenSource:
    """Sequential, peekable and seekable stream of tokens."""

    def has_next(self) -> bool:
        raise NotImplementedError

    def peek(self) -> Token:
        raise NotImplementedError

    def next(self) -> Token:
        raise NotImplementedError

    def tell(self) -> int:
        """Return an opaque position for a later ``seek``."""
        raise NotImplementedError

    def seek(self, pos: int) -> None:
        raise NotImplementedError

    def whitespace_after_last(self) -> bool:
        """True if whitespace follows the token most recently returned by ``next``."""
        raise NotImplementedError

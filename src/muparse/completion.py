"""Completion sink filled in by completion parses."""

from __future__ import annotations

import os


class CompletionInfo:
    """Collects completion candidates and the offset they replace from."""

    def __init__(self) -> None:
        self._completions: set[str] = set()
        self.completion_start = -1

    def add_completion(self, completion: str) -> None:
        self._completions.add(completion)

    def set_completion_start(self, start: int) -> None:
        self.completion_start = start

    @property
    def completions(self) -> list[str]:
        """Candidates in sorted order, without duplicates."""
        return sorted(self._completions)

    def common_prefix(self) -> str:
        """The longest prefix shared by every candidate."""
        if not self._completions:
            return ""
        return os.path.commonprefix(self.completions)

    def __len__(self) -> int:
        return len(self._completions)

    def __contains__(self, completion: object) -> bool:
        return completion in self._completions

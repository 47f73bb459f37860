"""Shared test helpers for the muparse test suite."""

from __future__ import annotations

from muparse.arguments import ArgumentBundle, StringArgument
from muparse.completion import CompletionInfo
from muparse.lexer import CommandLineSource, Lexer
from muparse.matcher import DEFAULT_STEP_LIMIT, SyntaxMatcher
from muparse.syntax import Syntax
from muparse.tokens import Token


class TracingArgument(StringArgument):
    """A string argument that records every accept and undo in a shared log."""

    def __init__(self, label: str, log: list, *, multiple: bool = False) -> None:
        super().__init__(label, multiple=multiple)
        self.log = log

    def accept(self, token: Token) -> None:
        super().accept(token)
        self.log.append(("accept", self.label, token.text))

    def undo_last_value(self) -> None:
        value = self.value
        super().undo_last_value()
        self.log.append(("undo", self.label, value))


def source(*words: str, trailing: bool = False) -> CommandLineSource:
    """Helper: a token source over words separated by single spaces."""
    return CommandLineSource.from_words(*words, trailing_whitespace=trailing)


def parse(
    syntax: Syntax,
    line: str,
    bundle: ArgumentBundle | None = None,
    step_limit: int = DEFAULT_STEP_LIMIT,
) -> dict:
    """Helper: parse a command line and return the bound values."""
    if bundle is None:
        bundle = ArgumentBundle()
    SyntaxMatcher().parse(syntax, None, Lexer(line).source(), bundle, step_limit)
    return bundle.values()


def complete(
    syntax: Syntax,
    line: str,
    bundle: ArgumentBundle | None = None,
    step_limit: int = DEFAULT_STEP_LIMIT,
) -> CompletionInfo:
    """Helper: run a completion parse over a partial command line."""
    if bundle is None:
        bundle = ArgumentBundle()
    completion = CompletionInfo()
    src = Lexer(line, lenient=True).source()
    SyntaxMatcher().parse(syntax, completion, src, bundle, step_limit)
    return completion

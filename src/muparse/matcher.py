"""Backtracking matcher for command-line syntax graphs.

``SyntaxMatcher.parse`` walks a syntax graph against a token source, binding
``ArgumentRef`` and ``Preset`` nodes into an ``ArgumentBundle`` as it goes.
Every ``Alternation`` pushes a choice point recording the source position,
the continuation stack and the alternatives; when the walk cannot make
progress it backtracks to the most recent choice point with an untried
alternative, undoing the argument values bound since that choice point.

A normal parse stops at the first complete match, or raises
``SyntaxFailure`` once every alternative has been tried.  A completion parse
(``completion`` is not None) never stops at a match: it explores every
alternative, recording in ``completion`` what could follow the input.

A syntax may loop without consuming input, or backtrack combinatorially, so
the number of steps is bounded by ``step_limit``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from muparse.arguments import Argument, ArgumentBundle
from muparse.completion import CompletionInfo
from muparse.errors import GrammarError, StepLimitExceeded, SyntaxFailure, SyntaxRejection
from muparse.stack import ContinuationStack
from muparse.syntax import (
    Alternation,
    ArgumentRef,
    BackReference,
    Preset,
    Sequence,
    Symbol,
    Syntax,
    format_syntax,
)
from muparse.tokens import Token, TokenSource

logger = logging.getLogger(__name__)

DEFAULT_STEP_LIMIT = 10000


@dataclass
class ChoicePoint:
    """Where to resume when the alternative being tried fails."""

    source_pos: int
    stack: ContinuationStack  # excludes the alternation's own children
    choices: list[Syntax | None]
    choice_no: int = 0
    args_modified: list[Argument] = field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"CP{{source_pos={self.source_pos}, stack=[{_show_stack(self.stack)}], "
            f"choice_no={self.choice_no}}}"
        )


def _show_stack(stack: ContinuationStack) -> str:
    return ", ".join(format_syntax(node) for node in stack)


# Serializes parses that bind no arguments
_unbound_lock = threading.Lock()


class SyntaxMatcher:
    """Matches token sources against syntax graphs.

    A matcher holds no parse state.  Parses into the same ``ArgumentBundle``
    are serialized on the bundle's lock, whichever matcher runs them.
    """

    def parse(
        self,
        root: Syntax,
        completion: CompletionInfo | None,
        source: TokenSource,
        bundle: ArgumentBundle | None,
        step_limit: int = DEFAULT_STEP_LIMIT,
    ) -> None:
        """Parse ``source`` against ``root``.

        On success the arguments in ``bundle`` hold the bound values.  After a
        failure their contents are unspecified.  A ``step_limit`` of zero or
        less means no limit.
        """
        with bundle.lock if bundle is not None else _unbound_lock:
            if bundle is not None:
                bundle.clear()
            _MatchRun(root, completion, source, bundle, step_limit).run()


class _MatchRun:
    """State of a single parse."""

    def __init__(
        self,
        root: Syntax,
        completion: CompletionInfo | None,
        source: TokenSource,
        bundle: ArgumentBundle | None,
        step_limit: int,
    ) -> None:
        self.completion = completion
        self.source = source
        self.bundle = bundle
        self.step_limit = step_limit
        self.stack = ContinuationStack([root])
        self.backtrack_stack: list[ChoicePoint] = []  # most recent last
        self.step_count = 0
        self.debug = logger.isEnabledFor(logging.DEBUG)
        # Token that caused the current step to backtrack, if any
        self.rejected: Token | None = None
        # Furthest point of failure, reported by the final SyntaxFailure
        self.fail_pos = -1
        self.fail_token: Token | None = None

    def run(self) -> None:
        while True:
            self.rejected = None
            backtrack = self._step() if self.stack else False
            if not backtrack and not self.stack:
                if self.source.has_next():
                    logger.debug("syntax exhausted before the input")
                    backtrack = True
                elif self.completion is not None and self.backtrack_stack:
                    logger.debug("trying remaining alternatives for completion")
                    backtrack = True
                else:
                    break
            if backtrack and not self._backtrack():
                if self.completion is None:
                    raise SyntaxFailure("ran out of alternatives", self.fail_token)
                logger.debug("completion finished after %d steps", self.step_count)
                return
        logger.debug("parse succeeded after %d steps", self.step_count)

    # ── Steps ────────────────────────────────────────────────────

    def _step(self) -> bool:
        """Match the top of the stack; return True to backtrack."""
        self.step_count += 1
        if self.step_limit > 0 and self.step_count > self.step_limit:
            raise StepLimitExceeded(self.step_limit)

        syntax = self.stack.pop()
        if self.debug:
            logger.debug(
                "trying %s; source -> %s",
                format_syntax(syntax),
                repr(self.source.peek().text) if self.source.has_next() else "end",
            )

        if isinstance(syntax, Symbol):
            return self._match_symbol(syntax)
        if isinstance(syntax, ArgumentRef):
            return self._match_argument(syntax)
        if isinstance(syntax, Preset):
            return self._match_preset(syntax)
        if isinstance(syntax, Sequence):
            self.stack.push_all(syntax.elements)
            return False
        if isinstance(syntax, Alternation):
            return self._push_choice_point(syntax)
        if isinstance(syntax, BackReference):
            raise GrammarError(f"unresolved back-reference '#{syntax.ref}'")
        raise GrammarError(f"unknown syntax node {syntax!r}")

    def _match_symbol(self, syntax: Symbol) -> bool:
        token = self.source.next() if self.source.has_next() else None
        completion = self.completion

        if completion is None:
            if token is None:
                return True
            if token.text != syntax.symbol:
                self.rejected = token
                return True
            return False

        if token is None:
            completion.add_completion(syntax.symbol)
            return True
        if self.source.whitespace_after_last():
            return token.text != syntax.symbol
        # A partial last word: offer the symbol, then keep looking
        if syntax.symbol.startswith(token.text):
            completion.add_completion(syntax.symbol)
            completion.set_completion_start(token.start)
        return True

    def _match_argument(self, syntax: ArgumentRef) -> bool:
        arg = self._argument(syntax.arg_name)
        completion = self.completion

        if not self.source.has_next():
            if completion is not None:
                arg.complete(completion, "")
            return True

        token = self.source.next()
        if completion is not None and not (
            self.source.has_next() or self.source.whitespace_after_last()
        ):
            arg.complete(completion, token.text)
            completion.set_completion_start(token.start)
            return True

        try:
            arg.accept(token)
        except SyntaxRejection as e:
            logger.debug("argument %s rejected %r: %s", arg.label, token.text, e)
            self.rejected = token
            return True
        self._record(arg)
        return False

    def _match_preset(self, syntax: Preset) -> bool:
        arg = self._argument(syntax.arg_name)
        try:
            arg.accept(Token(syntax.preset))
        except SyntaxRejection as e:
            logger.debug("argument %s rejected preset %r: %s", arg.label, syntax.preset, e)
            return True
        self._record(arg)
        return False

    def _push_choice_point(self, syntax: Alternation) -> bool:
        choices = syntax.alternatives
        if not choices:
            return True
        choice_point = ChoicePoint(self.source.tell(), self.stack, choices)
        self.backtrack_stack.append(choice_point)
        # The choice point owns the old view from here on
        self.stack = self.stack.share()
        if self.debug:
            logger.debug("pushed choice point %s", choice_point)
        if choices[0] is not None:
            self.stack.push(choices[0])
        return False

    def _argument(self, name: str) -> Argument:
        if self.bundle is None:
            raise GrammarError(f"syntax refers to argument '{name}' but there is no bundle")
        return self.bundle.get_argument(name)

    def _record(self, arg: Argument) -> None:
        """Log a bound value on the current choice point so it can be undone."""
        if self.backtrack_stack:
            self.backtrack_stack[-1].args_modified.append(arg)
            logger.debug("recording undo for argument %s", arg.label)

    # ── Backtracking ─────────────────────────────────────────────

    def _backtrack(self) -> bool:
        """Resume at the next untried alternative; False if there is none."""
        if self.completion is None:
            self._note_failure()

        while self.backtrack_stack:
            choice_point = self.backtrack_stack[-1]
            if self.debug:
                logger.debug("backtracking to %s", choice_point)
            for arg in reversed(choice_point.args_modified):
                logger.debug("undo for argument %s", arg.label)
                arg.undo_last_value()

            last_choice = len(choice_point.choices) - 1
            choice_point.choice_no += 1
            if choice_point.choice_no <= last_choice:
                choice = choice_point.choices[choice_point.choice_no]
                choice_point.args_modified.clear()
                self.source.seek(choice_point.source_pos)
                # Nothing resumes from this choice point's stack after its last choice
                if choice_point.choice_no == last_choice:
                    self.stack = choice_point.stack
                else:
                    self.stack = choice_point.stack.share()
                if choice is not None:
                    self.stack.push(choice)
                logger.debug("taking choice #%d", choice_point.choice_no)
                return True

            self.backtrack_stack.pop()
            logger.debug("popped choice point")
        return False

    def _note_failure(self) -> None:
        if self.rejected is not None:
            pos, culprit = self.source.tell() - 1, self.rejected
        else:
            pos = self.source.tell()
            culprit = self.source.peek() if self.source.has_next() else None
        if pos > self.fail_pos:
            self.fail_pos, self.fail_token = pos, culprit

"""Lexer for command lines.

Splits a line into whitespace-separated words, honouring single quotes
(literal), double quotes (backslash escapes allowed) and backslash escapes
outside quotes, and exposes the result as a seekable token source.
"""

from __future__ import annotations

from muparse.errors import LexError
from muparse.tokens import Token, TokenSource

_ESCAPABLE_IN_DQUOTE = frozenset('"\\$`')


class Lexer:
    """Tokenizes a single command line."""

    def __init__(self, line: str, *, lenient: bool = False) -> None:
        self.line = line
        self.lenient = lenient
        self.pos = 0
        self.tokens: list[Token] = []

    def lex(self) -> list[Token]:
        """Tokenize the whole line and return the token list."""
        while True:
            self._skip_spaces()
            if self.pos >= len(self.line):
                break
            self._lex_word()
        return self.tokens

    def source(self) -> CommandLineSource:
        """Tokenize the line and wrap the result in a ``CommandLineSource``."""
        tokens = self.lex()
        # An escaped or quoted space belongs to the last word
        trailing = tokens[-1].end < len(self.line) if tokens else bool(self.line)
        return CommandLineSource(tokens, trailing_whitespace=trailing)

    # ── Helpers ───────────────────────────────────────────────────

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.line):
            return self.line[idx]
        return '\0'

    def _at_end(self) -> bool:
        return self.pos >= len(self.line)

    def _skip_spaces(self) -> None:
        while not self._at_end() and self.line[self.pos].isspace():
            self.pos += 1

    def _unterminated(self, what: str, start: int) -> None:
        if not self.lenient:
            raise LexError(f"unterminated {what}", start)

    # ── Words ────────────────────────────────────────────────────

    def _lex_word(self) -> None:
        start = self.pos
        chars: list[str] = []
        while not self._at_end() and not self.line[self.pos].isspace():
            ch = self.line[self.pos]
            match ch:
                case "'":
                    self._lex_single_quoted(chars)
                case '"':
                    self._lex_double_quoted(chars)
                case '\\':
                    self.pos += 1
                    if self._at_end():
                        self._unterminated("escape", self.pos - 1)
                    else:
                        chars.append(self.line[self.pos])
                        self.pos += 1
                case _:
                    chars.append(ch)
                    self.pos += 1
        self.tokens.append(Token("".join(chars), start, self.pos))

    def _lex_single_quoted(self, chars: list[str]) -> None:
        quote_start = self.pos
        self.pos += 1
        while not self._at_end() and self.line[self.pos] != "'":
            chars.append(self.line[self.pos])
            self.pos += 1
        if self._at_end():
            self._unterminated("single quote", quote_start)
        else:
            self.pos += 1

    def _lex_double_quoted(self, chars: list[str]) -> None:
        quote_start = self.pos
        self.pos += 1
        while not self._at_end() and self.line[self.pos] != '"':
            ch = self.line[self.pos]
            if ch == '\\' and self._peek(1) in _ESCAPABLE_IN_DQUOTE:
                chars.append(self._peek(1))
                self.pos += 2
                continue
            chars.append(ch)
            self.pos += 1
        if self._at_end():
            self._unterminated("double quote", quote_start)
        else:
            self.pos += 1


class CommandLineSource(TokenSource):
    """A token source over an already tokenized command line."""

    def __init__(self, tokens: list[Token], *, trailing_whitespace: bool = False) -> None:
        self.tokens = tokens
        self.trailing_whitespace = trailing_whitespace
        self.pos = 0

    @classmethod
    def from_words(cls, *words: str, trailing_whitespace: bool = False) -> CommandLineSource:
        """Build a source from plain words laid out with single spaces."""
        tokens: list[Token] = []
        offset = 0
        for word in words:
            tokens.append(Token(word, offset, offset + len(word)))
            offset += len(word) + 1
        return cls(tokens, trailing_whitespace=trailing_whitespace)

    def has_next(self) -> bool:
        return self.pos < len(self.tokens)

    def peek(self) -> Token:
        if not self.has_next():
            raise IndexError("no more tokens")
        return self.tokens[self.pos]

    def next(self) -> Token:
        tok = self.peek()
        self.pos += 1
        return tok

    def tell(self) -> int:
        return self.pos

    def seek(self, pos: int) -> None:
        if not 0 <= pos <= len(self.tokens):
            raise IndexError(f"seek position {pos} out of range")
        self.pos = pos

    def whitespace_after_last(self) -> bool:
        # Words are whitespace separated, so only the final one can lack it
        if self.pos < len(self.tokens):
            return True
        return self.trailing_whitespace

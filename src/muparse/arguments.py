"""Argument slots bound by the matcher, and the bundle that holds them."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from muparse.errors import GrammarError, SyntaxRejection
from muparse.tokens import Token

if TYPE_CHECKING:
    from muparse.completion import CompletionInfo


class Argument:
    """A named, typed binding slot.

    Values are kept on a stack so that the matcher can undo them one at a
    time when it backtracks.  Subclasses implement ``convert`` (and optionally
    ``complete``); ``accept`` handles cardinality and bookkeeping.
    """

    type_name = "value"

    def __init__(self, label: str, *, multiple: bool = False, description: str = "") -> None:
        self.label = label
        self.multiple = multiple
        self.description = description
        self._values: list[Any] = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.label!r}, values={self._values!r})"

    def convert(self, token: Token) -> Any:
        """Turn a token into a value, raising ``SyntaxRejection`` if it is not legal."""
        raise NotImplementedError

    def accept(self, token: Token) -> None:
        if self._values and not self.multiple:
            raise SyntaxRejection(f"argument '{self.label}' already has a value")
        self._values.append(self.convert(token))

    def undo_last_value(self) -> None:
        if not self._values:
            raise IndexError(f"argument '{self.label}' has no value to undo")
        self._values.pop()

    def complete(self, completion: CompletionInfo, partial: str) -> None:
        """Offer completions for ``partial``.  Free-form arguments offer none."""

    def clear(self) -> None:
        self._values.clear()

    @property
    def is_set(self) -> bool:
        return bool(self._values)

    @property
    def values(self) -> list[Any]:
        return list(self._values)

    @property
    def value(self) -> Any:
        """The bound value (the latest one for multi-valued slots), or None."""
        return self._values[-1] if self._values else None


class StringArgument(Argument):
    type_name = "string"

    def convert(self, token: Token) -> str:
        return token.text


class IntegerArgument(Argument):
    type_name = "integer"

    def __init__(
        self,
        label: str,
        *,
        min_value: int | None = None,
        max_value: int | None = None,
        multiple: bool = False,
        description: str = "",
    ) -> None:
        super().__init__(label, multiple=multiple, description=description)
        self.min_value = min_value
        self.max_value = max_value

    def convert(self, token: Token) -> int:
        try:
            value = int(token.text, 0)
        except ValueError:
            raise SyntaxRejection(f"{token.text!r} is not an integer") from None
        if self.min_value is not None and value < self.min_value:
            raise SyntaxRejection(f"{value} is less than {self.min_value}")
        if self.max_value is not None and value > self.max_value:
            raise SyntaxRejection(f"{value} is greater than {self.max_value}")
        return value


class EnumArgument(Argument):
    type_name = "enum"

    def __init__(
        self,
        label: str,
        choices: list[str],
        *,
        multiple: bool = False,
        description: str = "",
    ) -> None:
        super().__init__(label, multiple=multiple, description=description)
        self.choices = list(choices)

    def convert(self, token: Token) -> str:
        if token.text not in self.choices:
            raise SyntaxRejection(
                f"{token.text!r} is not one of {', '.join(self.choices)}"
            )
        return token.text

    def complete(self, completion: CompletionInfo, partial: str) -> None:
        for choice in self.choices:
            if choice.startswith(partial):
                completion.add_completion(choice)


_TRUE_WORDS = frozenset({"true", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "no", "off"})


class FlagArgument(Argument):
    """A boolean slot, usually bound through a preset."""

    type_name = "flag"

    def convert(self, token: Token) -> bool:
        word = token.text.lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise SyntaxRejection(f"{token.text!r} is not a boolean")

    def complete(self, completion: CompletionInfo, partial: str) -> None:
        for word in ("false", "true"):
            if word.startswith(partial):
                completion.add_completion(word)


class ArgumentBundle:
    """The arguments of one command, keyed by label.

    ``lock`` is held by the matcher for the whole of a parse, so parses
    binding into the same bundle run one at a time.
    """

    def __init__(self, *arguments: Argument) -> None:
        self.lock = threading.Lock()
        self._arguments: dict[str, Argument] = {}
        for arg in arguments:
            self.add(arg)

    def add(self, argument: Argument) -> None:
        if argument.label in self._arguments:
            raise GrammarError(f"duplicate argument '{argument.label}'")
        self._arguments[argument.label] = argument

    def get_argument(self, name: str) -> Argument:
        try:
            return self._arguments[name]
        except KeyError:
            raise GrammarError(f"unknown argument '{name}'") from None

    def clear(self) -> None:
        for arg in self._arguments.values():
            arg.clear()

    def values(self) -> dict[str, Any]:
        """Return the bound arguments as ``{label: value}``.

        Multi-valued arguments map to a list of their values.
        """
        result: dict[str, Any] = {}
        for label, arg in self._arguments.items():
            if arg.is_set:
                result[label] = arg.values if arg.multiple else arg.value
        return result

    def __contains__(self, name: object) -> bool:
        return name in self._arguments

    def __iter__(self) -> Iterator[Argument]:
        return iter(self._arguments.values())

    def __len__(self) -> int:
        return len(self._arguments)

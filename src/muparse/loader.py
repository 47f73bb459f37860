"""Builds syntax graphs and argument bundles from plain data.

A syntax description is either a string (a literal ``Symbol``) or a list whose
first element names the construct::

    ["seq", item, ...]          Sequence
    ["alt", item, ...]          Alternation
    ["opt", item]               item or nothing
    ["star", item]              zero or more items
    ["plus", item]              one or more items
    ["arg", name]               ArgumentRef
    ["preset", name, value]     Preset
    ["label", name, item]       item, labelled for back-references
    ["ref", name]               BackReference to a labelled item

This is the format used by the ``syntax`` entries of ``muparse.toml``.
"""

from __future__ import annotations

import itertools
from typing import Any

from muparse.arguments import (
    Argument,
    ArgumentBundle,
    EnumArgument,
    FlagArgument,
    IntegerArgument,
    StringArgument,
)
from muparse.errors import GrammarError
from muparse.syntax import (
    Alternation,
    ArgumentRef,
    BackReference,
    Preset,
    Sequence,
    Symbol,
    Syntax,
    resolve,
)


class SyntaxBuilder:
    """Turns nested-list syntax descriptions into (unresolved) syntax graphs."""

    def __init__(self) -> None:
        self._loop_ids = itertools.count(1)

    def build(self, desc: Any) -> Syntax:
        if isinstance(desc, str):
            return Symbol(desc)
        if not isinstance(desc, list) or not desc or not isinstance(desc[0], str):
            raise GrammarError(f"bad syntax description {desc!r}")

        head, args = desc[0], desc[1:]
        match head:
            case "seq":
                return Sequence([self.build(item) for item in args])
            case "alt":
                return Alternation([self.build(item) for item in args])
            case "opt":
                self._arity(desc, 1)
                return Alternation([self.build(args[0]), None])
            case "star":
                self._arity(desc, 1)
                return self._loop(self.build(args[0]))
            case "plus":
                self._arity(desc, 1)
                item = self.build(args[0])
                return Sequence([item, self._loop(item)])
            case "arg":
                self._arity(desc, 1)
                return ArgumentRef(self._name(desc, args[0]))
            case "preset":
                self._arity(desc, 2)
                return Preset(self._name(desc, args[0]), str(args[1]))
            case "label":
                self._arity(desc, 2)
                return self._labelled(self._name(desc, args[0]), self.build(args[1]))
            case "ref":
                self._arity(desc, 1)
                return BackReference(self._name(desc, args[0]))
            case _:
                raise GrammarError(f"unknown syntax construct '{head}'")

    def _loop(self, item: Syntax) -> Alternation:
        label = f"*{next(self._loop_ids)}"
        return Alternation([Sequence([item, BackReference(label)]), None], label=label)

    @staticmethod
    def _labelled(label: str, node: Syntax) -> Syntax:
        if node.label is not None:
            return Sequence([node], label=label)
        if isinstance(node, Symbol):
            return Symbol(node.symbol, label=label)
        if isinstance(node, ArgumentRef):
            return ArgumentRef(node.arg_name, label=label)
        if isinstance(node, Preset):
            return Preset(node.arg_name, node.preset, label=label)
        if isinstance(node, Sequence):
            return Sequence(node.elements, label=label)
        if isinstance(node, Alternation):
            return Alternation(node.alternatives, label=label)
        raise GrammarError(f"cannot label a back-reference ('{label}')")

    @staticmethod
    def _arity(desc: list, n: int) -> None:
        if len(desc) != n + 1:
            raise GrammarError(f"'{desc[0]}' takes {n} operand(s), got {len(desc) - 1}")

    @staticmethod
    def _name(desc: list, value: Any) -> str:
        if not isinstance(value, str) or not value:
            raise GrammarError(f"'{desc[0]}' expects a name, got {value!r}")
        return value


def build_syntax(desc: Any) -> Syntax:
    """Build and resolve a syntax graph from a description."""
    return resolve(SyntaxBuilder().build(desc))


def build_command_syntax(commands: dict[str, Any]) -> Alternation:
    """Build one root alternation over several command descriptions, in order."""
    builder = SyntaxBuilder()
    root = Alternation([builder.build(desc) for desc in commands.values()])
    return resolve(root)


_ARGUMENT_TYPES = ("string", "integer", "enum", "flag")


def build_argument(label: str, spec: dict[str, Any]) -> Argument:
    """Create an argument from its ``[arguments.<label>]`` table."""
    kind = spec.get("type", "string")
    multiple = bool(spec.get("multiple", False))
    description = spec.get("description", "")
    if kind == "string":
        return StringArgument(label, multiple=multiple, description=description)
    if kind == "integer":
        return IntegerArgument(
            label,
            min_value=spec.get("min"),
            max_value=spec.get("max"),
            multiple=multiple,
            description=description,
        )
    if kind == "enum":
        choices = spec.get("choices", [])
        if not choices:
            raise GrammarError(f"enum argument '{label}' has no choices")
        return EnumArgument(label, choices, multiple=multiple, description=description)
    if kind == "flag":
        return FlagArgument(label, multiple=multiple, description=description)
    raise GrammarError(
        f"argument '{label}' has unknown type '{kind}' "
        f"(expected one of {', '.join(_ARGUMENT_TYPES)})"
    )


def build_bundle(arguments: dict[str, dict[str, Any]]) -> ArgumentBundle:
    return ArgumentBundle(*(build_argument(label, spec) for label, spec in arguments.items()))

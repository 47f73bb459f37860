"""Syntax graph node definitions.

A command syntax is a directed graph of six node kinds.  ``Sequence`` and
``Alternation`` hold their children in plain lists so that ``resolve`` can
splice labelled nodes in place of ``BackReference`` placeholders; this is how
loops are expressed, so graphs may be cyclic and nodes compare by identity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from muparse.errors import GrammarError


@dataclass(frozen=True, eq=False, repr=False)
class Symbol:
    symbol: str
    label: str | None = None

    def __repr__(self) -> str:
        return f"Symbol({format_syntax(self)})"


@dataclass(frozen=True, eq=False, repr=False)
class ArgumentRef:
    arg_name: str
    label: str | None = None

    def __repr__(self) -> str:
        return f"ArgumentRef({format_syntax(self)})"


@dataclass(frozen=True, eq=False, repr=False)
class Preset:
    arg_name: str
    preset: str
    label: str | None = None

    def __repr__(self) -> str:
        return f"Preset({format_syntax(self)})"


@dataclass(frozen=True, eq=False, repr=False)
class Sequence:
    elements: list[Syntax] = field(default_factory=list)
    label: str | None = None

    def __repr__(self) -> str:
        return f"Sequence{format_syntax(self)}"


@dataclass(frozen=True, eq=False, repr=False)
class Alternation:
    alternatives: list[Syntax | None] = field(default_factory=list)  # None matches nothing
    label: str | None = None

    def __repr__(self) -> str:
        return f"Alternation{format_syntax(self)}"


@dataclass(frozen=True, eq=False, repr=False)
class BackReference:
    ref: str
    label: str | None = None

    def __repr__(self) -> str:
        return f"BackReference({format_syntax(self)})"


Syntax = Union[Symbol, ArgumentRef, Preset, Sequence, Alternation, BackReference]


def children(node: Syntax) -> list:
    """Return the (mutable) child list of a node, empty for leaves."""
    if isinstance(node, Sequence):
        return node.elements
    if isinstance(node, Alternation):
        return node.alternatives
    return []


# ── Formatting ───────────────────────────────────────────────────


def format_syntax(node: Syntax | None) -> str:
    """Render a syntax graph compactly; safe on cyclic graphs."""
    return _format(node, set())


def _format(node: Syntax | None, active: set[int]) -> str:
    if node is None:
        return ""
    label = getattr(node, "label", None)
    if id(node) in active:
        return f"#{label}" if label else "#<cycle>"
    prefix = f"{label}:" if label else ""
    if isinstance(node, Symbol):
        text = node.symbol
        if not text or any(ch.isspace() for ch in text):
            text = repr(text)
        return prefix + text
    if isinstance(node, ArgumentRef):
        return f"{prefix}<{node.arg_name}>"
    if isinstance(node, Preset):
        return f"{prefix}<{node.arg_name}={node.preset}>"
    if isinstance(node, BackReference):
        return f"{prefix}#{node.ref}"
    active.add(id(node))
    try:
        if isinstance(node, Sequence):
            parts = [_format(child, active) for child in node.elements]
            return prefix + "(" + " ".join(parts) + ")"
        if isinstance(node, Alternation):
            parts = [_format(child, active) for child in node.alternatives]
            return prefix + "(" + " | ".join(parts) + ")"
    finally:
        active.discard(id(node))
    raise GrammarError(f"unknown syntax node {node!r}")


# ── Back-reference resolution ────────────────────────────────────


def _walk(root: Syntax):
    """Yield every node reachable from root once."""
    seen: set[int] = set()
    pending: list[Syntax] = [root]
    while pending:
        node = pending.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node
        for child in children(node):
            if child is not None:
                pending.append(child)


def resolve(root: Syntax) -> Syntax:
    """Replace every reachable ``BackReference`` with the node it names.

    Labels must be unique.  Returns ``root`` for convenience.
    """
    labelled: dict[str, Syntax] = {}
    for node in _walk(root):
        if node.label is None or isinstance(node, BackReference):
            continue
        if node.label in labelled:
            raise GrammarError(f"duplicate syntax label '{node.label}'")
        labelled[node.label] = node

    def target(ref: BackReference) -> Syntax:
        try:
            return labelled[ref.ref]
        except KeyError:
            raise GrammarError(f"unresolved back-reference '#{ref.ref}'") from None

    for node in list(_walk(root)):
        kids = children(node)
        for i, child in enumerate(kids):
            if isinstance(child, BackReference):
                kids[i] = target(child)
    return root

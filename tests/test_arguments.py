"""Tests for argument slots, bundles and the completion sink."""

from __future__ import annotations

import pytest

from muparse.arguments import (
    ArgumentBundle,
    EnumArgument,
    FlagArgument,
    IntegerArgument,
    StringArgument,
)
from muparse.completion import CompletionInfo
from muparse.errors import GrammarError, SyntaxRejection
from muparse.tokens import Token


def tok(text: str) -> Token:
    return Token(text, 0, len(text))


class TestArgument:
    def test_accept_and_undo(self):
        arg = StringArgument("msg")
        assert not arg.is_set
        assert arg.value is None
        arg.accept(tok("hello"))
        assert arg.is_set
        assert arg.value == "hello"
        arg.undo_last_value()
        assert not arg.is_set

    def test_single_valued_rejects_second_value(self):
        arg = StringArgument("msg")
        arg.accept(tok("one"))
        with pytest.raises(SyntaxRejection, match="already has a value"):
            arg.accept(tok("two"))
        assert arg.values == ["one"]

    def test_multiple_values_undo_last_first(self):
        arg = StringArgument("files", multiple=True)
        for name in ("a", "b", "c"):
            arg.accept(tok(name))
        arg.undo_last_value()
        assert arg.values == ["a", "b"]
        assert arg.value == "b"

    def test_undo_without_value(self):
        with pytest.raises(IndexError):
            StringArgument("msg").undo_last_value()

    def test_clear(self):
        arg = StringArgument("files", multiple=True)
        arg.accept(tok("a"))
        arg.accept(tok("b"))
        arg.clear()
        assert arg.values == []

    def test_free_form_offers_no_completions(self):
        completion = CompletionInfo()
        StringArgument("msg").complete(completion, "he")
        assert len(completion) == 0

    def test_repr(self):
        arg = StringArgument("msg")
        arg.accept(tok("hi"))
        assert repr(arg) == "StringArgument('msg', values=['hi'])"


class TestIntegerArgument:
    def test_accepts_integers(self):
        arg = IntegerArgument("n", multiple=True)
        arg.accept(tok("42"))
        arg.accept(tok("-3"))
        arg.accept(tok("0x10"))
        assert arg.values == [42, -3, 16]

    def test_rejects_non_integers(self):
        with pytest.raises(SyntaxRejection, match="not an integer"):
            IntegerArgument("n").accept(tok("many"))

    def test_bounds(self):
        arg = IntegerArgument("n", min_value=1, max_value=10)
        with pytest.raises(SyntaxRejection):
            arg.accept(tok("0"))
        with pytest.raises(SyntaxRejection):
            arg.accept(tok("11"))
        arg.accept(tok("10"))
        assert arg.value == 10


class TestEnumArgument:
    def test_accepts_choice(self):
        arg = EnumArgument("service", ["network", "sshd"])
        arg.accept(tok("sshd"))
        assert arg.value == "sshd"

    def test_rejects_other(self):
        with pytest.raises(SyntaxRejection, match="not one of network, sshd"):
            EnumArgument("service", ["network", "sshd"]).accept(tok("ftp"))

    def test_complete(self):
        completion = CompletionInfo()
        EnumArgument("service", ["network", "nfs", "sshd"]).complete(completion, "n")
        assert completion.completions == ["network", "nfs"]


class TestFlagArgument:
    def test_words(self):
        for word, value in [("true", True), ("yes", True), ("ON", True),
                            ("false", False), ("no", False), ("off", False)]:
            arg = FlagArgument("verbose")
            arg.accept(tok(word))
            assert arg.value is value, f"{word} should read as {value}"

    def test_rejects_other(self):
        with pytest.raises(SyntaxRejection):
            FlagArgument("verbose").accept(tok("maybe"))

    def test_complete(self):
        completion = CompletionInfo()
        FlagArgument("verbose").complete(completion, "")
        assert completion.completions == ["false", "true"]


class TestArgumentBundle:
    def test_get_argument(self):
        msg = StringArgument("msg")
        bundle = ArgumentBundle(msg)
        assert bundle.get_argument("msg") is msg
        assert "msg" in bundle
        assert len(bundle) == 1

    def test_unknown_argument(self):
        with pytest.raises(GrammarError, match="unknown argument 'nope'"):
            ArgumentBundle().get_argument("nope")

    def test_duplicate_argument(self):
        with pytest.raises(GrammarError, match="duplicate argument 'msg'"):
            ArgumentBundle(StringArgument("msg"), StringArgument("msg"))

    def test_values_and_clear(self):
        bundle = ArgumentBundle(
            StringArgument("msg"),
            IntegerArgument("n", multiple=True),
            StringArgument("unset"),
        )
        bundle.get_argument("msg").accept(tok("hi"))
        bundle.get_argument("n").accept(tok("1"))
        bundle.get_argument("n").accept(tok("2"))
        assert bundle.values() == {"msg": "hi", "n": [1, 2]}
        bundle.clear()
        assert bundle.values() == {}

    def test_iteration_in_declaration_order(self):
        bundle = ArgumentBundle(StringArgument("b"), StringArgument("a"))
        assert [arg.label for arg in bundle] == ["b", "a"]


class TestCompletionInfo:
    def test_sorted_and_deduplicated(self):
        completion = CompletionInfo()
        for word in ("stop", "start", "stop"):
            completion.add_completion(word)
        assert completion.completions == ["start", "stop"]
        assert "stop" in completion
        assert len(completion) == 2

    def test_completion_start(self):
        completion = CompletionInfo()
        assert completion.completion_start == -1
        completion.set_completion_start(8)
        assert completion.completion_start == 8

    def test_common_prefix(self):
        completion = CompletionInfo()
        assert completion.common_prefix() == ""
        completion.add_completion("status")
        completion.add_completion("start")
        assert completion.common_prefix() == "sta"

"""Tests for the trainer."""

from collections import Counter

from pwgram.bigram import State
from pwgram.qtable import CollisionPolicy, QuantizedTable
from pwgram.tokenize import tokenize
from pwgram.train import count_transitions, train


def test_train_small_corpus_exact_tables():
    model = train(["a", "b", "a", "b", "c"], set())

    assert model[State.START] == QuantizedTable([(255, "a")])
    assert model[State.after("a")] == QuantizedTable([(255, "b")])
    assert model[State.after("b")] == QuantizedTable([(127, "a"), (255, "c")])
    assert State.after("c") not in model
    assert len(model) == 3


def test_empty_corpus_gives_empty_model():
    model = train([])

    assert len(model) == 0
    assert model.is_empty


def test_delimiter_breaks_the_chain():
    model = train(tokenize("ab\ncd"), {"\n"})

    assert "c" not in model.transitions_from(State.after("b"))
    assert State.after("b") not in model
    assert set(model[State.START].outcomes()) == {"a", "c"}
    assert "\n" not in model.tokens()


def test_leading_and_repeated_delimiters_add_nothing():
    model = train(["\n", "\n", "a", "\n", " ", "\n", "b"], {"\n", " "})

    assert list(model) == [State.START]
    assert set(model[State.START].outcomes()) == {"a", "b"}


def test_default_delimiters_cover_newlines():
    model = train(tokenize("ab\r\ncd\nef"))

    assert set(model[State.START].outcomes()) == {"a", "c", "e"}
    assert "\r\n" not in model.tokens()


def test_count_transitions_counts_every_pair():
    counts = count_transitions(list("abab"), set())

    assert counts == {
        State.START: Counter({"a": 1}),
        State.after("a"): Counter({"b": 2}),
        State.after("b"): Counter({"a": 1}),
    }


def test_empty_tokens_are_ignored():
    model = train(["a", "", "b"], set())

    assert model[State.after("a")] == QuantizedTable([(255, "b")])


def test_train_respects_collision_policy():
    tokens = ["x", "a", "\n", "x", "b", "\n"] + ["x", "c", "\n"] * 1000

    overwrite = train(tokens, {"\n"})
    reserve = train(tokens, {"\n"}, CollisionPolicy.RESERVE)

    assert "a" not in overwrite[State.after("x")]
    assert "a" in reserve[State.after("x")]
    assert "b" in reserve[State.after("x")]


def test_multigraph_tokens_become_states():
    model = train(tokenize("the\nthat\n", ["th"]))

    assert model[State.START] == QuantizedTable([(255, "th")])
    assert set(model[State.after("th")].outcomes()) == {"e", "a"}

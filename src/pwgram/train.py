"""Train a BigramModel from a token stream."""

from __future__ import annotations

from collections import Counter
import sys
from typing import Dict, Iterable

from loguru import logger

from .bigram import BigramModel, State
from .qtable import CollisionPolicy, QuantizedTable

DEFAULT_DELIMITERS = frozenset({"\n", "\r\n"})


def count_transitions(
    tokens: Iterable[str],
    delimiters: Iterable[str] = DEFAULT_DELIMITERS,
) -> Dict[State, Counter]:
    """
    Count `state -> token` transitions.

    A delimiter is never counted. It sends the chain back to START, so the next
    token is counted as if it began a fresh sequence. Runs of delimiters and a
    leading delimiter therefore add nothing.
    """
    delimiters = frozenset(delimiters)
    counts: Dict[State, Counter] = {}
    current = State.START
    for token in tokens:
        if token in delimiters:
            current = State.START
            continue
        # Empty strings carry no text and cannot be persisted.
        if not token:
            continue
        token = sys.intern(token)
        counts.setdefault(current, Counter())[token] += 1
        current = State.after(token)
    return counts


def train(
    tokens: Iterable[str],
    delimiters: Iterable[str] = DEFAULT_DELIMITERS,
    collision: CollisionPolicy = CollisionPolicy.OVERWRITE,
) -> BigramModel:
    """
    Train a bigram model. An empty corpus gives an empty model.

    Next-token order within a state is first-seen order, which is the
    tie-break `QuantizedTable.from_aggregate` uses for equal counts.
    """
    counts = count_transitions(tokens, delimiters)
    model = BigramModel(
        {
            state: QuantizedTable.from_aggregate(counter.items(), collision)
            for state, counter in counts.items()
        }
    )
    logger.debug(
        "trained model: {} states, {} transitions, {} tokens seen",
        len(model),
        sum(len(counter) for counter in counts.values()),
        sum(sum(counter.values()) for counter in counts.values()),
    )
    return model


__all__ = ["DEFAULT_DELIMITERS", "count_transitions", "train"]

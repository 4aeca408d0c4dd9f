"""
entropy.py

Per-step entropy of a bigram chain, computed over the full distribution of
chain states rather than along one sampled path.

The estimator is meant to be advanced in lockstep with a generator: step k of
the estimator is the entropy of the k-th token, given everything the chain
could have done in steps 1..k-1. Walks that hit an absorbing state restart at
START, so that mass is folded back into START before the next step.

Quick start

>>> from pwgram.train import train
>>> from pwgram.entropy import EntropyEstimator
>>> model = train(["a", "b", "a", "c"])
>>> est = EntropyEstimator(model)
>>> next(est)         # START -> "a" is certain
0.0
>>> next(est)         # after "a": "b" or "c"
1.0
"""

from __future__ import annotations

from typing import Dict, Iterator

from .bigram import BigramModel, State
from .metrics import shannon_entropy
from .qtable import MAX_KEY, SAMPLE_SPACE, CollisionPolicy, QuantizedTable


class EntropyEstimator(Iterator[float]):
    """
    Infinite iterator of the entropy (bits) added by each generation step.

    Parameters
    ----------
    model : BigramModel
        Model being sampled. Never modified.
    collision : CollisionPolicy
        Quantization policy for the state distribution.
    """

    def __init__(
        self,
        model: BigramModel,
        collision: CollisionPolicy = CollisionPolicy.OVERWRITE,
    ) -> None:
        self.model = model
        self.collision = CollisionPolicy(collision)
        # Before the first step the chain is certainly at START.
        self.distribution: QuantizedTable[State] = QuantizedTable([(MAX_KEY, State.START)])

    def __iter__(self) -> "EntropyEstimator":
        return self

    def propagate(self) -> Dict[State, int]:
        """
        Joint weights of every state one step ahead of `distribution`.

        Weights are products of interval widths, so they sum to 256 * 256.
        Buckets keep first-seen order.
        """
        nexts: Dict[State, int] = {}
        for w_state, state in self.distribution.widths():
            transitions = self.model.transitions_from(state)
            if transitions:
                for w_token, token in transitions.widths():
                    target = State.after(token)
                    nexts[target] = nexts.get(target, 0) + w_state * w_token
            else:
                nexts[State.START] = nexts.get(State.START, 0) + w_state * SAMPLE_SPACE
        return nexts

    def __next__(self) -> float:
        self.distribution = QuantizedTable.from_aggregate(self.propagate().items(), self.collision)
        return shannon_entropy([width for width, _ in self.distribution.widths()])


__all__ = ["EntropyEstimator"]

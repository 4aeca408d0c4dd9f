"""
qtable.py

Quantized probability tables.

A table maps cumulative keys on a 256-point sample space to outcomes. Entry
`(key, outcome)` owns the interval `(previous_key, key]`, where the first
entry's previous key is -1, so the widths of all intervals sum to exactly 256.
A random sample is one uniform byte `b`: the outcome at the smallest key
`>= b` (binary search).

Invariants, checked by the constructor:

- keys are ints in [0, 255], strictly increasing;
- a non-empty table ends at key 255, so every byte finds an outcome.

The empty table is valid and stands for "no outgoing transitions".

Quick start

>>> from pwgram.qtable import QuantizedTable
>>> t = QuantizedTable.from_aggregate([("a", 3), ("b", 1)])
>>> list(t)
[(63, 'b'), (255, 'a')]
>>> t.sample()
'a'
"""

from __future__ import annotations

from bisect import bisect_left
from enum import Enum
import operator
from typing import (
    TYPE_CHECKING,
    Generic,
    Hashable,
    Iterable,
    Iterator,
    List,
    Optional,
    Tuple,
    TypeVar,
)

from loguru import logger

from .metrics import shannon_entropy
from .randomness import default_pool

if TYPE_CHECKING:
    from .randomness import BytePool

T = TypeVar("T", bound=Hashable)

SAMPLE_SPACE = 256
MAX_KEY = SAMPLE_SPACE - 1


class EmptyTableError(RuntimeError):
    """Raised when sampling a table that has no outcomes."""


class CollisionPolicy(str, Enum):
    """
    What `from_aggregate` does when two outcomes quantize to the same key.

    OVERWRITE
        The later (more frequent) outcome replaces the earlier one, which
        loses its interval entirely.
    RESERVE
        The later outcome is moved to `previous_key + 1`, so the earlier
        outcome keeps at least a 1/256 sliver. A moved key never passes the
        natural key of the outcome after it; when there is no room left it
        falls back to OVERWRITE.

    Both policies keep the full 256-point mass: the last key is always 255.
    """

    OVERWRITE = "overwrite"
    RESERVE = "reserve"


class QuantizedTable(Generic[T]):
    """Immutable cumulative table over a 256-point sample space."""

    __slots__ = ("_keys", "_outcomes")

    def __init__(self, entries: Iterable[Tuple[int, T]] = ()) -> None:
        keys: List[int] = []
        outcomes: List[T] = []
        for key, outcome in entries:
            if isinstance(key, bool) or not isinstance(key, int):
                raise ValueError(f"table key must be an int, got {key!r}")
            if not 0 <= key <= MAX_KEY:
                raise ValueError(f"table key {key} outside [0, {MAX_KEY}]")
            if keys and key <= keys[-1]:
                raise ValueError(f"table keys must strictly increase ({keys[-1]} then {key})")
            keys.append(key)
            outcomes.append(outcome)
        if keys and keys[-1] != MAX_KEY:
            raise ValueError(f"last table key must be {MAX_KEY}, got {keys[-1]}")
        self._keys: Tuple[int, ...] = tuple(keys)
        self._outcomes: Tuple[T, ...] = tuple(outcomes)

    @classmethod
    def from_aggregate(
        cls,
        pairs: Iterable[Tuple[T, int]],
        collision: CollisionPolicy = CollisionPolicy.OVERWRITE,
    ) -> "QuantizedTable[T]":
        """
        Quantize `(outcome, count)` frequencies into a table.

        Pairs are sorted ascending by count with a stable sort, so outcomes with
        equal counts keep their input order. Each outcome's key is
        `floor(cdf * 255 / total)` for the running cumulative count `cdf`.
        Least frequent outcomes come first and are therefore the ones that
        can lose their interval to a collision (see CollisionPolicy).
        """
        collision = CollisionPolicy(collision)

        items: List[Tuple[T, int]] = []
        seen = set()
        for outcome, count in pairs:
            count = operator.index(count)
            if count <= 0:
                raise ValueError(f"count for {outcome!r} must be positive, got {count}")
            if outcome in seen:
                raise ValueError(f"duplicate outcome {outcome!r}")
            seen.add(outcome)
            items.append((outcome, count))

        if not items:
            return cls()

        total = sum(count for _, count in items)
        items.sort(key=lambda item: item[1])

        naturals: List[int] = []
        cdf = 0
        for _, count in items:
            cdf += count
            naturals.append(cdf * MAX_KEY // total)

        keys: List[int] = []
        outcomes: List[T] = []
        collisions = 0
        for i, (outcome, _) in enumerate(items):
            key = naturals[i]
            if keys and key <= keys[-1]:
                collisions += 1
                ceiling = naturals[i + 1] if i + 1 < len(naturals) else MAX_KEY
                if collision is CollisionPolicy.RESERVE and keys[-1] < ceiling:
                    key = keys[-1] + 1
                else:
                    outcomes[-1] = outcome
                    continue
            keys.append(key)
            outcomes.append(outcome)

        if collisions:
            logger.debug(
                "{} of {} outcomes collided during quantization ({})",
                collisions,
                len(items),
                collision.value,
            )
        return cls(zip(keys, outcomes))

    #Sampling
    def lookup(self, b: int) -> T:
        """Outcome owning sample point `b` (smallest key >= b)."""
        if not self._keys:
            raise EmptyTableError("cannot sample an empty quantized table")
        if not 0 <= b <= MAX_KEY:
            raise ValueError(f"sample point {b} outside [0, {MAX_KEY}]")
        return self._outcomes[bisect_left(self._keys, b)]

    def sample(self, pool: Optional["BytePool"] = None) -> T:
        """Draw one outcome with probability proportional to its interval."""
        if not self._keys:
            raise EmptyTableError("cannot sample an empty quantized table")
        if pool is None:
            pool = default_pool()
        return self.lookup(pool.get_byte())

    #Introspection
    def keys(self) -> Tuple[int, ...]:
        return self._keys

    def outcomes(self) -> Tuple[T, ...]:
        return self._outcomes

    def widths(self) -> Iterator[Tuple[int, T]]:
        """Yield `(width, outcome)`; widths of a non-empty table sum to 256."""
        prev = -1
        for key, outcome in zip(self._keys, self._outcomes):
            yield key - prev, outcome
            prev = key

    def probabilities(self) -> Iterator[Tuple[float, T]]:
        """Yield `(p, outcome)` with `p = width / 256`."""
        for width, outcome in self.widths():
            yield width / SAMPLE_SPACE, outcome

    def entropy(self) -> float:
        """Shannon entropy of one sample, in bits."""
        return shannon_entropy([width for width, _ in self.widths()])

    #Container protocol
    def __iter__(self) -> Iterator[Tuple[int, T]]:
        return zip(self._keys, self._outcomes)

    def __len__(self) -> int:
        return len(self._keys)

    def __bool__(self) -> bool:
        return bool(self._keys)

    def __contains__(self, outcome: object) -> bool:
        return outcome in self._outcomes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QuantizedTable):
            return NotImplemented
        return self._keys == other._keys and self._outcomes == other._outcomes

    def __hash__(self) -> int:
        return hash((self._keys, self._outcomes))

    def __repr__(self) -> str:
        return f"QuantizedTable({list(self)!r})"


__all__ = [
    "CollisionPolicy",
    "EmptyTableError",
    "MAX_KEY",
    "QuantizedTable",
    "SAMPLE_SPACE",
]

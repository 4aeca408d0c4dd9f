"""
bigram.py

Core data model for order-1 Markov chains over tokens.

- `State` is the chain's position: `State.START` before any token, or
  `State.after(token)`.
- `BigramModel` maps each state to a QuantizedTable over next tokens. A state
  with no entry (or an empty table) is absorbing: generation from it stops.
- `BigramGenerator` walks a model from START and stops at the first absorbing
  state.
- `encode_model` / `decode_model` persist a model as a JSON document.

Quick start

>>> from pwgram.train import train
>>> model = train(list("abc"))
>>> "".join(model.gen_iter())
'abc'
>>> BigramModel.loads(model.dumps()) == model
True
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
import json
import sys
from types import MappingProxyType
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Set,
)

from loguru import logger

from .qtable import QuantizedTable

if TYPE_CHECKING:
    from .randomness import BytePool

MODEL_FORMAT = "pwgram-bigram"
MODEL_VERSION = 1


class ModelDecodeError(ValueError):
    """Raised when a persisted model is malformed."""


#States
@total_ordering
@dataclass(frozen=True)
class State:
    """Either START (`token is None`) or "after `token`"."""

    token: Optional[str] = None

    START: ClassVar["State"]

    @classmethod
    def after(cls, token: str) -> "State":
        return cls(token)

    @property
    def is_start(self) -> bool:
        return self.token is None

    def _sort_key(self):
        return (self.token is not None, self.token or "")

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, State):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __repr__(self) -> str:
        return "State.START" if self.token is None else f"State.after({self.token!r})"


State.START = State()


#Model
class BigramModel(Mapping[State, QuantizedTable[str]]):
    """Immutable mapping from State to a table over next tokens."""

    def __init__(self, transitions: Optional[Mapping[State, QuantizedTable[str]]] = None) -> None:
        table: Dict[State, QuantizedTable[str]] = {}
        for state, transition in (transitions or {}).items():
            if not isinstance(state, State):
                raise TypeError(f"model keys must be State, got {state!r}")
            if not isinstance(transition, QuantizedTable):
                raise TypeError(f"model values must be QuantizedTable, got {transition!r}")
            table[state] = transition
        self._transitions = MappingProxyType(table)

    def __getitem__(self, state: State) -> QuantizedTable[str]:
        return self._transitions[state]

    def __iter__(self) -> Iterator[State]:
        return iter(self._transitions)

    def __len__(self) -> int:
        return len(self._transitions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BigramModel):
            return NotImplemented
        return dict(self._transitions) == dict(other._transitions)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"BigramModel({len(self)} states)"

    @property
    def is_empty(self) -> bool:
        """True when generation from START yields nothing."""
        return not self.transitions_from(State.START)

    def transitions_from(self, state: State) -> QuantizedTable[str]:
        """Table for `state`; absorbing states get the empty table."""
        return self._transitions.get(state) or QuantizedTable()

    def tokens(self) -> Set[str]:
        """Every token some state can transition to."""
        return {token for table in self._transitions.values() for token in table.outcomes()}

    def absorbing_states(self) -> List[State]:
        """Reachable `after(token)` states with no outgoing transitions."""
        return sorted(
            State.after(token)
            for token in self.tokens()
            if not self.transitions_from(State.after(token))
        )

    def gen_iter(self, pool: Optional["BytePool"] = None) -> "BigramGenerator":
        return BigramGenerator(self, pool)

    def dumps(self) -> str:
        return encode_model(self)

    @classmethod
    def loads(cls, text: str) -> "BigramModel":
        return decode_model(text)


#Generation
class BigramGenerator:
    """
    Iterator producing one random walk through a model, starting at START.

    The walk is finite: it stops at the first absorbing state, and stays
    stopped. Callers wanting unbounded output build a fresh generator.
    """

    def __init__(self, model: BigramModel, pool: Optional["BytePool"] = None) -> None:
        self.model = model
        self.pool = pool
        self.state = State.START
        self._done = False

    def __iter__(self) -> "BigramGenerator":
        return self

    def __next__(self) -> str:
        if self._done:
            raise StopIteration
        table = self.model.transitions_from(self.state)
        if not table:
            self._done = True
            raise StopIteration
        token = table.sample(self.pool)
        self.state = State.after(token)
        return token


#Codec
def encode_model(model: BigramModel) -> str:
    """
    Serialize `model` to JSON.

    States are sorted (START first) so equal models encode identically.
    """
    states = [
        {"state": state.token, "table": [[key, token] for key, token in model[state]]}
        for state in sorted(model)
    ]
    return json.dumps(
        {"format": MODEL_FORMAT, "version": MODEL_VERSION, "states": states},
        ensure_ascii=False,
        indent=1,
    )


def _decode_state(raw: Any, idx: int) -> State:
    if raw is None:
        return State.START
    if not isinstance(raw, str) or not raw:
        raise ModelDecodeError(f"states[{idx}].state must be null or a non-empty string")
    return State.after(sys.intern(raw))


def _decode_table(raw: Any, idx: int) -> QuantizedTable[str]:
    if not isinstance(raw, list):
        raise ModelDecodeError(f"states[{idx}].table must be a list")
    entries = []
    for j, entry in enumerate(raw):
        if (
            not isinstance(entry, list)
            or len(entry) != 2
            or isinstance(entry[0], bool)
            or not isinstance(entry[0], int)
            or not isinstance(entry[1], str)
            or not entry[1]
        ):
            raise ModelDecodeError(f"states[{idx}].table[{j}] must be [int, non-empty string]")
        entries.append((entry[0], sys.intern(entry[1])))
    try:
        return QuantizedTable(entries)
    except ValueError as exc:
        raise ModelDecodeError(f"states[{idx}].table: {exc}") from exc


def decode_model(text: str) -> BigramModel:
    """Parse a model produced by `encode_model`. Raises ModelDecodeError."""
    try:
        doc = json.loads(text)
    except ValueError as exc:
        raise ModelDecodeError(f"model is not valid JSON: {exc}") from exc

    if not isinstance(doc, dict):
        raise ModelDecodeError("model document must be a JSON object")
    if doc.get("format") != MODEL_FORMAT:
        raise ModelDecodeError(f"unknown model format {doc.get('format')!r}")
    version = doc.get("version")
    if isinstance(version, bool) or version != MODEL_VERSION:
        raise ModelDecodeError(f"unsupported model version {version!r}")
    raw_states = doc.get("states")
    if not isinstance(raw_states, list):
        raise ModelDecodeError("'states' must be a list")

    transitions: Dict[State, QuantizedTable[str]] = {}
    for idx, entry in enumerate(raw_states):
        if not isinstance(entry, dict):
            raise ModelDecodeError(f"states[{idx}] must be an object")
        state = _decode_state(entry.get("state"), idx)
        if state in transitions:
            raise ModelDecodeError(f"duplicate state {state!r}")
        transitions[state] = _decode_table(entry.get("table"), idx)

    logger.debug("decoded model with {} states", len(transitions))
    return BigramModel(transitions)


__all__ = [
    "BigramGenerator",
    "BigramModel",
    "MODEL_FORMAT",
    "MODEL_VERSION",
    "ModelDecodeError",
    "State",
    "decode_model",
    "encode_model",
]

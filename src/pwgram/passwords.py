"""
passwords.py

Aim:
1) Turns a BigramModel into an unbounded token stream that restarts at START
   whenever a walk dies in an absorbing state.
2) Pairs that stream with an EntropyEstimator and keeps appending tokens until
   the running entropy reaches a target (90 bits by default).
3) Exposes a PasswordGenerator plus one-shot helpers.

Note:
- Entropy is the true per-step entropy of the chain (see entropy.py), not
  length * log2(alphabet size).
- An empty model yields "" instead of looping forever.

Quick start
>>> from pwgram.train import train
>>> from pwgram.tokenize import tokenize
>>> from pwgram.passwords import make_password
>>> model = train(tokenize(open("words.txt").read()))
>>> make_password(model)
# pronounceable text carrying >= 90 bits

Reusable generator:
>>> from pwgram.passwords import PasswordGenerator
>>> gen = PasswordGenerator(model, min_entropy=64.0)
>>> gen.passwords(count=5)
"""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Iterator, List, Optional

from loguru import logger

from .bigram import BigramGenerator, BigramModel
from .entropy import EntropyEstimator
from .qtable import CollisionPolicy
from .randomness import BytePool

DEFAULT_MIN_ENTROPY = 90.0
DEFAULT_MAX_TOKENS = 10_000


#Token stream
class RestartingGenerator(Iterator[str]):
    """
    Token stream that starts a fresh walk from START when one dies.

    Stops only if a fresh walk is exhausted immediately, which happens
    exactly when the model has no START transitions.
    """

    def __init__(self, model: BigramModel, pool: Optional[BytePool] = None) -> None:
        self.model = model
        self.pool = pool
        self.restarts = 0
        self._walk = BigramGenerator(model, pool)

    def __iter__(self) -> "RestartingGenerator":
        return self

    def __next__(self) -> str:
        try:
            return next(self._walk)
        except StopIteration:
            pass
        self._walk = BigramGenerator(self.model, self.pool)
        self.restarts += 1
        return next(self._walk)


def _check_target(min_entropy: float) -> None:
    if math.isnan(min_entropy) or min_entropy < 0:
        raise ValueError(f"min_entropy must be a non-negative number, got {min_entropy}")


#Result record
@dataclass
class GeneratedPassword:
    password: str
    entropy_bits: float
    tokens: List[str] = field(default_factory=list)


#Assembly
def assemble(
    model: BigramModel,
    min_entropy: float = DEFAULT_MIN_ENTROPY,
    pool: Optional[BytePool] = None,
    max_tokens: Optional[int] = DEFAULT_MAX_TOKENS,
    collision: CollisionPolicy = CollisionPolicy.OVERWRITE,
) -> GeneratedPassword:
    """
    Append tokens until their summed step entropy is >= `min_entropy`.

    The estimator's step k always describes the distribution before token k
    was drawn, so both iterators advance exactly once per loop.
    `max_tokens` caps degenerate models whose entropy rate is zero.
    """
    _check_target(min_entropy)
    result = GeneratedPassword(password="", entropy_bits=0.0)
    if model.is_empty:
        logger.debug("empty model, returning empty password")
        return result
    if min_entropy <= 0:
        return result

    stream = RestartingGenerator(model, pool)
    for token, bits in zip(stream, EntropyEstimator(model, collision)):
        result.tokens.append(token)
        result.entropy_bits += bits
        if result.entropy_bits >= min_entropy:
            break
        if max_tokens is not None and len(result.tokens) >= max_tokens:
            logger.warning(
                "stopped after {} tokens with {:.2f} of {:.2f} bits; model entropy rate too low",
                max_tokens,
                result.entropy_bits,
                min_entropy,
            )
            break

    result.password = "".join(result.tokens)
    logger.debug(
        "assembled {} tokens ({} restarts), {:.2f} bits",
        len(result.tokens),
        stream.restarts,
        result.entropy_bits,
    )
    return result


def pwgen(
    model: BigramModel,
    min_entropy: float = DEFAULT_MIN_ENTROPY,
    pool: Optional[BytePool] = None,
) -> str:
    """Generate one password carrying at least `min_entropy` bits."""
    return assemble(model, min_entropy, pool).password


#Password generator
@dataclass
class PasswordGenerator:
    """
    Generate passwords from a trained model.

    Parameters

    model : BigramModel
        Trained model to sample.
    min_entropy : float, default=90.0
        Bits each password must carry.
    pool : BytePool, optional
        Byte source. Defaults to the process-wide pool.
    max_tokens : int, default=10_000
        Safety cap for models whose entropy rate is zero.

    Examples

    >>> gen = PasswordGenerator(model, min_entropy=48.0)
    >>> gen.password()
    'velorantisk...'
    """

    model: BigramModel
    min_entropy: float = DEFAULT_MIN_ENTROPY
    pool: Optional[BytePool] = None
    max_tokens: Optional[int] = DEFAULT_MAX_TOKENS
    collision: CollisionPolicy = CollisionPolicy.OVERWRITE

    def __post_init__(self) -> None:
        _check_target(self.min_entropy)
        if self.max_tokens is not None and self.max_tokens <= 0:
            raise ValueError("max_tokens must be positive")
        self.collision = CollisionPolicy(self.collision)

    def password_with_entropy(self) -> GeneratedPassword:
        return assemble(self.model, self.min_entropy, self.pool, self.max_tokens, self.collision)

    def password(self) -> str:
        return self.password_with_entropy().password

    def passwords(self, count: int) -> List[str]:
        """Create `count` independent passwords."""
        if count < 0:
            raise ValueError("count must be non-negative")
        return [self.password() for _ in range(count)]


#Convenience helpers
def make_password(
    model: BigramModel,
    min_entropy: float = DEFAULT_MIN_ENTROPY,
    pool: Optional[BytePool] = None,
) -> str:
    """
    One-shot helper with the default token cap.
    """
    return PasswordGenerator(model, min_entropy=min_entropy, pool=pool).password()


__all__ = [
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_MIN_ENTROPY",
    "GeneratedPassword",
    "PasswordGenerator",
    "RestartingGenerator",
    "assemble",
    "make_password",
    "pwgen",
]

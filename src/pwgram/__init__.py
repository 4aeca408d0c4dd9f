"""pwgram: pronounceable passwords from bigram models with exact entropy accounting."""

from loguru import logger

from .bigram import BigramGenerator, BigramModel, ModelDecodeError, State, decode_model, encode_model
from .entropy import EntropyEstimator
from .passwords import PasswordGenerator, RestartingGenerator, make_password, pwgen
from .qtable import CollisionPolicy, EmptyTableError, QuantizedTable
from .randomness import BytePool
from .tokenize import Tokenizer, tokenize
from .train import train

# Silent as a library; configure_logging() turns output on.
logger.disable("pwgram")

__all__ = [
    "BigramGenerator",
    "BigramModel",
    "BytePool",
    "CollisionPolicy",
    "EmptyTableError",
    "EntropyEstimator",
    "ModelDecodeError",
    "PasswordGenerator",
    "QuantizedTable",
    "RestartingGenerator",
    "State",
    "Tokenizer",
    "decode_model",
    "encode_model",
    "make_password",
    "pwgen",
    "tokenize",
    "train",
]

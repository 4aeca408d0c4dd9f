"""
randomness.py

Aim:
1) Provides the uniform random byte source that every table sample draws from.
2) Keeps a small refillable cache so the backend is not called once per byte.
3) Stays backend-agnostic: numpy's PCG64 generator by default, an optional
   8-qubit Hadamard circuit (qiskit + qiskit-aer) when the `quantum` extra
   is installed.

Why bytes?

- Quantized tables live on a 256-point sample space, so one uniform byte is
  exactly one sample. No rejection sampling is needed.

Quick start

>>> from pwgram.randomness import BytePool, random_byte
>>> random_byte()             # one byte from the process-wide pool
>>> pool = BytePool(seed=7)   # reproducible pool for tests and demos
>>> pool.get_bytes(4)
[...]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional
import numpy as np
from loguru import logger

ByteBackend = Callable[[int], np.ndarray]


#Backends
def numpy_backend(seed: Optional[int] = None) -> ByteBackend:
    """
    Build a backend drawing bytes from `numpy.random.default_rng(seed)`.

    With `seed=None` numpy seeds itself from OS entropy.
    """
    rng = np.random.default_rng(seed)

    def _draw(n: int) -> np.ndarray:
        return rng.integers(0, 256, size=n, dtype=np.uint8)

    return _draw


class QuantumBackend:
    """
    Bytes measured from an H^8 circuit: every shot yields one uniform byte.

    Parameters
    ----------
    backend : qiskit backend, optional
        Where to run the circuit. Defaults to the Aer qasm simulator.
    seed_simulator : int, optional
        Seed for deterministic simulator runs.
    """

    n_qubits = 8

    def __init__(self, backend=None, seed_simulator: Optional[int] = None) -> None:
        try:
            from qiskit import QuantumCircuit
        except ImportError as exc:
            raise RuntimeError(
                "QuantumBackend needs qiskit; install pwgram[quantum]"
            ) from exc

        if backend is None:
            from qiskit_aer import Aer

            backend = Aer.get_backend("qasm_simulator")

        qc = QuantumCircuit(self.n_qubits, self.n_qubits)
        qc.h(range(self.n_qubits))
        qc.measure(range(self.n_qubits), range(self.n_qubits))

        self.backend = backend
        self.seed_simulator = seed_simulator
        self._circuit = qc
        # Each run gets a fresh simulator seed so refills never repeat.
        self._rng = np.random.default_rng(seed_simulator)

    def __call__(self, n: int) -> np.ndarray:
        run_seed = None
        if self.seed_simulator is not None:
            run_seed = int(self._rng.integers(0, 2**31 - 1))
        job = self.backend.run(self._circuit, shots=n, seed_simulator=run_seed)
        counts = job.result().get_counts(self._circuit)

        out: List[int] = []
        for bitstr, c in counts.items():
            out.extend([int(bitstr.replace(" ", ""), 2)] * c)

        # Counts come back grouped by outcome, so shuffle them back into a stream.
        arr = np.asarray(out, dtype=np.uint8)
        self._rng.shuffle(arr)
        return arr


#Byte cache
@dataclass
class BytePool:
    """
    A refillable cache of uniform bytes in [0, 255].

    Parameters
    ----------
    refill_size : int, default=4096
        How many bytes to pull from the backend when the cache runs dry.
    seed : int, optional
        Seed for the default numpy backend. Ignored when `backend` is given.
    backend : callable, optional
        `n -> np.ndarray[uint8]` of length n.
    """

    refill_size: int = 4096
    seed: Optional[int] = None
    backend: Optional[ByteBackend] = None

    def __post_init__(self) -> None:
        if self.refill_size <= 0:
            raise ValueError("refill_size must be positive")
        if self.backend is None:
            self.backend = numpy_backend(self.seed)
        self._buf: List[int] = []

    #internal
    def _refill(self) -> None:
        fresh = np.asarray(self.backend(self.refill_size), dtype=np.uint8)
        if fresh.size == 0:
            raise RuntimeError("byte backend returned no data")
        self._buf.extend(int(b) for b in fresh)

    #public API
    def get_byte(self) -> int:
        """One uniform byte."""
        if not self._buf:
            self._refill()
        return self._buf.pop()

    def get_bytes(self, n: int) -> List[int]:
        """Return `n` uniform bytes. Refills on demand."""
        if n < 0:
            raise ValueError("n must be non-negative")
        while len(self._buf) < n:
            self._refill()
        out = self._buf[:n]
        del self._buf[:n]
        return out


#Module-level convenience singleton
_default_pool: Optional[BytePool] = None


def default_pool() -> BytePool:
    """
    Lazily create (and reuse) the process-wide BytePool.

    The pool honours PWGRAM_SEED, PWGRAM_QUANTUM and PWGRAM_REFILL_SIZE.
    """
    global _default_pool
    if _default_pool is None:
        from .config import get_settings

        settings = get_settings()
        backend = QuantumBackend(seed_simulator=settings.seed) if settings.quantum else None
        _default_pool = BytePool(
            refill_size=settings.refill_size,
            seed=settings.seed,
            backend=backend,
        )
        logger.debug(
            "created default byte pool (quantum={}, seeded={})",
            settings.quantum,
            settings.seed is not None,
        )
    return _default_pool


def set_default_pool(pool: Optional[BytePool]) -> None:
    """Replace the process-wide pool. `None` resets it to be rebuilt lazily."""
    global _default_pool
    _default_pool = pool


def random_byte() -> int:
    """One uniform byte from the default pool."""
    return default_pool().get_byte()


__all__ = [
    "BytePool",
    "QuantumBackend",
    "default_pool",
    "numpy_backend",
    "random_byte",
    "set_default_pool",
]

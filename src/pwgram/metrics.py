"""
metrics.py

Statistical utilities for quantized tables and generated output.

What this module does

- Shannon entropy (bits) of a weight vector, ignoring zero-mass entries.
- Expected vs. observed sampling frequencies for a QuantizedTable.
- Chi-square goodness-of-fit of observed samples against a table.
- KL divergence (with safe smoothing) between two distributions.

Design choices

- Weights never need to be normalized by the caller.
- Terms that come out non-finite (p = 0 gives 0 * log2(0)) count as 0.

Quick start

>>> from pwgram.metrics import shannon_entropy
>>> shannon_entropy([128, 128])
1.0
>>> shannon_entropy([256])
0.0

Dependencies

- numpy
- scipy (chi-square p-values)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Hashable, List, Optional, Sequence
import numpy as np
from scipy.stats import chisquare

if TYPE_CHECKING:
    from .qtable import QuantizedTable
    from .randomness import BytePool


#Entropy

def shannon_entropy(weights: Sequence[float]) -> float:
    """
    H = sum(-p * log2(p)) with p = w / sum(w), in bits.

    An empty or all-zero weight vector carries no information and returns 0.
    """
    w = np.asarray(weights, dtype=float).reshape(-1)
    total = w.sum()
    if w.size == 0 or total <= 0.0:
        return 0.0
    p = w / total
    with np.errstate(divide="ignore", invalid="ignore"):
        terms = -p * np.log2(p)
    terms[~np.isfinite(terms)] = 0.0
    # Rounding can leave -0.0 or a tiny negative for a certain outcome.
    return max(float(terms.sum()), 0.0)


#Table frequencies

def table_expected_frequencies(table: "QuantizedTable") -> Dict[Hashable, float]:
    """
    Probability of each outcome under `table` (interval width / 256).

    An outcome that owns several intervals has their masses summed.
    """
    out: Dict[Hashable, float] = {}
    for p, outcome in table.probabilities():
        out[outcome] = out.get(outcome, 0.0) + p
    return out


def sample_frequencies(
    table: "QuantizedTable",
    trials: int,
    pool: Optional["BytePool"] = None,
) -> Dict[Hashable, int]:
    """Sample `table` `trials` times and histogram the outcomes."""
    if trials <= 0:
        raise ValueError("trials must be positive")
    hist: Dict[Hashable, int] = {}
    for _ in range(trials):
        x = table.sample(pool)
        hist[x] = hist.get(x, 0) + 1
    return hist


#Chi-square goodness of fit

@dataclass
class ChiSquareResult:
    stat: float
    df: int
    pvalue: float
    expected: List[float]


def chi_square_fit(
    observed: Dict[Hashable, int],
    expected: Dict[Hashable, float],
) -> ChiSquareResult:
    """
    Chi-square goodness-of-fit of observed counts against expected probabilities.

    Parameters
    ----------
    observed : Mapping
        Outcome -> count.
    expected : Mapping
        Outcome -> probability. Outcomes missing from `observed` count as 0.

    Notes

    - Observed outcomes absent from `expected` are an immediate failure:
      they could not have been sampled.
    - df = (number of expected outcomes - 1)
    """
    stray = set(observed) - set(expected)
    if stray:
        raise ValueError(f"observed outcomes with no expected mass: {sorted(map(str, stray))}")

    keys = list(expected)
    obs = np.array([float(observed.get(k, 0)) for k in keys])
    total = obs.sum()
    if total <= 0:
        raise ValueError("Empty counts supplied.")

    probs = np.array([float(expected[k]) for k in keys])
    exp = probs / probs.sum() * total

    if len(keys) < 2:
        return ChiSquareResult(stat=0.0, df=0, pvalue=1.0, expected=exp.tolist())

    res = chisquare(f_obs=obs, f_exp=exp)
    return ChiSquareResult(
        stat=float(res.statistic),
        df=len(keys) - 1,
        pvalue=float(res.pvalue),
        expected=exp.tolist(),
    )


#KL divergence

def kl_divergence(
    p: Sequence[float],
    q: Sequence[float],
    eps: float = 1e-12,
) -> float:
    """
    Compute D_KL(p || q) in bits with additive smoothing.

    p and q do not need to be normalized.
    """
    p = np.asarray(p, dtype=float)
    q = np.asarray(q, dtype=float)
    if p.shape != q.shape:
        raise ValueError("p and q must have the same shape.")

    def _norm(x: np.ndarray) -> np.ndarray:
        s = x.sum()
        if s <= 0:
            raise ValueError("Distribution has zero or negative sum.")
        return x / s

    p = _norm(p) + eps
    q = _norm(q) + eps
    p = p / p.sum()
    q = q / q.sum()
    return float(np.sum(p * np.log2(p / q)))


__all__ = [
    "ChiSquareResult",
    "chi_square_fit",
    "kl_divergence",
    "sample_frequencies",
    "shannon_entropy",
    "table_expected_frequencies",
]

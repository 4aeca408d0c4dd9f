"""
viz.py: Matplotlib helpers for inspecting trained models

Aim:
- Return (fig, ax) so callers can further customize or save.
- Accept QuantizedTables and plain per-step entropy lists.

Quick start

>>> from pwgram.viz import plot_transition_table, plot_entropy_curve
>>> fig, ax = plot_transition_table(model.transitions_from(State.START), title="START")
>>> fig, ax = plot_entropy_curve([0.0, 1.0, 2.3, 2.1], target=90.0)
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple
import numpy as np
import matplotlib.pyplot as plt

from .qtable import QuantizedTable


#Basic helpers

def _autox_labels(ax, labels: Sequence[str]) -> None:
    ax.set_xticks(range(len(labels)))
    ax.set_xticklabels(labels, rotation=0)


#Plots

def plot_transition_table(
    table: QuantizedTable,
    *,
    title: Optional[str] = None,
) -> Tuple[plt.Figure, plt.Axes]:
    """
    Bar chart of each outcome's probability (interval width / 256).
    """
    labels = [repr(str(outcome)) for _, outcome in table.probabilities()]
    vals = [p for p, _ in table.probabilities()]

    fig, ax = plt.subplots()
    ax.bar(range(len(vals)), vals)
    _autox_labels(ax, labels)
    ax.set_ylim(0.0, 1.0)
    ax.set_ylabel("Probability")
    if title:
        ax.set_title(title)
    fig.tight_layout()
    return fig, ax


def plot_entropy_curve(
    per_step: Sequence[float],
    *,
    target: Optional[float] = None,
    title: Optional[str] = "Entropy per generation step",
) -> Tuple[plt.Figure, plt.Axes]:
    """
    Per-step entropy as bars, running total as a line on a second axis.

    `target`, if given, is drawn as a dashed line on the cumulative axis.
    """
    per_step = np.asarray(per_step, dtype=float).reshape(-1)
    if np.any(per_step < 0):
        raise ValueError("per-step entropy cannot be negative.")
    steps = np.arange(1, per_step.size + 1)

    fig, ax = plt.subplots()
    ax.bar(steps, per_step, color="tab:blue")
    ax.set_xlabel("Step")
    ax.set_ylabel("Bits per step")

    cum_ax = ax.twinx()
    cum_ax.plot(steps, np.cumsum(per_step), color="tab:orange", marker="o")
    if target is not None:
        cum_ax.axhline(target, linestyle="--", color="tab:red")
    cum_ax.set_ylabel("Cumulative bits")

    if title:
        ax.set_title(title)
    fig.tight_layout()
    return fig, ax


__all__ = [
    "plot_entropy_curve",
    "plot_transition_table",
]

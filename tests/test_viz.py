"""Tests for the plotting helpers."""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pytest  # noqa: E402

from pwgram.bigram import State  # noqa: E402
from pwgram.viz import plot_entropy_curve, plot_transition_table  # noqa: E402


def test_plot_transition_table(word_model):
    table = word_model.transitions_from(State.START)

    fig, ax = plot_transition_table(table, title="START")

    assert len(ax.patches) == len(table)
    assert ax.get_title() == "START"
    plt.close(fig)


def test_plot_entropy_curve_with_target():
    fig, ax = plot_entropy_curve([0.0, 1.0, 2.5, 1.5], target=4.0)

    assert len(ax.patches) == 4
    plt.close(fig)


def test_plot_entropy_curve_rejects_negative_steps():
    with pytest.raises(ValueError):
        plot_entropy_curve([1.0, -0.5])

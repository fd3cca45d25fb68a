"""Render the telemetry windows to a static chart image."""

import logging
from pathlib import Path
from typing import Union

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import seaborn as sns

from .models import LATENCY, REQUESTS, THROUGHPUT
from .series_store import SeriesStore

logger = logging.getLogger(__name__)

LATENCY_COLORS = {"p50": "#3b82f6", "p95": "#f59e0b", "p99": "#ef4444"}


def plot_series(store: SeriesStore, output_path: Union[Path, str]) -> Path:
    """Draw the latency, throughput and request-rate windows as line charts.

    Args:
        store: Series store to read the current windows from
        output_path: Path of the PNG file to write

    Returns:
        The path the chart was written to
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    sns.set_theme(style="darkgrid")
    fig, axs = plt.subplots(3, 1, figsize=(10, 10), sharex=True)

    latency = store.get_series(LATENCY)
    labels = [s.time for s in latency]
    x = range(len(labels))

    for field, color in LATENCY_COLORS.items():
        axs[0].plot(x, [getattr(s, field) for s in latency], label=field.upper(), color=color, linewidth=2)
    axs[0].set_title("Latency (ms)")
    axs[0].legend(loc="upper left", fontsize=8)

    axs[1].plot(x, [s.tokens for s in store.get_series(THROUGHPUT)], color="#10b981", linewidth=2)
    axs[1].set_title("Throughput (tokens/sec)")

    axs[2].plot(x, [s.requests for s in store.get_series(REQUESTS)], color="#8b5cf6", linewidth=2)
    axs[2].set_title("Requests/sec")
    axs[2].set_xticks(list(x))
    axs[2].set_xticklabels(labels, rotation=45, ha="right", fontsize=8)

    plt.tight_layout()
    plt.savefig(output_path)
    plt.close(fig)
    logger.info(f"Chart saved: {output_path}")
    return output_path

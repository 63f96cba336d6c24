#!/usr/bin/env python3
"""Plot the pairwise similarity scores as a document-by-document heatmap."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
from matplotlib.colors import LinearSegmentedColormap  # noqa: E402

logger = logging.getLogger(__name__)


def pairs_to_matrix(pairs: pd.DataFrame) -> pd.DataFrame:
    """Square, symmetric similarity matrix from pair rows; diagonal is 100."""
    names = sorted(set(pairs["document1"]) | set(pairs["document2"]))
    matrix = pd.DataFrame(np.eye(len(names)) * 100.0, index=names, columns=names)
    for row in pairs.itertuples(index=False):
        matrix.loc[row.document1, row.document2] = row.similarity
        matrix.loc[row.document2, row.document1] = row.similarity
    return matrix


def load_similarity_matrix(path: Path) -> pd.DataFrame:
    """Load the pair CSV written by ``detect_plagiarism`` as a matrix."""
    df = pd.read_csv(path)
    df["similarity"] = df["similarity"].astype(float)
    return pairs_to_matrix(df)


def plot_heatmap(matrix: pd.DataFrame, output: Path, title: str = "Structural Similarity Matrix") -> None:
    """Plot similarity matrix (percent scale) as heatmap."""
    n = len(matrix)
    fig_size = max(8, n * 0.4)

    fig, ax = plt.subplots(figsize=(fig_size, fig_size))

    colors = ["#ffffff", "#e6f2ff", "#99ccff", "#3399ff", "#0066cc", "#003366"]
    cmap = LinearSegmentedColormap.from_list("similarity", colors)

    im = ax.imshow(matrix.values, cmap=cmap, aspect='auto', vmin=0, vmax=100)

    cbar = plt.colorbar(im, ax=ax, fraction=0.046, pad=0.04)
    cbar.set_label("Similarity (%)", rotation=270, labelpad=20)

    ax.set_xticks(np.arange(n))
    ax.set_yticks(np.arange(n))

    short_names = [name[:20] + "..." if len(name) > 23 else name for name in matrix.columns]
    ax.set_xticklabels(short_names, rotation=45, ha="right", fontsize=8)
    ax.set_yticklabels(short_names, fontsize=8)

    ax.set_title(title, fontsize=14, fontweight='bold')

    plt.tight_layout()
    output.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output, dpi=150, bbox_inches='tight')
    plt.close(fig)
    logger.info("Saved heatmap to %s", output)


def main() -> None:
    parser = argparse.ArgumentParser(description="Plot a similarity heatmap from the pair CSV")
    parser.add_argument("--pairs", default="results/plagiarism_scores.csv", help="Pair CSV from detect_plagiarism")
    parser.add_argument("--output", default="results/plots/similarity_heatmap.png", help="PNG output")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    pairs_path = Path(args.pairs)
    if not pairs_path.exists():
        raise SystemExit(f"Pair file not found: {pairs_path}")
    plot_heatmap(load_similarity_matrix(pairs_path), Path(args.output))


if __name__ == "__main__":
    main()

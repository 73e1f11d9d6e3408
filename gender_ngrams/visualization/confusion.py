"""Confusion matrix heatmap for an evaluation result."""

from pathlib import Path

import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
import seaborn as sns


def generate_confusion_matrix_figure(
    evaluation,
    output_path=None,
    figsize=(5, 4),
    normalize=False,
    cmap="Blues",
):
    """
    Plot predicted vs. true label counts as an annotated heatmap.

    Args:
        evaluation: EvaluationResult from evaluate() or an experiment run
        output_path: Path to save PDF (optional)
        figsize: Figure size
        normalize: Show each true-label column as proportions instead of counts
        cmap: Matplotlib colormap name

    Returns:
        matplotlib figure object
    """
    table = evaluation.confusion.to_frame()
    fmt = "d"
    if normalize:
        # columns are true labels; an all-zero column stays zero
        column_totals = table.sum(axis=0).replace(0, 1)
        table = table / column_totals
        fmt = ".2f"

    fig, ax = plt.subplots(figsize=figsize)

    sns.heatmap(
        table,
        annot=True,
        fmt=fmt,
        ax=ax,
        cbar=False,
        cmap=cmap,
    )

    ax.set_xlabel("True label", fontsize=13)
    ax.set_ylabel("Predicted label", fontsize=13)
    ax.set_title(
        f"Accuracy {evaluation.accuracy:.3f} (n={evaluation.n_records})",
        fontsize=12,
    )
    plt.yticks(rotation=0)
    plt.tight_layout()

    if output_path:
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, format="pdf", bbox_inches="tight")

    return fig

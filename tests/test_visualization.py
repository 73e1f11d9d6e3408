"""Tests for the confusion matrix figure."""

import matplotlib.pyplot as plt
import numpy as np

from gender_ngrams.classification import evaluate
from gender_ngrams.visualization import generate_confusion_matrix_figure


class TestConfusionMatrixFigure:
    """Test heatmap generation."""

    def test_counts_figure(self, tmp_path):
        evaluation = evaluate(['F', 'F', 'M', 'M'], ['F', 'M', 'M', 'M'])
        output_path = tmp_path / "nested" / "confusion.pdf"

        fig = generate_confusion_matrix_figure(evaluation, output_path=str(output_path))
        try:
            assert output_path.exists()
            ax = fig.axes[0]
            assert ax.get_xlabel() == "True label"
            assert ax.get_ylabel() == "Predicted label"
            annotations = sorted(text.get_text() for text in ax.texts)
            assert annotations == ['0', '1', '1', '2']
        finally:
            plt.close(fig)

    def test_normalized_figure(self):
        evaluation = evaluate(['F', 'F', 'M', 'M'], ['F', 'M', 'M', 'M'])

        fig = generate_confusion_matrix_figure(evaluation, normalize=True)
        try:
            values = sorted(float(text.get_text()) for text in fig.axes[0].texts)
            assert np.allclose(values, [0.0, 0.33, 0.67, 1.0], atol=0.01)
        finally:
            plt.close(fig)

"""Visualization modules for gender_ngrams."""

from .confusion import generate_confusion_matrix_figure

__all__ = [
    'generate_confusion_matrix_figure',
]

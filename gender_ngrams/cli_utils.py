"""Console formatting for experiment results."""

import math


def format_header(title, width=60, char='='):
    """Format a header with plain ASCII borders."""
    border = '+' + char * (width - 2) + '+'
    middle = f"| {title:^{width - 4}} |"
    return f"\n{border}\n{middle}\n{border}\n"


def format_metric(value, digits=3):
    """Format a metric, showing NaN as 'undefined'."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "undefined"
    return f"{value:.{digits}f}"


def format_confusion_matrix(confusion):
    """Render a ConfusionMatrix as an aligned text table (rows = predicted)."""
    labels = [str(label) for label in confusion.labels]
    width = max([len(label) for label in labels] + [len(str(confusion.total)), 9])

    corner = "pred/true"
    lines = [f"{corner:>{width}} " + " ".join(f"{label:>{width}}" for label in labels)]
    for i, label in enumerate(labels):
        cells = " ".join(f"{int(count):>{width}}" for count in confusion.counts[i])
        lines.append(f"{label:>{width}} {cells}")
    return "\n".join(lines)


def format_metrics_report(evaluation, title=None):
    """
    Multi-line text report of an EvaluationResult.

    Examples:
        >>> print(format_metrics_report(evaluate(['F', 'M'], ['F', 'F'])))
    """
    lines = []
    if title:
        lines.append(format_header(title))
    lines.append(format_confusion_matrix(evaluation.confusion))
    lines.append("")
    lines.append(f"Positive class: {evaluation.positive_label}")
    lines.append(f"Precision: {format_metric(evaluation.precision)}")
    lines.append(f"Recall:    {format_metric(evaluation.recall)}")
    lines.append(f"F1:        {format_metric(evaluation.f1)}")
    lines.append(f"Accuracy:  {format_metric(evaluation.accuracy)}")
    lines.append(f"Test records: {evaluation.n_records}")
    return "\n".join(lines)

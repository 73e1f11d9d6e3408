#!/usr/bin/env python
"""
CLI for gender_ngrams: predict gender from character n-grams of first names.
"""

import sys
import argparse
import logging
from pathlib import Path

# Add package to path
sys.path.insert(0, str(Path(__file__).parent))

from gender_ngrams.core.constants import (
    CLASSIFIERS,
    DEFAULT_MIN_DOCUMENT_FREQUENCY,
    DEFAULT_SEED,
    DEFAULT_TRAIN_FRACTION,
    LABEL_COLUMN,
    SPLIT_METHODS,
    TEXT_COLUMN,
    VOCABULARY_SCOPES,
)
from gender_ngrams.core.records import load_records
from gender_ngrams.classification import (
    ExperimentConfig,
    run_classification_experiment,
    save_classification_results,
)
from gender_ngrams.cli_utils import format_header, format_metrics_report


def build_arg_parser():
    """CLI parser with knobs for features, split, model and output."""
    parser = argparse.ArgumentParser(
        description='gender_ngrams CLI: classify names by character n-grams',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --data names.csv                         # Naive Bayes, default settings
  %(prog)s --data names.csv --classifier lasso      # L1-penalized logistic regression
  %(prog)s --data names.csv --vocabulary-scope train --figure out/confusion.pdf
        """
    )

    parser.add_argument('--data', '-d', required=False, help='Delimited file of labelled names')
    parser.add_argument('--sep', default=',', help='Field delimiter (default: ",")')
    parser.add_argument('--text-column', default=TEXT_COLUMN)
    parser.add_argument('--label-column', default=LABEL_COLUMN)
    parser.add_argument('--id-column', default=None, help='Record id column (default: row number)')

    parser.add_argument('--ngram-min', type=int, default=1)
    parser.add_argument('--ngram-max', type=int, default=3)
    parser.add_argument('--keep-case', action='store_true', help='Do not lowercase names')
    parser.add_argument(
        '--min-df',
        type=int,
        default=DEFAULT_MIN_DOCUMENT_FREQUENCY,
        help='Drop n-grams found in fewer names than this',
    )

    parser.add_argument('--train-fraction', type=float, default=DEFAULT_TRAIN_FRACTION)
    parser.add_argument('--seed', type=int, default=DEFAULT_SEED)
    parser.add_argument('--split-method', choices=SPLIT_METHODS, default='independent')
    parser.add_argument(
        '--vocabulary-scope',
        choices=VOCABULARY_SCOPES,
        default='corpus',
        help='corpus: build vocabulary on all names; train: on the training split only',
    )

    parser.add_argument('--classifier', '-c', choices=CLASSIFIERS, default='naive_bayes')
    parser.add_argument('--alpha', type=float, default=None, help='Naive Bayes smoothing')
    parser.add_argument('--C', type=float, default=None, help='Inverse penalty strength (ridge/lasso)')

    parser.add_argument('--positive-label', default=None, help='Class for precision/recall')
    parser.add_argument(
        '--zero-division',
        choices=['raise', 'nan'],
        default='nan',
        help='Report undefined precision/recall as NaN or fail',
    )

    parser.add_argument('--output', '-o', default=None, help='Directory to pickle results into')
    parser.add_argument('--figure', '-f', default=None, help='Path for a confusion matrix PDF')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    parser.add_argument('--list', '-l', action='store_true', help='List available classifiers')
    return parser


def config_from_args(args):
    """Translate parsed arguments into an ExperimentConfig."""
    classifier_params = {}
    if args.classifier == 'naive_bayes' and args.alpha is not None:
        classifier_params['alpha'] = args.alpha
    if args.classifier in ('ridge', 'lasso') and args.C is not None:
        classifier_params['C'] = args.C

    return ExperimentConfig(
        ngram_range=(args.ngram_min, args.ngram_max),
        lowercase=not args.keep_case,
        min_document_frequency=args.min_df,
        train_fraction=args.train_fraction,
        seed=args.seed,
        split_method=args.split_method,
        vocabulary_scope=args.vocabulary_scope,
        classifier=args.classifier,
        classifier_params=classifier_params,
        positive_label=args.positive_label,
        zero_division=args.zero_division,
    )


def main(argv=None):
    """Main CLI entry point."""
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    if args.list:
        print("\nAvailable classifiers:")
        print("  naive_bayes - Multinomial Naive Bayes (--alpha)")
        print("  ridge       - L2-penalized logistic regression (--C)")
        print("  lasso       - L1-penalized logistic regression (--C)")
        return 0

    if not args.data:
        print("\nERROR: --data is required")
        return 1

    print(format_header("gender_ngrams CLI"))

    try:
        config = config_from_args(args)
        records = load_records(
            args.data,
            text_column=args.text_column,
            label_column=args.label_column,
            id_column=args.id_column,
            sep=args.sep,
        )
        result = run_classification_experiment(records, config)
    except (ValueError, FileNotFoundError) as e:
        print(f"\nERROR: {e}")
        return 1

    print(f"Records: {len(records)}")
    print(
        f"Train: {len(result.split.train_ids)}, Test: {len(result.split.test_ids)} "
        f"(realized train fraction {result.split.realized_fraction:.3f})"
    )
    print(f"Features: {len(result.vocabulary)} n-grams ({config.vocabulary_scope} vocabulary)")
    print(format_metrics_report(result.evaluation, title=f"Results: {config.classifier}"))

    if args.output:
        path = save_classification_results(result, output_dir=args.output)
        print(f"\nResults saved to: {path}")

    if args.figure:
        from gender_ngrams.visualization import generate_confusion_matrix_figure
        import matplotlib.pyplot as plt

        fig = generate_confusion_matrix_figure(result.evaluation, output_path=args.figure)
        plt.close(fig)
        print(f"Confusion matrix figure: {args.figure}")

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""End-to-end tests for record loading and the experiment runner (NO MOCKS)."""

import pickle

import pandas as pd
import pytest

from gender_ngrams.classification import (
    ExperimentConfig,
    load_classification_results,
    run_classification_experiment,
    save_classification_results,
)
from gender_ngrams.classification.vectorizer import extract_ngrams
from gender_ngrams.core.exceptions import InputShapeError, TrainingError
from gender_ngrams.core.records import Record, load_records, make_records


def nan_config(**kwargs):
    """Config that reports undefined metrics as NaN instead of raising."""
    return ExperimentConfig(zero_division="nan", **kwargs)


class TestLoadRecords:
    """Test loading labelled names from CSV."""

    def test_load_fixture(self, name_records):
        assert len(name_records) == 80
        assert {r.label for r in name_records} == {'F', 'M'}
        assert [r.record_id for r in name_records] == list(range(80))
        assert name_records[0] == Record(0, 'Anna', 'F')

    def test_id_column_and_separator(self, tmp_path):
        path = tmp_path / "names.tsv"
        path.write_text("id\tfirst\tsex\nx1\tAnna\tF\nx2\tJohn\tM\n")

        records = load_records(
            path, text_column='first', label_column='sex', id_column='id', sep='\t'
        )
        assert records == [Record('x1', 'Anna', 'F'), Record('x2', 'John', 'M')]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_records(tmp_path / "nope.csv")

    def test_missing_column(self, tmp_path):
        path = tmp_path / "names.csv"
        path.write_text("name,sex\nAnna,F\n")
        with pytest.raises(ValueError, match="Missing required columns"):
            load_records(path)

    def test_empty_cell(self, tmp_path):
        path = tmp_path / "names.csv"
        path.write_text("name,gender\nAnna,F\n,M\n")
        with pytest.raises(InputShapeError):
            load_records(path)

    def test_duplicate_ids(self, tmp_path):
        path = tmp_path / "names.csv"
        path.write_text("id,name,gender\n1,Anna,F\n1,John,M\n")
        with pytest.raises(InputShapeError):
            load_records(path, id_column='id')


class TestExperimentConfig:
    """Test configuration validation."""

    @pytest.mark.parametrize("kwargs", [
        {'split_method': 'temporal'},
        {'vocabulary_scope': 'test'},
        {'classifier': 'svm'},
        {'zero_division': 'zero'},
        {'train_fraction': 1.0},
        {'min_document_frequency': -1},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            ExperimentConfig(**kwargs)


class TestRunExperiment:
    """Test the full pipeline."""

    def test_corpus_vocabulary(self, name_records):
        result = run_classification_experiment(name_records, nan_config(seed=1))

        assert result.train_matrix.vocabulary == result.test_matrix.vocabulary
        assert set(result.train_matrix.record_ids) == set(result.split.train_ids)
        assert set(result.test_matrix.record_ids) == set(result.split.test_ids)
        assert len(result.predictions) == len(result.split.test_ids)
        assert result.evaluation.n_records == len(result.split.test_ids)
        assert 0.0 <= result.evaluation.accuracy <= 1.0

    def test_corpus_vocabulary_respects_trim(self, name_records):
        config = nan_config(seed=1, min_document_frequency=5)
        result = run_classification_experiment(name_records, config)

        train_df = result.train_matrix.document_frequency()
        test_df = result.test_matrix.document_frequency()
        assert ((train_df + test_df) >= 5).all()

    def test_train_vocabulary(self, name_records):
        """Train-scoped vocabulary only holds n-grams seen in training names."""
        config = nan_config(seed=1, vocabulary_scope="train", min_document_frequency=1)
        result = run_classification_experiment(name_records, config)

        train_ids = set(result.split.train_ids)
        train_grams = set()
        for record in name_records:
            if record.record_id in train_ids:
                train_grams.update(extract_ngrams(record.text.lower(), 1, 3))

        assert set(result.vocabulary) <= train_grams
        assert result.test_matrix.vocabulary == result.train_matrix.vocabulary

    def test_scope_does_not_change_split(self, name_records):
        corpus = run_classification_experiment(name_records, nan_config(seed=9))
        train = run_classification_experiment(
            name_records, nan_config(seed=9, vocabulary_scope="train")
        )
        assert corpus.split.assignment == train.split.assignment

    def test_reproducible(self, name_records):
        """Same records and seed give identical features, split and predictions."""
        first = run_classification_experiment(name_records, nan_config(seed=4))
        second = run_classification_experiment(name_records, nan_config(seed=4))

        assert first.split.assignment == second.split.assignment
        assert first.vocabulary == second.vocabulary
        assert (first.train_matrix.counts != second.train_matrix.counts).nnz == 0
        pd.testing.assert_frame_equal(first.predictions, second.predictions)

    @pytest.mark.parametrize("classifier", ["naive_bayes", "ridge", "lasso"])
    @pytest.mark.parametrize("split_method", ["independent", "exact", "stratified"])
    def test_classifiers_and_split_methods(self, name_records, classifier, split_method):
        config = nan_config(seed=2, classifier=classifier, split_method=split_method)
        result = run_classification_experiment(name_records, config)

        assert set(result.predictions['predicted_label']) <= {'F', 'M'}
        assert result.evaluation.confusion.labels == ('F', 'M')

    def test_predictions_frame(self, name_records):
        result = run_classification_experiment(name_records, nan_config(seed=1))
        predictions = result.predictions

        assert list(predictions.columns) == [
            'record_id', 'text', 'true_label', 'predicted_label', 'correct'
        ]
        assert predictions['correct'].mean() == pytest.approx(result.evaluation.accuracy)

    def test_single_class_corpus(self):
        records = make_records([(name, "F") for name in ("anna", "mary", "emma", "lily")])
        with pytest.raises(TrainingError):
            run_classification_experiment(records, nan_config(min_document_frequency=0))

    def test_empty_records(self):
        with pytest.raises(InputShapeError):
            run_classification_experiment([])

    def test_empty_test_split(self, scenario_records):
        """Every record landing in training is reported, not passed to sklearn."""
        with pytest.raises(InputShapeError, match="Test split is empty"):
            run_classification_experiment(
                scenario_records, nan_config(seed=0, min_document_frequency=0)
            )

    def test_trim_removes_every_feature(self):
        """Six distinct names share no n-gram in five records."""
        records = make_records([
            ("anna", "F"), ("lucy", "F"), ("ruth", "F"),
            ("john", "M"), ("mark", "M"), ("paul", "M"),
        ])
        config = nan_config(seed=0, split_method="stratified")
        with pytest.raises(TrainingError, match="No feature columns"):
            run_classification_experiment(records, config)


class TestSaveResults:
    """Test pickling experiment results."""

    def test_save_and_load(self, name_records, tmp_path):
        result = run_classification_experiment(name_records, nan_config(seed=3))
        path = save_classification_results(result, output_dir=str(tmp_path / "out"))

        assert path.endswith("naive_bayes_seed=3.pkl")
        data = load_classification_results(path)

        assert set(data) == {'result', 'metrics', 'feature_names', 'config'}
        assert data['feature_names'] == list(result.vocabulary)
        assert data['metrics']['accuracy'] == result.evaluation.accuracy
        assert data['config'] == result.config

        # the stored classifier still predicts
        loaded = data['result']
        assert len(loaded.classifier.predict(loaded.test_matrix)) == len(loaded.split.test_ids)

    def test_plain_pickle(self, name_records, tmp_path):
        result = run_classification_experiment(name_records, nan_config(seed=3))
        path = save_classification_results(result, output_dir=str(tmp_path), filename="run.pkl")

        with open(path, 'rb') as f:
            data = pickle.load(f)
        assert data['metrics']['n_records'] == len(result.split.test_ids)

"""
Unit Tests – Naive Bayes Classifier
=====================================
Training validation, smoothing, priors, features and state round-trips.
"""

from __future__ import annotations

import math

import pytest

from src.sentiment_engine.errors import ModelNotTrainedError, TrainingError
from src.sentiment_engine.models import SentimentLabel, TrainingExample
from src.sentiment_engine.naive_bayes import NaiveBayesClassifier


class TestTraining:

    @pytest.fixture(autouse=True)
    def _setup(self):
        self.nb = NaiveBayesClassifier()

    def test_untrained_predict_raises(self):
        assert not self.nb.is_trained
        with pytest.raises(ModelNotTrainedError):
            self.nb.predict("anything")

    def test_empty_training_set_rejected(self):
        with pytest.raises(TrainingError):
            self.nb.train([])

    def test_unknown_label_rejected(self):
        with pytest.raises(TrainingError):
            self.nb.train([{"text": "meh", "label": "mixed"}])

    def test_non_string_text_rejected(self):
        with pytest.raises(TrainingError):
            self.nb.train([{"text": 42, "label": "positive"}])

    def test_failed_training_keeps_previous_model(self, tiny_training_set):
        self.nb.train(tiny_training_set)
        before = self.nb.predict_proba("I love this")
        with pytest.raises(TrainingError):
            self.nb.train(tiny_training_set + [{"text": "x", "label": "bogus"}])
        assert self.nb.predict_proba("I love this") == before
        assert self.nb.total_documents == 3

    def test_accepts_models_tuples_and_mixed_case(self):
        self.nb.train([
            TrainingExample(text="great stuff", label="positive"),
            ("awful stuff", "NEGATIVE"),
            {"text": "some stuff", "label": " Neutral "},
        ])
        assert self.nb.labels == (
            SentimentLabel.POSITIVE, SentimentLabel.NEGATIVE, SentimentLabel.NEUTRAL,
        )

    def test_train_resets_counts(self, tiny_training_set):
        self.nb.train(tiny_training_set)
        self.nb.train(tiny_training_set[:2])
        assert self.nb.total_documents == 2
        assert SentimentLabel.NEUTRAL not in self.nb.labels

    def test_partial_train_accumulates(self, tiny_training_set):
        self.nb.train(tiny_training_set)
        self.nb.partial_train([{"text": "love love love", "label": "positive"}])
        assert self.nb.total_documents == 4
        assert self.nb.stats()["doc_counts"]["positive"] == 2

    def test_merge_sums_tables(self, tiny_training_set):
        other = NaiveBayesClassifier()
        other.train([{"text": "brand new words", "label": "positive"}])
        self.nb.train(tiny_training_set)
        self.nb.merge(other)
        assert self.nb.total_documents == 4
        assert "brand" in self.nb.to_state()["vocabulary"]

    def test_merge_untrained_rejected(self, tiny_training_set):
        self.nb.train(tiny_training_set)
        with pytest.raises(TrainingError):
            self.nb.merge(NaiveBayesClassifier())

    def test_invalid_smoothing(self):
        with pytest.raises(ValueError):
            NaiveBayesClassifier(smoothing=0)


class TestPrediction:

    def test_love_scenario(self, tiny_training_set):
        nb = NaiveBayesClassifier()
        nb.train(tiny_training_set)
        out = nb.predict("I love this")
        assert out.label == SentimentLabel.POSITIVE
        assert 0.0 <= out.confidence <= 1.0
        assert out.keywords == ["love"]

    def test_probabilities_sum_to_one(self, trained_nb, probe_texts):
        for text in probe_texts:
            probs = trained_nb.predict_proba(text)
            assert math.isclose(sum(probs.values()), 1.0, rel_tol=1e-9)

    def test_score_is_pos_minus_neg(self, trained_nb):
        out = trained_nb.predict("great service, happy")
        probs = out.probabilities
        assert out.score == pytest.approx(
            probs[SentimentLabel.POSITIVE] - probs[SentimentLabel.NEGATIVE]
        )
        assert out.confidence == pytest.approx(max(probs.values()))

    def test_every_prediction_is_valid(self, trained_nb, probe_texts):
        for text in probe_texts:
            out = trained_nb.predict(text)
            assert out.label in set(SentimentLabel)
            assert 0.0 <= out.confidence <= 1.0
            assert -1.0 <= out.score <= 1.0

    def test_never_returns_untrained_label(self):
        nb = NaiveBayesClassifier()
        nb.train([("good day", "positive"), ("bad day", "negative")])
        out = nb.predict("the weather report")
        assert out.label in (SentimentLabel.POSITIVE, SentimentLabel.NEGATIVE)
        assert SentimentLabel.NEUTRAL not in out.probabilities

    def test_empty_input_returns_prior(self):
        nb = NaiveBayesClassifier()
        nb.train([
            ("good stuff", "positive"),
            ("great stuff", "positive"),
            ("bad stuff", "negative"),
        ])
        probs = nb.predict_proba("")
        assert probs[SentimentLabel.POSITIVE] == pytest.approx(2 / 3)
        assert probs[SentimentLabel.NEGATIVE] == pytest.approx(1 / 3)

    def test_unknown_tokens_are_not_skipped(self):
        # Equal priors; the label with fewer total terms gives unseen
        # tokens a larger smoothed probability.
        nb = NaiveBayesClassifier()
        nb.train([
            ("alpha beta gamma delta", "positive"),
            ("omega", "negative"),
        ])
        assert nb.predict("zzz qqq").label == SentimentLabel.NEGATIVE

    def test_deterministic(self, trained_nb):
        text = "not bad at all, pretty good"
        assert trained_nb.predict(text) == trained_nb.predict(text)


class TestFeatures:

    def test_stopwords_dropped_and_negation_marked(self):
        nb = NaiveBayesClassifier()
        feats = nb.features("this is not good", language="en")
        assert feats == ["this", "not", "NOT_good", "good"]

    def test_negation_tokens_can_be_disabled(self):
        nb = NaiveBayesClassifier(enable_negation_tokens=False)
        assert "NOT_good" not in nb.features("this is not good", language="en")

    def test_single_characters_dropped(self):
        nb = NaiveBayesClassifier()
        assert nb.features("I x love", language="en") == ["love"]

    def test_language_specific_stopwords(self):
        nb = NaiveBayesClassifier()
        assert "der" not in nb.features("der Film ist toll", language="de")
        assert "der" in nb.features("der Film ist toll", language="en")


class TestState:

    def test_round_trip_is_exact(self, trained_nb, probe_texts):
        restored = NaiveBayesClassifier.from_state(trained_nb.to_state())
        for text in probe_texts:
            assert restored.predict_proba(text) == trained_nb.predict_proba(text)
        assert restored.stats() == trained_nb.stats()

    def test_bad_format_version(self, trained_nb):
        state = trained_nb.to_state()
        state["format_version"] = 99
        with pytest.raises(ValueError):
            NaiveBayesClassifier.from_state(state)

    def test_stats(self, tiny_training_set):
        nb = NaiveBayesClassifier()
        nb.train(tiny_training_set)
        stats = nb.stats()
        assert stats["trained"] is True
        assert stats["total_documents"] == 3
        assert stats["vocabulary_size"] == 4

"""
Unit Tests – Hybrid Combiner
==============================
The blending policy is exact, so these tests pin the numbers.
"""

from __future__ import annotations

import itertools

import pytest

from src.sentiment_engine.combiner import HybridCombiner
from src.sentiment_engine.models import ClassifierOutput, ClassifierTag, SentimentLabel

POS, NEG, NEU = SentimentLabel.POSITIVE, SentimentLabel.NEGATIVE, SentimentLabel.NEUTRAL
RULE, NB, CTX = ClassifierTag.RULE_BASED, ClassifierTag.NAIVE_BAYES, ClassifierTag.CONTEXTUAL


def out(label, score, confidence, keywords=()):
    return ClassifierOutput(label=label, score=score, confidence=confidence, keywords=list(keywords))


class TestHybridCombiner:

    @pytest.fixture(autouse=True)
    def _setup(self):
        self.combiner = HybridCombiner(agreement_bonus=0.1)

    # ── Agreement ─────────────────────────────────────────────────

    def test_agreement_boosts_confidence(self):
        result = self.combiner.combine([
            (RULE, out(POS, 0.6, 0.7)),
            (NB, out(POS, 0.5, 0.8)),
        ])
        assert result.label == POS
        assert result.agreement is True
        assert result.method == ClassifierTag.HYBRID
        # weights 0.3 / 0.45 renormalise to 0.4 / 0.6
        assert result.score == pytest.approx(0.4 * 0.6 + 0.6 * 0.5)
        assert result.confidence == pytest.approx(0.9)

    def test_agreement_confidence_capped(self):
        result = self.combiner.combine([
            (RULE, out(NEG, -0.9, 1.0)),
            (NB, out(NEG, -0.8, 0.95)),
        ])
        assert result.confidence == 1.0

    def test_agreement_invariant(self):
        grid = [0.0, 0.2, 0.5, 0.8, 1.0]
        for rc, nc in itertools.product(grid, grid):
            result = self.combiner.combine([
                (RULE, out(NEG, -0.4, rc)),
                (NB, out(NEG, -0.3, nc)),
            ])
            assert result.agreement is True
            assert result.confidence >= max(rc, nc)
            assert result.confidence <= 1.0

    # ── Disagreement ──────────────────────────────────────────────

    def test_disagreement_higher_confidence_wins(self):
        result = self.combiner.combine([
            (RULE, out(NEG, -0.5, 0.9)),
            (NB, out(POS, 0.2, 0.6)),
        ])
        assert result.label == NEG
        assert result.agreement is False
        assert result.confidence == pytest.approx(0.4 * 0.9 + 0.6 * 0.6)
        assert result.score == pytest.approx(-0.08)

    def test_tie_goes_to_statistical(self):
        result = self.combiner.combine([
            (RULE, out(NEG, -0.5, 0.7)),
            (NB, out(POS, 0.2, 0.7)),
        ])
        assert result.label == POS
        # weighted score is negative; the winner's own score is used
        assert result.score == pytest.approx(0.2)

    def test_neutral_winner_keeps_weighted_score(self):
        result = self.combiner.combine([
            (RULE, out(NEU, 0.0, 0.5)),
            (NB, out(POS, 0.1, 0.34)),
        ])
        assert result.label == NEU
        assert result.score == pytest.approx(0.6 * 0.1)

    # ── Contextual ────────────────────────────────────────────────

    def test_contextual_breaks_disagreement(self):
        result = self.combiner.combine([
            (RULE, out(NEG, -0.5, 0.6)),
            (NB, out(POS, 0.4, 0.7)),
            (CTX, out(NEG, -0.8, 0.9)),
        ])
        assert result.label == NEG
        assert result.agreement is False

    def test_contextual_must_match_a_candidate(self):
        result = self.combiner.combine([
            (RULE, out(NEG, -0.5, 0.6)),
            (NB, out(POS, 0.4, 0.7)),
            (CTX, out(NEU, 0.0, 0.95)),
        ])
        assert result.label == POS

    def test_contextual_must_beat_both(self):
        result = self.combiner.combine([
            (RULE, out(NEG, -0.5, 0.6)),
            (NB, out(POS, 0.4, 0.7)),
            (CTX, out(NEG, -0.8, 0.7)),
        ])
        assert result.label == POS

    def test_contextual_weight_participates(self):
        result = self.combiner.combine([
            (RULE, out(POS, 0.5, 0.5)),
            (NB, out(POS, 0.5, 0.5)),
            (CTX, out(POS, 1.0, 1.0)),
        ])
        assert result.score == pytest.approx(0.3 * 0.5 + 0.45 * 0.5 + 0.25 * 1.0)
        assert result.contributors == [RULE, NB, CTX]

    # ── Single contributor & weights ──────────────────────────────

    def test_single_contributor(self):
        single = out(NEG, -0.4, 0.66)
        result = self.combiner.combine([(NB, single)])
        assert result.method == ClassifierTag.NAIVE_BAYES
        assert result.agreement is True
        assert (result.label, result.score, result.confidence) == (NEG, -0.4, 0.66)

    def test_rule_and_contextual_only(self):
        result = self.combiner.combine([
            (RULE, out(POS, 0.5, 0.6)),
            (CTX, out(NEG, -0.6, 0.8)),
        ])
        assert result.label == NEG
        assert result.agreement is False
        assert result.method == ClassifierTag.HYBRID

    def test_explicit_weights_renormalised(self):
        result = self.combiner.combine([
            (RULE, out(POS, 0.2, 0.5), 2.0),
            (NB, out(POS, 0.6, 0.5), 2.0),
        ])
        assert result.score == pytest.approx(0.4)

    def test_custom_weights(self):
        combiner = HybridCombiner(weights={RULE: 1.0, NB: 0.0})
        result = combiner.combine([
            (RULE, out(POS, 0.2, 0.5)),
            (NB, out(POS, 0.6, 0.5)),
        ])
        assert result.score == pytest.approx(0.2)

    def test_negative_weight_rejected(self):
        with pytest.raises(ValueError):
            HybridCombiner(weights={RULE: -0.1})

    def test_keywords_union_in_order(self):
        result = self.combiner.combine([
            (RULE, out(POS, 0.5, 0.6, ["love", "great"])),
            (NB, out(POS, 0.4, 0.6, ["love", "fun"])),
        ])
        assert result.keywords == ["love", "great", "fun"]

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            self.combiner.combine([])

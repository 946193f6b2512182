"""
Hybrid Combiner
================
Blends per-classifier outputs into one label / score / confidence.

Policy:

  1. Weights are renormalised over the classifiers that actually
     contributed, so a dropped contextual call does not shrink scores.
  2. weighted_score = Σ w·score,  weighted_confidence = Σ w·confidence
  3. Rule-based and Naive Bayes agree
        → their label; confidence = min(1, max(weighted, max individual) + bonus)
     They disagree
        → label of the higher individual confidence, Naive Bayes on ties;
          confidence = weighted confidence.
        → A contextual output overrides that choice only when its label is
          one of the two candidates and its confidence beats both.
  4. The blended score is forced onto the side of a polar label; if the
     weighted score points the other way, the winner's own score is used.
  5. method = "hybrid" for ≥2 contributors, else the single tag.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .models import ClassifierOutput, ClassifierTag, CombinedOutput, SentimentLabel

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS: Dict[ClassifierTag, float] = {
    ClassifierTag.RULE_BASED: 0.3,
    ClassifierTag.NAIVE_BAYES: 0.45,
    ClassifierTag.CONTEXTUAL: 0.25,
}

# Preference when confidences tie outside the rule-vs-statistical decision
_TIE_ORDER = (ClassifierTag.NAIVE_BAYES, ClassifierTag.RULE_BASED, ClassifierTag.CONTEXTUAL)

Contribution = Union[
    Tuple[ClassifierTag, ClassifierOutput],
    Tuple[ClassifierTag, ClassifierOutput, float],
]


class HybridCombiner:
    """
    Usage::

        combiner = HybridCombiner(agreement_bonus=0.1)
        blended = combiner.combine([
            (ClassifierTag.RULE_BASED, rule_out),
            (ClassifierTag.NAIVE_BAYES, nb_out),
        ])
    """

    def __init__(
        self,
        weights: Optional[Mapping[Union[ClassifierTag, str], float]] = None,
        agreement_bonus: float = 0.1,
    ):
        merged = dict(DEFAULT_WEIGHTS)
        for tag, w in (weights or {}).items():
            if w < 0:
                raise ValueError(f"negative weight for {tag}")
            merged[ClassifierTag(tag)] = float(w)
        self.weights = merged
        self.agreement_bonus = agreement_bonus

    def weight_for(self, tag: ClassifierTag) -> float:
        return self.weights.get(tag, 0.0)

    def combine(self, outputs: Sequence[Contribution]) -> CombinedOutput:
        if not outputs:
            raise ValueError("combine() needs at least one classifier output")

        entries: List[Tuple[ClassifierTag, ClassifierOutput, float]] = []
        for item in outputs:
            if len(item) == 3:
                tag, out, weight = item
            else:
                tag, out = item
                weight = self.weight_for(tag)
            entries.append((ClassifierTag(tag), out, float(weight)))

        weights = self._normalise([w for _, _, w in entries])
        weighted_score = sum(w * out.score for (_, out, _), w in zip(entries, weights))
        weighted_conf = sum(w * out.confidence for (_, out, _), w in zip(entries, weights))

        by_tag = {tag: out for tag, out, _ in entries}
        contributors = [tag for tag, _, _ in entries]
        keywords = self._merge_keywords(out for _, out, _ in entries)

        if len(entries) == 1:
            tag, out, _ = entries[0]
            return CombinedOutput(
                label=out.label,
                score=out.score,
                confidence=out.confidence,
                method=tag,
                agreement=True,
                contributors=contributors,
                keywords=keywords,
            )

        rule = by_tag.get(ClassifierTag.RULE_BASED)
        stat = by_tag.get(ClassifierTag.NAIVE_BAYES)
        ctx = by_tag.get(ClassifierTag.CONTEXTUAL)

        if rule is not None and stat is not None:
            if rule.label == stat.label:
                label, agreement = stat.label, True
                confidence = self._boosted(weighted_conf, (rule, stat))
            else:
                agreement = False
                label = stat.label if stat.confidence >= rule.confidence else rule.label
                if (
                    ctx is not None
                    and ctx.label in (rule.label, stat.label)
                    and ctx.confidence > max(rule.confidence, stat.confidence)
                ):
                    label = ctx.label
                confidence = weighted_conf
        else:
            winner = self._most_confident(entries)
            label = winner.label
            agreement = all(out.label == label for _, out, _ in entries)
            confidence = (
                self._boosted(weighted_conf, [out for _, out, _ in entries])
                if agreement else weighted_conf
            )

        score = self._align_score(label, weighted_score, entries)

        return CombinedOutput(
            label=label,
            score=max(-1.0, min(1.0, score)),
            confidence=max(0.0, min(1.0, confidence)),
            method=ClassifierTag.HYBRID,
            agreement=agreement,
            contributors=contributors,
            keywords=keywords,
        )

    # ── helpers ───────────────────────────────────────────────────

    @staticmethod
    def _normalise(raw: List[float]) -> List[float]:
        total = sum(raw)
        if total <= 0:
            return [1.0 / len(raw)] * len(raw)
        return [w / total for w in raw]

    def _boosted(self, weighted_conf: float, outs: Sequence[ClassifierOutput]) -> float:
        peak = max(o.confidence for o in outs)
        return min(1.0, max(weighted_conf, peak) + self.agreement_bonus)

    @staticmethod
    def _most_confident(
        entries: Sequence[Tuple[ClassifierTag, ClassifierOutput, float]],
    ) -> ClassifierOutput:
        def rank(entry):
            tag, out, _ = entry
            return (-out.confidence, _TIE_ORDER.index(tag))
        return sorted(entries, key=rank)[0][1]

    def _align_score(
        self,
        label: SentimentLabel,
        weighted_score: float,
        entries: Sequence[Tuple[ClassifierTag, ClassifierOutput, float]],
    ) -> float:
        if label == SentimentLabel.NEUTRAL:
            return weighted_score
        sign = 1.0 if label == SentimentLabel.POSITIVE else -1.0
        if weighted_score * sign > 0:
            return weighted_score
        backers = [e for e in entries if e[1].label == label]
        winner = self._most_confident(backers)
        logger.debug(
            "Blended score %.3f disagrees with label %s – using winner score %.3f",
            weighted_score, label.value, winner.score,
        )
        return winner.score

    @staticmethod
    def _merge_keywords(outs) -> List[str]:
        seen = set()
        merged: List[str] = []
        for out in outs:
            for kw in out.keywords:
                if kw not in seen:
                    seen.add(kw)
                    merged.append(kw)
        return merged

"""
Lexicon Scorer
===============
Deterministic rule-based polarity scoring for tweets.

Scoring Method:
- Each token is looked up (case-insensitive, diacritics stripped) in a
  signed polarity table for the working language, with English always
  consulted as a fallback since tweets freely mix languages
- A negation word within the lookback window inverts the term's sign
- An intensifier directly before a term scales its weight up,
  a diminisher scales it down
- Emoji glyphs add their own weight; runs of ``!`` amplify whatever
  direction the text already leans
- The raw sum is squashed into [-1, +1] with ``x / sqrt(x² + alpha)``
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple

from .models import ClassifierOutput, SentimentLabel
from .text_processing import exclamation_runs, is_emoji, normalize_term, tokenize


# ---------------------------------------------------------------------------
# Constants & Lexicon
# ---------------------------------------------------------------------------

_EN_TERMS: Dict[str, float] = {
    # Strong positive
    "love": 3.0, "loved": 3.0, "loving": 2.5, "adore": 3.0,
    "amazing": 3.0, "awesome": 3.0, "fantastic": 3.0, "excellent": 3.0,
    "outstanding": 3.0, "incredible": 3.0, "perfect": 3.0, "wonderful": 3.0,
    "brilliant": 3.0, "superb": 3.0, "phenomenal": 3.0, "spectacular": 3.0,
    "magnificent": 3.0, "best": 2.5, "delighted": 2.5, "thrilled": 2.5,
    # Moderate positive
    "great": 2.5, "good": 2.0, "nice": 1.8, "happy": 2.0, "beautiful": 2.2,
    "glad": 1.8, "enjoy": 2.0, "enjoyed": 2.0, "like": 1.0, "liked": 1.2,
    "pleased": 1.8, "impressive": 2.2, "recommend": 1.8, "recommended": 1.8,
    "fun": 1.5, "cool": 1.3, "helpful": 1.5, "reliable": 1.5, "fast": 0.8,
    "win": 1.5, "winning": 1.5, "thanks": 1.2, "thank": 1.2, "excited": 2.0,
    "satisfied": 1.8, "worth": 1.2, "smooth": 1.0, "solid": 1.0, "yay": 1.8,
    # Strong negative
    "hate": -3.0, "hated": -3.0, "terrible": -3.0, "horrible": -3.0,
    "awful": -3.0, "worst": -3.0, "disgusting": -3.0, "pathetic": -2.8,
    "useless": -2.5, "garbage": -2.8, "trash": -2.5, "scam": -3.0,
    "furious": -2.8, "disaster": -2.8, "nightmare": -2.8, "worthless": -2.8,
    # Moderate negative
    "bad": -2.0, "poor": -1.8, "sad": -1.8, "angry": -2.2, "annoying": -2.0,
    "annoyed": -2.0, "disappointed": -2.2, "disappointing": -2.2,
    "frustrating": -2.2, "frustrated": -2.2, "broken": -1.8, "fail": -2.0,
    "failed": -2.0, "fails": -2.0, "slow": -1.0, "boring": -1.5, "ugly": -2.0,
    "wrong": -1.5, "problem": -1.2, "problems": -1.2, "issue": -1.0,
    "issues": -1.0, "bug": -1.0, "buggy": -1.8, "crash": -1.8, "crashes": -1.8,
    "upset": -2.0, "dislike": -2.0, "sucks": -2.5, "meh": -0.8,
    "overpriced": -1.8, "refund": -1.0, "lag": -1.0, "laggy": -1.5,
}

_ES_TERMS: Dict[str, float] = {
    "encanta": 3.0, "amo": 3.0, "adoro": 3.0, "increíble": 3.0,
    "excelente": 3.0, "fantástico": 3.0, "maravilloso": 3.0, "perfecto": 3.0,
    "genial": 2.5, "bueno": 2.0, "buena": 2.0, "mejor": 2.0, "feliz": 2.0,
    "contento": 1.8, "hermoso": 2.2, "estupendo": 2.5, "gracias": 1.2,
    "odio": -3.0, "terrible": -3.0, "horrible": -3.0, "pésimo": -3.0,
    "pésima": -3.0, "peor": -2.5, "malo": -2.0, "mala": -2.0, "triste": -1.8,
    "decepcionante": -2.2, "asco": -2.8, "fatal": -2.5, "desastre": -2.8,
    "inútil": -2.5, "molesto": -2.0, "basura": -2.8,
}

_FR_TERMS: Dict[str, float] = {
    "adore": 3.0, "aime": 2.5, "génial": 2.8, "excellent": 3.0,
    "magnifique": 3.0, "parfait": 3.0, "merveilleux": 3.0, "super": 2.2,
    "bien": 1.5, "bon": 1.8, "bonne": 1.8, "heureux": 2.0, "content": 1.8,
    "merci": 1.2, "formidable": 2.8,
    "déteste": -3.0, "horrible": -3.0, "terrible": -3.0, "nul": -2.5,
    "nulle": -2.5, "mauvais": -2.0, "mauvaise": -2.0, "pire": -2.5,
    "triste": -1.8, "décevant": -2.2, "catastrophe": -2.8, "affreux": -2.8,
}

_DE_TERMS: Dict[str, float] = {
    "liebe": 3.0, "toll": 2.5, "super": 2.2, "wunderbar": 3.0,
    "ausgezeichnet": 3.0, "fantastisch": 3.0, "perfekt": 3.0, "gut": 2.0,
    "schön": 2.0, "glücklich": 2.0, "danke": 1.2, "großartig": 3.0,
    "hasse": -3.0, "schrecklich": -3.0, "furchtbar": -3.0, "schlecht": -2.0,
    "schlimmste": -3.0, "traurig": -1.8, "enttäuscht": -2.2,
    "enttäuschend": -2.2, "katastrophe": -2.8, "mies": -2.2, "nervig": -2.0,
}

EMOJI_SENTIMENT: Dict[str, float] = {
    "\U0001F600": 1.5, "\U0001F603": 1.5, "\U0001F604": 1.5, "\U0001F601": 1.5,
    "\U0001F60A": 1.3, "\U0001F60D": 2.0, "\U0001F970": 2.0, "\U0001F618": 1.5,
    "\U0001F602": 1.0, "\U0001F923": 1.0, "\U0001F44D": 1.2, "\U0001F44F": 1.2,
    "\U0001F64C": 1.3, "\U0001F389": 1.5, "\U0001F525": 1.0, "\U0001F4AF": 1.5,
    "❤": 2.0, "\U0001F496": 2.0, "\U0001F495": 1.8, "✨": 0.8,
    "✅": 1.0, "\U0001F680": 1.2, "\U0001F31F": 1.2,
    "\U0001F622": -1.5, "\U0001F62D": -1.5, "\U0001F61E": -1.3, "\U0001F614": -1.3,
    "\U0001F621": -2.0, "\U0001F620": -2.0, "\U0001F92C": -2.5, "\U0001F44E": -1.2,
    "\U0001F494": -2.0, "\U0001F612": -1.0, "\U0001F644": -1.0, "\U0001F92E": -2.0,
    "\U0001F4A9": -1.8, "❌": -1.0, "\U0001F624": -1.5,
}

_NEGATIONS: Dict[str, Tuple[str, ...]] = {
    "en": (
        "not", "no", "never", "none", "nothing", "nobody", "neither", "nor",
        "hardly", "barely", "rarely", "don't", "dont", "doesn't", "doesnt",
        "didn't", "didnt", "isn't", "isnt", "wasn't", "wasnt", "aren't",
        "won't", "wont", "can't", "cant", "couldn't", "shouldn't", "wouldn't",
        "ain't",
    ),
    "es": ("no", "nunca", "nada", "nadie", "ningún", "ninguna", "ninguno", "ni", "tampoco", "jamás"),
    "fr": ("ne", "pas", "non", "jamais", "rien", "personne", "aucun", "aucune", "ni"),
    "de": ("nicht", "kein", "keine", "keinen", "niemals", "nie", "nichts", "niemand", "weder"),
}

_INTENSIFIERS: Dict[str, Tuple[str, ...]] = {
    "en": (
        "very", "really", "so", "extremely", "absolutely", "incredibly",
        "totally", "completely", "super", "truly", "highly", "insanely",
        "ridiculously", "utterly", "most",
    ),
    "es": ("muy", "súper", "realmente", "totalmente", "absolutamente", "tan"),
    "fr": ("très", "vraiment", "tellement", "absolument", "trop", "si"),
    "de": ("sehr", "wirklich", "total", "absolut", "extrem", "so"),
}

_DIMINISHERS: Dict[str, Tuple[str, ...]] = {
    "en": ("slightly", "somewhat", "kinda", "kind", "sort", "barely", "little", "bit"),
    "es": ("poco", "algo"),
    "fr": ("peu", "assez"),
    "de": ("etwas", "bisschen", "kaum"),
}

_BASE_TERMS: Dict[str, Dict[str, float]] = {
    "en": _EN_TERMS, "es": _ES_TERMS, "fr": _FR_TERMS, "de": _DE_TERMS,
}


def _normalised_table(table: Dict[str, float]) -> Dict[str, float]:
    return {normalize_term(k): v for k, v in table.items()}


def _normalised_words(words: Tuple[str, ...]) -> FrozenSet[str]:
    return frozenset(normalize_term(w) for w in words)


# ---------------------------------------------------------------------------
# Per-language view
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LanguageLexicon:
    """Merged lookup tables for one working language (English as fallback)."""
    terms: Dict[str, float]
    negations: FrozenSet[str]
    intensifiers: FrozenSet[str]
    diminishers: FrozenSet[str]

    @classmethod
    def build(cls, language: str) -> "LanguageLexicon":
        terms = _normalised_table(_EN_TERMS)
        negations = set(_normalised_words(_NEGATIONS["en"]))
        intensifiers = set(_normalised_words(_INTENSIFIERS["en"]))
        diminishers = set(_normalised_words(_DIMINISHERS["en"]))
        if language != "en" and language in _BASE_TERMS:
            # Language-specific entries override the English fallback
            terms.update(_normalised_table(_BASE_TERMS[language]))
            negations |= _normalised_words(_NEGATIONS[language])
            intensifiers |= _normalised_words(_INTENSIFIERS[language])
            diminishers |= _normalised_words(_DIMINISHERS[language])
        return cls(
            terms=terms,
            negations=frozenset(negations),
            intensifiers=frozenset(intensifiers - negations),
            diminishers=frozenset(diminishers - negations),
        )


# ---------------------------------------------------------------------------
# Scorer
# ---------------------------------------------------------------------------

class LexiconScorer:
    """
    Rule-based polarity scorer.

    Pipeline:
    1. Tokenise (URLs / mentions removed, diacritics stripped)
    2. Term lookup with negation lookback and intensifier / diminisher scaling
    3. Emoji weights
    4. Exclamation amplification
    5. Squash to [-1, +1], threshold into a label, estimate confidence

    Usage::

        scorer = LexiconScorer()
        out = scorer.score("not bad at all 👍", "en")
    """

    def __init__(
        self,
        positive_threshold: float = 0.15,
        negative_threshold: float = -0.15,
        intensifier_multiplier: float = 1.5,
        diminisher_multiplier: float = 0.5,
        negation_window: int = 3,
        exclamation_weight: float = 0.3,
        max_exclamations: int = 4,
        normalization_alpha: float = 4.0,
        confidence_scale: float = 1.2,
        neutral_confidence: float = 0.5,
    ):
        if positive_threshold < 0 or negative_threshold > 0:
            raise ValueError("thresholds must straddle zero")
        if intensifier_multiplier <= 1.0:
            raise ValueError("intensifier_multiplier must be > 1")
        self.positive_threshold = positive_threshold
        self.negative_threshold = negative_threshold
        self.intensifier_multiplier = intensifier_multiplier
        self.diminisher_multiplier = diminisher_multiplier
        self.negation_window = negation_window
        self.exclamation_weight = exclamation_weight
        self.max_exclamations = max_exclamations
        self.normalization_alpha = normalization_alpha
        self.confidence_scale = confidence_scale
        self.neutral_confidence = neutral_confidence
        self._lexicons: Dict[str, LanguageLexicon] = {}
        self._emoji = dict(EMOJI_SENTIMENT)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def score(self, text: str, language: str = "en") -> ClassifierOutput:
        """Score *text* in *language*; never raises for string input."""
        if not text or not text.strip():
            return ClassifierOutput(
                label=SentimentLabel.NEUTRAL, score=0.0,
                confidence=self.neutral_confidence,
            )

        tokens = tokenize(text)
        raw, keywords = self._score_tokens(tokens, self._lexicon(language))
        raw += self._exclamation_boost(text, raw)

        score = self._squash(raw)
        label = self._label(score)
        return ClassifierOutput(
            label=label,
            score=round(score, 6),
            confidence=round(self._confidence(score, label), 6),
            keywords=keywords,
        )

    def predict(self, text: str, language: Optional[str] = None) -> ClassifierOutput:
        return self.score(text, language or "en")

    def polarity(self, term: str, language: str = "en") -> Optional[float]:
        """Table weight of a single term, or ``None`` if unknown."""
        key = normalize_term(term)
        if key in self._emoji:
            return self._emoji[key]
        return self._lexicon(language).terms.get(key)

    # ------------------------------------------------------------------
    # Internal – scoring
    # ------------------------------------------------------------------

    def _lexicon(self, language: str) -> LanguageLexicon:
        # Codes without their own tables share the English view
        if language not in _BASE_TERMS:
            language = "en"
        lex = self._lexicons.get(language)
        if lex is None:
            lex = LanguageLexicon.build(language)
            self._lexicons[language] = lex
        return lex

    def _score_tokens(
        self, tokens: List[str], lex: LanguageLexicon,
    ) -> Tuple[float, List[str]]:
        total = 0.0
        keywords: List[str] = []

        for i, token in enumerate(tokens):
            if is_emoji(token):
                weight = self._emoji.get(token)
                if weight is None:
                    continue
                total += weight
                keywords.append(token)
                continue

            weight = lex.terms.get(token)
            if weight is None or token in lex.negations:
                continue

            prev = tokens[i - 1] if i > 0 else None
            if prev in lex.intensifiers:
                weight *= self.intensifier_multiplier
            elif prev in lex.diminishers:
                weight *= self.diminisher_multiplier

            if self._is_negated(tokens, i, lex):
                weight = -weight

            total += weight
            keywords.append(token)

        return total, keywords

    def _is_negated(self, tokens: List[str], index: int, lex: LanguageLexicon) -> bool:
        start = max(0, index - self.negation_window)
        for tok in tokens[start:index]:
            if tok in lex.negations or tok.endswith("n't"):
                return True
        return False

    def _exclamation_boost(self, text: str, raw: float) -> float:
        """``!`` adds weight in the direction the text already leans."""
        if raw == 0:
            return 0.0
        count = min(sum(exclamation_runs(text)), self.max_exclamations)
        return math.copysign(count * self.exclamation_weight, raw)

    def _squash(self, raw: float) -> float:
        if raw == 0:
            return 0.0
        value = raw / math.sqrt(raw * raw + self.normalization_alpha)
        return max(-1.0, min(1.0, value))

    # ------------------------------------------------------------------
    # Internal – classification
    # ------------------------------------------------------------------

    def _label(self, score: float) -> SentimentLabel:
        if score > self.positive_threshold:
            return SentimentLabel.POSITIVE
        if score < self.negative_threshold:
            return SentimentLabel.NEGATIVE
        return SentimentLabel.NEUTRAL

    def _confidence(self, score: float, label: SentimentLabel) -> float:
        """
        Polar labels: ``min(1, |score| × confidence_scale)``.
        Neutral carries the fixed neutral confidence (the empty-text value).
        """
        if label == SentimentLabel.NEUTRAL:
            return self.neutral_confidence
        return min(1.0, abs(score) * self.confidence_scale)


def negation_words(language: str) -> FrozenSet[str]:
    """Negation cues for *language* plus the English fallback set."""
    words = set(_normalised_words(_NEGATIONS["en"]))
    if language in _NEGATIONS and language != "en":
        words |= _normalised_words(_NEGATIONS[language])
    return frozenset(words)

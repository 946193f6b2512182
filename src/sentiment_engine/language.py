"""
Language Resolver
==================
Decides the working language of a request.

An explicitly requested, supported code always wins.  Otherwise the
text is scored against per-language function-word and character
patterns and the best-scoring language is used; no hits (or a tie
between the leaders) fall back to the configured default.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES: Tuple[str, ...] = ("en", "es", "fr", "de")
AUTO = "auto"

_LANGUAGE_PATTERNS: Dict[str, List[re.Pattern]] = {
    "en": [
        re.compile(r"\b(the|and|or|but|in|on|at|to|for|of|with|by|is|this|it's|i'm|you|my)\b"),
    ],
    "es": [
        re.compile(
            r"\b(que|qué|el|la|los|las|es|son|está|están|muy|pero|con|por|para|"
            r"desde|hasta|como|cuando|donde|dónde|esto|este|esta|una|del|me)\b"
        ),
        re.compile(r"ñ"),
        re.compile(r"[¿¡]"),
    ],
    "fr": [
        re.compile(
            r"\b(le|les|un|une|des|du|ce|cette|ces|est|sont|était|etait|ont|"
            r"et|ou|mais|avec|pour|dans|sur|chez|ne|pas|très|tres|aussi|jamais|"
            r"toujours|c'est|je|j'adore|je suis)\b"
        ),
        re.compile(r"[çèêàùôîïë]"),
    ],
    "de": [
        re.compile(
            r"\b(der|die|das|den|dem|des|ein|eine|einen|ist|sind|war|hat|haben|"
            r"wird|und|oder|aber|wenn|weil|dass|mit|von|zu|für|auf|nicht|kein|"
            r"keine|sehr|auch|nur|noch|schon|immer|nie|ich|es)\b"
        ),
        re.compile(r"[ßäöü]"),
    ],
}


class LanguageResolver:
    """
    Usage::

        resolver = LanguageResolver(default_language="en")
        resolver.resolve("Me encanta este producto")   # → "es"
        resolver.resolve("whatever", requested="de")   # → "de"
    """

    def __init__(self, default_language: str = "en", auto_detect: bool = True):
        if default_language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported default language: {default_language}")
        self.default_language = default_language
        self.auto_detect = auto_detect

    def resolve(self, text: str, requested: Optional[str] = None) -> str:
        """Return the language code used for the rest of the pipeline."""
        if requested:
            code = requested.strip().lower()
            if code in SUPPORTED_LANGUAGES:
                return code
            if code != AUTO:
                logger.debug("Unsupported language %r requested – detecting instead", requested)
        if not self.auto_detect:
            return self.default_language
        return self.detect(text)

    def detect(self, text: str) -> str:
        if not text or not text.strip():
            return self.default_language

        scores = self.score(text)
        ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
        best_lang, best_score = ranked[0]
        if best_score == 0:
            return self.default_language
        if len(ranked) > 1 and ranked[1][1] == best_score:
            # A tie that includes the default resolves to the default
            tied = {lang for lang, s in ranked if s == best_score}
            return self.default_language if self.default_language in tied else best_lang
        return best_lang

    @staticmethod
    def score(text: str) -> Dict[str, int]:
        """Pattern hit count per supported language."""
        lowered = unicodedata.normalize("NFKC", text).lower().replace("’", "'")
        return {
            lang: sum(len(p.findall(lowered)) for p in patterns)
            for lang, patterns in _LANGUAGE_PATTERNS.items()
        }

"""
Unit Tests – Text Processing & Language Resolver
==================================================
"""

from __future__ import annotations

import pytest

from src.sentiment_engine.language import LanguageResolver
from src.sentiment_engine.text_processing import (
    canonical_text,
    exclamation_runs,
    extract_emojis,
    is_emoji,
    normalize_term,
    tokenize,
)


class TestTextProcessing:

    def test_urls_mentions_removed_hashtags_kept(self):
        assert tokenize("Check https://x.co/abc @bob #Awesome day") == ["check", "awesome", "day"]

    def test_diacritics_stripped(self):
        assert tokenize("Increíble!") == ["increible"]

    def test_curly_apostrophe_folded(self):
        assert tokenize("don’t") == ["don't"]

    def test_empty(self):
        assert tokenize("") == []

    def test_emoji_tokens_in_order(self):
        assert tokenize("ok 😊 fine 👍") == ["ok", "😊", "fine", "👍"]

    def test_extract_emojis(self):
        assert extract_emojis("hi 😊👍") == ["😊", "👍"]

    def test_is_emoji(self):
        assert is_emoji("😊")
        assert not is_emoji("smile")

    def test_exclamation_runs(self):
        assert exclamation_runs("wow!!! ok!") == [3, 1]
        assert exclamation_runs("calm") == []

    def test_canonical_text_collapses_whitespace(self):
        assert canonical_text("  Hello \n  WORLD ") == "hello world"

    def test_normalize_term(self):
        assert normalize_term("Schön") == "schon"


class TestLanguageResolver:

    @pytest.fixture(autouse=True)
    def _setup(self):
        self.resolver = LanguageResolver(default_language="en")

    def test_requested_language_wins(self):
        assert self.resolver.resolve("This is English", requested="de") == "de"

    def test_requested_is_case_insensitive(self):
        assert self.resolver.resolve("whatever", requested=" FR ") == "fr"

    def test_unsupported_request_falls_back_to_detection(self):
        assert self.resolver.resolve("Das ist wirklich schön und ich bin glücklich", requested="xx") == "de"

    def test_auto_request_detects(self):
        assert self.resolver.resolve("Me encanta este producto, es increíble", requested="auto") == "es"

    def test_empty_text_uses_default(self):
        assert self.resolver.resolve("") == "en"

    def test_detect_english(self):
        assert self.resolver.detect("This is the best day") == "en"

    def test_detect_french(self):
        assert self.resolver.detect("Je suis très content, c'est magnifique") == "fr"

    def test_detect_german(self):
        assert self.resolver.detect("Das ist wirklich schön und ich bin glücklich") == "de"

    def test_no_hits_uses_default(self):
        resolver = LanguageResolver(default_language="es")
        assert resolver.detect("zzz qqq") == "es"

    def test_tie_with_default_resolves_to_default(self):
        # "the" scores English, "la" scores Spanish
        assert self.resolver.detect("the la") == "en"

    def test_auto_detect_disabled(self):
        resolver = LanguageResolver(default_language="en", auto_detect=False)
        assert resolver.resolve("Das ist wirklich schön") == "en"
        assert resolver.resolve("Das ist wirklich schön", requested="de") == "de"

    def test_unsupported_default_rejected(self):
        with pytest.raises(ValueError):
            LanguageResolver(default_language="xx")

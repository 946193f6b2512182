"""
Text preprocessing shared by the lexicon scorer, the Naive Bayes
classifier and the cache fingerprint.

Tweets are cleaned the same way everywhere:
  1. URLs and @mentions removed, hashtag text kept without ``#``
  2. NFKC normalisation, curly apostrophes folded to ``'``, lowercased
  3. Diacritics stripped for lookups (``increíble`` → ``increible``)
  4. Word tokens and emoji glyphs extracted in reading order
"""

from __future__ import annotations

import re
import unicodedata
from typing import List

_URL_PATTERN = re.compile(r"https?://\S+|www\.\S+", re.IGNORECASE)
_MENTION_PATTERN = re.compile(r"@\w+")
_HASHTAG_PATTERN = re.compile(r"#(\w+)")
_WHITESPACE_PATTERN = re.compile(r"\s+")

_EMOJI_CLASS = (
    "["
    "\U0001F300-\U0001FAFF"  # pictographs, emoticons, transport, supplemental
    "\U0001F1E6-\U0001F1FF"  # flags
    "\u2600-\u27BF"        # misc symbols & dingbats
    "\u2B00-\u2BFF"        # arrows & stars
    "]"
)
_EMOJI_PATTERN = re.compile(_EMOJI_CLASS)
_TOKEN_PATTERN = re.compile(r"[^\W_]+(?:'[^\W_]+)*|" + _EMOJI_CLASS)
_EXCLAMATION_PATTERN = re.compile(r"!+")


def strip_diacritics(text: str) -> str:
    """Remove combining marks after canonical decomposition."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def canonical_text(text: str) -> str:
    """NFKC, lowercase, folded apostrophes and collapsed whitespace."""
    text = unicodedata.normalize("NFKC", text)
    text = text.replace("’", "'").replace("‘", "'")
    return _WHITESPACE_PATTERN.sub(" ", text.lower()).strip()


def normalize_term(term: str) -> str:
    """Key form used for every lexicon / vocabulary lookup."""
    return strip_diacritics(canonical_text(term))


def clean_tweet(text: str) -> str:
    """Drop URLs and mentions, unwrap hashtags."""
    text = _URL_PATTERN.sub(" ", text)
    text = _MENTION_PATTERN.sub(" ", text)
    return _HASHTAG_PATTERN.sub(r"\1", text)


def tokenize(text: str) -> List[str]:
    """Word and emoji tokens of *text* in normalised key form."""
    if not text:
        return []
    return _TOKEN_PATTERN.findall(normalize_term(clean_tweet(text)))


def extract_emojis(text: str) -> List[str]:
    return _EMOJI_PATTERN.findall(text or "")


def is_emoji(token: str) -> bool:
    return bool(_EMOJI_PATTERN.fullmatch(token))


def exclamation_runs(text: str) -> List[int]:
    """Length of every run of ``!`` in *text*."""
    return [len(m.group(0)) for m in _EXCLAMATION_PATTERN.finditer(text or "")]

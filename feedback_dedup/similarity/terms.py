"""Key-term extraction and the cheap textual heuristics built on it."""
from __future__ import annotations

import re
from typing import FrozenSet, List, Optional, Tuple

STOP_WORDS: FrozenSet[str] = frozenset({
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "with", "by", "about", "like", "through", "over", "before", "between",
    "after", "since", "without", "under", "within", "along", "following",
    "across", "behind", "beyond", "plus", "except", "up", "out", "around",
    "down", "off", "above", "near", "is", "are", "was", "were", "be", "been",
    "being", "have", "has", "had", "do", "does", "did", "will", "would",
    "shall", "should", "may", "might", "must", "can", "could", "of", "that",
    "this", "these", "those", "it", "its", "it's", "they", "them", "their",
    "theirs", "we", "us", "our", "ours", "you", "your", "yours", "he", "him",
    "his", "she", "her", "hers",
})

# Phrases naming a product concept; two items mentioning the same one are
# treated as requests for the same thing.  Order matters: first hit wins.
FEATURE_TERMS: Tuple[str, ...] = (
    "dark mode",
    "light mode",
    "theme",
    "login",
    "sign in",
    "authentication",
    "search",
    "filter",
    "sort",
    "export",
    "import",
    "download",
    "notification",
    "alert",
    "message",
    "profile",
    "account",
    "user",
    "dashboard",
    "analytics",
    "report",
)

_RE_TERM_PUNCT = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()]")


def extract_key_terms(text: str) -> List[str]:
    """Content words of ``text``: no stop words, nothing of 2 chars or fewer.

    Order and repeats are preserved.  Punctuation is removed after the
    length and stop-word filters, and tokens left empty are dropped.
    """
    terms = []
    for word in text.lower().split():
        if len(word) <= 2 or word in STOP_WORDS:
            continue
        term = _RE_TERM_PUNCT.sub("", word)
        if term:
            terms.append(term)
    return terms


def share_key_terms(a: str, b: str, min_shared: int = 1) -> bool:
    """True when at least ``min_shared`` key terms of ``a`` also occur in ``b``."""
    terms2 = set(extract_key_terms(b))
    shared = [term for term in extract_key_terms(a) if term in terms2]
    return len(shared) >= min_shared


def contains_substring(a: str, b: str) -> bool:
    s1 = a.lower()
    s2 = b.lower()
    return s2 in s1 or s1 in s2


def _common_prefix_length(s1: str, s2: str) -> int:
    n = 0
    for c1, c2 in zip(s1, s2):
        if c1 != c2:
            break
        n += 1
    return n


def has_common_phrases(a: str, b: str, min_length: int = 5) -> bool:
    """True if the texts share a case-insensitive prefix or suffix of ``min_length``+ chars."""
    s1 = a.lower()
    s2 = b.lower()

    if _common_prefix_length(s1, s2) >= min_length:
        return True
    return _common_prefix_length(s1[::-1], s2[::-1]) >= min_length


def find_shared_feature_term(text1: str, text2: str) -> Optional[str]:
    """Return the first ``FEATURE_TERMS`` phrase present in both texts, if any."""
    t1 = text1.lower()
    t2 = text2.lower()
    for term in FEATURE_TERMS:
        if term in t1 and term in t2:
            return term
    return None

"""Near-duplicate detection for proposed questions.

The model sees the full history but still tends to rephrase questions it has
already asked. Questions are compared as token sets with the game-framing
words removed, plus a plain containment check on the normalized text.
"""

from __future__ import annotations

import re
from typing import FrozenSet, Iterable, List, Set

from akinator.core.schemas import HistoryEntry


STOP_WORDS: FrozenSet[str] = frozenset(
    (
        "the a an is are was were do does did has have had of to in on for with without "
        "about from at by as be been being character person human someone somebody male "
        "female man woman guy girl boy child adult old young age big small same similar "
        "repeat repeated repeating any"
    ).split()
)

REPEAT_THRESHOLD = 0.7

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    lowered = str(text).lower()
    return _WHITESPACE.sub(" ", _NON_ALNUM.sub(" ", lowered)).strip()


def tokenize(text: str) -> List[str]:
    return [word for word in normalize(text).split(" ") if word and word not in STOP_WORDS]


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    left: Set[str] = set(a)
    right: Set[str] = set(b)
    union = len(left | right)
    if not union:
        return 0.0
    return len(left & right) / union


def _contains_either_way(a: str, b: str) -> bool:
    if not a or not b:
        # "" is a substring of everything; only treat two empties as equal
        return a == b
    return a in b or b in a


def is_repeat(question: str, history: Iterable[HistoryEntry]) -> bool:
    candidate_tokens = tokenize(question)
    candidate = normalize(question)
    for entry in history:
        if jaccard(candidate_tokens, tokenize(entry.q)) >= REPEAT_THRESHOLD:
            return True
        if _contains_either_way(candidate, normalize(entry.q)):
            return True
    return False

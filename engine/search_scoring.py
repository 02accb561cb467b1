import logging
import re
from collections import Counter

from config.settings import CONFIDENCE_FLOOR
from metadata.types import Matched, NoMatch

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def _squash(value):
    return _WHITESPACE_RE.sub("", str(value or "").lower())


def _bigrams(text):
    return Counter(text[i:i + 2] for i in range(len(text) - 1))


def title_similarity(a, b):
    """Return the Dice coefficient of the character bigrams of ``a`` and ``b``.

    Comparison ignores case and whitespace. The result is symmetric and lies in
    ``[0, 1]``; an empty side scores 0.0.
    """
    first = _squash(a)
    second = _squash(b)
    if not first or not second:
        return 0.0
    if first == second:
        return 1.0
    if len(first) < 2 or len(second) < 2:
        return 0.0
    first_bigrams = _bigrams(first)
    second_bigrams = _bigrams(second)
    intersection = sum((first_bigrams & second_bigrams).values())
    return (2.0 * intersection) / (len(first) + len(second) - 2)


def dedupe_candidates(candidates):
    """Drop candidates whose name repeats case-insensitively, keeping first-seen order."""
    seen = set()
    unique = []
    for candidate in candidates or []:
        key = str(candidate.name or "").lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def select_best_match(candidates, target_title, *, confidence_floor=CONFIDENCE_FLOOR, log=None):
    """Pick the candidate whose name best matches ``target_title``.

    Ties keep the earlier candidate. Returns ``Matched`` when the best score
    reaches ``confidence_floor``, otherwise ``NoMatch`` carrying the best score.
    """
    log = log or logger
    unique = dedupe_candidates(candidates)
    if not unique:
        return NoMatch(best_score=0.0, reason="no_results")

    best = None
    best_score = 0.0
    for candidate in unique:
        score = title_similarity(candidate.name, target_title)
        log.debug('[MATCH] comparing "%s" with "%s" score=%.2f', candidate.name, target_title, score)
        if score > best_score:
            best_score = score
            best = candidate

    if best is not None and best_score >= confidence_floor:
        return Matched(candidate=best, score=best_score)
    return NoMatch(best_score=best_score, reason="low_confidence")

"""
Fuzzy Matching

Small skim/fzf-style subsequence scorer used to filter folder names as the
user types.
"""

from typing import List, Optional, Sequence

SCORE_MATCH = 16
BONUS_FIRST_CHAR = 8
BONUS_BOUNDARY = 8
BONUS_CAMEL = 6
BONUS_CONSECUTIVE = 6
PENALTY_GAP_START = 3
PENALTY_GAP_EXTEND = 1

SEPARATORS = set(" _-./\\:[]()")


def _char_bonus(text: str, index: int) -> int:
    if index == 0:
        return BONUS_FIRST_CHAR
    prev, cur = text[index - 1], text[index]
    if prev in SEPARATORS:
        return BONUS_BOUNDARY
    if prev.islower() and cur.isupper():
        return BONUS_CAMEL
    if not prev.isdigit() and cur.isdigit():
        return BONUS_CAMEL
    return 0


def fuzzy_score(text: str, query: str) -> Optional[int]:
    """
    Score how well query matches text as an ordered subsequence.

    Matching is smart-case: case-insensitive unless the query contains an
    uppercase letter.

    Returns:
        Higher is better; None when query is not a subsequence of text
    """
    if not query:
        return 0

    case_sensitive = any(c.isupper() for c in query)
    haystack = text if case_sensitive else text.lower()
    needle = query if case_sensitive else query.lower()

    n, m = len(haystack), len(needle)
    if m > n:
        return None

    # best[j]: best score with the current query char matched at text index j
    best: List[Optional[int]] = [None] * n
    for j in range(n):
        if haystack[j] == needle[0]:
            best[j] = SCORE_MATCH + _char_bonus(text, j)

    for i in range(1, m):
        current: List[Optional[int]] = [None] * n
        for j in range(i, n):
            if haystack[j] != needle[i]:
                continue
            top = None
            for k in range(i - 1, j):
                if best[k] is None:
                    continue
                gap = j - k - 1
                if gap == 0:
                    candidate = best[k] + BONUS_CONSECUTIVE
                else:
                    candidate = best[k] - PENALTY_GAP_START - PENALTY_GAP_EXTEND * (gap - 1)
                if top is None or candidate > top:
                    top = candidate
            if top is not None:
                current[j] = top + SCORE_MATCH + _char_bonus(text, j)
        best = current

    scores = [s for s in best if s is not None]
    return max(scores) if scores else None


def fuzzy_filter(names: Sequence[str], query: str) -> List[str]:
    """
    Names matching query, best match first.

    An empty query returns every name in its original order; equal scores
    keep their original relative order.
    """
    if not query:
        return list(names)

    scored = []
    for name in names:
        score = fuzzy_score(name, query)
        if score is not None:
            scored.append((score, name))

    scored.sort(key=lambda item: item[0], reverse=True)
    return [name for _, name in scored]

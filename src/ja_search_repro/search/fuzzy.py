"""Edit-distance term expansion for ``term~N`` query clauses.

A clause with an edit distance matches every vocabulary term within that many
single-character insertions, deletions or substitutions.
"""

from __future__ import annotations

from collections.abc import Iterable


def levenshtein_distance(s1: str, s2: str, max_distance: int | None = None) -> int:
    """Calculate the Levenshtein (edit) distance between two strings.

    With ``max_distance`` set, returns ``max_distance + 1`` as soon as the
    distance is known to exceed it.

    Examples:
        >>> levenshtein_distance("東京都", "東京")
        1
        >>> levenshtein_distance("kitten", "sitting")
        3
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)
    if max_distance is not None and n - m > max_distance:
        return max_distance + 1

    prev_row = list(range(m + 1))
    curr_row = [0] * (m + 1)

    for j in range(1, n + 1):
        curr_row[0] = j
        row_min = j
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            curr_row[i] = min(
                prev_row[i] + 1,  # deletion
                curr_row[i - 1] + 1,  # insertion
                prev_row[i - 1] + cost,  # substitution
            )
            row_min = min(row_min, curr_row[i])

        if max_distance is not None and row_min > max_distance:
            return max_distance + 1

        prev_row, curr_row = curr_row, prev_row

    return prev_row[m]


def expand_edit_distance(term: str, vocabulary: Iterable[str], max_distance: int) -> list[str]:
    """Return vocabulary terms within ``max_distance`` edits of ``term``.

    Closest terms come first; ties keep alphabetical order.
    """
    if not term or max_distance < 0:
        return []

    matches: list[tuple[int, str]] = []
    for candidate in vocabulary:
        if abs(len(candidate) - len(term)) > max_distance:
            continue
        distance = levenshtein_distance(term, candidate, max_distance)
        if distance <= max_distance:
            matches.append((distance, candidate))

    matches.sort()
    return [candidate for _distance, candidate in matches]

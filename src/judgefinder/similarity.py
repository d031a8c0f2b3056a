"""
Edit-distance similarity for short strings (identifiers, names).
"""

from __future__ import annotations


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit costs for insert, delete and substitute."""
    rows = len(a) + 1
    cols = len(b) + 1
    table = [[0] * cols for _ in range(rows)]

    for i in range(rows):
        table[i][0] = i
    for j in range(cols):
        table[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            table[i][j] = min(
                table[i - 1][j] + 1,
                table[i][j - 1] + 1,
                table[i - 1][j - 1] + cost,
            )

    return table[-1][-1]


def similarity(a: str, b: str) -> float:
    """
    Normalized similarity in [0, 1].

    ``(max_len - edit_distance) / max_len``; two empty strings score 1.0.
    Symmetric, and 1.0 exactly when ``a == b``.
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - edit_distance(a, b)) / longest

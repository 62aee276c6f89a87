"""
Edit-distance matching for "did you mean" diagnostics.

Only the unknown-command diagnostic uses these helpers; flags and values are never
guessed.
"""

DEFAULT_THRESHOLD = 2


def edit_distance(a, b, /):
    """
    Levenshtein distance between two strings.

    Unit cost for insertion, deletion and substitution. The full (len(a)+1) x (len(b)+1)
    table is built, so time and space are both O(len(a) * len(b)).

        >>> edit_distance("kitten", "sitting")
        3
    """
    table = [[0] * (len(b) + 1) for _ in range(len(a) + 1)]
    for row in range(len(a) + 1):
        table[row][0] = row
    for column in range(len(b) + 1):
        table[0][column] = column

    for row in range(1, len(a) + 1):
        for column in range(1, len(b) + 1):
            cost = 0 if a[row - 1] == b[column - 1] else 1
            table[row][column] = min(
                table[row - 1][column] + 1,  # deletion
                table[row][column - 1] + 1,  # insertion
                table[row - 1][column - 1] + cost,  # substitution
            )

    return table[len(a)][len(b)]


def find_close(candidates, query, /, threshold=DEFAULT_THRESHOLD):
    """
    Every candidate within threshold edits of query, in input order.

        >>> find_close(["baz", "boz"], "bax", 1)
        ['baz']
    """
    if threshold < 0:
        raise ValueError("find_close() threshold must be non-negative")
    return [candidate for candidate in candidates if edit_distance(candidate, query) <= threshold]


__all__ = (
    "DEFAULT_THRESHOLD",
    "edit_distance",
    "find_close",
)

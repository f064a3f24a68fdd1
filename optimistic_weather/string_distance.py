# ABOUTME: Levenshtein edit distance used as a fuzzy ranking signal for place names.
# ABOUTME: Case-insensitive; insertion, deletion and substitution each cost 1.


def distance(a: str, b: str) -> int:
    """Return the edit distance between two strings, ignoring case."""
    a = a.casefold()
    b = b.casefold()
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]

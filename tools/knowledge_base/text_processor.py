"""
Text Processing Helpers
Normalization, tokenization and token-set similarity for question lookup
"""

import string

# Same set as the C-locale ispunct(): ASCII punctuation only
_PUNCTUATION = frozenset(string.punctuation)


def normalize(text: str) -> str:
    """
    Canonicalize a question for use as a lookup key.

    Removes ASCII punctuation and lower-cases letters. Whitespace and every
    other character stay where they were.
    """
    return "".join(ch.lower() for ch in text if ch not in _PUNCTUATION)


def tokenize(text: str) -> list[str]:
    """Split on whitespace, then normalize each token (a punctuation-only token becomes "")"""
    return [normalize(raw) for raw in text.split()]


def similarity(first: str, second: str) -> float:
    """
    Jaccard index over the distinct tokens of both strings.

    Returns:
        |intersection| / |union| in [0.0, 1.0]; 0.0 when neither side has tokens
    """
    tokens1 = set(tokenize(first))
    tokens2 = set(tokenize(second))

    union = tokens1 | tokens2
    if not union:
        return 0.0

    return len(tokens1 & tokens2) / len(union)

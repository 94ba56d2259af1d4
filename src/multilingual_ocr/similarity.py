"""Text similarity used to detect duplicate detections across language groups."""

import Levenshtein

# Score given when one normalized text contains the other.
SUBSTRING_SIMILARITY = 0.9


def text_similarity(text1: str, text2: str) -> float:
    """Similarity ratio between two recognized texts, in [0, 1].

    Exact (case-insensitive) matches score 1.0 and containment scores 0.9.
    Anything else is 1 - distance / max_len over the trimmed, lowercased texts.

    Examples:
        >>> text_similarity("Hello", "hello")
        1.0
        >>> text_similarity("Hello World", "world")
        0.9
        >>> round(text_similarity("kitten", "sitting"), 3)
        0.571
    """
    if not text1 and not text2:
        return 1.0

    if not text1 or not text2:
        return 0.0

    if text1.lower() == text2.lower():
        return 1.0

    normalized1 = text1.strip().lower()
    normalized2 = text2.strip().lower()

    if normalized1 in normalized2 or normalized2 in normalized1:
        return SUBSTRING_SIMILARITY

    max_len = max(len(normalized1), len(normalized2))
    if max_len == 0:
        return 1.0

    distance = Levenshtein.distance(normalized1, normalized2)
    return 1.0 - (distance / max_len)

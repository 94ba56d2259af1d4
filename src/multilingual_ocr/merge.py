"""Merging of OCR lines produced by several language groups.

Different groups often detect the same text span. Duplicates are found in two
tiers:
1. Fast path: the box rounded to one decimal matches a surviving line's box
2. Fallback: IoU > 0.7 and text similarity > 0.8 with any surviving line

The higher-confidence line of a duplicate pair survives; on equal confidence
the line seen first is kept. Survivors are then put in reading order by
10-unit rows, left to right within a row.

The two tiers can disagree for boxes sitting on a rounding boundary. That
imprecision is accepted and kept as is. The fallback scan also stops at the
first matching survivor, so a line that replaces one survivor is not compared
against later survivors; in that case a second merge pass can remove one more
line.
"""

from collections.abc import Iterable
from typing import Final

from .models import BoundingBox, OCRLine
from .similarity import text_similarity

BOX_KEY_DECIMALS: Final[int] = 1
DUPLICATE_IOU_THRESHOLD: Final[float] = 0.7
DUPLICATE_TEXT_SIMILARITY_THRESHOLD: Final[float] = 0.8
ROW_BAND_HEIGHT: Final[float] = 10.0

BoxKey = tuple[float, float, float, float]


def box_key(box: BoundingBox) -> BoxKey:
    """Quantized box coordinates used for exact duplicate lookup."""
    return (
        round(box.min_x, BOX_KEY_DECIMALS),
        round(box.min_y, BOX_KEY_DECIMALS),
        round(box.max_x, BOX_KEY_DECIMALS),
        round(box.max_y, BOX_KEY_DECIMALS),
    )


def reading_order_key(line: OCRLine) -> tuple[float, float]:
    """Sort key: row band from min_y, then min_x.

    Rounding is half-to-even, so min_y=5 lands in band 0 and min_y=15 in band 20.
    """
    box = line.bounding_box
    return (round(box.min_y / ROW_BAND_HEIGHT) * ROW_BAND_HEIGHT, box.min_x)


def is_duplicate(line: OCRLine, other: OCRLine) -> bool:
    """Whether two lines overlap and read alike enough to be the same span."""
    if line.bounding_box.iou(other.bounding_box) <= DUPLICATE_IOU_THRESHOLD:
        return False
    return text_similarity(line.text, other.text) > DUPLICATE_TEXT_SIMILARITY_THRESHOLD


def merge_lines(lines: Iterable[OCRLine]) -> list[OCRLine]:
    """Drop blank lines, de-duplicate across groups and sort into reading order.

    Args:
        lines: Lines from all groups, in group-plan order

    Returns:
        Surviving lines in reading order
    """
    survivors: list[OCRLine] = []
    index_by_key: dict[BoxKey, int] = {}

    for line in lines:
        if not line.text.strip():
            continue

        key = box_key(line.bounding_box)

        if key in index_by_key:
            index = index_by_key[key]
            if line.confidence > survivors[index].confidence:
                survivors[index] = line
            continue

        for index, existing in enumerate(survivors):
            if is_duplicate(line, existing):
                if line.confidence > existing.confidence:
                    old_key = box_key(existing.bounding_box)
                    if index_by_key.get(old_key) == index:
                        del index_by_key[old_key]
                    survivors[index] = line
                    index_by_key.setdefault(key, index)
                break
        else:
            index_by_key[key] = len(survivors)
            survivors.append(line)

    return sorted(survivors, key=reading_order_key)

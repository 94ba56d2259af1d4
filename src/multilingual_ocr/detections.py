"""Conversion of raw engine output into structured OCR lines.

Engines return loosely typed `(polygon, text, confidence)` tuples where numbers
may be numpy scalars, ints or strings. They are converted to `RawDetection`
as soon as they are received so nothing downstream depends on the engine's
native types.
"""

import logging
import numbers
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from .exceptions import ConfidenceCoercionError
from .models import OCRLine, Point

logger = logging.getLogger(__name__)


def _exact_float(value: Any) -> float:
    if type(value) is not float:
        raise TypeError(f"not a float: {type(value).__name__}")
    return value


def _real_number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise TypeError(f"not a real number: {type(value).__name__}")
    return float(value)


def _float_protocol(value: Any) -> float:
    # Covers 0-d tensors and other objects implementing __float__
    if isinstance(value, (str, bytes, bool)) or not hasattr(value, "__float__"):
        raise TypeError(f"no __float__: {type(value).__name__}")
    return float(value)


def _parsed_string(value: Any) -> float:
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    return float(str(value).strip())


# Ordered coercion attempts; the first one that succeeds wins
COERCIONS: tuple[tuple[str, Callable[[Any], float]], ...] = (
    ("float", _exact_float),
    ("real", _real_number),
    ("__float__", _float_protocol),
    ("string", _parsed_string),
)


def coerce_float(value: Any) -> float:
    """Convert an engine-reported number to a Python float.

    Raises:
        ConfidenceCoercionError: If no coercion in COERCIONS succeeds
    """
    for name, coerce in COERCIONS:
        try:
            result = coerce(value)
        except (TypeError, ValueError, OverflowError, UnicodeDecodeError):
            continue

        if name == "string":
            logger.warning(f"Parsed engine value {value!r} from its string form")
        elif name != "float":
            logger.debug(f"Coerced engine value of type {type(value).__name__} via {name}")
        return result

    raise ConfidenceCoercionError(
        f"Cannot convert engine value {value!r} ({type(value).__name__}) to float"
    )


@dataclass(frozen=True)
class RawDetection:
    """One engine detection with native types already stripped."""

    polygon: tuple[Point, ...]
    text: str
    confidence: float

    @classmethod
    def from_engine(cls, item: Sequence[Any]) -> "RawDetection":
        """Build from an engine tuple `(polygon, text, confidence)`."""
        if len(item) < 3:
            raise ValueError(f"Expected (polygon, text, confidence), got {len(item)} elements")

        raw_polygon, raw_text, raw_confidence = item[0], item[1], item[2]

        polygon = tuple(
            Point(x=coerce_float(vertex[0]), y=coerce_float(vertex[1]))
            for vertex in (raw_polygon if raw_polygon is not None else ())
        )
        text = "" if raw_text is None else str(raw_text)

        return cls(polygon=polygon, text=text, confidence=coerce_float(raw_confidence))

    def to_line(self) -> OCRLine:
        return OCRLine(text=self.text, confidence=self.confidence, polygon=self.polygon)


def lines_from_detections(raw_output: Iterable[Sequence[Any]]) -> list[OCRLine]:
    """Convert a full engine response into OCR lines, preserving engine order."""
    return [RawDetection.from_engine(item).to_line() for item in raw_output]

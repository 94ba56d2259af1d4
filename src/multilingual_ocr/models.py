"""Data models for multilingual OCR results."""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, computed_field


class Point(BaseModel):
    """A vertex of a detection polygon."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class BoundingBox(BaseModel):
    """Axis-aligned box derived from a detection polygon."""

    model_config = ConfigDict(frozen=True)

    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0

    @classmethod
    def empty(cls) -> "BoundingBox":
        """Canonical empty box (all zero)."""
        return cls()

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> "BoundingBox":
        """Compute per-axis min/max over points. No points gives the empty box."""
        points = list(points)
        if not points:
            return cls.empty()

        return cls(
            min_x=min(p.x for p in points),
            min_y=min(p.y for p in points),
            max_x=max(p.x for p in points),
            max_y=max(p.y for p in points),
        )

    @property
    def width(self) -> float:
        return max(0.0, self.max_x - self.min_x)

    @property
    def height(self) -> float:
        return max(0.0, self.max_y - self.min_y)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center_x(self) -> float:
        return self.min_x + self.width / 2.0

    @property
    def center_y(self) -> float:
        return self.min_y + self.height / 2.0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 and self.height <= 0

    def iou(self, other: "BoundingBox") -> float:
        """Intersection over union with another box, in [0, 1].

        Empty boxes and boxes that only touch at an edge score 0.
        """
        if self.is_empty or other.is_empty:
            return 0.0

        inter_min_x = max(self.min_x, other.min_x)
        inter_min_y = max(self.min_y, other.min_y)
        inter_max_x = min(self.max_x, other.max_x)
        inter_max_y = min(self.max_y, other.max_y)

        if inter_max_x <= inter_min_x or inter_max_y <= inter_min_y:
            return 0.0

        intersection = (inter_max_x - inter_min_x) * (inter_max_y - inter_min_y)
        union = self.area + other.area - intersection
        if union <= 0:
            return 0.0

        return intersection / union


class OCRLine(BaseModel):
    """One recognized text span.

    Confidence is whatever the engine reported; it is not re-validated.
    The bounding box is always derived from the polygon.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    confidence: float
    polygon: tuple[Point, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self.polygon)


class OCRResult(BaseModel):
    """Merged OCR output for a single image."""

    model_config = ConfigDict(frozen=True)

    full_text: str
    lines: tuple[OCRLine, ...]
    languages: frozenset[str]
    duration: float  # seconds
    used_gpu: bool

    @classmethod
    def empty(cls) -> "OCRResult":
        """Result for a call that did no work."""
        return cls(
            full_text="",
            lines=(),
            languages=frozenset(),
            duration=0.0,
            used_gpu=False,
        )

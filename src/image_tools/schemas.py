"""
Pydantic v2 schemas for detection results.

All models use strict validation so coordinates stay integers and scores stay
floats; numpy scalars must be converted before construction. Detected shapes
are frozen once built. TextRegion is the exception: the merge pass grows its
bounds and raises its confidence in place.
"""

from pydantic import BaseModel, Field, ConfigDict


# Global strict configuration for all models
STRICT_CONFIG = ConfigDict(strict=True, extra='forbid')
FROZEN_CONFIG = ConfigDict(strict=True, extra='forbid', frozen=True)


class Point(BaseModel):
    """Integer pixel coordinate."""
    model_config = FROZEN_CONFIG

    x: int
    y: int


class Bounds(BaseModel):
    """Axis-aligned box; x2/y2 are the far edges of the box."""
    model_config = FROZEN_CONFIG

    x1: int
    y1: int
    x2: int
    y2: int

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1

    @property
    def area(self) -> int:
        return self.width * self.height

    def overlaps(self, other: "Bounds") -> bool:
        """True when the two boxes share a non-zero-area intersection."""
        return (
            self.x1 < other.x2 and other.x1 < self.x2
            and self.y1 < other.y2 and other.y1 < self.y2
        )

    def union(self, other: "Bounds") -> "Bounds":
        return Bounds(
            x1=min(self.x1, other.x1),
            y1=min(self.y1, other.y1),
            x2=max(self.x2, other.x2),
            y2=max(self.y2, other.y2),
        )

    def shifted(self, dx: int, dy: int) -> "Bounds":
        return Bounds(x1=self.x1 + dx, y1=self.y1 + dy, x2=self.x2 + dx, y2=self.y2 + dy)


class Rectangle(BaseModel):
    """Axis-aligned rectangle derived from one contour."""
    model_config = FROZEN_CONFIG

    bounds: Bounds
    center: Point
    width: int = Field(ge=0)
    height: int = Field(ge=0)
    area: int = Field(ge=0)
    fill_color: str = Field(description="#RRGGBB sampled at the bounding-box center")
    border_color: str = Field(description="#RRGGBB sampled at the top-left corner")
    confidence: float = Field(ge=0.0, le=1.0, description="Rectangularity score")


class Line(BaseModel):
    """Line segment derived from one Hough peak."""
    model_config = FROZEN_CONFIG

    start: Point
    end: Point
    length: float = Field(ge=0.0, description="Euclidean length rounded to 1 decimal")
    angle_degrees: float = Field(gt=-180.0, le=180.0)
    color: str
    thickness_approx: int = Field(ge=1)
    has_arrow_start: bool = False
    has_arrow_end: bool = False


class Circle(BaseModel):
    """Circle derived from one accumulator local maximum."""
    model_config = FROZEN_CONFIG

    center: Point
    radius: int = Field(ge=1)
    diameter: int
    fill_color: str
    confidence: float = Field(ge=0.0, le=1.0)


class TextRegion(BaseModel):
    """Window that looks like text; mutated only while merging overlaps."""
    model_config = STRICT_CONFIG

    bounds: Bounds
    confidence: float = Field(ge=0.0, le=1.0)
    area: int = Field(ge=0)


class RectanglesResult(BaseModel):
    model_config = STRICT_CONFIG

    rectangles: list[Rectangle] = Field(default_factory=list)
    count: int = 0


class LinesResult(BaseModel):
    model_config = STRICT_CONFIG

    lines: list[Line] = Field(default_factory=list)
    count: int = 0


class CirclesResult(BaseModel):
    model_config = STRICT_CONFIG

    circles: list[Circle] = Field(default_factory=list)
    count: int = 0


class TextRegionsResult(BaseModel):
    model_config = STRICT_CONFIG

    regions: list[TextRegion] = Field(default_factory=list)
    count: int = 0


__all__ = [
    'Point',
    'Bounds',
    'Rectangle',
    'Line',
    'Circle',
    'TextRegion',
    'RectanglesResult',
    'LinesResult',
    'CirclesResult',
    'TextRegionsResult',
]

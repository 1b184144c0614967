"""Configuration for the image tools: tool defaults, cache size and logging."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
import json
import os

from dotenv import load_dotenv
import yaml

ENV_PREFIX = "IMAGE_TOOLS_"


class ImageToolsConfig(BaseModel):
    """Defaults applied when a tool call omits an optional argument."""
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    # Rectangle detection
    min_area: int = Field(default=100, description="Minimum rectangle area in pixels")
    tolerance: float = Field(default=0.9, description="Minimum rectangularity score (0-1)")

    # Line detection
    min_length: int = Field(default=20, description="Minimum line length in pixels")
    detect_arrows: bool = Field(default=False, description="Check line endpoints for arrowheads")

    # Circle detection
    min_radius: int = Field(default=5, description="Smallest circle radius to test")
    max_radius: int = Field(default=500, description="Largest circle radius to test")

    # Text region detection
    min_confidence: float = Field(default=0.5, description="Minimum text region confidence (0-1)")

    # Imaging
    grid_spacing: int = Field(default=50, description="Pixels between grid overlay lines")
    grid_color: str = Field(default="#FF000080", description="Grid color as #RRGGBB or #RRGGBBAA")
    canny_low: int = Field(default=50, description="Canny lower hysteresis threshold")
    canny_high: int = Field(default=150, description="Canny upper hysteresis threshold")
    dominant_color_count: int = Field(default=5, description="Colors returned by dominant color analysis")
    alignment_tolerance: float = Field(default=5.0, description="Max std deviation (px) for aligned points")

    # Runtime
    cache_max_images: Optional[int] = Field(default=32, description="Images kept in memory (None = unbounded)")
    log_level: str = Field(default="INFO", description="Logging level name")

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "ImageToolsConfig":
        """Load configuration from YAML file."""
        with open(yaml_path, 'r') as f:
            config_dict = yaml.safe_load(f) or {}
        return cls(**config_dict)

    @classmethod
    def from_json(cls, json_path: str) -> "ImageToolsConfig":
        """Load configuration from JSON file."""
        with open(json_path, 'r') as f:
            config_dict = json.load(f)
        return cls(**config_dict)

    @classmethod
    def from_file(cls, path: str) -> "ImageToolsConfig":
        """Load YAML or JSON depending on the file extension."""
        if path.endswith(".json"):
            return cls.from_json(path)
        return cls.from_yaml(path)

    @classmethod
    def from_env(cls, base: Optional["ImageToolsConfig"] = None) -> "ImageToolsConfig":
        """
        Overlay IMAGE_TOOLS_* environment variables (and a .env file) on a config.

        Example:
            IMAGE_TOOLS_LOG_LEVEL=debug IMAGE_TOOLS_MAX_RADIUS=100 image-tools serve
        """
        load_dotenv()
        config = base.model_copy() if base is not None else cls()
        for name, field in cls.model_fields.items():
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is None:
                continue
            setattr(config, name, _coerce(raw, field.annotation))
        return config

    def save_yaml(self, output_path: str) -> None:
        """Save configuration to YAML file."""
        with open(output_path, 'w') as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)

    def save_json(self, output_path: str) -> None:
        """Save configuration to JSON file."""
        with open(output_path, 'w') as f:
            json.dump(self.model_dump(), f, indent=2)

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.min_area < 0:
            raise ValueError(f"min_area must be non-negative, got {self.min_area}")
        if not 0 <= self.tolerance <= 1:
            raise ValueError(f"tolerance must be between 0 and 1, got {self.tolerance}")
        if self.min_length < 0:
            raise ValueError(f"min_length must be non-negative, got {self.min_length}")
        if self.min_radius < 1:
            raise ValueError(f"min_radius must be at least 1, got {self.min_radius}")
        if self.max_radius < self.min_radius:
            raise ValueError(
                f"max_radius ({self.max_radius}) must not be below min_radius ({self.min_radius})"
            )
        if not 0 <= self.min_confidence <= 1:
            raise ValueError(f"min_confidence must be between 0 and 1, got {self.min_confidence}")
        if self.grid_spacing <= 0:
            raise ValueError(f"grid_spacing must be positive, got {self.grid_spacing}")
        if not 0 <= self.canny_low <= self.canny_high <= 255:
            raise ValueError(
                f"Canny thresholds must satisfy 0 <= low <= high <= 255, got {self.canny_low}/{self.canny_high}"
            )
        if self.dominant_color_count <= 0:
            raise ValueError(f"dominant_color_count must be positive, got {self.dominant_color_count}")
        if self.cache_max_images is not None and self.cache_max_images <= 0:
            raise ValueError(f"cache_max_images must be positive, got {self.cache_max_images}")


def _coerce(raw: str, annotation):
    """Turn an environment string into the field's type."""
    if raw.lower() in ("none", "null", "") and annotation == Optional[int]:
        return None
    if annotation is bool:
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if annotation in (int, Optional[int]):
        return int(raw)
    if annotation is float:
        return float(raw)
    return raw

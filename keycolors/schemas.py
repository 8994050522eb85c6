"""
keycolors Schemas
Pydantic models for palette analysis options and results.
"""
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from keycolors.config import config


CATEGORIES = ("vibrant", "muted", "light", "dark")


class ExtractionOptions(BaseModel):
    """Tunable parameters of the palette pipeline. All have defaults."""
    max_colors: int = Field(config.MAX_COLORS, ge=1, le=16, description="Maximum palette size")
    merge_threshold: float = Field(
        config.MERGE_THRESHOLD, ge=0.0, le=255.0,
        description="Weighted RGB distance under which a sample joins an existing cluster"
    )
    background_similarity_threshold: float = Field(
        config.BACKGROUND_THRESHOLD, ge=0.0, le=255.0,
        description="Weighted RGB distance under which a cluster counts as background"
    )
    significant_fraction: float = Field(
        config.SIGNIFICANT_FRACTION, ge=0.0, le=1.0,
        description="Pixel share black or white needs to be injected"
    )
    monochrome_significant_fraction: float = Field(
        config.MONOCHROME_SIGNIFICANT_FRACTION, ge=0.0, le=1.0,
        description="Injection share used when the image is monochrome"
    )
    sample_target_count: int = Field(
        config.SAMPLE_TARGET_COUNT, ge=1, le=1_000_000,
        description="Approximate number of pixels visited by the full sample"
    )
    grid_size: int = Field(
        config.GRID_SIZE, ge=config.MIN_GRID_SIZE, le=config.MAX_GRID_SIZE,
        description="Cells per side of the simplification grid"
    )
    source: Literal["full", "grid"] = Field("full", description="Extraction input: strided sample or grid cells")
    order_by: Literal["score", "vertical_position"] = Field(config.ORDER_BY, description="Palette ordering")
    background_source: Literal["border", "corners"] = Field("border", description="Background sample region")
    background_strategy: Literal["mode", "mean"] = Field("mode", description="Background reduction")
    corner_size: int = Field(10, ge=1, le=256, description="Corner block size for background sampling")
    include_background: bool = Field(False, description="Pin a labeled background entry at index 0")
    distance_metric: Literal["weighted", "ciede2000"] = Field(
        "weighted", description="Metric used to keep palette entries apart"
    )
    palette_distance_threshold: float = Field(
        config.MERGE_THRESHOLD, ge=0.0, le=255.0,
        description="Minimum weighted RGB distance between palette entries"
    )
    delta_e_threshold: float = Field(6.0, ge=0.0, le=100.0, description="Minimum CIEDE2000 distance between entries")
    min_per_category: Dict[str, int] = Field(
        default_factory=lambda: {"vibrant": 2, "muted": 2, "light": 1, "dark": 1},
        description="Reserved palette slots per category"
    )
    vertical_tolerance: float = Field(30.0, ge=0.0, le=255.0, description="Match tolerance for vertical position")
    vertical_stride: int = Field(4, ge=1, le=64, description="Row/column stride of the vertical scan")

    @field_validator("min_per_category")
    @classmethod
    def validate_categories(cls, value: Dict[str, int]) -> Dict[str, int]:
        unknown = set(value) - set(CATEGORIES)
        if unknown:
            raise ValueError(f"Unknown categories: {sorted(unknown)}")
        if any(count < 0 for count in value.values()):
            raise ValueError("Category minimums must be non-negative")
        return value


class BackgroundInfo(BaseModel):
    """Detected background color."""
    hex: str = Field(..., pattern=r"^#[0-9A-F]{6}$", description="Hex color code #RRGGBB")
    rgb: List[int] = Field(..., min_length=3, max_length=3)
    source: str = Field(..., description="Sample region used ('border' or 'corners')")
    strategy: str = Field(..., description="Reduction used ('mode' or 'mean')")


class ColorEntry(BaseModel):
    """Single key color of the palette."""
    hex: str = Field(..., pattern=r"^#[0-9A-F]{6}$", description="Hex color code #RRGGBB")
    rgb: List[int] = Field(..., min_length=3, max_length=3)
    population: int = Field(..., ge=0, description="Sampled pixels represented by this color")
    weight: float = Field(..., ge=0.0, le=1.0, description="Population share of the sampled pixels")
    category: Literal["vibrant", "muted", "light", "dark"]
    label: str = Field(..., description="Swatch role, e.g. 'Dark Vibrant'")
    score: float
    luminance: float = Field(..., ge=0.0, le=1.0)
    text_color: str = Field(..., description="Readable label color on top of this swatch")
    vertical_position: Optional[float] = Field(None, ge=0.0, le=1.0)
    synthetic: bool = Field(False, description="Injected pure black/white entry")
    is_background: bool = Field(False, description="Explicit background entry")


class PaletteMetadata(BaseModel):
    """Diagnostics of one analysis run."""
    width: int
    height: int
    sampled_pixels: int
    unique_samples: int
    cluster_count: int
    monochrome: bool
    white_percentage: float
    black_percentage: float
    options: ExtractionOptions


class PaletteArtifacts(BaseModel):
    """Optional rendered images."""
    swatch_png_b64: Optional[str] = Field(None, description="Base64-encoded PNG palette strip")
    simplified_png_b64: Optional[str] = Field(None, description="Base64-encoded PNG grid-simplified image")


class PaletteResult(BaseModel):
    """Background color plus ordered key-color palette."""
    status: Literal["ok", "empty_input", "no_significant_colors"] = "ok"
    background_color: BackgroundInfo
    palette: List[ColorEntry] = Field(default_factory=list)
    metadata: PaletteMetadata
    artifacts: Optional[PaletteArtifacts] = None

    @property
    def hex_colors(self) -> List[str]:
        return [entry.hex for entry in self.palette]


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("keycolors", description="Service name")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")

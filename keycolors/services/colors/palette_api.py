"""
Palette Analysis Orchestrator

Runs the full pipeline on a decoded image: sampling, background detection,
palette extraction and result assembly. Analysis is synchronous and
side-effect free apart from logging and metrics, so repeated calls on the
same input return identical results.
"""

from typing import List, Optional, Sequence, Union

import numpy as np
from loguru import logger

from keycolors.errors import EmptyInputError, NoSignificantColorError
from keycolors.schemas import (
    BackgroundInfo, ColorEntry, ExtractionOptions, PaletteArtifacts,
    PaletteMetadata, PaletteResult
)
from keycolors.services.observability import performance_monitor, performance_tracked
from .background import DEFAULT_BACKGROUND, estimate_background
from .color_math import Pixel, luminance, text_color_for
from .extraction import Cluster, PaletteExtraction, extract_palette, swatch_label
from .monochrome import BlackWhiteStats
from .sampling import ColorSample, as_rgb_array, grid_samples, is_empty, sample_full, simplify_image
from .swatches import encode_png_b64, render_swatch_strip


def validate_image(image: np.ndarray) -> np.ndarray:
    """
    Check the image layout and return it.

    Raises:
        ValueError: If the array is not (H, W, 3|4)
        EmptyInputError: If width or height is zero
    """
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected (H, W, 3|4) image, got shape {image.shape}")
    if is_empty(image):
        raise EmptyInputError(f"Image has zero size: {image.shape[1]}x{image.shape[0]}")
    if image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)
    return image


def _entry(cluster: Cluster, total: int, vertical_position: Optional[float] = None,
           is_background: bool = False) -> ColorEntry:
    pixel = cluster.pixel
    return ColorEntry(
        hex=pixel.hex,
        rgb=list(pixel.as_tuple()),
        population=cluster.population,
        weight=round(min(1.0, cluster.population / total), 6) if total else 0.0,
        category=cluster.category,
        label=swatch_label(cluster.hsl),
        score=round(cluster.score, 4),
        luminance=round(luminance(*pixel.as_tuple()), 4),
        text_color=text_color_for(pixel),
        vertical_position=None if vertical_position is None else round(vertical_position, 4),
        synthetic=cluster.synthetic,
        is_background=is_background,
    )


def _background_entry(background: Pixel, population: int, total: int) -> ColorEntry:
    cluster = Cluster.build(background.as_tuple(), population)
    return _entry(cluster, total, is_background=True)


def _background_info(background: Pixel, options: ExtractionOptions) -> BackgroundInfo:
    return BackgroundInfo(
        hex=background.hex,
        rgb=list(background.as_tuple()),
        source=options.background_source,
        strategy=options.background_strategy,
    )


def _metadata(image: np.ndarray, samples: List[ColorSample], cluster_count: int,
              stats: Optional[BlackWhiteStats], monochrome: bool,
              options: ExtractionOptions) -> PaletteMetadata:
    return PaletteMetadata(
        width=int(image.shape[1]) if image.ndim >= 2 else 0,
        height=int(image.shape[0]) if image.ndim >= 2 else 0,
        sampled_pixels=sum(s.population for s in samples),
        unique_samples=len(samples),
        cluster_count=cluster_count,
        monochrome=monochrome,
        white_percentage=round(stats.white_percentage, 4) if stats else 0.0,
        black_percentage=round(stats.black_percentage, 4) if stats else 0.0,
        options=options,
    )


def collect_samples(image: np.ndarray, options: ExtractionOptions) -> List[ColorSample]:
    """Build the extraction histogram for the configured source."""
    if options.source == "grid":
        return grid_samples(image, options.grid_size)
    return sample_full(image, options.sample_target_count)


def analyze_image(image: np.ndarray,
                  options: Optional[ExtractionOptions] = None,
                  background: Optional[Pixel] = None) -> PaletteResult:
    """
    Extract the background color and key-color palette of an image.

    Args:
        image: (H, W, 3|4) uint8 array, RGB or RGBA
        options: Pipeline parameters (defaults when omitted)
        background: Known background color; detected from the border when omitted

    Returns:
        PaletteResult. A zero-sized image yields status "empty_input" and an
        image with nothing but background yields "no_significant_colors";
        both carry an empty palette.
    """
    options = options or ExtractionOptions()

    try:
        image = validate_image(image)
    except EmptyInputError as e:
        logger.warning(f"Palette analysis skipped: {e}")
        fallback = background or DEFAULT_BACKGROUND
        return PaletteResult(
            status="empty_input",
            background_color=_background_info(fallback, options),
            metadata=_metadata(np.asarray(image), [], 0, None, False, options),
        )

    pixel_count = int(image.shape[0] * image.shape[1])

    with performance_monitor("sampling", pixel_count=pixel_count):
        samples = collect_samples(image, options)

    if background is None:
        with performance_monitor("background_detection", pixel_count=pixel_count):
            background = estimate_background(
                image, options.background_source, options.background_strategy, options.corner_size
            )

    try:
        with performance_monitor("palette_extraction", pixel_count=pixel_count):
            extraction = extract_palette(samples, background, options, image=image)
    except NoSignificantColorError as e:
        logger.info(f"No significant colors: {e}")
        total = sum(s.population for s in samples)
        palette = []
        if options.include_background:
            palette.append(_background_entry(background, total, total))
        return PaletteResult(
            status="no_significant_colors",
            background_color=_background_info(background, options),
            palette=palette,
            metadata=_metadata(image, samples, 0, None, False, options),
        )

    palette = _build_palette(extraction, background, options)
    logger.info(f"Palette analysis: background={background.hex}, "
                f"colors={[entry.hex for entry in palette]}")

    return PaletteResult(
        status="ok",
        background_color=_background_info(background, options),
        palette=palette,
        metadata=_metadata(
            image, samples, extraction.cluster_count, extraction.stats,
            extraction.monochrome, options
        ),
    )


def _build_palette(extraction: PaletteExtraction, background: Pixel,
                   options: ExtractionOptions) -> List[ColorEntry]:
    total = extraction.total_population
    palette: List[ColorEntry] = []
    if options.include_background:
        palette.append(_background_entry(background, extraction.background_population, total))

    for cluster in extraction.clusters:
        palette.append(_entry(cluster, total, extraction.vertical_positions.get(cluster.pixel)))
    return palette


def analyze_buffer(buffer: Union[bytes, bytearray, Sequence[int], np.ndarray],
                   width: int, height: int,
                   options: Optional[ExtractionOptions] = None,
                   background: Optional[Pixel] = None) -> PaletteResult:
    """Analyze a flat row-major RGB or RGBA pixel buffer."""
    return analyze_image(as_rgb_array(buffer, width, height), options, background)


@performance_tracked("render_artifacts")
def render_artifacts(result: PaletteResult, image: np.ndarray, grid_size: int,
                     include_swatch: bool = True,
                     include_simplified: bool = False) -> PaletteArtifacts:
    """Render the optional palette strip and simplified image."""
    artifacts = PaletteArtifacts()

    if include_swatch and result.palette:
        highlight = 0 if result.palette[0].is_background else None
        artifacts.swatch_png_b64 = render_swatch_strip(result.hex_colors, highlight_index=highlight)

    if include_simplified and not is_empty(image):
        artifacts.simplified_png_b64 = encode_png_b64(simplify_image(image, grid_size))

    return artifacts

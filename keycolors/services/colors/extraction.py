"""
Palette extraction service.

This module implements the key-color pipeline: greedy clustering of a
weighted pixel histogram, cluster scoring and categorization, background and
acceptance filtering, black/white injection, category-diverse selection and
final ordering.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from keycolors.errors import NoSignificantColorError
from keycolors.schemas import CATEGORIES, ExtractionOptions
from .color_math import (
    HSL, Pixel, ciede2000, hsl_of, weighted_distances, weighted_euclidean_distance
)
from .monochrome import (
    BLACK, WHITE, BlackWhiteStats, is_monochromatic, measure_black_white,
    passes_acceptance, significance_threshold
)
from .sampling import ColorSample, vertical_position_of


def saturation_score(s: float) -> float:
    """Saturation term, boosted around 60%."""
    return s * (1 + math.exp(-((s - 60) ** 2) / 800))


def score_color(hsl: HSL, population: int) -> float:
    """
    Importance score of a color.

    score = 1.2 * saturation + 0.8 * brightness + 0.3 * warm hue bonus
            + 0.4 * log population
    """
    h, s, l = hsl
    brightness_score = 100 - abs(l - 50)
    hue_score = 20 if 0 <= h <= 60 else 0
    population_score = math.log(population + 1) * 0.5
    return (
        saturation_score(s) * 1.2
        + brightness_score * 0.8
        + hue_score * 0.3
        + population_score * 0.4
    )


def categorize(hsl: HSL) -> str:
    """Bucket a color into light, dark, vibrant or muted."""
    if hsl.l >= 80:
        return "light"
    if hsl.l <= 20:
        return "dark"
    if hsl.s >= 60:
        return "vibrant"
    return "muted"


def swatch_label(hsl: HSL) -> str:
    """Six-role swatch name: [Light |Dark ]Vibrant|Muted."""
    base = "Vibrant" if hsl.s >= 60 else "Muted"
    category = categorize(hsl)
    if category == "light":
        return f"Light {base}"
    if category == "dark":
        return f"Dark {base}"
    return base


@dataclass(frozen=True)
class Cluster:
    """
    Running aggregate of similar samples.

    A cluster is a value: merging returns a new cluster with the center,
    population and every derived field recomputed.
    """
    center: Tuple[float, float, float]
    population: int
    pixel: Pixel
    hsl: HSL
    category: str
    score: float
    synthetic: bool = False

    @classmethod
    def build(cls, center: Sequence[float], population: int, synthetic: bool = False) -> "Cluster":
        pixel = Pixel.from_values(center)
        hsl = hsl_of(pixel)
        return cls(
            center=(float(center[0]), float(center[1]), float(center[2])),
            population=int(population),
            pixel=pixel,
            hsl=hsl,
            category=categorize(hsl),
            score=score_color(hsl, population),
            synthetic=synthetic,
        )

    @classmethod
    def from_sample(cls, sample: ColorSample) -> "Cluster":
        return cls.build(sample.pixel.as_tuple(), sample.population)

    def merge(self, sample: ColorSample) -> "Cluster":
        """Absorb a sample into a population-weighted center."""
        total = self.population + sample.population
        if total <= 0:
            return self
        center = tuple(
            (c * self.population + s * sample.population) / total
            for c, s in zip(self.center, sample.pixel.as_tuple())
        )
        return Cluster.build(center, total, self.synthetic)


def rank_key(cluster: Cluster):
    """Descending score, then population, then RGB for a total order."""
    return (-cluster.score, -cluster.population, cluster.pixel.as_tuple())


def cluster_samples(samples: List[ColorSample], merge_threshold: float) -> List[Cluster]:
    """
    Greedy single-pass clustering.

    Samples are visited by descending population. Each one merges into the
    first cluster (in creation order) whose center lies within
    merge_threshold, or starts a new cluster. Earlier assignments are never
    revisited.
    """
    ordered = sorted(samples, key=lambda s: -s.population)
    clusters: List[Cluster] = []
    centers = np.empty((len(ordered), 3), dtype=np.float64)

    for sample in ordered:
        if clusters:
            distances = weighted_distances(centers[:len(clusters)], sample.pixel)
            hits = np.flatnonzero(distances < merge_threshold)
        else:
            hits = ()

        if len(hits):
            index = int(hits[0])
            clusters[index] = clusters[index].merge(sample)
        else:
            index = len(clusters)
            clusters.append(Cluster.from_sample(sample))
        centers[index] = clusters[index].center

    logger.debug(f"Clustered {len(ordered)} samples into {len(clusters)} clusters "
                 f"(merge_threshold={merge_threshold})")
    return clusters


def filter_background(clusters: List[Cluster], background: Pixel,
                      threshold: float) -> Tuple[List[Cluster], int]:
    """
    Drop clusters closer than threshold to the background color.

    Synthetic clusters are never dropped here.

    Returns:
        Tuple of (kept clusters, population of the dropped clusters)
    """
    kept = []
    dropped_population = 0
    for cluster in clusters:
        if not cluster.synthetic and weighted_euclidean_distance(cluster.pixel, background) < threshold:
            dropped_population += cluster.population
        else:
            kept.append(cluster)

    logger.debug(f"Background filter: kept {len(kept)}/{len(clusters)} clusters "
                 f"(background={background.hex}, threshold={threshold})")
    return kept, dropped_population


def inject_black_white(candidates: List[Cluster], stats: BlackWhiteStats,
                       options: ExtractionOptions, monochrome: bool) -> List[Cluster]:
    """
    Add synthetic pure white / pure black clusters when they are significant.

    An ordinary candidate within merge_threshold of an injected color is
    replaced by the synthetic cluster.
    """
    threshold = significance_threshold(
        monochrome,
        normal=options.significant_fraction,
        relaxed=options.monochrome_significant_fraction,
    )
    result = list(candidates)

    for color, count in ((WHITE, stats.white_count), (BLACK, stats.black_count)):
        if stats.total == 0 or count / stats.total < threshold:
            continue
        result = [
            c for c in result
            if c.synthetic or weighted_euclidean_distance(c.pixel, color) >= options.merge_threshold
        ]
        result.append(Cluster.build(color.as_tuple(), count, synthetic=True))
        logger.debug(f"Injected {color.hex} ({count}/{stats.total} pixels, "
                     f"threshold={threshold:.0%})")

    return result


def _is_too_close(pixel: Pixel, others: List[Pixel], options: ExtractionOptions) -> bool:
    if options.distance_metric == "ciede2000":
        return any(ciede2000(pixel, other) < options.delta_e_threshold for other in others)
    return any(
        weighted_euclidean_distance(pixel, other) < options.palette_distance_threshold
        for other in others
    )


def select_diverse(candidates: List[Cluster], options: ExtractionOptions,
                   capacity: int, anchors: Optional[List[Pixel]] = None) -> List[Cluster]:
    """
    Pick up to capacity clusters with guaranteed category coverage.

    Reserved slots per category are filled first with the top-scoring
    candidates of that category, then the remaining slots go to the best
    leftovers. A candidate too close to an already chosen color (or to an
    anchor such as a pinned background entry) is skipped.
    """
    pool = sorted(candidates, key=rank_key)
    anchors = list(anchors or [])
    selected: List[Cluster] = []

    def taken_pixels() -> List[Pixel]:
        return anchors + [c.pixel for c in selected]

    for category in CATEGORIES:
        quota = options.min_per_category.get(category, 0)
        taken = 0
        for cluster in list(pool):
            if len(selected) >= capacity or taken >= quota:
                break
            if cluster.category != category or _is_too_close(cluster.pixel, taken_pixels(), options):
                continue
            selected.append(cluster)
            pool.remove(cluster)
            taken += 1

    for cluster in pool:
        if len(selected) >= capacity:
            break
        if _is_too_close(cluster.pixel, taken_pixels(), options):
            continue
        selected.append(cluster)

    logger.debug(f"Selected {len(selected)} of {len(candidates)} candidates "
                 f"(capacity={capacity})")
    return selected


def order_clusters(clusters: List[Cluster], order_by: str,
                   positions: Optional[Dict[Pixel, float]] = None) -> List[Cluster]:
    """Order by descending score, or by ascending vertical position."""
    if order_by == "score":
        return sorted(clusters, key=rank_key)
    if order_by == "vertical_position":
        if positions is None:
            raise ValueError("Vertical ordering requires vertical positions")
        return sorted(clusters, key=lambda c: (positions[c.pixel],) + rank_key(c))
    raise ValueError(f"Unknown palette order: {order_by}")


@dataclass
class PaletteExtraction:
    """Result of extract_palette before presentation."""
    clusters: List[Cluster]
    total_population: int
    cluster_count: int
    stats: BlackWhiteStats
    monochrome: bool
    background_population: int
    vertical_positions: Dict[Pixel, float] = field(default_factory=dict)


def extract_palette(samples: List[ColorSample], background: Pixel,
                    options: Optional[ExtractionOptions] = None,
                    image: Optional[np.ndarray] = None) -> PaletteExtraction:
    """
    Run the key-color pipeline over a weighted histogram.

    Args:
        samples: Histogram from sample_full or grid_samples
        background: Detected background color
        options: Pipeline parameters (defaults when omitted)
        image: Source image, required for vertical ordering

    Returns:
        PaletteExtraction with the ordered clusters

    Raises:
        NoSignificantColorError: If no candidate survives filtering
        ValueError: If vertical ordering is requested without an image
    """
    options = options or ExtractionOptions()
    if options.order_by == "vertical_position" and image is None:
        raise ValueError("Vertical ordering requires the source image")

    clusters = cluster_samples(samples, options.merge_threshold)
    candidates, background_population = filter_background(
        clusters, background, options.background_similarity_threshold
    )

    stats = measure_black_white(samples)
    monochrome = is_monochromatic(stats)
    candidates = [c for c in candidates if passes_acceptance(c.pixel, monochrome)]
    candidates = inject_black_white(candidates, stats, options, monochrome)

    if not candidates:
        raise NoSignificantColorError(
            f"No distinct colors besides background {background.hex} "
            f"({len(clusters)} clusters filtered)"
        )

    capacity = options.max_colors - (1 if options.include_background else 0)
    anchors = [background] if options.include_background else []
    selected = select_diverse(candidates, options, capacity, anchors)

    positions: Dict[Pixel, float] = {}
    if options.order_by == "vertical_position":
        positions = {
            c.pixel: vertical_position_of(
                image, c.pixel, options.vertical_tolerance, options.vertical_stride
            )
            for c in selected
        }
    ordered = order_clusters(selected, options.order_by, positions)

    logger.info(f"Palette extraction: {len(clusters)} clusters -> {len(ordered)} colors "
                f"(monochrome={monochrome}, order_by={options.order_by})")

    return PaletteExtraction(
        clusters=ordered,
        total_population=stats.total,
        cluster_count=len(clusters),
        stats=stats,
        monochrome=monochrome,
        background_population=background_population,
        vertical_positions=positions,
    )

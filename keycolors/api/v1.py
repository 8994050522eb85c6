"""
keycolors v1 API Routes
Implements the /v1/palette analysis endpoint.
"""
import time
import uuid
from typing import Dict, Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from pydantic import ValidationError

from keycolors.config import config
from keycolors.schemas import ErrorResponse, ExtractionOptions, PaletteResult
from keycolors.services.colors.palette_api import analyze_image, render_artifacts
from keycolors.services.imaging import decode_image
from keycolors.utils.logging import get_logger

router = APIRouter(prefix="/v1", tags=["palette"])


def _build_options(params: Dict) -> ExtractionOptions:
    """Validate query parameters into pipeline options (422 on failure)."""
    try:
        return ExtractionOptions(**{k: v for k, v in params.items() if v is not None})
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/palette",
             response_model=PaletteResult,
             responses={400: {"model": ErrorResponse}, 415: {"model": ErrorResponse}},
             summary="Extract Key Colors",
             description="Detect the background color and key-color palette of an uploaded image")
async def extract_palette_endpoint(
    file: UploadFile = File(..., description="Image file (PNG, JPEG, WebP or GIF)"),
    max_colors: Optional[int] = Query(None, ge=1, le=16, description="Maximum palette size"),
    merge_threshold: Optional[float] = Query(None, ge=0.0, le=255.0, description="Cluster merge distance"),
    background_similarity_threshold: Optional[float] = Query(
        None, ge=0.0, le=255.0, description="Background exclusion distance"
    ),
    significant_fraction: Optional[float] = Query(None, ge=0.0, le=1.0, description="Black/white injection share"),
    sample_target_count: Optional[int] = Query(None, ge=1, le=1_000_000, description="Pixels visited by sampling"),
    grid_size: Optional[int] = Query(
        None, ge=config.MIN_GRID_SIZE, le=config.MAX_GRID_SIZE, description="Simplification grid size"
    ),
    source: Optional[str] = Query(None, pattern="^(full|grid)$", description="Extraction input"),
    order_by: Optional[str] = Query(None, pattern="^(score|vertical_position)$", description="Palette ordering"),
    background_source: Optional[str] = Query(None, pattern="^(border|corners)$", description="Background region"),
    background_strategy: Optional[str] = Query(None, pattern="^(mode|mean)$", description="Background reduction"),
    include_background: Optional[bool] = Query(None, description="Pin the background as the first entry"),
    distance_metric: Optional[str] = Query(None, pattern="^(weighted|ciede2000)$", description="Palette spacing metric"),
    include_swatch: bool = Query(False, description="Render a palette strip PNG"),
    include_simplified: bool = Query(False, description="Render the grid-simplified image PNG"),
) -> PaletteResult:
    """
    Analyze an uploaded image.

    Query parameters map onto ExtractionOptions; omitted ones use the
    configured defaults.
    """
    log = get_logger()
    request_id = f"pal-{uuid.uuid4().hex[:8]}"
    start_time = time.time()

    if file.content_type and file.content_type not in config.SUPPORTED_MIME_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported media type. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}"
        )

    options = _build_options({
        "max_colors": max_colors,
        "merge_threshold": merge_threshold,
        "background_similarity_threshold": background_similarity_threshold,
        "significant_fraction": significant_fraction,
        "sample_target_count": sample_target_count,
        "grid_size": grid_size,
        "source": source,
        "order_by": order_by,
        "background_source": background_source,
        "background_strategy": background_strategy,
        "include_background": include_background,
        "distance_metric": distance_metric,
    })

    file_bytes = await file.read()
    image = decode_image(file_bytes)

    result = analyze_image(image, options)
    if include_swatch or include_simplified:
        result.artifacts = render_artifacts(
            result, image, options.grid_size,
            include_swatch=include_swatch,
            include_simplified=include_simplified,
        )

    log.info("Palette request completed", extra={
        "request_id": request_id,
        "dims": f"{image.shape[1]}x{image.shape[0]}",
        "status": result.status,
        "colors": len(result.palette),
        "ms_total": round((time.time() - start_time) * 1000, 1),
    })
    return result

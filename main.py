from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from typing import Optional, List, Dict
import logging
import traceback

from color_engine import (
    adjust_color, export_palette, generate_harmonies, is_valid_hex, mix_colors,
)
from exceptions import (
    AggregationFailure, BackendError, ParseError, RunCancelled, ValidationError,
)
from models import (
    AdjustRequest, CreateSeriesRequest, CreativeResult, ExportRequest, ExportResponse,
    ExtractPaletteRequest, GenerateCreativeRequest, HarmonyGroup, HarmonyRequest,
    MixRequest, PaletteOutput, ProgressResponse, RunState,
)
from orchestrator import FormatOrchestrator
from palette_extractor import VisionPaletteExtractor, decode_image_payload
from progress import EventKind, ProgressChannel, ProgressEstimator, ProgressEvent
from prompts import get_domain_options
from providers import (
    GeminiImageProvider, PaletteExtractionService, RouterTextGenerator, VeoVideoProvider, get_router,
)
from settings import get_settings
from video_proxy import fetch_video_file

# Logging setup
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()
app = FastAPI(title="Palette Creative Processor", version="1.0.0")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Progress per client session
progress_channel = ProgressChannel()
session_progress: Dict[str, ProgressEstimator] = {}


def _track_session_progress(event: ProgressEvent):
    if not event.session_id:
        return
    if event.kind == EventKind.RUN_RESET:
        estimator = session_progress.get(event.session_id)
        if estimator is not None and estimator.run_id == event.run_id:
            del session_progress[event.session_id]
        return
    estimator = session_progress.setdefault(event.session_id, ProgressEstimator())
    estimator.handle(event)


progress_channel.subscribe(_track_session_progress)

# Services are created on first use so the app imports without API keys
_orchestrator: Optional[FormatOrchestrator] = None
_palette_extractor: Optional[PaletteExtractionService] = None


def get_orchestrator() -> FormatOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = FormatOrchestrator(
            text_service=RouterTextGenerator(),
            image_service=GeminiImageProvider(),
            video_service=VeoVideoProvider(),
            settings=settings,
            channel=progress_channel,
        )
    return _orchestrator


def get_palette_extractor() -> PaletteExtractionService:
    global _palette_extractor
    if _palette_extractor is None:
        _palette_extractor = VisionPaletteExtractor()
    return _palette_extractor


def _require_hex(*values: str):
    bad = [v for v in values if not is_valid_hex(v)]
    if bad:
        raise HTTPException(status_code=400, detail=f"Malformed hex colors: {bad}")


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "palette-creative-processor"}


@app.get("/")
async def root():
    return {
        "service": "Palette Creative Processor",
        "version": "1.0.0",
        "description": "Turns an extracted color palette into ideas, images, videos and series",
        "endpoints": [
            "/extract-palette", "/generate-creative", "/create-series", "/progress/{session_id}",
            "/video/{file_id}", "/domains", "/palette/harmonies", "/palette/mix", "/palette/adjust", "/palette/export",
            "/config", "/health",
        ],
    }


@app.get("/config")
async def get_config():
    """Get current model and timeout configuration."""
    router = get_router()
    active = router.get_active_provider()
    return {
        "text_model": settings.text_model,
        "vision_model": settings.vision_model,
        "image_model": settings.image_model,
        "video_model": settings.video_model,
        "active_llm_provider": active.name if active else None,
        "api_keys_count": len(settings.google_api_keys),
        "timeouts": {
            "text": settings.text_timeout,
            "image": settings.image_timeout,
            "video": settings.video_timeout,
            "series": settings.series_timeout,
        },
        "video_series_parts": settings.video_series_parts,
    }


@app.get("/domains")
async def list_domains():
    """Domains with their angles, customization fields, aspect defaults and series themes."""
    return {"domains": get_domain_options()}


@app.post("/extract-palette", response_model=PaletteOutput)
async def extract_palette(
    request: ExtractPaletteRequest,
    extractor: PaletteExtractionService = Depends(get_palette_extractor)
):
    """Extract a color palette and mood description from an uploaded image."""
    try:
        image_data = decode_image_payload(request.image_base64)
        result = await extractor.extract(image_data, request.swatches)
        logger.info(f"Extracted palette: {[p.hex for p in result.palette]}")
        return result
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ParseError as e:
        logger.warning(f"Palette parse failed: {e.message}; raw={e.raw_output[:200]!r}")
        raise HTTPException(status_code=502, detail=f"Failed to extract color palette from image: {e.message}")
    except BackendError as e:
        raise HTTPException(status_code=502, detail=f"Failed to extract color palette from image: {e.message}")
    except Exception as e:
        logger.error(f"Palette extraction error: {str(e)}")
        logger.error(traceback.format_exc())
        raise HTTPException(status_code=500, detail=f"Palette extraction failed: {str(e)}")


def _failure_response(result: CreativeResult) -> JSONResponse:
    failure = AggregationFailure(result)
    logger.error(f"{failure.message}: {failure.errors}")
    return JSONResponse(status_code=500, content={"error": failure.message, "errors": failure.errors})


@app.post("/generate-creative", response_model=CreativeResult, response_model_exclude_none=True)
async def generate_creative(
    request: GenerateCreativeRequest,
    orchestrator: FormatOrchestrator = Depends(get_orchestrator)
):
    """
    Generate creative content from a palette.

    Individual format failures are reported in `errors` with a 200 status;
    only a run that produced neither ideas nor any format returns 500.
    """
    try:
        result = await orchestrator.submit(request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except RunCancelled as e:
        raise HTTPException(status_code=409, detail=e.message)
    except Exception as e:
        logger.error(f"Generation error: {str(e)}")
        logger.error(traceback.format_exc())
        raise HTTPException(status_code=500, detail=f"Generation failed: {str(e)}")

    if not result.has_content:
        return _failure_response(result)
    return result


@app.post("/create-series", response_model=CreativeResult, response_model_exclude_none=True)
async def create_series(
    request: CreateSeriesRequest,
    orchestrator: FormatOrchestrator = Depends(get_orchestrator)
):
    """Generate an image series and merge it into an earlier result."""
    try:
        result = await orchestrator.create_series(request.existing_result, request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except RunCancelled as e:
        raise HTTPException(status_code=409, detail=e.message)
    except Exception as e:
        logger.error(f"Series error: {str(e)}")
        logger.error(traceback.format_exc())
        raise HTTPException(status_code=500, detail=f"Series generation failed: {str(e)}")

    if not result.has_content:
        return _failure_response(result)
    return result


@app.get("/progress/{session_id}", response_model=ProgressResponse)
async def get_progress(session_id: str):
    estimator = session_progress.get(session_id)
    if estimator is None:
        return ProgressResponse(session_id=session_id, state=RunState.IDLE, progress=0.0)
    progress = estimator.tick()
    return ProgressResponse(session_id=session_id, state=estimator.state, progress=progress, stage=estimator.stage)


@app.delete("/progress/{session_id}")
async def cancel_run(session_id: str, orchestrator: FormatOrchestrator = Depends(get_orchestrator)):
    """Cancel the in-flight run for a session."""
    return {"cancelled": orchestrator.cancel(session_id)}


@app.get("/video/{file_id}")
async def proxy_video(file_id: str):
    """Serve a generated video that Veo returned as a file URI."""
    try:
        video = await fetch_video_file(file_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except BackendError as e:
        status = e.context.get("status_code", 500)
        raise HTTPException(status_code=status, detail=f"Failed to fetch video: {e.message}")

    return Response(
        content=video.content,
        media_type=video.mime_type,
        headers={"Accept-Ranges": "bytes", "Cache-Control": "private, max-age=3600"},
    )


# ============== Palette Playground ==============

@app.post("/palette/harmonies", response_model=List[HarmonyGroup])
async def palette_harmonies(request: HarmonyRequest):
    _require_hex(request.hex)
    return [
        HarmonyGroup(name=h.name, description=h.description, colors=h.colors)
        for h in generate_harmonies(request.hex)
    ]


@app.post("/palette/mix")
async def palette_mix(request: MixRequest):
    _require_hex(request.color_a, request.color_b)
    return {"hex": mix_colors(request.color_a, request.color_b, request.ratio)}


@app.post("/palette/adjust")
async def palette_adjust(request: AdjustRequest):
    try:
        palette = adjust_color(request.palette, request.index, request.property, request.value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"palette": [p.model_dump() for p in palette]}


@app.post("/palette/export", response_model=ExportResponse)
async def palette_export(request: ExportRequest):
    try:
        content, filename = export_palette(request.palette, request.format)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ExportResponse(content=content, filename=filename)

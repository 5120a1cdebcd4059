"""
FormatOrchestrator - fans one creative request out into per-format tasks.

Workflow for submit():
1. Validate the request (raises ValidationError, nothing is dispatched)
2. Expand 'combined' into image + video + series
3. Generate the ideas text first; the image prompt uses it
4. Run all format tasks concurrently, each under its own timeout
   (series keep the parts finished before their deadline)
5. Fold every task failure into one errors entry; other tasks keep going
6. Aggregate once into a fresh CreativeResult

Progress is reported only as events on a ProgressChannel.
"""

import asyncio
import copy
import logging
import traceback
import uuid
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from color_engine import is_valid_hex
from exceptions import ValidationError, BackendError, RunCancelled
from models import (
    AspectRatio, CreativeResult, Domain, GenerateCreativeRequest, OutputFormat,
    PaletteEntry, RunState, SeriesConfig,
)
from progress import EventKind, ProgressChannel, ProgressEvent
from prompts import (
    build_domain_prompt, build_image_series_prompts, build_video_prompt,
    build_video_series_prompts, get_strategy, get_theme,
)
from providers.base import (
    BackendResponse, ImageGenerationService, SeriesGenerationService, SeriesResponse,
    TextGenerationService, VideoGenerationService,
)
from providers.series import OrderedSeriesGenerator
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

DISPATCH_ORDER = (
    OutputFormat.IMAGE,
    OutputFormat.VIDEO,
    OutputFormat.SERIES,
    OutputFormat.IMAGE_SERIES,
)

COMBINED_FORMATS = (OutputFormat.IMAGE, OutputFormat.VIDEO, OutputFormat.SERIES)

# Formats that enforce their own deadline and keep parts finished before it
SERIES_FORMATS = {OutputFormat.SERIES, OutputFormat.IMAGE_SERIES}

# Formats whose prompts are built from the selected angle
ANGLE_FORMATS = {OutputFormat.IMAGE, OutputFormat.VIDEO, OutputFormat.SERIES, OutputFormat.COMBINED}

MIN_SERIES_COUNT = 3
MAX_SERIES_COUNT = 10

IDEAS_TASK = "ideas"


@dataclass(frozen=True)
class ValidatedRequest:
    """Request after validation, holding immutable snapshots."""
    domain: Domain
    palette: Tuple[PaletteEntry, ...]
    customizations: Mapping[str, Any]
    prompt_choice: Optional[str]
    formats: Tuple[OutputFormat, ...]
    image_aspect: AspectRatio
    video_aspect: AspectRatio
    series_config: Optional[SeriesConfig] = None
    series_aspect: Optional[AspectRatio] = None
    session_id: Optional[str] = None


@dataclass(frozen=True)
class GenerationTask:
    """One unit of work: a single output format for a validated request."""
    format: OutputFormat
    domain: Domain
    palette: Tuple[PaletteEntry, ...]
    customizations: Mapping[str, Any]
    prompt_choice: Optional[str]
    aspect_ratio: AspectRatio
    series_config: Optional[SeriesConfig] = None


@dataclass
class TaskOutcome:
    task: GenerationTask
    url: Optional[str] = None
    urls: List[str] = field(default_factory=list)
    part_errors: List[str] = field(default_factory=list)
    error: Optional[BackendError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def _parse_aspect(value: Optional[str], default: AspectRatio, label: str) -> AspectRatio:
    if not value:
        return default
    try:
        return AspectRatio(value)
    except ValueError:
        allowed = ", ".join(a.value for a in AspectRatio)
        raise ValidationError(f"Invalid {label} aspect ratio '{value}' (expected {allowed})")


def expand_formats(formats: List[OutputFormat]) -> Tuple[OutputFormat, ...]:
    """Replace 'combined' with its parts, drop duplicates, order for dispatch."""
    wanted: Set[OutputFormat] = set()
    for fmt in formats:
        if fmt == OutputFormat.COMBINED:
            wanted.update(COMBINED_FORMATS)
        else:
            wanted.add(fmt)
    return tuple(fmt for fmt in DISPATCH_ORDER if fmt in wanted)


class FormatOrchestrator:
    """
    Runs creative generation requests against the configured backends.

    Usage:
        orchestrator = FormatOrchestrator(text, image, video)
        result = await orchestrator.submit(request)
    """

    def __init__(
        self,
        text_service: TextGenerationService,
        image_service: ImageGenerationService,
        video_service: VideoGenerationService,
        video_series: Optional[SeriesGenerationService] = None,
        image_series: Optional[SeriesGenerationService] = None,
        settings: Optional[Settings] = None,
        channel: Optional[ProgressChannel] = None
    ):
        settings = settings or get_settings()

        self.text_service = text_service
        self.image_service = image_service
        self.video_service = video_service
        self.video_series = video_series or OrderedSeriesGenerator(video_service)
        self.image_series = image_series or OrderedSeriesGenerator(image_service)
        self.channel = channel or ProgressChannel()

        self.text_timeout = settings.text_timeout
        self.timeouts = {
            OutputFormat.IMAGE: settings.image_timeout,
            OutputFormat.VIDEO: settings.video_timeout,
            OutputFormat.SERIES: settings.series_timeout,
            OutputFormat.IMAGE_SERIES: settings.series_timeout,
        }
        self.video_series_parts = settings.video_series_parts
        self.reset_delay = settings.progress_reset_delay

        self.state = RunState.IDLE
        self._current_run: Optional[str] = None
        self._session_runs: Dict[str, str] = {}
        self._active: Dict[str, asyncio.Task] = {}
        self._superseded: Set[str] = set()

    # ============== Validation ==============

    def validate(self, request: GenerateCreativeRequest) -> ValidatedRequest:
        """
        Check a request and snapshot its inputs.

        Raises:
            ValidationError: unknown domain, empty or malformed palette, no or
                unknown formats, missing angle choice, bad aspect ratio or
                series config out of range
        """
        try:
            domain = Domain(request.path)
        except ValueError:
            raise ValidationError(f"Unknown creative domain: {request.path!r}")

        if not request.palette:
            raise ValidationError("Palette must contain at least one color")
        bad_hex = [p.hex for p in request.palette if not is_valid_hex(p.hex)]
        if bad_hex:
            raise ValidationError(f"Malformed hex colors in palette: {bad_hex}")

        if not request.formats:
            raise ValidationError("At least one output format is required")
        requested = []
        for value in request.formats:
            try:
                requested.append(OutputFormat(value))
            except ValueError:
                raise ValidationError(f"Unknown output format: {value!r}")
        formats = expand_formats(requested)

        prompt_choice = (request.image_prompt_choice or "").strip() or None
        if prompt_choice is None and ANGLE_FORMATS.intersection(requested):
            raise ValidationError("An image prompt choice is required for image, video and series formats")

        strategy = get_strategy(domain)
        image_aspect = _parse_aspect(request.image_aspect_ratio, strategy.image_aspect, "image")
        video_aspect = _parse_aspect(request.video_aspect_ratio, strategy.video_aspect, "video")

        series_config = None
        series_aspect = None
        if OutputFormat.IMAGE_SERIES in formats:
            series_config = (request.image_series_config or SeriesConfig()).model_copy()
            if not MIN_SERIES_COUNT <= series_config.count <= MAX_SERIES_COUNT:
                raise ValidationError(
                    f"Image series count must be between {MIN_SERIES_COUNT} and {MAX_SERIES_COUNT}",
                    context={"count": series_config.count},
                )
            theme = get_theme(domain, series_config.theme_id)
            series_aspect = _parse_aspect(series_config.aspect_ratio, theme.preferred_aspect, "series")

        return ValidatedRequest(
            domain=domain,
            palette=tuple(p.model_copy() for p in request.palette),
            customizations=MappingProxyType(copy.deepcopy(dict(request.customizations))),
            prompt_choice=prompt_choice,
            formats=formats,
            image_aspect=image_aspect,
            video_aspect=video_aspect,
            series_config=series_config,
            series_aspect=series_aspect,
            session_id=request.session_id,
        )

    # ============== Public API ==============

    async def submit(self, request: GenerateCreativeRequest) -> CreativeResult:
        """
        Generate every requested format.

        Raises:
            ValidationError: the request is invalid
            RunCancelled: a newer run for the same session superseded this one
        """
        validated = self.validate(request)
        logger.info(
            f"Submitting {validated.domain.value} run: formats={[f.value for f in validated.formats]}"
        )
        return await self._run_supervised(validated, include_ideas=True)

    async def create_series(self, existing: CreativeResult, request: GenerateCreativeRequest) -> CreativeResult:
        """
        Generate an image series and merge it into an earlier result.

        The earlier result is not modified; a merged copy is returned with
        'image-series' added to formats_generated, new urls appended and
        new errors appended.
        """
        series_request = request.model_copy(update={"formats": [OutputFormat.IMAGE_SERIES.value]})
        validated = self.validate(series_request)
        fresh = await self._run_supervised(validated, include_ideas=False)
        return merge_series(existing, fresh)

    def cancel(self, session_id: str) -> bool:
        """Cancel the in-flight run for a session. Returns True if one was running."""
        task = self._active.get(session_id)
        if task is None or task.done():
            return False
        self._superseded.add(self._run_id_of(task))
        task.cancel()
        logger.info(f"Cancelled run for session {session_id}")
        return True

    # ============== Run lifecycle ==============

    @staticmethod
    def _run_id_of(task: asyncio.Task) -> str:
        return task.get_name()

    async def _run_supervised(self, request: ValidatedRequest, include_ideas: bool) -> CreativeResult:
        run_id = uuid.uuid4().hex[:12]
        session_id = request.session_id

        if session_id:
            self.cancel(session_id)

        run_task = asyncio.ensure_future(self._run(run_id, request, include_ideas))
        run_task.set_name(run_id)
        if session_id:
            self._active[session_id] = run_task

        try:
            return await run_task
        except asyncio.CancelledError:
            if session_id and self._session_runs.get(session_id) == run_id:
                # Cancelled with no newer run taking over the session
                del self._session_runs[session_id]
                self._emit(EventKind.RUN_RESET, run_id, request, state=RunState.IDLE)
            if run_id in self._superseded:
                self._superseded.discard(run_id)
                raise RunCancelled(f"Run {run_id} was superseded", context={"session_id": session_id})
            raise
        finally:
            if session_id and self._active.get(session_id) is run_task:
                del self._active[session_id]

    def _emit(self, kind: EventKind, run_id: str, request: ValidatedRequest, **kwargs):
        self.channel.emit(ProgressEvent(kind=kind, run_id=run_id, session_id=request.session_id, **kwargs))

    def _set_state(self, state: RunState):
        self.state = state

    async def _run(self, run_id: str, request: ValidatedRequest, include_ideas: bool) -> CreativeResult:
        tasks = [self._make_task(request, fmt) for fmt in request.formats]
        total = len(tasks) + (1 if include_ideas else 0)

        self._current_run = run_id
        if request.session_id:
            self._session_runs[request.session_id] = run_id
        self._set_state(RunState.DISPATCHING)
        self._emit(EventKind.RUN_STARTED, run_id, request, total_tasks=total, state=RunState.DISPATCHING)

        ideas = ""
        if include_ideas:
            ideas = await self._generate_ideas(run_id, request)

        self._set_state(RunState.RUNNING)
        futures = []
        for task in tasks:
            self._emit(EventKind.TASK_DISPATCHED, run_id, request, task=task.format.value, state=RunState.RUNNING)
            futures.append(asyncio.ensure_future(self._execute(task, ideas)))

        outcomes: Dict[OutputFormat, TaskOutcome] = {}
        try:
            for next_done in asyncio.as_completed(futures):
                outcome = await next_done
                outcomes[outcome.task.format] = outcome
                if outcome.succeeded:
                    detail = "; ".join(outcome.part_errors) or None
                    self._emit(EventKind.TASK_COMPLETED, run_id, request, task=outcome.task.format.value, detail=detail)
                else:
                    self._emit(EventKind.TASK_FAILED, run_id, request, task=outcome.task.format.value,
                               detail=outcome.error.message)
        except asyncio.CancelledError:
            for future in futures:
                future.cancel()
            raise

        result = aggregate(ideas, [outcomes[task.format] for task in tasks])
        self._set_state(result.status)
        logger.info(
            f"Run {run_id} finished: state={result.status.value}, "
            f"generated={result.formats_generated}, errors={len(result.errors)}"
        )
        self._emit(EventKind.RUN_COMPLETED, run_id, request, state=result.status)
        self._schedule_reset(run_id, request)
        return result

    def _schedule_reset(self, run_id: str, request: ValidatedRequest):
        def reset():
            session_id = request.session_id
            if session_id:
                # A newer run of the same session owns its progress now
                if self._session_runs.get(session_id) != run_id:
                    return
                del self._session_runs[session_id]
            if self._current_run == run_id:
                self._set_state(RunState.IDLE)
            self._emit(EventKind.RUN_RESET, run_id, request, state=RunState.IDLE)

        asyncio.get_running_loop().call_later(max(self.reset_delay, 0.0), reset)

    def _make_task(self, request: ValidatedRequest, fmt: OutputFormat) -> GenerationTask:
        if fmt == OutputFormat.IMAGE:
            aspect = request.image_aspect
        elif fmt == OutputFormat.IMAGE_SERIES:
            aspect = request.series_aspect or request.image_aspect
        else:
            aspect = request.video_aspect

        return GenerationTask(
            format=fmt,
            domain=request.domain,
            palette=request.palette,
            customizations=request.customizations,
            prompt_choice=request.prompt_choice,
            aspect_ratio=aspect,
            series_config=request.series_config if fmt == OutputFormat.IMAGE_SERIES else None,
        )

    # ============== Task execution ==============

    async def _generate_ideas(self, run_id: str, request: ValidatedRequest) -> str:
        """Generate the concept text; failure leaves ideas empty and the run continues."""
        self._emit(EventKind.TASK_DISPATCHED, run_id, request, task=IDEAS_TASK, state=RunState.DISPATCHING)

        error = None
        try:
            response = await asyncio.wait_for(
                self.text_service.generate(request.domain, list(request.palette), dict(request.customizations)),
                self.text_timeout,
            )
            error = response.error
        except asyncio.TimeoutError:
            error = f"timed out after {self.text_timeout:g}s"
        except Exception as e:
            logger.error(f"Ideas generation raised: {e}")
            logger.error(traceback.format_exc())
            error = str(e)

        if error:
            logger.warning(f"Ideas generation failed, continuing without ideas: {error}")
            self._emit(EventKind.TASK_FAILED, run_id, request, task=IDEAS_TASK, detail=error)
            return ""

        self._emit(EventKind.TASK_COMPLETED, run_id, request, task=IDEAS_TASK)
        return response.text

    async def _execute(self, task: GenerationTask, ideas: str) -> TaskOutcome:
        """Run one task; every failure comes back as a TaskOutcome error."""
        timeout = self.timeouts[task.format]
        try:
            if task.format in SERIES_FORMATS:
                return await self._dispatch(task, ideas)
            return await asyncio.wait_for(self._dispatch(task, ideas), timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{task.format.value} timed out after {timeout:g}s")
            return TaskOutcome(task, error=BackendError(task.format.value, f"timed out after {timeout:g}s"))
        except BackendError as e:
            logger.warning(f"{task.format.value} failed: {e}")
            return TaskOutcome(task, error=e)
        except Exception as e:
            logger.error(f"{task.format.value} raised: {e}")
            logger.error(traceback.format_exc())
            return TaskOutcome(task, error=BackendError(task.format.value, str(e) or type(e).__name__, cause=e))

    async def _dispatch(self, task: GenerationTask, ideas: str) -> TaskOutcome:
        fmt = task.format
        customizations = dict(task.customizations)
        aspect = task.aspect_ratio.value

        if fmt == OutputFormat.IMAGE:
            prompt = build_domain_prompt(task.domain, task.prompt_choice, task.palette, ideas)
            return self._single_outcome(task, await self.image_service.generate(prompt, aspect))

        if fmt == OutputFormat.VIDEO:
            prompt = build_video_prompt(task.domain, task.prompt_choice, task.palette, customizations)
            return self._single_outcome(task, await self.video_service.generate(prompt, aspect, "short", "cinematic"))

        if fmt == OutputFormat.SERIES:
            prompts = build_video_series_prompts(task.domain, task.palette, customizations, self.video_series_parts)
            response = await self.video_series.generate_ordered(prompts, aspect, self.timeouts[fmt])
            return self._series_outcome(task, response)

        if fmt == OutputFormat.IMAGE_SERIES:
            config = task.series_config or SeriesConfig()
            prompts = build_image_series_prompts(
                task.domain, task.palette, customizations, config.theme_id, config.count
            )
            response = await self.image_series.generate_ordered(prompts, aspect, self.timeouts[fmt])
            return self._series_outcome(task, response)

        raise BackendError(fmt.value, "format cannot be dispatched directly")

    @staticmethod
    def _single_outcome(task: GenerationTask, response: BackendResponse) -> TaskOutcome:
        if response.error or not response.url:
            raise BackendError(
                task.format.value,
                response.error or "backend returned no output",
                context={"provider": response.provider},
            )
        return TaskOutcome(task, url=response.url)

    @staticmethod
    def _series_outcome(task: GenerationTask, response: SeriesResponse) -> TaskOutcome:
        if not response.urls:
            raise BackendError(
                task.format.value,
                "; ".join(response.errors) or "no parts generated",
                context={"provider": response.provider},
            )
        if response.errors:
            logger.warning(f"{task.format.value} partially generated: {response.errors}")
        return TaskOutcome(task, urls=list(response.urls), part_errors=list(response.errors))


def aggregate(ideas: str, outcomes: List[TaskOutcome]) -> CreativeResult:
    """Merge task outcomes, in dispatch order, into a new result."""
    fields: Dict[str, Any] = {}
    generated: List[str] = []
    errors: List[str] = []

    for outcome in outcomes:
        if not outcome.succeeded:
            errors.append(outcome.error.as_result_error())
            continue

        fmt = outcome.task.format
        if fmt == OutputFormat.IMAGE:
            fields["image_url"] = outcome.url
        elif fmt == OutputFormat.VIDEO:
            fields["video_url"] = outcome.url
        elif fmt == OutputFormat.SERIES:
            fields["series_urls"] = list(outcome.urls)
        elif fmt == OutputFormat.IMAGE_SERIES:
            fields["image_series_urls"] = list(outcome.urls)
        generated.append(fmt.value)

    return CreativeResult(ideas=ideas, formats_generated=generated, errors=errors, **fields)


def merge_series(existing: CreativeResult, fresh: CreativeResult) -> CreativeResult:
    """Fold an image-series run into an earlier result without touching it."""
    merged = existing.model_copy(deep=True)

    new_urls = fresh.image_series_urls or []
    if new_urls:
        merged.image_series_urls = list(existing.image_series_urls or []) + list(new_urls)
        if OutputFormat.IMAGE_SERIES.value not in merged.formats_generated:
            merged.formats_generated.append(OutputFormat.IMAGE_SERIES.value)

    merged.errors = list(existing.errors) + list(fresh.errors)
    return merged

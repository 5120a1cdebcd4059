import asyncio

import pytest

from exceptions import RunCancelled, ValidationError
from fakes import FakeImage, FakeText, FakeVideo, make_request
from models import CreativeResult, OutputFormat, RunState
from orchestrator import FormatOrchestrator, expand_formats
from progress import EventKind, ProgressChannel, ProgressEstimator
from settings import Settings


def _orchestrator(text=None, image=None, video=None, **settings_overrides):
    values = dict(progress_reset_delay=0.0, text_timeout=5.0, image_timeout=5.0,
                  video_timeout=5.0, series_timeout=5.0, video_series_parts=5)
    values.update(settings_overrides)
    return FormatOrchestrator(
        text or FakeText(), image or FakeImage(), video or FakeVideo(),
        settings=Settings(**values), channel=ProgressChannel(),
    )


def test_combined_expands_in_dispatch_order():
    formats = expand_formats([OutputFormat.IMAGE_SERIES, OutputFormat.COMBINED, OutputFormat.IMAGE])
    assert formats == (OutputFormat.IMAGE, OutputFormat.VIDEO, OutputFormat.SERIES, OutputFormat.IMAGE_SERIES)


class TestValidation:
    @pytest.mark.asyncio
    async def test_empty_formats_rejected_before_any_backend_call(self, orchestrator, backends):
        text, image, video = backends
        with pytest.raises(ValidationError):
            await orchestrator.submit(make_request(formats=[]))
        assert text.calls == 0
        assert image.prompts == []
        assert video.prompts == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [
        {"path": "Underwater Basket Weaving"},
        {"palette": []},
        {"palette": [{"hex": "red", "name": "Red"}]},
        {"formats": ["hologram"]},
        {"imagePromptChoice": None},
        {"imageAspectRatio": "4:3"},
        {"formats": ["image-series"], "imageSeriesConfig": {"count": 11}},
        {"formats": ["image-series"], "imageSeriesConfig": {"count": 2}},
    ])
    async def test_invalid_requests(self, orchestrator, backends, overrides):
        with pytest.raises(ValidationError):
            await orchestrator.submit(make_request(**overrides))
        assert backends[0].calls == 0

    def test_emoji_domain_label_accepted(self, orchestrator):
        validated = orchestrator.validate(make_request(path="🍳 Cooking"))
        assert validated.domain.value == "Cooking"

    def test_image_series_does_not_need_angle(self, orchestrator):
        validated = orchestrator.validate(make_request(formats=["image-series"], imagePromptChoice=None))
        assert validated.formats == (OutputFormat.IMAGE_SERIES,)

    def test_snapshot_is_isolated_from_caller(self, orchestrator):
        request = make_request(customizations={"dietary_needs": ["Vegan"]})
        validated = orchestrator.validate(request)
        request.customizations["dietary_needs"].append("Keto")
        request.palette[0].name = "Blue"

        assert validated.customizations["dietary_needs"] == ["Vegan"]
        assert validated.palette[0].name == "Red"


class TestSubmit:
    @pytest.mark.asyncio
    async def test_single_image_run(self, orchestrator, backends):
        text, image, _ = backends
        result = await orchestrator.submit(make_request())

        assert result.formats_generated == ["image"]
        assert result.errors == []
        assert result.image_url.startswith("data:image/png;base64,")
        assert result.ideas == text.text
        assert result.status == RunState.COMPLETED

        prompt = image.prompts[0]
        assert "Colors emphasizing Red tones with Red accents" in prompt
        assert text.text in prompt
        assert image.aspects == ["1:1"]

    @pytest.mark.asyncio
    async def test_combined_with_image_failure(self):
        video = FakeVideo()
        orchestrator = _orchestrator(image=FakeImage(fail=True), video=video)

        result = await orchestrator.submit(make_request(formats=["combined"]))

        assert result.formats_generated == ["video", "series"]
        assert result.errors == ["Failed to generate image: image backend exploded"]
        assert len(result.errors) + len(result.formats_generated) == 3
        assert result.video_url is not None
        assert len(result.series_urls) == 5
        assert result.image_url is None
        assert result.status == RunState.PARTIALLY_FAILED
        # one single video plus five series parts
        assert len(video.prompts) == 6

    @pytest.mark.asyncio
    async def test_every_format_failing(self):
        orchestrator = _orchestrator(image=FakeImage(fail=True), video=FakeVideo(fail=True))

        result = await orchestrator.submit(make_request(formats=["image", "video"]))

        assert result.formats_generated == []
        assert len(result.errors) == 2
        assert result.status == RunState.FAILED

    @pytest.mark.asyncio
    async def test_ideas_failure_does_not_stop_run(self):
        image = FakeImage()
        orchestrator = _orchestrator(text=FakeText(error="quota_exceeded"), image=image)

        result = await orchestrator.submit(make_request())

        assert result.ideas == ""
        assert result.errors == []
        assert result.formats_generated == ["image"]
        assert "a signature dish" in image.prompts[0]

    @pytest.mark.asyncio
    async def test_ideas_exception_does_not_stop_run(self):
        orchestrator = _orchestrator(text=FakeText(raises=RuntimeError("socket closed")))

        result = await orchestrator.submit(make_request())

        assert result.ideas == ""
        assert result.formats_generated == ["image"]

    @pytest.mark.asyncio
    async def test_slow_backend_times_out_without_blocking_others(self):
        orchestrator = _orchestrator(video=FakeVideo(delay=1.0), video_timeout=0.05)

        result = await orchestrator.submit(make_request(formats=["image", "video"]))

        assert result.formats_generated == ["image"]
        assert len(result.errors) == 1
        assert result.errors == ["Failed to generate video: timed out after 0.05s"]

    @pytest.mark.asyncio
    async def test_series_with_one_failed_part_still_succeeds(self):
        orchestrator = _orchestrator(video=FakeVideo(fail_on=[2]))
        events = []
        orchestrator.channel.subscribe(events.append)

        result = await orchestrator.submit(make_request(formats=["series"]))

        assert result.formats_generated == ["series"]
        assert len(result.series_urls) == 4
        assert result.errors == []
        completed = [e for e in events if e.kind == EventKind.TASK_COMPLETED and e.task == "series"]
        assert completed[0].detail == "part 2: video backend exploded"

    @pytest.mark.asyncio
    async def test_series_deadline_keeps_finished_parts(self):
        video = FakeVideo(delay=0.1)
        orchestrator = _orchestrator(video=video, series_timeout=0.35)
        events = []
        orchestrator.channel.subscribe(events.append)

        result = await orchestrator.submit(make_request(formats=["series"]))

        assert result.formats_generated == ["series"]
        assert result.series_urls == [
            "https://videos.test/1.mp4", "https://videos.test/2.mp4", "https://videos.test/3.mp4",
        ]
        assert result.errors == []
        assert len(video.prompts) == 4
        completed = [e for e in events if e.kind == EventKind.TASK_COMPLETED and e.task == "series"]
        assert completed[0].detail == "part 4: timed out after 0.35s; part 5: timed out after 0.35s"

    @pytest.mark.asyncio
    async def test_series_deadline_before_any_part_fails_task(self):
        orchestrator = _orchestrator(video=FakeVideo(delay=0.2), series_timeout=0.05)

        result = await orchestrator.submit(make_request(formats=["series"]))

        assert result.formats_generated == []
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Failed to generate series: part 1: timed out after 0.05s")

    @pytest.mark.asyncio
    async def test_image_series_uses_theme_aspect(self):
        image = FakeImage()
        orchestrator = _orchestrator(image=image)

        result = await orchestrator.submit(make_request(
            formats=["image-series"],
            imagePromptChoice=None,
            imageSeriesConfig={"themeId": "social-content", "count": 3},
        ))

        assert result.formats_generated == ["image-series"]
        assert len(result.image_series_urls) == 3
        assert image.aspects == ["9:16", "9:16", "9:16"]
        assert "Image 3 of 3" in image.prompts[2]

    @pytest.mark.asyncio
    async def test_concurrent_runs_are_independent(self):
        image = FakeImage()
        orchestrator = _orchestrator(image=image)

        red, blue = await asyncio.gather(
            orchestrator.submit(make_request()),
            orchestrator.submit(make_request(
                palette=[{"hex": "#0000FF", "name": "Blue", "suggested_role": "Dominant"}],
            )),
        )

        assert red is not blue
        assert red.image_url != blue.image_url
        assert red.formats_generated == blue.formats_generated == ["image"]
        assert any("Red tones" in p for p in image.prompts)
        assert any("Blue tones" in p for p in image.prompts)

    @pytest.mark.asyncio
    async def test_newer_run_supersedes_same_session(self):
        orchestrator = _orchestrator(image=FakeImage(delay=0.3))

        first = asyncio.ensure_future(orchestrator.submit(make_request(sessionId="s1")))
        await asyncio.sleep(0.05)
        second = await orchestrator.submit(make_request(sessionId="s1"))

        with pytest.raises(RunCancelled):
            await first
        assert second.formats_generated == ["image"]

    @pytest.mark.asyncio
    async def test_cancel_without_active_run(self, orchestrator):
        assert orchestrator.cancel("nobody") is False


class TestCreateSeries:
    @pytest.mark.asyncio
    async def test_merges_into_copy_of_existing(self):
        text = FakeText()
        orchestrator = _orchestrator(text=text)
        existing = CreativeResult(
            ideas="Earlier concept",
            image_url="data:image/png;base64,OLD",
            formats_generated=["image"],
            errors=["Failed to generate video: timed out after 360s"],
        )

        merged = await orchestrator.create_series(
            existing, make_request(imageSeriesConfig={"count": 3}),
        )

        assert merged.formats_generated == ["image", "image-series"]
        assert len(merged.image_series_urls) == 3
        assert merged.image_url == existing.image_url
        assert merged.ideas == "Earlier concept"
        assert merged.errors == existing.errors
        assert existing.formats_generated == ["image"]
        assert existing.image_series_urls is None
        assert text.calls == 0


class TestProgress:
    @pytest.mark.asyncio
    async def test_progress_is_monotonic_then_completes_and_resets(self):
        orchestrator = _orchestrator()
        estimator = ProgressEstimator()
        seen = []
        orchestrator.channel.subscribe(estimator)
        orchestrator.channel.subscribe(lambda event: seen.append((event.kind, estimator.progress)))

        await orchestrator.submit(make_request(formats=["image", "video"]))

        kinds = [kind for kind, _ in seen]
        assert kinds[0] == EventKind.RUN_STARTED
        seen = seen[:kinds.index(EventKind.RUN_COMPLETED) + 1]

        in_flight = [progress for _, progress in seen[:-1]]
        assert in_flight == sorted(in_flight)
        assert max(in_flight) <= ProgressEstimator.IN_FLIGHT_CAP
        assert seen[-1][1] == 100.0
        assert estimator.state == RunState.COMPLETED

        await asyncio.sleep(0.05)
        assert estimator.progress == 0.0
        assert estimator.state == RunState.IDLE
        assert orchestrator.state == RunState.IDLE

    @pytest.mark.asyncio
    async def test_each_session_resets_while_another_runs(self):
        orchestrator = _orchestrator(image=FakeImage(delay=0.1), progress_reset_delay=0.05)
        estimators = {"a": ProgressEstimator(), "b": ProgressEstimator()}
        for session_id, estimator in estimators.items():
            orchestrator.channel.subscribe(
                lambda event, sid=session_id, est=estimator: est.handle(event) if event.session_id == sid else None
            )

        await orchestrator.submit(make_request(sessionId="a"))
        second = asyncio.ensure_future(orchestrator.submit(make_request(sessionId="b")))
        await asyncio.sleep(0.08)

        assert estimators["a"].progress == 0.0
        assert estimators["a"].state == RunState.IDLE
        assert estimators["b"].state == RunState.RUNNING

        await second
        await asyncio.sleep(0.1)
        assert estimators["b"].progress == 0.0
        assert estimators["b"].state == RunState.IDLE
        assert orchestrator.state == RunState.IDLE

    @pytest.mark.asyncio
    async def test_cancelled_run_resets_its_session(self):
        orchestrator = _orchestrator(image=FakeImage(delay=0.3))
        estimator = ProgressEstimator()
        kinds = []
        orchestrator.channel.subscribe(estimator)
        orchestrator.channel.subscribe(lambda event: kinds.append(event.kind))

        run = asyncio.ensure_future(orchestrator.submit(make_request(sessionId="s1")))
        await asyncio.sleep(0.05)
        assert orchestrator.cancel("s1") is True

        with pytest.raises(RunCancelled):
            await run
        assert kinds[-1] == EventKind.RUN_RESET
        assert estimator.progress == 0.0
        assert estimator.state == RunState.IDLE

    def test_tick_creeps_but_stays_under_cap(self):
        estimator = ProgressEstimator()
        estimator.state = RunState.RUNNING
        values = [estimator.tick() for _ in range(100)]

        assert values == sorted(values)
        assert values[-1] <= ProgressEstimator.IN_FLIGHT_CAP
        assert estimator.stage == "creating"

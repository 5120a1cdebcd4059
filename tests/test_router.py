import pytest

from providers.base import LLMProvider, LLMResponse, TaskType
from providers.router import ProviderRouter


class FakeProvider(LLMProvider):
    def __init__(self, name: str, fail: bool = False, available: bool = True):
        self._name = name
        self.fail = fail
        self.available = available
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return self.available

    def _respond(self) -> LLMResponse:
        self.calls += 1
        if self.fail:
            return LLMResponse(text="", model_used="m", provider=self.name, error="api_error")
        return LLMResponse(text=f"from {self.name}", model_used="m", provider=self.name)

    async def generate_text(self, prompt, model=None, config=None):
        return self._respond()

    async def analyze_image(self, image_data, prompt, mime_type="image/jpeg", model=None):
        return self._respond()


@pytest.mark.asyncio
async def test_primary_used_when_healthy():
    primary, fallback = FakeProvider("primary"), FakeProvider("fallback")
    router = ProviderRouter(primary=primary, fallback=fallback)

    response = await router.generate_text("hello", TaskType.TEXT_GENERATION)

    assert response.text == "from primary"
    assert fallback.calls == 0


@pytest.mark.asyncio
async def test_failure_is_returned_without_retry():
    primary, fallback = FakeProvider("primary", fail=True), FakeProvider("fallback")
    router = ProviderRouter(primary=primary, fallback=fallback)

    response = await router.generate_text("hello")

    assert response.error == "api_error"
    assert primary.calls == 1
    assert fallback.calls == 0


@pytest.mark.asyncio
async def test_circuit_breaker_switches_to_fallback():
    primary, fallback = FakeProvider("primary", fail=True), FakeProvider("fallback")
    router = ProviderRouter(primary=primary, fallback=fallback, failure_threshold=3)

    for _ in range(3):
        await router.generate_text("hello")
    assert router.get_active_provider() is fallback

    response = await router.analyze_image(b"img", "describe", "image/png")
    assert response.text == "from fallback"
    assert primary.calls == 3

    router.reset_primary()
    assert router.get_active_provider() is primary


@pytest.mark.asyncio
async def test_success_resets_failure_count():
    primary, fallback = FakeProvider("primary", fail=True), FakeProvider("fallback")
    router = ProviderRouter(primary=primary, fallback=fallback, failure_threshold=3)

    await router.generate_text("a")
    await router.generate_text("b")
    primary.fail = False
    await router.generate_text("c")
    primary.fail = True
    await router.generate_text("d")
    await router.generate_text("e")

    assert router.get_active_provider() is primary


@pytest.mark.asyncio
async def test_no_provider_available():
    router = ProviderRouter(
        primary=FakeProvider("primary", available=False),
        fallback=FakeProvider("fallback", available=False),
    )

    response = await router.generate_text("hello")

    assert response.error == "all_providers_unavailable"
    assert router.get_active_provider() is None

"""Tests for the AI stylist client with the provider mocked out."""

from __future__ import annotations

from types import SimpleNamespace

import httpx
import pytest
import pytest_mock

from stylehub.config.settings import Settings
from stylehub.nlp.stylist_client import MAX_IMAGE_BYTES, StylistClient, strip_markdown
from stylehub.services.errors import UpstreamError, ValidationError

SETTINGS = Settings(aitunnel_api_key="test-key", aitunnel_base_url="https://aitunnel.test/v1/")


def completion(content: str) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def openai_mock(mocker: pytest_mock.MockerFixture):
    client_cls = mocker.patch("stylehub.nlp.stylist_client.AsyncOpenAI")
    instance = client_cls.return_value
    instance.chat.completions.create = mocker.AsyncMock()
    instance.close = mocker.AsyncMock(return_value=None)
    return client_cls


def test_missing_api_key_is_a_configuration_error() -> None:
    with pytest.raises(UpstreamError) as error:
        StylistClient(Settings(aitunnel_api_key=""))

    assert "API key missing" in error.value.message


def test_strip_markdown_removes_fences() -> None:
    assert strip_markdown('```json\n{"a": 1}\n```') == '{"a": 1}'


@pytest.mark.asyncio
async def test_suggest_colors_parses_fenced_json(openai_mock) -> None:
    create = openai_mock.return_value.chat.completions.create
    create.return_value = completion(
        '```json {"recommendedColors": ["emerald", "gold"], "advice": "Go bold."} ```'
    )

    advice = await StylistClient(SETTINGS).suggest_colors("medium")

    assert advice.recommended_colors == ["emerald", "gold"]
    assert advice.model_dump(by_alias=True)["recommendedColors"] == ["emerald", "gold"]
    openai_mock.assert_called_once_with(
        api_key="test-key",
        base_url="https://aitunnel.test/v1",
        timeout=SETTINGS.ai_request_timeout,
    )
    assert "medium skin tone" in create.await_args.kwargs["messages"][0]["content"]


@pytest.mark.asyncio
async def test_suggest_colors_requires_skin_tone(openai_mock) -> None:
    with pytest.raises(ValidationError):
        await StylistClient(SETTINGS).suggest_colors("  ")

    openai_mock.return_value.chat.completions.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_unparseable_answer_is_upstream_error(openai_mock) -> None:
    openai_mock.return_value.chat.completions.create.return_value = completion("I think blue?")

    with pytest.raises(UpstreamError) as error:
        await StylistClient(SETTINGS).suggest_colors("fair")

    assert error.value.message == "Failed to parse AI suggestions"
    assert error.value.detail == "I think blue?"


@pytest.mark.asyncio
async def test_detect_skin_tone_sends_image_as_data_url(
    openai_mock, mocker: pytest_mock.MockerFixture
) -> None:
    openai_mock.return_value.chat.completions.create.return_value = completion(
        '{"skinTone": " Olive ", "confidence": "high"}'
    )
    client = StylistClient(SETTINGS)
    fetch = mocker.patch.object(
        client, "_fetch_image", mocker.AsyncMock(return_value="data:image/png;base64,AAAA")
    )

    detection = await client.detect_skin_tone("https://img.test/face.png")

    assert detection.skin_tone == "olive"
    assert detection.confidence == "high"
    fetch.assert_awaited_once_with("https://img.test/face.png")
    content = openai_mock.return_value.chat.completions.create.await_args.kwargs["messages"][0]["content"]
    assert content[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}}


@pytest.mark.asyncio
async def test_detect_skin_tone_requires_url(openai_mock) -> None:
    with pytest.raises(ValidationError) as error:
        await StylistClient(SETTINGS).detect_skin_tone("")

    assert error.value.fields == ["imageUrl"]


@pytest.mark.asyncio
async def test_close_releases_provider_client(openai_mock) -> None:
    await StylistClient(SETTINGS).close()

    openai_mock.return_value.close.assert_awaited_once()


class ChunkedBody:
    """Async response body that records how many chunks were pulled."""

    def __init__(self, chunk: bytes, count: int) -> None:
        self.chunk = chunk
        self.count = count
        self.pulled = 0

    async def __aiter__(self):
        for _ in range(self.count):
            self.pulled += 1
            yield self.chunk


@pytest.mark.asyncio
async def test_fetch_image_returns_data_url(openai_mock) -> None:
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, headers={"content-type": "image/png"}, content=b"\x89PNG")
    )
    client = StylistClient(SETTINGS, image_transport=transport)

    assert await client._fetch_image("https://img.test/face.png") == "data:image/png;base64,iVBORw=="


@pytest.mark.asyncio
async def test_fetch_image_rejects_declared_oversize_before_reading(openai_mock) -> None:
    body = ChunkedBody(b"x" * 1024, 4)
    transport = httpx.MockTransport(
        lambda request: httpx.Response(
            200, headers={"content-length": str(MAX_IMAGE_BYTES + 1)}, content=body
        )
    )
    client = StylistClient(SETTINGS, image_transport=transport)

    with pytest.raises(ValidationError) as error:
        await client._fetch_image("https://img.test/huge.jpg")

    assert error.value.message == "Image is larger than 10MB"
    assert body.pulled == 0


@pytest.mark.asyncio
async def test_fetch_image_stops_reading_past_the_limit(openai_mock) -> None:
    body = ChunkedBody(b"x" * (4 * 1024 * 1024), 6)
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body))
    client = StylistClient(SETTINGS, image_transport=transport)

    with pytest.raises(ValidationError) as error:
        await client._fetch_image("https://img.test/endless.jpg")

    assert error.value.fields == ["imageUrl"]
    assert body.pulled == 3


@pytest.mark.asyncio
async def test_fetch_image_reports_unreachable_urls(openai_mock) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(404))
    client = StylistClient(SETTINGS, image_transport=transport)

    with pytest.raises(ValidationError) as error:
        await client._fetch_image("https://img.test/missing.jpg")

    assert "publicly accessible" in error.value.message

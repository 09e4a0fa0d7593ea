"""Client for colour advice and skin tone detection via the configured LLM provider."""

from __future__ import annotations

import base64
import json
import logging
import re
from typing import Any

import httpx
from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from stylehub.config.settings import Settings, get_settings
from stylehub.services.errors import UpstreamError, ValidationError

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 10 * 1024 * 1024
DETECTABLE_SKIN_TONES = (
    "fair", "light", "medium", "tan", "deep", "dark", "reddish", "olive", "pale",
)

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


class ColorAdvice(BaseModel):
    """Colours recommended for a skin tone."""

    recommended_colors: list[str] = Field(alias="recommendedColors")
    advice: str = ""

    model_config = {"populate_by_name": True}


class SkinToneDetection(BaseModel):
    skin_tone: str = Field(alias="skinTone")
    confidence: str = "low"

    model_config = {"populate_by_name": True}


def strip_markdown(text: str) -> str:
    """Remove code fences some models wrap around JSON answers."""

    return _FENCE_RE.sub("", text).strip()


class StylistClient:
    """Thin client that communicates with the AITunnel OpenAI-compatible proxy."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        image_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = settings or get_settings()
        if not settings.aitunnel_api_key:
            raise UpstreamError("Server configuration error: AI API key missing")

        self._settings = settings
        self._image_transport = image_transport
        self._client = AsyncOpenAI(
            api_key=settings.aitunnel_api_key,
            base_url=settings.aitunnel_base_url.rstrip("/"),
            timeout=settings.ai_request_timeout,
        )

    async def suggest_colors(self, skin_tone: str) -> ColorAdvice:
        """Ask the chat model which dress colours suit ``skin_tone``."""

        if not skin_tone or not skin_tone.strip():
            raise ValidationError("Skin tone is required", ["skinTone"])

        prompt = (
            f"Suggest suitable dress colors for a person with {skin_tone.strip()} skin tone. "
            "Return ONLY a JSON object with this structure: "
            '{"recommendedColors": ["color1", "color2", "color3", "color4", "color5"], '
            '"advice": "short advice (max 2 sentences)"}. '
            "Do not include markdown formatting or backticks."
        )
        content = await self._complete(
            self._settings.aitunnel_chat_model,
            [{"role": "user", "content": prompt}],
        )
        payload = self._parse_json(content, "Failed to parse AI suggestions")
        try:
            return ColorAdvice.model_validate(payload)
        except PydanticValidationError as exc:
            logger.warning("Unexpected colour advice payload: %s", payload)
            raise UpstreamError("Failed to parse AI suggestions", detail=content) from exc

    async def detect_skin_tone(self, image_url: str) -> SkinToneDetection:
        """Classify the skin tone of the person in the image at ``image_url``."""

        if not image_url or not image_url.strip():
            raise ValidationError("Image URL is required", ["imageUrl"])

        data_url = await self._fetch_image(image_url.strip())
        prompt = (
            "Analyze this person's skin tone in the image and classify it into ONE of these "
            f"categories ONLY: {', '.join(DETECTABLE_SKIN_TONES)}.\n\n"
            "Return ONLY a JSON object with this exact structure (no markdown, no backticks):\n"
            '{"skinTone": "one of the categories above", "confidence": "high|medium|low"}'
        )
        content = await self._complete(
            self._settings.aitunnel_vision_model,
            [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": data_url}},
                    ],
                }
            ],
        )
        payload = self._parse_json(content, "Failed to parse skin tone detection")
        try:
            detection = SkinToneDetection.model_validate(payload)
        except PydanticValidationError as exc:
            logger.warning("Unexpected skin tone payload: %s", payload)
            raise UpstreamError("Failed to parse skin tone detection", detail=content) from exc
        detection.skin_tone = detection.skin_tone.strip().lower()
        return detection

    async def ping(self) -> bool:
        """Return ``True`` if the upstream service responds to a model listing call."""

        models = await self._client.models.list()
        return bool(models.data)

    async def close(self) -> None:
        """Release HTTP resources."""

        await self._client.close()

    async def _fetch_image(self, image_url: str) -> str:
        """Download the image and return it as a base64 data URL.

        The transfer is aborted as soon as the declared or received size
        passes ``MAX_IMAGE_BYTES``.
        """

        too_large = ValidationError("Image is larger than 10MB", ["imageUrl"])
        chunks: list[bytes] = []
        received = 0
        try:
            async with httpx.AsyncClient(
                timeout=10.0,
                follow_redirects=True,
                transport=self._image_transport,
            ) as client:
                async with client.stream("GET", image_url) as response:
                    response.raise_for_status()
                    declared = response.headers.get("content-length")
                    if declared and declared.isdigit() and int(declared) > MAX_IMAGE_BYTES:
                        raise too_large
                    async for chunk in response.aiter_bytes():
                        received += len(chunk)
                        if received > MAX_IMAGE_BYTES:
                            raise too_large
                        chunks.append(chunk)
                    mime_type = response.headers.get("content-type", "image/jpeg").split(";")[0]
        except httpx.HTTPError as exc:
            logger.error("Failed to fetch image %s: %s", image_url[:100], exc)
            raise ValidationError(
                "Failed to fetch image from URL. Ensure the image URL is publicly accessible.",
                ["imageUrl"],
            ) from exc

        encoded = base64.b64encode(b"".join(chunks)).decode("ascii")
        return f"data:{mime_type};base64,{encoded}"

    async def _complete(self, model: str, messages: list[dict[str, Any]]) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=messages,  # type: ignore[arg-type]
                max_tokens=400,
            )
        except OpenAIError as exc:
            logger.error("AI provider call to %s failed: %s", model, exc)
            raise UpstreamError("AI service error", detail=str(exc)) from exc
        if not response.choices:
            raise UpstreamError("AI service returned no choices")
        return response.choices[0].message.content or ""

    @staticmethod
    def _parse_json(content: str, message: str) -> dict[str, Any]:
        cleaned = strip_markdown(content)
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            logger.warning("Failed to parse AI JSON: %s", content)
            raise UpstreamError(message, detail=content) from exc
        if not isinstance(parsed, dict):
            raise UpstreamError(message, detail=content)
        return parsed

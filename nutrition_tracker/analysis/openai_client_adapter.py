import base64
from collections.abc import Sequence
from typing import Any

import httpx
import openai

from nutrition_tracker.analysis.client_base import BaseVisionClient
from nutrition_tracker.analysis.exceptions import AnalysisNetworkError, AnalysisResponseError


class OpenAIClientAdapter(BaseVisionClient):
    """Vision client adapter built on the OpenAI chat completions API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
        image_detail: str = "high",
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )
        self._image_detail = image_detail

    def create_vision_completion(
        self,
        *,
        model: str,
        temperature: float | None,
        prompt: str,
        images: Sequence[bytes],
        json_schema: dict[str, object],
    ) -> str:
        content: list[dict[str, Any]] = [{"type": "text", "text": prompt}]
        content.extend(
            {
                "type": "image_url",
                "image_url": {
                    "url": _data_url(image),
                    "detail": self._image_detail,
                },
            }
            for image in images
        )
        request: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": content}],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": "meal_nutrition_analysis",
                    "strict": True,
                    "schema": json_schema,
                },
            },
        }
        if temperature is not None:
            request["temperature"] = temperature

        try:
            response = self._client.chat.completions.create(**request)
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise AnalysisNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise AnalysisNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise AnalysisResponseError("AI returned no choices")
        message = response.choices[0].message
        if getattr(message, "refusal", None):
            raise AnalysisResponseError(f"AI refused the request: {message.refusal}")
        if not message.content:
            raise AnalysisResponseError("AI returned empty response")
        return message.content


def _data_url(image: bytes) -> str:
    return "data:image/jpeg;base64," + base64.b64encode(image).decode("ascii")

"""AI-powered meal analysis requestor."""

import json
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from nutrition_tracker.analysis.base import BaseAnalysisRequestor
from nutrition_tracker.analysis.client_base import BaseVisionClient
from nutrition_tracker.analysis.exceptions import AnalysisError
from nutrition_tracker.analysis.models import AnalysisOutcome, fallback_outcome
from nutrition_tracker.analysis.prompt_loader import (
    load_json_schema,
    load_multi_image_preamble,
    load_prompt_template,
)
from nutrition_tracker.analysis.validator import extract_json_object, validate_and_build
from nutrition_tracker.logging.logger import Log

# Model families that only accept the default sampling temperature.
_FIXED_TEMPERATURE_PREFIXES: tuple[str, ...] = ("gpt-5", "o1", "o3", "o4")


def supports_temperature(model: str) -> bool:
    return not model.lower().startswith(_FIXED_TEMPERATURE_PREFIXES)


def render_time_context(captured_at: datetime | None) -> str:
    if captured_at is None:
        return ""
    return (
        f"The photos were taken on {captured_at:%Y-%m-%d} at {captured_at:%H:%M}."
    )


def render_info_context(context: str) -> str:
    context = context.strip()
    if not context:
        return ""
    return f"Additional context provided by the user: {context}"


class AnalysisRequestor(BaseAnalysisRequestor):
    """Sends every photo of a meal to a vision model in one request."""

    def __init__(
        self,
        *,
        client: BaseVisionClient,
        model: str,
        temperature: float = 0.2,
        prompt_template_path: Path | None = None,
        multi_image_preamble_path: Path | None = None,
        json_schema_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = (
            max(0.0, min(1.0, temperature)) if supports_temperature(model) else None
        )
        self._prompt_template = load_prompt_template(prompt_template_path)
        self._multi_image_preamble = load_multi_image_preamble(multi_image_preamble_path)
        self._json_schema = json.loads(load_json_schema(json_schema_path))

    def analyze(
        self,
        images: Sequence[bytes],
        captured_at: datetime | None,
        context: str = "",
    ) -> AnalysisOutcome:
        Log.info(
            "Analyzing meal images",
            images=len(images),
            has_captured_at=captured_at is not None,
            has_context=bool(context),
            model=self._model,
        )
        try:
            if not images:
                raise AnalysisError("No images to analyze")
            prompt = self.build_prompt(len(images), captured_at, context)
            Log.debug(f"Analysis prompt:\n{prompt}")

            raw_response = self._client.create_vision_completion(
                model=self._model,
                temperature=self._temperature,
                prompt=prompt,
                images=list(images),
                json_schema=self._json_schema,
            )
            Log.debug(f"AI raw response:\n{raw_response}")

            outcome = validate_and_build(extract_json_object(raw_response))
        except Exception as exc:
            Log.error(
                f"Meal analysis failed, using fallback: {exc}",
                images=len(images),
                error_type=type(exc).__name__,
            )
            return fallback_outcome()

        Log.info(
            "Meal analysis complete",
            images=len(images),
            total_calories=outcome.calories.total_calories,
            categories_present=outcome.nutritional_categories.present_count(),
            avg_confidence=round(outcome.average_confidence(), 2),
        )
        return outcome

    def build_prompt(
        self, image_count: int, captured_at: datetime | None, context: str
    ) -> str:
        body = self._prompt_template.format(
            time_context=render_time_context(captured_at),
            info_context=render_info_context(context),
        )
        if image_count > 1:
            preamble = self._multi_image_preamble.format(image_count=image_count)
            return f"{preamble.strip()}\n\n{body}"
        return body

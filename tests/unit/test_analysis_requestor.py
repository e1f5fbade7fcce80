import json
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from nutrition_tracker.analysis.example_client_adapter import ExampleClientAdapter
from nutrition_tracker.analysis.exceptions import AnalysisNetworkError
from nutrition_tracker.analysis.models import Portion, fallback_outcome
from nutrition_tracker.analysis.requestor import (
    AnalysisRequestor,
    render_info_context,
    render_time_context,
    supports_temperature,
)


def _client_returning(payload: object) -> MagicMock:
    client = MagicMock()
    client.create_vision_completion.return_value = (
        payload if isinstance(payload, str) else json.dumps(payload)
    )
    return client


def _requestor(client: MagicMock, model: str = "gpt-4o", **kwargs: object) -> AnalysisRequestor:
    return AnalysisRequestor(client=client, model=model, **kwargs)


class TestHelpers:
    @pytest.mark.parametrize(
        ("model", "expected"),
        [("gpt-4o", True), ("gpt-4.1-mini", True), ("gpt-5", False), ("GPT-5-mini", False), ("o3", False)],
    )
    def test_supports_temperature(self, model: str, expected: bool) -> None:
        assert supports_temperature(model) is expected

    def test_time_context(self) -> None:
        assert render_time_context(datetime(2024, 5, 1, 12, 30)) == (
            "The photos were taken on 2024-05-01 at 12:30."
        )

    def test_time_context_absent(self) -> None:
        assert render_time_context(None) == ""

    def test_info_context(self) -> None:
        assert render_info_context("  sin gluten ") == (
            "Additional context provided by the user: sin gluten"
        )
        assert render_info_context("   ") == ""


class TestAnalyze:
    def test_single_request_for_all_images(self) -> None:
        client = _client_returning(ExampleClientAdapter.DEFAULT_RESPONSE)
        requestor = _requestor(client)

        outcome = requestor.analyze([b"one", b"two", b"three"], None)

        client.create_vision_completion.assert_called_once()
        kwargs = client.create_vision_completion.call_args.kwargs
        assert kwargs["images"] == [b"one", b"two", b"three"]
        assert kwargs["json_schema"]["type"] == "object"
        assert outcome.calories.total_calories == 450
        assert outcome.nutritional_categories.vegetables.portion is Portion.HIGH

    def test_prompt_includes_time_and_context(self) -> None:
        client = _client_returning(ExampleClientAdapter.DEFAULT_RESPONSE)
        _requestor(client).analyze(
            [b"img"], datetime(2024, 5, 1, 12, 30), context="Información adicional: cena"
        )
        prompt = client.create_vision_completion.call_args.kwargs["prompt"]
        assert "The photos were taken on 2024-05-01 at 12:30." in prompt
        assert "Additional context provided by the user: Información adicional: cena" in prompt

    def test_multi_image_preamble(self) -> None:
        client = _client_returning(ExampleClientAdapter.DEFAULT_RESPONSE)
        _requestor(client).analyze([b"a", b"b"], None)
        prompt = client.create_vision_completion.call_args.kwargs["prompt"]
        assert prompt.startswith("IMPORTANT: You will receive 2 photos.")

    def test_no_preamble_for_single_image(self) -> None:
        client = _client_returning(ExampleClientAdapter.DEFAULT_RESPONSE)
        _requestor(client).analyze([b"a"], None)
        prompt = client.create_vision_completion.call_args.kwargs["prompt"]
        assert "You will receive" not in prompt

    def test_temperature_sent_when_supported(self) -> None:
        client = _client_returning(ExampleClientAdapter.DEFAULT_RESPONSE)
        _requestor(client, model="gpt-4o", temperature=0.3).analyze([b"a"], None)
        assert client.create_vision_completion.call_args.kwargs["temperature"] == 0.3

    def test_temperature_omitted_for_fixed_models(self) -> None:
        client = _client_returning(ExampleClientAdapter.DEFAULT_RESPONSE)
        _requestor(client, model="gpt-5", temperature=0.3).analyze([b"a"], None)
        assert client.create_vision_completion.call_args.kwargs["temperature"] is None

    def test_json_embedded_in_prose_is_accepted(self) -> None:
        text = "Sure!\n" + json.dumps(ExampleClientAdapter.DEFAULT_RESPONSE) + "\nBye"
        outcome = _requestor(_client_returning(text)).analyze([b"a"], None)
        assert outcome.used_fallback is False

    def test_client_error_returns_fallback(self) -> None:
        client = MagicMock()
        client.create_vision_completion.side_effect = AnalysisNetworkError("down")
        outcome = _requestor(client).analyze([b"a"], None)
        assert outcome == fallback_outcome()

    def test_unparsable_response_returns_fallback(self) -> None:
        outcome = _requestor(_client_returning("no json here")).analyze([b"a"], None)
        assert outcome.used_fallback is True
        assert outcome.calories.total_calories == 0
        assert outcome.calories.confidence == 0.1

    def test_missing_required_key_returns_fallback(self) -> None:
        payload = dict(ExampleClientAdapter.DEFAULT_RESPONSE)
        del payload["analysisNotes"]
        assert _requestor(_client_returning(payload)).analyze([b"a"], None) == fallback_outcome()

    def test_no_images_returns_fallback_without_calling_client(self) -> None:
        client = _client_returning(ExampleClientAdapter.DEFAULT_RESPONSE)
        outcome = _requestor(client).analyze([], None)
        assert outcome.used_fallback is True
        client.create_vision_completion.assert_not_called()


class TestCustomTemplates:
    def test_uses_custom_prompt_template(self, tmp_path: Path) -> None:
        template = tmp_path / "prompt.txt"
        template.write_text("Meal. {time_context} {info_context}")
        client = _client_returning(ExampleClientAdapter.DEFAULT_RESPONSE)
        requestor = _requestor(client, prompt_template_path=template)
        assert requestor.build_prompt(1, None, "") == "Meal.  "

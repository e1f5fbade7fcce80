"""Example vision client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseVisionClient and register the provider in AnalysisRequestorFactory.
"""

import json
from collections.abc import Sequence
from typing import ClassVar

from nutrition_tracker.analysis.client_base import BaseVisionClient


class ExampleClientAdapter(BaseVisionClient):
    """Offline adapter that returns a fixed, valid analysis JSON."""

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "calories": {
            "totalCalories": 450,
            "caloriesRange": {"min": 380, "max": 520},
            "confidence": 0.6,
        },
        "nutritionalCategories": {
            "vegetables": {"present": True, "portion": "high", "confidence": 0.8},
            "fruits": {"present": False, "portion": "low", "confidence": 0.7},
            "proteins": {"present": True, "portion": "medium", "confidence": 0.7},
            "sugars": {"present": False, "portion": "low", "confidence": 0.6},
            "processedFoods": {"present": False, "portion": "low", "confidence": 0.6},
        },
        "analysisNotes": "Example analysis: mixed salad with grilled chicken.",
    }

    def create_vision_completion(
        self,
        *,
        model: str,
        temperature: float | None,
        prompt: str,
        images: Sequence[bytes],
        json_schema: dict[str, object],
    ) -> str:
        _ = model, temperature, prompt, images, json_schema
        return json.dumps(self.DEFAULT_RESPONSE)

from pathlib import Path

from nutrition_tracker.analysis.exceptions import AnalysisError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def _read(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AnalysisError(f"Failed to load {what}: {exc}") from exc


def load_prompt_template(path: Path | None = None) -> str:
    """Load the meal analysis prompt template.

    The template has `{time_context}` and `{info_context}` placeholders.

    Raises:
        AnalysisError: if the file cannot be read.
    """
    return _read(path or _DEFAULT_PROMPT_DIR / "nutrition_prompt.txt", "prompt template")


def load_multi_image_preamble(path: Path | None = None) -> str:
    """Load the statement prepended when a meal has several photos.

    The preamble has an `{image_count}` placeholder.
    """
    return _read(
        path or _DEFAULT_PROMPT_DIR / "multi_image_preamble.txt", "multi-image preamble"
    )


def load_json_schema(path: Path | None = None) -> str:
    """Load the JSON schema the model response must follow."""
    return _read(path or _DEFAULT_PROMPT_DIR / "nutrition_schema.json", "JSON schema")

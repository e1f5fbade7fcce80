from collections.abc import Callable, Generator
from unittest.mock import MagicMock, patch

import pytest

from nutrition_tracker.analysis.models import AnalysisResult
from nutrition_tracker.config.exceptions import ConfigurationError
from nutrition_tracker.main import load_settings, main, parse_args
from nutrition_tracker.records.exceptions import RecordStoreError


@pytest.fixture(autouse=True)
def _quiet_logging() -> Generator[None, None, None]:
    with patch("nutrition_tracker.main.Log.configure"):
        yield


@pytest.fixture()
def configured_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NOTION_API_KEY", "secret")
    monkeypatch.setenv("NOTION_DATABASE_ID", "db-1")
    monkeypatch.setenv("OPENAI_API_KEY", "sk")


class TestParseArgs:
    def test_defaults(self) -> None:
        args = parse_args([])
        assert args.page is None
        assert args.limit == 5

    def test_page_and_limit(self) -> None:
        args = parse_args(["--page", "abc", "--limit", "3"])
        assert args.page == "abc"
        assert args.limit == 3

    @pytest.mark.parametrize("value", ["0", "-1", "many"])
    def test_rejects_bad_limit(self, value: str) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--limit", value])


class TestLoadSettings:
    def test_missing_variables_raise(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("NOTION_API_KEY", "NOTION_DATABASE_ID", "OPENAI_API_KEY"):
            monkeypatch.delenv(name, raising=False)
        with patch("nutrition_tracker.main.Settings") as mock_settings:
            mock_settings.return_value.missing_required.return_value = ["NOTION_API_KEY"]
            with pytest.raises(ConfigurationError, match="NOTION_API_KEY"):
                load_settings()


class TestMain:
    @patch("nutrition_tracker.main.close_pool")
    @patch("nutrition_tracker.main.build_reconciler")
    def test_success_prints_report(
        self,
        mock_build: MagicMock,
        mock_close_pool: MagicMock,
        configured_env: None,
        make_result: Callable[..., AnalysisResult],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        mock_build.return_value.run.return_value = [make_result()]

        assert main(["--limit", "2"]) == 0

        mock_build.return_value.run.assert_called_once_with(
            "db-1", explicit_record_id=None, limit=2
        )
        assert "Calories: 450" in capsys.readouterr().out
        mock_close_pool.assert_called_once()
        mock_build.return_value.close.assert_called_once()

    @patch("nutrition_tracker.main.close_pool")
    @patch("nutrition_tracker.main.build_reconciler")
    def test_explicit_page(
        self, mock_build: MagicMock, _close: MagicMock, configured_env: None
    ) -> None:
        mock_build.return_value.run.return_value = []
        assert main(["--page", "page-9"]) == 0
        assert mock_build.return_value.run.call_args.kwargs["explicit_record_id"] == "page-9"

    @patch("nutrition_tracker.main.close_pool")
    @patch("nutrition_tracker.main.build_reconciler")
    def test_missing_configuration_exits_1(
        self, mock_build: MagicMock, _close: MagicMock
    ) -> None:
        with patch("nutrition_tracker.main.load_settings", side_effect=ConfigurationError("x")):
            assert main([]) == 1
        mock_build.assert_not_called()

    @patch("nutrition_tracker.main.close_pool")
    @patch("nutrition_tracker.main.build_reconciler")
    def test_discovery_failure_exits_1(
        self, mock_build: MagicMock, mock_close_pool: MagicMock, configured_env: None
    ) -> None:
        mock_build.return_value.run.side_effect = RecordStoreError("unauthorized")
        assert main([]) == 1
        mock_close_pool.assert_called_once()
        mock_build.return_value.close.assert_called_once()

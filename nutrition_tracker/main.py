import argparse
import sys

from nutrition_tracker.config.exceptions import ConfigurationError
from nutrition_tracker.config.settings import Settings
from nutrition_tracker.database.connection import close_pool
from nutrition_tracker.logging.logger import Log
from nutrition_tracker.processor.reconciler import DEFAULT_LIMIT, Reconciler, build_reconciler
from nutrition_tracker.report import format_report


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="nutrition-tracker",
        description="Analyze meal photos stored in Notion and write the results back.",
    )
    parser.add_argument(
        "--page",
        default=None,
        help="Analyze this page only, even if it is not pending",
    )
    parser.add_argument(
        "--limit",
        type=_positive_int,
        default=DEFAULT_LIMIT,
        help=f"Maximum number of pending pages to analyze (default: {DEFAULT_LIMIT})",
    )
    return parser.parse_args(argv)


def load_settings() -> Settings:
    """Load settings and fail fast on missing required variables."""
    settings = Settings()
    missing = settings.missing_required()
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )
    return settings


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> build dependencies -> reconcile -> report."""
    args = parse_args(argv)
    reconciler: Reconciler | None = None
    try:
        settings = load_settings()
        Log.configure(settings.log_level)
        Log.info(
            "Starting meal analysis",
            app=settings.app_name,
            version=settings.app_version,
            page=args.page or "-",
            limit=args.limit,
            model=settings.openai_model,
        )
        reconciler = build_reconciler(settings)
        results = reconciler.run(
            settings.notion_database_id,
            explicit_record_id=args.page,
            limit=args.limit,
        )
    except ConfigurationError as exc:
        Log.configure("INFO")
        Log.error(f"Configuration error: {exc}")
        return 1
    except Exception as exc:
        Log.exception(f"Meal analysis failed: {exc}")
        return 1
    finally:
        if reconciler is not None:
            reconciler.close()
        close_pool()

    print(format_report(results))
    Log.info("Meal analysis finished", analyzed=len(results))
    return 0


if __name__ == "__main__":
    sys.exit(main())

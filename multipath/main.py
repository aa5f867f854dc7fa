import argparse
import asyncio
import logging
import sys
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine

from .database import async_session_maker, init_db
from .schemas import StudioData, is_blocked
from .services.catalog import Studio
from .services.examples import example_studio
from .services.storage import load_studio, save_studio
from .settings.config import settings

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ----------------------
# Startup / shutdown
# ----------------------
async def open_studio(session_maker=async_session_maker, engine: AsyncEngine | None = None) -> Studio:
    """Create tables if needed, load the saved snapshot, seed examples into an empty store."""
    await init_db(engine)
    defaults = settings.studio_defaults()
    async with session_maker() as db:
        data = await load_studio(db)
        if data is None:
            if settings.SEED_EXAMPLES:
                data = example_studio(defaults)
                await save_studio(db, data)
                logger.info("Empty store seeded with %d example paths", len(data.paths))
            else:
                data = StudioData(settings=defaults)
                logger.info("Empty store; starting without a catalog")
    return Studio(data, defaults=defaults)


async def persist_studio(studio: Studio, session_maker=async_session_maker) -> None:
    async with session_maker() as db:
        await save_studio(db, studio.data)


# ----------------------
# Command line
# ----------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="multipath-studio", description="Seeded prompts across creative paths")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("generate", help="Generate and store the next prompt")
    export = sub.add_parser("export", help="Print the studio as JSON")
    export.add_argument("--out", default=None, help="Write to a file instead of stdout")
    imp = sub.add_parser("import", help="Replace the studio from an exported JSON file")
    imp.add_argument("file")
    sub.add_parser("csv", help="Print the logs as CSV")
    sub.add_parser("summary", help="Print log totals and this week's coverage")
    return parser


async def run_command(args: argparse.Namespace, session_maker=async_session_maker, engine: AsyncEngine | None = None) -> str:
    """Run one subcommand against the stored studio and return what to print."""
    studio = await open_studio(session_maker, engine)

    if args.command == "generate":
        result = studio.generate()
        await persist_studio(studio, session_maker)
        if is_blocked(result):
            return result.message(studio.data.paths)
        return result.text

    if args.command == "export":
        text = studio.export_json()
        if args.out:
            Path(args.out).write_text(text, encoding="utf-8")
            return f"Exported to {args.out}"
        return text

    if args.command == "import":
        studio.import_json(Path(args.file).read_text(encoding="utf-8"))
        await persist_studio(studio, session_maker)
        return f"Imported {len(studio.data.paths)} paths and {len(studio.data.logs)} logs"

    if args.command == "csv":
        return studio.logs_csv()

    if args.command == "summary":
        s = studio.summary()
        missing = ", ".join(s.missing) or "none"
        return (
            f"Logs: {s.total}\n"
            f"Completed: {s.completed_pct}%\n"
            f"Missing this week: {missing}\n"
            f"Full-coverage weeks: {s.full_coverage_weeks}"
        )

    raise ValueError(f"unknown command {args.command!r}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    print(asyncio.run(run_command(args)))
    return 0


if __name__ == "__main__":
    sys.exit(main())

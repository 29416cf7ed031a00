"""Pipeline entry point for running as a module: python -m pipeline."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from draftwire.config import get_settings
from draftwire.database import dispose_engine, get_session, init_models
from draftwire.schemas.pipeline import OutcomeStatus
from draftwire.services.document_store import SqlDocumentStore
from draftwire.services.generation_client import GenerationClient
from draftwire.services.notices import NoticeLog
from draftwire.services.pipeline_settings import build_generation_config, load_pipeline_settings

from pipeline.lock import ScheduleLock
from pipeline.orchestrator import PipelineStageRunner
from pipeline.scheduler import Scheduler

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    stream=sys.stdout,
)

logger = logging.getLogger("pipeline")

NOTICES = NoticeLog()


@asynccontextmanager
async def open_runner() -> AsyncIterator[PipelineStageRunner]:
    """Build a runner from current settings; settings are re-read every tick."""
    settings = get_settings()
    async with get_session() as session:
        pipeline_settings = await load_pipeline_settings(session)

    config = build_generation_config(settings, pipeline_settings.generation)
    client = GenerationClient(config, prompts=pipeline_settings.prompts.to_prompts())
    try:
        yield PipelineStageRunner(
            SqlDocumentStore(get_session),
            client,
            pipeline_settings,
            notices=NOTICES,
            timezone_name=settings.timezone,
        )
    finally:
        await client.close()


def build_scheduler() -> Scheduler:
    settings = get_settings()
    lock = ScheduleLock(timeout=timedelta(seconds=settings.pipeline_lock_timeout_seconds))
    return Scheduler(
        lock,
        open_runner,
        interval_seconds=settings.pipeline_interval_seconds,
        notices=NOTICES,
    )


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="python -m pipeline", description="Draftwire rewrite pipeline")
    parser.add_argument("--once", action="store_true", help="run a single tick and exit")
    parser.add_argument("--init-db", action="store_true", help="create database tables and exit")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    """Run one pipeline pass or scheduler mode."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    logger.info("Starting Draftwire pipeline")
    try:
        if args.init_db:
            await init_models()
            logger.info("Database tables created")
            return 0

        scheduler = build_scheduler()
        if args.once:
            outcomes = await scheduler.tick()
            if outcomes is None:
                return 0
            if not outcomes or any(o.status is OutcomeStatus.FAILED for o in outcomes):
                return 1
            return 0

        await scheduler.run_forever(run_on_start=get_settings().pipeline_run_on_start)
        return 0
    except Exception as exc:
        logger.error("Pipeline scheduler failed: %s", exc)
        return 1
    finally:
        await dispose_engine()


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()

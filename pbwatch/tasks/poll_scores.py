"""Personal best polling APScheduler task.

Runs the score pipeline on a fixed interval. Runs never overlap: the job is
registered with `max_instances=1` and `coalesce=True`.
"""

from datetime import UTC
from typing import Final

from pbwatch.config import settings
from pbwatch.dependencies.pipeline import get_pipeline
from pbwatch.dependencies.scheduler import get_scheduler
from pbwatch.log import task_logger
from pbwatch.service import RunResult, RunStatus, ScorePipeline

from apscheduler.triggers.interval import IntervalTrigger

POLL_JOB_ID: Final[str] = "pbwatch:poll_scores"

logger = task_logger("PollScores")


async def poll_scores(pipeline: ScorePipeline | None = None) -> RunResult | None:
    """Run one poll of the pipeline.

    Failures never propagate to the scheduler; each run is independent and the
    persisted cursor lets the next one recover.

    Args:
        pipeline: The pipeline to run. Defaults to the process-wide pipeline.

    Returns:
        The run result, or None if the run crashed unexpectedly.
    """
    pipeline = pipeline or get_pipeline()
    try:
        result = await pipeline.run()
    except Exception as e:
        logger.exception(f"Score poll failed: {e}")
        return None

    if result.status != RunStatus.COMPLETED:
        logger.warning(f"Score poll aborted: {result.status}")
    return result


def register_poll_job() -> None:
    """Register the polling job on the shared scheduler."""
    scheduler = get_scheduler()
    scheduler.add_job(
        poll_scores,
        trigger=IntervalTrigger(seconds=settings.poll_interval_seconds, timezone=UTC),
        id=POLL_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
        misfire_grace_time=settings.poll_interval_seconds,
    )
    logger.info(f"Registered score poll every {settings.poll_interval_seconds} seconds")

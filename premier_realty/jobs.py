"""
Job dispatch
Queues work on the ARQ worker and falls back to in-process background tasks when Redis is unavailable
"""

import asyncio
import logging
from typing import Optional

from arq import create_pool
from fastapi import BackgroundTasks

logger = logging.getLogger(__name__)


async def enqueue_job(task_name: str, *args) -> Optional[str]:
    """Queue a worker task. Returns the job id, or None when the queue is unreachable."""
    from .worker import get_redis_settings

    try:
        pool = await asyncio.wait_for(create_pool(get_redis_settings()), timeout=10.0)
        try:
            job = await pool.enqueue_job(task_name, *args)
        finally:
            await pool.aclose()
        logger.info(f"📋 {task_name} job queued: {job.job_id}")
        return job.job_id
    except Exception as e:
        logger.warning(f"⚠️ Failed to queue {task_name}: {e}")
        return None


async def dispatch_job(background_tasks: BackgroundTasks, task_name: str, *args) -> str:
    """
    Run a worker task through the queue, or after the response when the queue is down.

    Returns "queued" or "background".
    """
    from .worker import TASKS

    job_id = await enqueue_job(task_name, *args)
    if job_id:
        return "queued"

    background_tasks.add_task(TASKS[task_name], {}, *args)
    logger.info(f"↪️ {task_name} will run in-process after the response")
    return "background"

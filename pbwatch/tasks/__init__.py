"""Application tasks module.

This module provides the scheduled background tasks of the watcher.
"""

from .poll_scores import POLL_JOB_ID, poll_scores, register_poll_job

__all__ = [
    "POLL_JOB_ID",
    "poll_scores",
    "register_poll_job",
]

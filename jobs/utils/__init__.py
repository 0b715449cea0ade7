"""Task utilities."""
from jobs.utils.database import create_task_engine, task_session

__all__ = [
    "create_task_engine",
    "task_session",
]

"""
Thread-safe registry of tune_id -> running training poll task and its latest progress.

Snapshots of finished polls are kept for the progress route, up to
MAX_FINISHED_SNAPSHOTS; past that the oldest are dropped and the route
answers from the ledger instead.
"""
import asyncio
import threading
import logging
from collections import OrderedDict
from typing import Dict, Optional

from headshots.modules.training.schemas import TrainingProgress

logger = logging.getLogger(__name__)

MAX_FINISHED_SNAPSHOTS = 200

_lock = threading.Lock()
_progress: Dict[str, TrainingProgress] = {}
_tasks: Dict[str, asyncio.Task] = {}
_finished: "OrderedDict[str, None]" = OrderedDict()


def _retire(tune_id: str) -> None:
    # caller holds _lock
    _finished[tune_id] = None
    _finished.move_to_end(tune_id)
    while len(_finished) > MAX_FINISHED_SNAPSHOTS:
        oldest, _ = _finished.popitem(last=False)
        _progress.pop(oldest, None)


def register(progress: TrainingProgress, task: Optional[asyncio.Task] = None) -> None:
    with _lock:
        _progress[progress.tune_id] = progress
        _finished.pop(progress.tune_id, None)
        if task is not None:
            _tasks[progress.tune_id] = task
    logger.debug(f"Registered training poll for tune {progress.tune_id}")


def unregister(tune_id: str) -> None:
    with _lock:
        _tasks.pop(tune_id, None)
        if tune_id in _progress:
            _retire(tune_id)
    logger.debug(f"Unregistered training poll for tune {tune_id}")


def get_progress(tune_id: str) -> Optional[TrainingProgress]:
    with _lock:
        return _progress.get(tune_id)


def is_running(tune_id: str) -> bool:
    with _lock:
        task = _tasks.get(tune_id)
    return task is not None and not task.done()


def cancel(tune_id: str) -> bool:
    """Cancel the poll task for tune_id. Returns True if a running task was found."""
    with _lock:
        task = _tasks.pop(tune_id, None)
        progress = _progress.get(tune_id)
        if progress is not None:
            _retire(tune_id)
    if task is None or task.done():
        return False
    task.cancel()
    if progress is not None:
        progress.status = "cancelled"
        progress.active = False
    logger.info(f"Cancelled training poll for tune {tune_id}")
    return True


def reset() -> None:
    with _lock:
        for task in _tasks.values():
            if not task.done():
                task.cancel()
        _tasks.clear()
        _progress.clear()
        _finished.clear()

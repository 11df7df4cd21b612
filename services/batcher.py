"""
Turns debounced filesystem notifications into batches of work

A notification batch is everything the watcher delivered for one debounce
window. Processors want a plain list of paths instead, in the order the files
were first touched.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple

from .logger import app_logger


@dataclass(frozen=True)
class NotificationEvent:
    """One filesystem change: the path(s) involved and what happened"""
    paths: Tuple[Path, ...]
    kind: str = "modified"
    
    @classmethod
    def from_watchdog(cls, event) -> "NotificationEvent":
        """Convert a watchdog FileSystemEvent (moves carry both endpoints)"""
        paths = [_fs_path(event.src_path)]
        dest = getattr(event, 'dest_path', '')
        if dest:
            paths.append(_fs_path(dest))
        return cls(paths=tuple(paths), kind=event.event_type)


def _fs_path(raw) -> Path:
    # watchdog reports bytes paths when it was scheduled with a bytes path
    if isinstance(raw, bytes):
        raw = raw.decode('utf-8', 'surrogateescape')
    return Path(raw)


def event_paths(event) -> List[Path]:
    """All paths referenced by a NotificationEvent or a raw watchdog event"""
    if isinstance(event, NotificationEvent):
        return list(event.paths)
    return list(NotificationEvent.from_watchdog(event).paths)


def dedup_adjacent(paths: Iterable[Path]) -> List[Path]:
    """Drop consecutive repeats only, [a, a, b, a] -> [a, b, a]"""
    result: List[Path] = []
    for path in paths:
        if not result or result[-1] != path:
            result.append(path)
    return result


def flatten_events(batch) -> List[Path]:
    """
    Flatten a notification batch into the list of paths to process.
    
    Paths are taken from every event in delivery order and adjacent duplicates
    are collapsed. The debouncer delivers repeated notifications for one file
    back to back, so a non-adjacent repeat is a genuinely separate change and
    is kept.
    
    Args:
        batch: Iterable of NotificationEvent (or watchdog events)
        
    Returns:
        Ordered list of paths, empty for an empty batch
    """
    paths = []
    for event in batch:
        paths.extend(event_paths(event))
    
    paths = dedup_adjacent(paths)
    app_logger.debug(f"Event paths: {[str(p) for p in paths]}")
    return paths

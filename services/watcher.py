"""
File system watcher using watchdog

Raw events from the observer are collected by a debouncing handler and
delivered as one notification batch per quiet period, through a queue the
dispatcher blocks on.
"""
import os
import queue
import threading
from typing import Callable, Iterator, List, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from app_config import DEFAULT_DEBOUNCE_MS
from .batcher import NotificationEvent
from .errors import WatchError
from .logger import app_logger

# inotify reports reads too, those never mean new data
IGNORED_EVENT_TYPES = frozenset({'opened', 'closed_no_write'})


class DebouncedEventHandler(FileSystemEventHandler):
    """
    Handler that coalesces file events.
    
    Every event restarts the debounce timer. Once no event has arrived for
    debounce_ms, everything collected so far is handed to deliver() as one
    batch, in arrival order.
    """
    
    def __init__(self, deliver: Callable[[List[NotificationEvent]], None],
                 debounce_ms: int = DEFAULT_DEBOUNCE_MS):
        super().__init__()
        self.deliver = deliver
        self.debounce_sec = debounce_ms / 1000.0
        self.pending: List[NotificationEvent] = []
        self.lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._closed = False
    
    def on_any_event(self, event):
        """Called for every event the observer sees"""
        if event.is_directory or event.event_type in IGNORED_EVENT_TYPES:
            return
        
        with self.lock:
            if self._closed:
                return
            self.pending.append(NotificationEvent.from_watchdog(event))
            self._restart_timer()
    
    def _restart_timer(self):
        # Caller holds self.lock
        if self._timer is not None:
            self._timer.cancel()
        self._timer = threading.Timer(self.debounce_sec, self.flush)
        self._timer.daemon = True
        self._timer.start()
    
    def flush(self):
        """Deliver pending events now, if there are any"""
        with self.lock:
            batch = self.pending
            self.pending = []
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self._closed:
                return
        
        if batch:
            self.deliver(batch)
    
    def shutdown(self):
        """Stop delivering; events still pending are dropped"""
        with self.lock:
            self._closed = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            dropped = len(self.pending)
            self.pending = []
        
        if dropped:
            app_logger.debug(f"Dropped {dropped} pending events on shutdown")


class FileWatcher:
    """
    Watch source backed by a watchdog Observer.
    
    subscribe() starts watching, batches() blocks for notification batches
    and close() stops the observer.
    """
    
    def __init__(self, debounce_ms: int = DEFAULT_DEBOUNCE_MS, poll_interval: float = 0.5,
                 observer_factory=Observer):
        self.debounce_ms = debounce_ms
        self.poll_interval = poll_interval
        self.observer_factory = observer_factory
        self.observer = None
        self.handler = None
        self.queue: "queue.Queue[List[NotificationEvent]]" = queue.Queue()
    
    def subscribe(self, path, recursive: bool = True) -> None:
        """
        Start watching path.
        
        Raises:
            WatchError: the directory cannot be watched
        """
        if not os.path.isdir(path):
            raise WatchError(f"Cannot watch {path}: not a directory")
        
        self.handler = DebouncedEventHandler(self.queue.put, self.debounce_ms)
        
        observer = self.observer_factory()
        try:
            observer.schedule(self.handler, str(path), recursive=recursive)
            observer.start()
        except OSError as e:
            raise WatchError(f"Cannot watch {path}: {e}") from e
        self.observer = observer
        
        mode = "recursively" if recursive else "non-recursively"
        app_logger.info(f"Watching {path} ({mode})")
    
    def _check_alive(self):
        if self.observer is None:
            raise WatchError("Watcher is not subscribed")
        if not self.observer.is_alive():
            raise WatchError("Error while processing events: observer thread stopped")
        for emitter in list(getattr(self.observer, 'emitters', ())):
            if not emitter.is_alive():
                raise WatchError(f"Error while processing events: emitter for {emitter.watch.path} stopped")
    
    def batches(self, stop_event: Optional[threading.Event] = None) -> Iterator[List[NotificationEvent]]:
        """
        Yield notification batches as they arrive.
        
        Blocks between batches. Returns when stop_event is set.
        
        Raises:
            WatchError: the observer died
        """
        while stop_event is None or not stop_event.is_set():
            try:
                batch = self.queue.get(timeout=self.poll_interval)
            except queue.Empty:
                self._check_alive()
                continue
            yield batch
    
    def close(self):
        """Stop watching"""
        if self.handler is not None:
            self.handler.shutdown()
        
        if self.observer is not None:
            self.observer.stop()
            if self.observer.is_alive():
                self.observer.join()
            self.observer = None
        
        app_logger.info("Stopped watching")
    
    def is_running(self):
        """Check if watcher is running"""
        return self.observer is not None and self.observer.is_alive()

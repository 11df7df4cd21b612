"""
Run loop: wait for notification batches and hand them to the processor
"""
import threading
from enum import Enum, auto
from typing import Optional

from .batcher import flatten_events
from .logger import app_logger


class DispatcherState(Enum):
    """Where the run loop is"""
    IDLE = auto()          # Created, not yet watching
    WATCHING = auto()      # Blocked waiting for the next batch
    DISPATCHING = auto()   # Processor is running on a batch
    STOPPED = auto()       # Stopped on request
    FAILED = auto()        # Stopped by an error


class Dispatcher:
    """
    Feeds every notification batch from a watch source to one processor.
    
    Batches are handled one at a time on the calling thread, so the processor
    is the only writer of the output directory. Any error from the processor
    or the source ends the loop and is re-raised to the caller.
    
    The source must provide subscribe(path, recursive), batches(stop_event)
    and close(); see services.watcher.FileWatcher.
    """
    
    def __init__(self, processor, source, inpath, recursive: bool = True):
        self.processor = processor
        self.source = source
        self.inpath = inpath
        self.recursive = recursive
        self.state = DispatcherState.IDLE
        self.batch_count = 0
        self.error: Optional[BaseException] = None
        self._stop_event = threading.Event()
    
    def stop(self):
        """Ask the loop to exit after the batch in flight"""
        app_logger.info("Stop requested")
        self._stop_event.set()
    
    def handle_batch(self, batch) -> bool:
        """
        Process one notification batch.
        
        Returns:
            True if the processor ran, False for an empty batch
        """
        paths = flatten_events(batch)
        if not paths:
            app_logger.debug("Empty batch, nothing to do")
            return False
        
        self.state = DispatcherState.DISPATCHING
        try:
            self.processor.process(paths)
        finally:
            if self.state is DispatcherState.DISPATCHING:
                self.state = DispatcherState.WATCHING
        
        self.batch_count += 1
        app_logger.info(f"Processed batch {self.batch_count} ({len(paths)} files)")
        return True
    
    def run(self):
        """
        Subscribe to the input directory and process batches until stopped.
        
        Raises:
            WatchError: the watch subsystem failed
            ProcessingError: the processor failed on a batch
        """
        try:
            self.source.subscribe(self.inpath, recursive=self.recursive)
            self.state = DispatcherState.WATCHING
            
            for batch in self.source.batches(self._stop_event):
                self.handle_batch(batch)
                if self._stop_event.is_set():
                    break
        except Exception as e:
            self.state = DispatcherState.FAILED
            self.error = e
            app_logger.error(f"Run loop stopped: {e}")
            raise
        finally:
            self.source.close()
        
        self.state = DispatcherState.STOPPED
        app_logger.info(f"Dispatcher stopped after {self.batch_count} batches")

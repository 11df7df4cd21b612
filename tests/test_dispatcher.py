"""
Test the dispatcher run loop with a synthetic watch source
"""
import pytest
import os
import sys
from pathlib import Path

project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from services.batcher import NotificationEvent
from services.dispatcher import Dispatcher, DispatcherState
from services.errors import IoError, WatchError
from services.processing import IdentityProcessor


def ev(*paths):
    return NotificationEvent(paths=tuple(Path(p) for p in paths))


class FakeSource:
    """Watch source that replays prepared batches"""
    
    def __init__(self, batches, error=None):
        self._batches = list(batches)
        self._error = error
        self.subscribed = None
        self.closed = False
    
    def subscribe(self, path, recursive=True):
        self.subscribed = (path, recursive)
    
    def batches(self, stop_event=None):
        for batch in self._batches:
            if stop_event is not None and stop_event.is_set():
                return
            yield batch
        if self._error is not None:
            raise self._error
    
    def close(self):
        self.closed = True


class RecordingProcessor:
    """Processor that remembers every batch it was given"""
    
    name = "recording"
    
    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = fail_on
    
    def process(self, paths):
        self.calls.append(list(paths))
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise IoError("disk full")


class TestDispatcher:
    """Test batch dispatch and error propagation"""
    
    def test_batches_processed_in_order(self):
        proc = RecordingProcessor()
        source = FakeSource([[ev("a", "b"), ev("b", "c")], [ev("d")]])
        dispatcher = Dispatcher(proc, source, "/in")
        
        dispatcher.run()
        
        assert proc.calls == [[Path("a"), Path("b"), Path("c")], [Path("d")]]
        assert dispatcher.batch_count == 2
        assert dispatcher.state is DispatcherState.STOPPED
    
    def test_subscribes_recursively(self):
        source = FakeSource([])
        Dispatcher(RecordingProcessor(), source, "/in").run()
        assert source.subscribed == ("/in", True)
        assert source.closed
    
    def test_empty_batch_is_noop(self):
        proc = RecordingProcessor()
        source = FakeSource([[], [ev("a")]])
        dispatcher = Dispatcher(proc, source, "/in")
        
        dispatcher.run()
        
        assert proc.calls == [[Path("a")]]
        assert dispatcher.batch_count == 1
    
    def test_processor_error_is_fatal(self):
        """The first failing batch ends the loop, later batches are not seen"""
        proc = RecordingProcessor(fail_on=1)
        source = FakeSource([[ev("a")], [ev("b")]])
        dispatcher = Dispatcher(proc, source, "/in")
        
        with pytest.raises(IoError, match="disk full"):
            dispatcher.run()
        
        assert proc.calls == [[Path("a")]]
        assert dispatcher.state is DispatcherState.FAILED
        assert isinstance(dispatcher.error, IoError)
        assert source.closed
    
    def test_watch_error_is_fatal(self):
        proc = RecordingProcessor()
        source = FakeSource([[ev("a")]], error=WatchError("inotify gone"))
        dispatcher = Dispatcher(proc, source, "/in")
        
        with pytest.raises(WatchError):
            dispatcher.run()
        
        assert proc.calls == [[Path("a")]]
        assert dispatcher.state is DispatcherState.FAILED
    
    def test_stop_after_batch_in_flight(self):
        """stop() lets the current batch finish, then the loop exits"""
        source = FakeSource([[ev("a")], [ev("b")]])
        
        class StoppingProcessor(RecordingProcessor):
            def process(self, paths):
                super().process(paths)
                dispatcher.stop()
        
        proc = StoppingProcessor()
        dispatcher = Dispatcher(proc, source, "/in")
        dispatcher.run()
        
        assert proc.calls == [[Path("a")]]
        assert dispatcher.state is DispatcherState.STOPPED
    
    def test_state_while_dispatching(self):
        seen = []
        
        class StateProcessor(RecordingProcessor):
            def process(self, paths):
                seen.append(dispatcher.state)
        
        dispatcher = Dispatcher(StateProcessor(), FakeSource([[ev("a")]]), "/in")
        assert dispatcher.state is DispatcherState.IDLE
        dispatcher.run()
        
        assert seen == [DispatcherState.DISPATCHING]
    
    def test_identity_end_to_end(self, io_dirs):
        """Synthetic notifications drive real copies into the output folder"""
        inpath, outpath = io_dirs
        for name in ("f1.sis", "f2.sis"):
            with open(os.path.join(inpath, name), 'wb') as f:
                f.write(name.encode())
        f1 = os.path.join(inpath, "f1.sis")
        f2 = os.path.join(inpath, "f2.sis")
        
        source = FakeSource([[ev(f1), ev(f1), ev(f2)]])
        Dispatcher(IdentityProcessor(outpath), source, inpath).run()
        
        assert sorted(os.listdir(outpath)) == ["f1.sis", "f2.sis"]
        with open(os.path.join(outpath, "f2.sis"), 'rb') as f:
            assert f.read() == b"f2.sis"

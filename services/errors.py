"""
Exception types raised by the watch/process pipeline

Everything derives from SisWatchError so main() can report any failure
and exit non-zero. Nothing here is retried.
"""


class SisWatchError(Exception):
    """Base class for all application errors"""


class ConfigError(SisWatchError):
    """Invalid configuration, fatal at startup"""


class WatchError(SisWatchError):
    """Failure of the filesystem watch subsystem, fatal to the run loop"""


class ProcessingError(SisWatchError):
    """A processor could not finish a batch"""


class FormatError(ProcessingError):
    """Malformed or truncated SIS image data"""


class DimensionError(ProcessingError):
    """Image dimensions out of range or shapes that do not match"""


class IoError(ProcessingError):
    """Filesystem failure while reading, copying or writing a file"""


class PatternNotFoundError(ProcessingError):
    """No path in the batch contains a required file name token"""
    
    def __init__(self, pattern, paths):
        self.pattern = pattern
        self.paths = list(paths)
        super().__init__(f"Cannot find pattern {pattern} in {[str(p) for p in self.paths]}")

"""
Identity processor - copies every file from input to output unchanged
"""
from typing import Sequence

from .interface import PathLike, Processor, as_paths
from ..logger import app_logger


class IdentityProcessor(Processor):
    """This processor just copies the files from input to output."""
    
    name = "identity"
    
    def process(self, paths: Sequence[PathLike]) -> None:
        # Stops at the first failed copy, earlier copies stay in place
        for path in as_paths(paths):
            app_logger.debug(f"Identity processor function. Path: {path}")
            self.copy_to_output(path)

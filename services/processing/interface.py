"""
Processor Interface

Defines the abstract base class all processors implement. A processor is bound
to one output directory for its whole life and is handed the paths of every
file that changed during one debounce window.
"""
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Sequence, Union

from ..errors import IoError
from ..logger import app_logger

PathLike = Union[str, Path]


class Processor(ABC):
    """
    Common base for processors.
    
    Each processor is a thin layer over process(), which implements all of
    the logic. process() either completes or raises a ProcessingError; it
    never retries and never undoes files it already wrote.
    """
    
    # Name used to select the processor in config and on the command line
    name: str = ""
    
    def __init__(self, outpath: PathLike):
        self._outpath = Path(outpath)
        app_logger.debug(f"{type(self).__name__} created with outpath {self._outpath}")
    
    @property
    def outpath(self) -> Path:
        """Directory every output file is written to"""
        return self._outpath
    
    @abstractmethod
    def process(self, paths: Sequence[PathLike]) -> None:
        """
        Process the files in paths according to processor logic.
        
        Args:
            paths: Changed files, in the order they were first seen
            
        Raises:
            ProcessingError: on any condition that stops the batch
        """
    
    def output_path_for(self, path: PathLike) -> Path:
        """Path in the output directory with the same file name as path"""
        fname = Path(path).name
        if not fname or fname == '..':
            raise IoError(f"Path {path} is file, but cannot extract filename.")
        return self._outpath / fname
    
    def copy_to_output(self, path: PathLike) -> Path:
        """Copy path into the output directory byte for byte"""
        outname = self.output_path_for(path)
        app_logger.debug(f"Output filename: {outname}")
        
        try:
            shutil.copy(path, outname)
        except OSError as e:
            raise IoError(
                f"Error while copying {path} to {outname} in {self.name} processing: {e}"
            ) from e
        
        app_logger.info(f"Copied {path} to {outname}")
        return outname
    
    def __repr__(self):
        return f"{type(self).__name__}(outpath={str(self._outpath)!r})"


def as_paths(paths: Sequence[PathLike]) -> List[Path]:
    """Normalise a batch to a list of Path objects"""
    return [Path(p) for p in paths]

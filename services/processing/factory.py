"""
Processor Factory

Maps processor names to classes and creates the processor selected in the
configuration. The set of processors is fixed; there is no plugin loading.
"""
from typing import Dict, List, Type

from .interface import PathLike, Processor
from .identity import IdentityProcessor
from .fkspecies import FKSpeciesProcessor
from ..errors import ConfigError


PROCESSORS: Dict[str, Type[Processor]] = {
    IdentityProcessor.name: IdentityProcessor,
    FKSpeciesProcessor.name: FKSpeciesProcessor,
}


def get_available_processors() -> List[str]:
    """
    Get list of processor names.
    
    Returns:
        List of names that can be used with create_processor()
    """
    return list(PROCESSORS)


def create_processor(name: str, outpath: PathLike) -> Processor:
    """
    Create a processor by name.
    
    Args:
        name: Processor name ('identity', 'fkspecies')
        outpath: Output directory for the processor
        
    Returns:
        Processor instance bound to outpath
        
    Raises:
        ConfigError: if name is not a known processor
    """
    try:
        cls = PROCESSORS[name]
    except (KeyError, TypeError):
        raise ConfigError(
            f"Processor {name} unknown, possible values are {get_available_processors()}"
        ) from None
    
    return cls(outpath)


def create_processor_from_config(config) -> Processor:
    """
    Create the processor named in the application config.
    
    Args:
        config: Config object (or dict) with 'proc' and 'outpath' keys
    """
    return create_processor(config.get('proc'), config.get('outpath'))

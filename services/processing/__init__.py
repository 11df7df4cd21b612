"""
Processors run on each batch of files picked up by the watcher.

Package structure:
    services/processing/
    ├── __init__.py         # This file - exports
    ├── interface.py        # Processor ABC
    ├── factory.py          # create_processor(), get_available_processors()
    ├── identity.py         # Copy files through unchanged
    └── fkspecies.py        # Optical density from three raw frames

Usage:
    from services.processing import create_processor

    processor = create_processor('fkspecies', '/data/out')
    processor.process([Path('/data/in/rawimg-0001.sis'), ...])
"""

from .interface import Processor

from .factory import (
    PROCESSORS,
    create_processor,
    create_processor_from_config,
    get_available_processors,
)

from .identity import IdentityProcessor
from .fkspecies import FKSpeciesProcessor, calc_od, find_pattern, to_uint16

__all__ = [
    'Processor',
    'PROCESSORS',
    'create_processor',
    'create_processor_from_config',
    'get_available_processors',
    'IdentityProcessor',
    'FKSpeciesProcessor',
    'calc_od',
    'find_pattern',
    'to_uint16',
]

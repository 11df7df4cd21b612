"""
Configuration management for SIS Watch
"""
import json
import os

from app_config import DEFAULT_DEBOUNCE_MS
from utils_paths import get_default_config_path
from .errors import ConfigError

DEFAULT_CONFIG = {
    # Directory watch settings
    "inpath": "",
    "outpath": "",
    "recursive": True,
    "debounce_ms": DEFAULT_DEBOUNCE_MS,
    
    # Processor name, see services.processing.get_available_processors()
    "proc": "identity",
    
    # Console logging (-v for info, -vv for debug, quiet overrides)
    "verbose": 0,
    "quiet": False,
}


class Config:
    def __init__(self, config_path=None):
        if config_path is None:
            config_path = get_default_config_path()
        
        self.config_path = config_path
        self.data = self.load()
    
    def load(self):
        """
        Load configuration from JSON file or return defaults
        
        Raises:
            ConfigError: the file exists but is not a JSON object
        """
        config = dict(DEFAULT_CONFIG)
        if not os.path.exists(self.config_path):
            return config
        
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Error loading config {self.config_path}: {e}") from e
        
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config {self.config_path} must contain a JSON object")
        
        # Merge with defaults to ensure new keys exist
        config.update(loaded)
        return config
    
    def save(self):
        """Save current configuration to JSON file"""
        try:
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.data, f, indent=2)
        except OSError as e:
            raise ConfigError(f"Error saving config {self.config_path}: {e}") from e
    
    def get(self, key, default=None):
        """Get configuration value"""
        return self.data.get(key, default)
    
    def set(self, key, value):
        """Set configuration value"""
        self.data[key] = value
    
    def apply_overrides(self, overrides):
        """
        Layer command line values over the loaded file.
        
        Keys whose value is None were not given and leave the config alone.
        """
        for key, value in overrides.items():
            if value is not None:
                self.data[key] = value
    
    def check_paths(self):
        """
        Check that input and output paths are separate folders.
        
        The output folder must not sit inside the watched input tree, or every
        file written there would be picked up again as a new change.
        
        Raises:
            ConfigError: on the first problem found
        """
        inpath = self.get('inpath') or ''
        outpath = self.get('outpath') or ''
        
        if not inpath:
            raise ConfigError("Input path is not set.")
        if not outpath:
            raise ConfigError("Output path is not set.")
        
        if inpath == outpath or os.path.abspath(inpath) == os.path.abspath(outpath):
            raise ConfigError("Input path and output path must not be identical.")
        
        if not os.path.isdir(inpath):
            raise ConfigError(f"Input path must be a directory: {inpath}")
        
        if not os.path.isdir(outpath):
            raise ConfigError(f"Output path must be a directory: {outpath}")
        
        real_in = os.path.realpath(inpath)
        real_out = os.path.realpath(outpath)
        if os.path.commonpath([real_in, real_out]) == real_in:
            raise ConfigError(
                f"Output path {outpath} must not be inside the watched input path {inpath}."
            )

"""
Path utilities for application data and log locations
"""
import os
import sys

from app_config import APP_DATA_FOLDER, MAIN_CONFIG_FILE


def get_app_data_dir():
    r"""
    Get application data directory (for logs, user config, etc.)
    
    Returns:
        Path to %LOCALAPPDATA%\{APP_DATA_FOLDER} on Windows,
        ~/.{APP_DATA_FOLDER} elsewhere
    """
    if sys.platform == 'win32':
        local_app_data = os.environ.get('LOCALAPPDATA')
        if not local_app_data:
            # Fallback to APPDATA if LOCALAPPDATA not available
            local_app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
        app_dir = os.path.join(local_app_data, APP_DATA_FOLDER)
    else:
        app_dir = os.path.join(os.path.expanduser('~'), f'.{APP_DATA_FOLDER}')
    
    os.makedirs(app_dir, exist_ok=True)
    
    return app_dir


def get_log_dir():
    """
    Get log directory path
    
    Returns:
        Path to {app data dir}/Logs
    """
    log_dir = os.path.join(get_app_data_dir(), 'Logs')
    os.makedirs(log_dir, exist_ok=True)
    return log_dir


def get_default_config_path():
    """Path of the config file used when none is given on the command line"""
    return os.path.join(get_app_data_dir(), MAIN_CONFIG_FILE)

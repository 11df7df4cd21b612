"""
Application Configuration - Central place for app identity
Change these values when renaming the application
"""

# Application Identity
APP_NAME = "SisWatch"
APP_DISPLAY_NAME = "SIS Watch"
APP_DESCRIPTION = "Preprocess SIS camera images as they are acquired"

# Directory names (used for app data paths)
APP_DATA_FOLDER = APP_NAME  # ~/.{APP_DATA_FOLDER} or %LOCALAPPDATA%\{APP_DATA_FOLDER}

# File names
MAIN_CONFIG_FILE = "config.json"
LOG_FILE = "siswatch.log"
LOG_RETENTION_DAYS = 7

# Event debounce window used when the config does not set one
DEFAULT_DEBOUNCE_MS = 200


"""
Logging configuration with 7-day rolling file retention
Writes to {app data dir}/Logs with automatic cleanup
"""
import os
import sys
import logging
from logging.handlers import TimedRotatingFileHandler
from datetime import datetime, timedelta

from app_config import LOG_FILE, LOG_RETENTION_DAYS
from utils_paths import get_log_dir

# Console level used with --quiet: above CRITICAL, so nothing gets through
LEVEL_OFF = logging.CRITICAL + 10


def cleanup_old_logs(log_dir, days_to_keep=LOG_RETENTION_DAYS):
    """
    Remove log files older than specified days
    
    Args:
        log_dir: Directory containing log files
        days_to_keep: Number of days to retain (default: 7)
    """
    if not os.path.exists(log_dir):
        return
    
    cutoff_date = datetime.now() - timedelta(days=days_to_keep)
    
    for filename in os.listdir(log_dir):
        file_path = os.path.join(log_dir, filename)
        
        # Only process files, not directories
        if not os.path.isfile(file_path):
            continue
        
        file_mtime = datetime.fromtimestamp(os.path.getmtime(file_path))
        
        if file_mtime < cutoff_date:
            try:
                os.remove(file_path)
            except OSError as e:
                print(f"Failed to remove old log {filename}: {e}", file=sys.stderr)


def get_console_level(verbose=0, quiet=False):
    """
    Map command line verbosity to a console log level
    
    none -> WARNING, -v -> INFO, -vv or more -> DEBUG, -q -> off (overrides -v)
    """
    if quiet:
        return LEVEL_OFF
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(verbose=0, quiet=False, log_dir=None):
    """
    Configure application logging with file rotation and cleanup
    
    Sets up:
    - Console logging (level from verbose/quiet)
    - File logging with daily rotation (DEBUG level)
    - Automatic cleanup of logs older than 7 days
    
    Args:
        verbose: Number of -v flags given
        quiet: Silence console output entirely
        log_dir: Override for the log directory (defaults to the app data dir)
    """
    # Silence the observer internals, they log every inotify event at DEBUG
    for logger_name in ['watchdog', 'watchdog.observers', 'watchdog.observers.inotify_buffer']:
        noisy_logger = logging.getLogger(logger_name)
        noisy_logger.setLevel(logging.WARNING)
    
    if log_dir is None:
        log_dir = get_log_dir()
    log_file = os.path.join(log_dir, LOG_FILE)
    
    cleanup_old_logs(log_dir, days_to_keep=LOG_RETENTION_DAYS)
    
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)  # Capture everything, handlers filter
    
    # Remove any existing handlers (in case setup_logging is called multiple times)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(get_console_level(verbose, quiet))
    console_format = logging.Formatter(
        '[%(asctime)s] %(levelname)s: %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)
    
    # File handler - Daily rotation, keep 7 days
    try:
        file_handler = TimedRotatingFileHandler(
            log_file,
            when='midnight',
            interval=1,
            backupCount=LOG_RETENTION_DAYS,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_format = logging.Formatter(
            '[%(asctime)s] %(levelname)-8s [%(name)s:%(funcName)s:%(lineno)d] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)
        
        logger.debug(f"Logging initialized - Log file: {log_file}")
        
    except OSError as e:
        # If file logging fails, at least we have console
        logger.error(f"Failed to initialize file logging: {e}")
        logger.warning("Continuing with console logging only")
    
    return logger


"""
Application logger facade

All services log through ``app_logger`` so messages land on the dedicated
application logger, whose handlers are configured by logging_config.setup_logging().
"""
import logging

from app_config import APP_NAME


class AppLogger:
    """Thin wrapper around the application's named logger"""
    
    def __init__(self, name=APP_NAME):
        self.file_logger = logging.getLogger(name)
    
    def log(self, message, level="INFO"):
        """Log a message at the named level"""
        log_level = getattr(logging, level, logging.INFO)
        self.file_logger.log(log_level, message)
    
    def info(self, message):
        """Log info message"""
        self.log(message, "INFO")
    
    def error(self, message):
        """Log error message"""
        self.log(message, "ERROR")
    
    def warning(self, message):
        """Log warning message"""
        self.log(message, "WARNING")
    
    def debug(self, message):
        """Log debug message"""
        self.log(message, "DEBUG")


# Singleton pattern to ensure only one logger instance
_logger_instance = None

def get_app_logger():
    """Get or create the singleton logger instance"""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = AppLogger()
    return _logger_instance

# Global logger instance (singleton)
app_logger = get_app_logger()

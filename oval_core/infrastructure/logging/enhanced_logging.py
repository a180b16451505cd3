"""
Enhanced logging system for the OVAL evaluation core.

Log records go to stderr and, optionally, to a log file. Standard output is
left to verdict lines, reports and exported documents.
"""

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional, List
import atexit


class EnhancedLogger:
    """
    Logging setup shared by all commands.

    The console handler writes to stderr; an optional file handler records
    everything at DEBUG level for troubleshooting.
    """

    def __init__(self):
        """Initialize the enhanced logger."""
        self.file_handlers: List[logging.FileHandler] = []
        self.console_handler: Optional[logging.Handler] = None
        self.original_handlers: List[logging.Handler] = []
        self.log_file_path: Optional[Path] = None

        # Register cleanup on exit
        atexit.register(self.cleanup)

    def setup_logging(self, verbose: bool = False, log_file: Optional[str] = None,
                      level: str = "INFO") -> Optional[str]:
        """
        Set up console logging and, when a path is given, file logging.

        Args:
            verbose: Show INFO records on the console (WARNING and above otherwise)
            log_file: Optional log file path
            level: Root logger level

        Returns:
            Path to the log file, if one was created
        """
        root_logger = logging.getLogger()

        # Store original handlers for cleanup
        if not self.original_handlers:
            self.original_handlers = root_logger.handlers[:]
        root_logger.handlers.clear()
        self.file_handlers.clear()
        self.log_file_path = None

        root_logger.setLevel(logging.DEBUG if log_file else getattr(logging, level.upper(), logging.INFO))

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Console handler (stderr to keep stdout clean for documents and reports)
        self.console_handler = logging.StreamHandler(sys.stderr)
        self.console_handler.setFormatter(formatter)
        self.console_handler.setLevel(logging.INFO if verbose else logging.WARNING)
        root_logger.addHandler(self.console_handler)

        logger = logging.getLogger("enhanced.logging")

        if log_file:
            self.log_file_path = Path(log_file).expanduser()
            self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.log_file_path, mode='w', encoding='utf-8')
            file_handler.setFormatter(formatter)
            file_handler.setLevel(logging.DEBUG)
            root_logger.addHandler(file_handler)
            self.file_handlers.append(file_handler)
            logger.info(f"Log file: {self.log_file_path}")

        logger.debug(f"Console logging level: {'INFO' if verbose else 'WARNING'}")
        return str(self.log_file_path) if self.log_file_path else None

    def log_error_details(self, error: Exception, context: str = ""):
        """Log detailed error information for troubleshooting."""
        logger = logging.getLogger("error.details")

        logger.debug("=== Error Details ===")
        if context:
            logger.debug(f"Context: {context}")
        logger.debug(f"Error type: {type(error).__name__}")
        logger.debug(f"Error message: {str(error)}")
        logger.debug("Full stack trace:", exc_info=error)

    def create_evaluation_log_entry(self, stage: str, message: str, details: dict = None):
        """Create a structured log entry for workflow stages."""
        logger = logging.getLogger(f"oval.{stage}")

        log_message = f"[{stage.upper()}] {message}"
        if details:
            log_message += f" | Details: {details}"

        logger.info(log_message)

    def cleanup(self):
        """Close file handlers and restore original logging."""
        root_logger = logging.getLogger()
        for handler in self.file_handlers:
            root_logger.removeHandler(handler)
            handler.close()
        self.file_handlers.clear()

        if self.console_handler is not None:
            root_logger.removeHandler(self.console_handler)
            self.console_handler = None

        if self.original_handlers:
            for handler in self.original_handlers:
                if handler not in root_logger.handlers:
                    root_logger.addHandler(handler)
            self.original_handlers.clear()

    def finalize_logging(self, success: bool = True):
        """Finalize logging with completion status."""
        logger = logging.getLogger("enhanced.logging")

        if success:
            logger.info(f"Run completed successfully at {datetime.now().isoformat()}")
        else:
            logger.info(f"Run completed with failures at {datetime.now().isoformat()}")

        if self.log_file_path and self.log_file_path.exists():
            logger.info(f"Log saved: {self.log_file_path} ({self.log_file_path.stat().st_size:,} bytes)")

        for handler in logging.getLogger().handlers:
            handler.flush()


# Global instance for use throughout the application
enhanced_logger = EnhancedLogger()

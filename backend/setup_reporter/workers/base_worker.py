"""
Base worker class for the setup reporter.

Provides the lifecycle shared by workers:

1. start()/stop() - Worker lifecycle management
   - Called by main_worker.py to initialize/cleanup workers
   - Sets self.running and calls initialize()/cleanup()
   - DOES NOT start the processing loop

2. run() - The worker's own loop, implemented by subclasses
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..enums import LogEmoji, LoggerName
from ..services.logger import get_service_logger


class BaseWorker(ABC):
    """
    Abstract base class for setup reporter workers.

    Provides common interface and logging helpers for worker implementation.
    """

    def __init__(self, name: str, logger_name: LoggerName = LoggerName.SYSTEM):
        """
        Initialize base worker.

        Args:
            name: Worker name for logging and identification
            logger_name: Logger category for this worker's records
        """
        self.name = name
        self.running = False
        self.logger = get_service_logger(logger_name)

    async def start(self) -> None:
        """Start the worker."""
        self.log_info("Starting worker", emoji=LogEmoji.STARTUP)
        self.running = True
        await self.initialize()

    async def stop(self) -> None:
        """Stop the worker."""
        self.log_info("Stopping worker", emoji=LogEmoji.SHUTDOWN)
        self.running = False
        await self.cleanup()

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize worker-specific resources."""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Cleanup worker-specific resources."""
        pass

    def log_info(self, message: str, emoji: Optional[LogEmoji] = None) -> None:
        """Log info message with worker name prefix."""
        self.logger.info(f"[{self.name}] {message}", emoji=emoji)

    def log_error(self, message: str, error: Optional[Exception] = None) -> None:
        """Log error message with worker name prefix."""
        self.logger.error(f"[{self.name}] {message}", exception=error)

    def log_warning(self, message: str, emoji: Optional[LogEmoji] = None) -> None:
        """Log warning message with worker name prefix."""
        self.logger.warning(f"[{self.name}] {message}", emoji=emoji)

    def log_debug(self, message: str) -> None:
        """Log debug message with worker name prefix."""
        self.logger.debug(f"[{self.name}] {message}")

    def get_status(self) -> Dict[str, Any]:
        """
        Get current worker status.

        Returns:
            Dictionary with worker status information
        """
        return {
            "name": self.name,
            "running": self.running,
            "worker_type": self.__class__.__name__,
        }

    def is_healthy(self) -> bool:
        """
        Check if worker is in a healthy state.

        Returns:
            True if worker is healthy, False otherwise
        """
        return self.running

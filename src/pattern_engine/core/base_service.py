"""
Base service class for Pattern Engine
Provides initialization, statistics and health checks for services
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict

from ..exceptions import ServiceInitializationError
from ..utils import LoggingMixin, get_logger


def _empty_stats() -> Dict[str, Any]:
    return {
        "total_requests": 0,
        "successful_requests": 0,
        "failed_requests": 0,
        "average_processing_time": 0.0,
        "last_request_time": None,
    }


class BaseService(ABC, LoggingMixin):
    """Base class for engine services"""

    def __init__(self, service_name: str):
        """
        Initialize base service

        Args:
            service_name: Name of the service for logging
        """
        self.service_name = service_name
        self.logger = get_logger(f"{self.__module__}.{service_name}")
        self._initialized = False
        self._initialization_time = None
        self._stats = _empty_stats()
        self._stats_lock = threading.Lock()

    def initialize(self) -> None:
        """
        Initialize the service

        Raises:
            ServiceInitializationError: If initialization fails
        """
        if self._initialized:
            return

        try:
            self._do_initialize()
        except Exception as e:
            self.logger.error(f"Failed to initialize {self.service_name}: {e}")
            raise ServiceInitializationError(f"Service initialization failed: {str(e)}") from e

        self._initialized = True
        self._initialization_time = datetime.now()
        self.logger.info(f"{self.service_name} initialized successfully")

    @abstractmethod
    def _do_initialize(self) -> None:
        """Service-specific initialization logic"""
        pass

    def is_initialized(self) -> bool:
        return self._initialized

    def get_stats(self) -> Dict[str, Any]:
        """Get service statistics"""
        with self._stats_lock:
            stats = self._stats.copy()
        stats.update({
            "service_name": self.service_name,
            "initialized": self._initialized,
            "initialization_time": self._initialization_time.isoformat() if self._initialization_time else None,
        })
        return stats

    def reset_stats(self) -> None:
        with self._stats_lock:
            self._stats = _empty_stats()
        self.logger.info(f"{self.service_name} statistics reset")

    def _update_stats(self, success: bool, processing_time: float) -> None:
        """Update service statistics"""
        with self._stats_lock:
            self._stats["total_requests"] += 1
            self._stats["last_request_time"] = datetime.now().isoformat()

            if success:
                self._stats["successful_requests"] += 1
            else:
                self._stats["failed_requests"] += 1

            # Running average
            total_time = self._stats["average_processing_time"] * (self._stats["total_requests"] - 1)
            self._stats["average_processing_time"] = (total_time + processing_time) / self._stats["total_requests"]

    def health_check(self) -> Dict[str, Any]:
        """Perform health check"""
        return {
            "service_name": self.service_name,
            "status": "healthy" if self._initialized else "unhealthy",
            "initialized": self._initialized,
            "stats": self.get_stats(),
        }

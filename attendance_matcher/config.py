"""
Configuration module for the attendance matcher service.

Loads configuration from environment variables with sensible defaults.
All settings are immutable after initialization.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration for the attendance matcher service.

    Backend Integration:
        backend_url: Base URL of the backend API (e.g., http://backend:3000)
        request_timeout: Seconds to wait for a backend response
        request_retries: Attempts when fetching reference descriptors

    Service Identity:
        service_name: Name of this service instance (log context)
        api_port: Port for Flask HTTP server

    Matching:
        match_threshold: Distance threshold for live identification
            (lower = stricter)
        compare_threshold: Distance threshold for single-reference
            comparison; tuned independently of match_threshold

    System:
        cache_file: Path to reference snapshot cache file
        debug_mode: Enable debug logging
        log_file: Optional path of a rotating log file (console only when empty)
        log_max_bytes: Size at which the log file is rotated
        log_backup_count: Number of rotated log files kept
    """

    # Backend
    backend_url: str
    request_timeout: float
    request_retries: int

    # Service
    service_name: str
    api_port: int

    # Matching
    match_threshold: float
    compare_threshold: float

    # System
    cache_file: str
    debug_mode: bool
    log_file: Optional[str]
    log_max_bytes: int
    log_backup_count: int

    def __post_init__(self):
        for name in ('match_threshold', 'compare_threshold'):
            if getattr(self, name) <= 0:
                raise ValueError(f'{name} must be positive')
        if self.log_max_bytes < 0 or self.log_backup_count < 0:
            raise ValueError('log rotation settings must be non-negative')
        if self.request_retries < 1:
            raise ValueError('request_retries must be at least 1')


def load_config() -> Config:
    """
    Load configuration from environment variables.

    Returns:
        Config: Immutable configuration object

    Raises:
        ValueError: If a numeric variable cannot be parsed or is out of range
    """
    return Config(
        # Backend
        backend_url=os.getenv('BACKEND_URL', 'http://localhost:3000').rstrip('/'),
        request_timeout=float(os.getenv('REQUEST_TIMEOUT', '10')),
        request_retries=int(os.getenv('REQUEST_RETRIES', '3')),

        # Service
        service_name=os.getenv('SERVICE_NAME', 'attendance-matcher'),
        api_port=int(os.getenv('API_PORT', '5001')),

        # Matching
        match_threshold=float(os.getenv('MATCH_THRESHOLD', '0.5')),
        compare_threshold=float(os.getenv('COMPARE_THRESHOLD', '0.5')),

        # System
        cache_file=os.getenv('CACHE_FILE', 'reference_descriptors_cache.pkl'),
        debug_mode=os.getenv('DEBUG', 'false').lower() == 'true',
        log_file=os.getenv('LOG_FILE') or None,
        log_max_bytes=int(os.getenv('LOG_MAX_BYTES', str(10 * 1024 * 1024))),
        log_backup_count=int(os.getenv('LOG_BACKUP_COUNT', '5')),
    )

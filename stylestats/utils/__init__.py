"""
Utility modules for stylestats.
"""

# Import key utilities for easy access
from stylestats.utils.config import Config
from stylestats.utils.logging import setup_logging, log_exception, PerformanceLogger

__all__ = [
    'Config',
    'setup_logging',
    'log_exception',
    'PerformanceLogger',
]

"""
Custom logging module with per-level formatting.
"""
from teamspace.logging.custom_logger import CustomLogger, get_logger
from teamspace.logging.log_levels import LogLevel

__all__ = [
    'CustomLogger',
    'LogLevel',
    'get_logger',
]

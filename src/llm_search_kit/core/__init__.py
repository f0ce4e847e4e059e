"""Core utilities shared by all llm-search-kit components."""

from .config import LoggingConfig, RetryPolicyConfig, load_config_data
from .logger import get_logger, setup_logging

__all__ = [
    "LoggingConfig",
    "RetryPolicyConfig",
    "load_config_data",
    "get_logger",
    "setup_logging",
]

"""
Utilities Package

Logging and retry helpers shared by scrapers and pipelines.
"""
from src.taxscout.utils.logger import get_logger, setup_logging
from src.taxscout.utils.retry import retry_call

__all__ = ["get_logger", "setup_logging", "retry_call"]

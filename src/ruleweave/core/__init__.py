"""
Shared infrastructure: settings, logging and constants.
"""

from .config import RuleweaveSettings, get_settings, reset_settings
from .constants import MISSING, ConditionType
from .logging import get_logger, reset_logging, set_log_level

__all__ = [
    "MISSING",
    "ConditionType",
    "RuleweaveSettings",
    "get_logger",
    "get_settings",
    "reset_logging",
    "reset_settings",
    "set_log_level",
]

"""
Utility helpers - configuration and logging.
"""

from docqa.utils.config import Settings, load_config, read_config_file
from docqa.utils.logging import configure_logging, set_log_level

__all__ = [
    "Settings",
    "load_config",
    "read_config_file",
    "configure_logging",
    "set_log_level",
]

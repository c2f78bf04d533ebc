# log_config.py
import logging

from config import get_settings

_LOGGING_CONFIGURED = False


def configure_logging() -> None:
    """依照 LOG_LEVEL 設定整個行程的 logging (只會執行一次)"""
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    level_name = get_settings().LOG_LEVEL.upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    _LOGGING_CONFIGURED = True

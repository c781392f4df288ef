import sys

from loguru import logger

from liverelay.schemas import LogCallback


def init_logger(debug: bool | None = None) -> None:
    from liverelay.app_config import get_relay_environ_config

    if debug is None:
        debug = get_relay_environ_config().DEBUG

    logger.remove()

    if debug:
        logger_level = "DEBUG"
        logger_format = (
            "<green>{time:MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )
    else:
        logger_level = "INFO"
        logger_format = (
            "{time:MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "{name}:{function}:{line} | "
            "{message}"
        )
    logger.add(sys.stderr, level=logger_level, format=logger_format)


class SessionLog:
    """Routes session log lines to loguru and to the optional ``log(level, message)`` callback."""

    LEVELS = {"error": "ERROR", "info": "INFO", "debug": "DEBUG"}

    def __init__(self, callback: LogCallback | None = None) -> None:
        self._callback = callback

    def __call__(self, level: str, message: str) -> None:
        logger.opt(depth=1).log(self.LEVELS.get(level, "INFO"), message)
        if self._callback is None:
            return
        try:
            self._callback(level, message)
        except Exception:
            logger.exception("Error in log callback")

"""
Loguru setup shared by the API and the services.

Services import ``from loguru import logger`` directly; this module only
replaces the default sink so every record carries its structured context.
"""
import sys

from loguru import logger

from .config import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level> {extra}"
)


def setup_logging(level: str | None = None):
    """Install a single stderr sink and return the configured logger"""
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
        backtrace=settings.app_env == "dev",
        diagnose=False,
    )
    logger.info("Logging configured", app=settings.app_name, env=settings.app_env)
    return logger

"""Logging setup for the Teamsheet entry points."""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging for command-line entry points.

    Library modules only create named loggers; the application decides
    where records go.

    Args:
        level: Level name such as "DEBUG" or "INFO"
    """
    numeric = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    logging.basicConfig(level=numeric, format=LOG_FORMAT)

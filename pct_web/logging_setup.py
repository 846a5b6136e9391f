import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Root logging for the web app; Flask's app.logger propagates here."""
    resolved = logging.getLevelName((level or "INFO").upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Invalid [logging] level: {level!r}")
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger().setLevel(resolved)
    # urllib3 chatter drowns out request logs at DEBUG
    logging.getLogger("urllib3").setLevel(max(resolved, logging.INFO))

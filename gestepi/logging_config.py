import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "INFO"):
    """Attach one stream handler to the root logger (idempotent)."""
    root = logging.getLogger()
    root.setLevel(level)

    if not any(getattr(h, "_gestepi", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._gestepi = True
        root.addHandler(handler)

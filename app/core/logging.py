"""Standard-library logging setup shared by the API process and CLI scripts."""

import logging
import time


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once; later calls are no-ops (logging.basicConfig semantics)."""
    # Timestamps carry a literal Z, so render them in UTC.
    logging.Formatter.converter = time.gmtime
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )

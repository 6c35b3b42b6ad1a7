# imagifine/core/logging_config.py
import logging
import os

from imagifine.core.config import LOG_DIR, LOG_LEVEL

PAYMENTS_LOGGER = "imagifine.payments"


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    payments_logger = logging.getLogger(PAYMENTS_LOGGER)
    if not any(isinstance(h, logging.FileHandler) for h in payments_logger.handlers):
        os.makedirs(LOG_DIR, exist_ok=True)
        handler = logging.FileHandler(os.path.join(LOG_DIR, "payments.log"))
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        payments_logger.setLevel(logging.INFO)
        payments_logger.addHandler(handler)

    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

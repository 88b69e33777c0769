# tuma_helper/core/logging_config.py
import logging

from tuma_helper.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or settings.log_level).upper(), format=LOG_FORMAT)
    # SQL echo is noisy; store failures are logged by the retry policy
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

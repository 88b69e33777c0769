"""Database initialization utilities."""

import logging

from sqlalchemy.exc import SQLAlchemyError

from tuma_helper.db.base import Base, engine
from tuma_helper.db.models import (  # noqa: F401 - register model metadata
    availability,
    booking,
    category,
    favorite,
    message,
    provider_profile,
    review,
    service,
    user,
)

logger = logging.getLogger(__name__)


def init_db(bind=None) -> None:
    try:
        Base.metadata.create_all(bind=bind or engine)
    except SQLAlchemyError:
        logger.exception("Database initialization failed.")
        raise

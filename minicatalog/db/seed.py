"""Lookup table seeding.

painted_by id 1 and base_size id 3 are the writer defaults, so the seed order
below is significant.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from minicatalog.core.logging import get_logger
from minicatalog.db.models import BaseSizeModel, PaintedByModel

logger = get_logger(__name__)

PAINTED_BY = ("prepainted", "self", "other")

BASE_SIZES = ("tiny", "small", "medium", "large", "huge", "gargantuan")


def seed_lookups(db: Session) -> int:
    """Insert missing painted-by and base-size rows. Returns the number inserted."""
    count = 0
    existing = set(db.scalars(select(PaintedByModel.painted_by_name)))
    for position, name in enumerate(PAINTED_BY, start=1):
        if name not in existing:
            db.add(PaintedByModel(id=position, painted_by_name=name))
            count += 1

    existing = set(db.scalars(select(BaseSizeModel.base_size_name)))
    for position, name in enumerate(BASE_SIZES, start=1):
        if name not in existing:
            db.add(BaseSizeModel(id=position, base_size_name=name))
            count += 1

    db.commit()
    logger.info("Seeded %d lookup rows", count)
    return count

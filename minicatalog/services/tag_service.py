"""Tag vocabulary store.

Tags are created lazily by the mini writer and only removed by the
unused-tag sweep. Name matching is exact and case-sensitive.
"""

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from minicatalog.core.errors import ConflictError, ValidationError
from minicatalog.core.logging import get_logger
from minicatalog.db.models import MiniTagModel, TagModel

logger = get_logger(__name__)


class TagService:
    """Get-or-create and garbage collection for tags."""

    def __init__(self, db: Session):
        self._db = db

    def get_by_name(self, name: str) -> TagModel | None:
        return self._db.scalars(
            select(TagModel).where(TagModel.name == name)
        ).first()

    def resolve_or_create(self, name: str) -> int:
        """Return the id of the tag named ``name``, inserting it when absent.

        Runs inside the caller's transaction and does not commit. The insert is
        flushed, so a second call for the same name in the same transaction
        finds the row instead of inserting a duplicate.
        """
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("tag name is required", field="tags")
        name = name.strip()

        existing = self.get_by_name(name)
        if existing is not None:
            return existing.id

        tag = TagModel(name=name)
        self._db.add(tag)
        try:
            self._db.flush()
        except IntegrityError as e:
            raise ConflictError(f"Tag already exists: {name}") from e

        logger.debug("Created tag %r (id=%d)", name, tag.id)
        return tag.id

    def list_tags(self) -> list[TagModel]:
        return list(self._db.scalars(select(TagModel).order_by(TagModel.name)))

    def sweep_unused(self) -> int:
        """Delete every tag no mini references. Returns the number removed."""
        referenced = select(MiniTagModel.tag_id).distinct()
        try:
            unused = list(
                self._db.scalars(select(TagModel.id).where(TagModel.id.not_in(referenced)))
            )
            if unused:
                self._db.execute(delete(TagModel).where(TagModel.id.in_(unused)))
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise

        logger.info("Swept %d unused tags", len(unused))
        return len(unused)

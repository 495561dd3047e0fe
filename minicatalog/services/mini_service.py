"""Mini aggregate writer.

Create, update and delete a mini together with its association rows and image
files. Each operation is one unit of work: everything commits together, or the
session is rolled back and the error is re-raised to the caller.

Association sets are never diffed. Update deletes every row of a relation for
the mini and inserts the supplied set again.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session

from minicatalog.config import Settings
from minicatalog.core.errors import NotFoundError, ValidationError
from minicatalog.core.logging import get_logger
from minicatalog.core.models import MiniInput, MiniView, NormalizedMini
from minicatalog.core.validation import normalize_mini_input
from minicatalog.db.models import (
    BaseSizeModel,
    CategoryModel,
    MiniCategoryModel,
    MiniModel,
    MiniProxyTypeModel,
    MiniTagModel,
    MiniTypeModel,
    PaintedByModel,
    ProductSetModel,
    TypeModel,
)
from minicatalog.services.image_service import ImageService
from minicatalog.services.mini_reader import MiniReader
from minicatalog.services.tag_service import TagService

logger = get_logger(__name__)

# association model, target column name
_ASSOCIATIONS = (
    (MiniTagModel, "tag_id"),
    (MiniCategoryModel, "category_id"),
    (MiniTypeModel, "type_id"),
    (MiniProxyTypeModel, "type_id"),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class MiniService:
    """Writes minis and everything hanging off them."""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        images: Optional[ImageService] = None,
        tags: Optional[TagService] = None,
        reader: Optional[MiniReader] = None,
    ):
        self._db = db
        self._settings = settings
        self._images = images or ImageService(settings)
        self._tags = tags or TagService(db)
        self._reader = reader or MiniReader(db, settings)

    # === Unit of work ===

    @contextmanager
    def _unit_of_work(self, action: str) -> Iterator[Session]:
        """Commit on success; roll back and re-raise on any error."""
        try:
            yield self._db
            self._db.commit()
        except Exception as e:
            self._db.rollback()
            logger.warning("Rolled back %s: %s", action, e)
            raise

    # === Create ===

    def create(self, data: MiniInput) -> MiniView:
        """Insert a mini with its associations and optional image."""
        mini = self._normalize(data)
        raw_image = (
            self._images.decode_payload(data.image_data) if data.image_data else None
        )

        mini_id: Optional[int] = None
        image_written = False
        try:
            with self._unit_of_work("create mini"):
                self._check_references(mini)

                now = _utcnow()
                row = MiniModel(
                    name=mini.name,
                    description=mini.description,
                    location=mini.location,
                    quantity=mini.quantity,
                    painted_by_id=mini.painted_by_id,
                    base_size_id=mini.base_size_id,
                    product_set_id=mini.product_set_id,
                    created_at=now,
                    updated_at=now,
                )
                self._db.add(row)
                self._db.flush()
                mini_id = row.id

                if raw_image is not None:
                    self._images.store(mini_id, raw_image)
                    image_written = True

                self._insert_associations(mini_id, mini)
        except Exception:
            # the id is never reused, so files written for it are orphans
            if image_written and mini_id is not None:
                self._images.remove(mini_id)
            raise

        logger.info("Created mini %d (%s)", mini_id, mini.name)
        return self._reader.fetch_one(mini_id)

    # === Update ===

    def update(
        self,
        mini_id: int,
        data: MiniInput,
        image_bytes: Optional[bytes] = None,
    ) -> MiniView:
        """Replace a mini's fields and every association set.

        The image is only re-derived when new bytes (or a base64 payload in
        ``data.image_data``) are supplied.
        """
        row = self._get_or_raise(mini_id)
        mini = self._normalize(data)
        if image_bytes is None and data.image_data:
            image_bytes = self._images.decode_payload(data.image_data)

        with self._unit_of_work(f"update mini {mini_id}"):
            self._check_references(mini)

            row.name = mini.name
            row.description = mini.description
            row.location = mini.location
            row.quantity = mini.quantity
            row.painted_by_id = mini.painted_by_id
            row.base_size_id = mini.base_size_id
            row.product_set_id = mini.product_set_id
            row.updated_at = _utcnow()

            self._delete_associations(mini_id)
            self._insert_associations(mini_id, mini)

            if image_bytes is not None:
                self._images.store(mini_id, image_bytes)

        logger.info("Updated mini %d", mini_id)
        return self._reader.fetch_one(mini_id)

    # === Delete ===

    def delete(self, mini_id: int) -> None:
        """Delete the mini and all of its association rows.

        Image files stay on disk.
        """
        row = self._get_or_raise(mini_id)

        with self._unit_of_work(f"delete mini {mini_id}"):
            self._delete_associations(mini_id)
            self._db.delete(row)
            self._db.flush()

        logger.info("Deleted mini %d", mini_id)

    # === Helpers ===

    def _normalize(self, data: MiniInput) -> NormalizedMini:
        return normalize_mini_input(
            data,
            default_painted_by_id=self._settings.DEFAULT_PAINTED_BY_ID,
            default_base_size_id=self._settings.DEFAULT_BASE_SIZE_ID,
        )

    def _get_or_raise(self, mini_id: int) -> MiniModel:
        row = self._db.get(MiniModel, mini_id)
        if row is None:
            raise NotFoundError(f"Mini not found: {mini_id}")
        return row

    # Association rows only go through bulk statements; they are never loaded
    # into the identity map.

    def _delete_associations(self, mini_id: int) -> None:
        for model, _ in _ASSOCIATIONS:
            self._db.execute(
                delete(model)
                .where(model.mini_id == mini_id)
                .execution_options(synchronize_session=False)
            )

    def _insert_associations(self, mini_id: int, mini: NormalizedMini) -> None:
        tag_ids: dict[int, None] = {}
        for name in mini.tags:
            tag_ids[self._tags.resolve_or_create(name)] = None

        targets = (tuple(tag_ids), mini.category_ids, mini.type_ids, mini.proxy_type_ids)
        for (model, column), ids in zip(_ASSOCIATIONS, targets):
            if ids:
                self._db.execute(
                    insert(model),
                    [{"mini_id": mini_id, column: target_id} for target_id in ids],
                )

    def _check_references(self, mini: NormalizedMini) -> None:
        """Reject ids that point at nothing.

        With VALIDATE_REFERENCES off, the datastore's foreign keys decide.
        """
        if not self._settings.VALIDATE_REFERENCES:
            return

        checks = (
            ("category_ids", CategoryModel, mini.category_ids),
            ("type_ids", TypeModel, mini.type_ids),
            ("proxy_type_ids", TypeModel, mini.proxy_type_ids),
            ("painted_by_id", PaintedByModel, (mini.painted_by_id,)),
            ("base_size_id", BaseSizeModel, (mini.base_size_id,)),
        )
        if mini.product_set_id is not None:
            checks += (("product_set_id", ProductSetModel, (mini.product_set_id,)),)

        for field, model, ids in checks:
            if not ids:
                continue
            found = set(self._db.scalars(select(model.id).where(model.id.in_(ids))))
            missing = [i for i in ids if i not in found]
            if missing:
                raise ValidationError(
                    f"{field} references unknown ids: {missing}", field=field
                )

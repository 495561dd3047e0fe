"""Relationship reader / aggregator.

Builds MiniView objects from one outer-joined query. Each association relation
is a one-to-many join, so a mini with 2 categories and 3 tags comes back as 6
rows; ``_collapse`` folds them into one view per mini with de-duplicated,
order-stable name and id lists.
"""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import Select, select
from sqlalchemy.orm import Session, aliased

from minicatalog.config import Settings
from minicatalog.core.errors import NotFoundError, ValidationError
from minicatalog.core.logging import get_logger
from minicatalog.core.models import MiniFilter, MiniView
from minicatalog.core.shard import original_url, thumbnail_url
from minicatalog.db.models import (
    BaseSizeModel,
    CategoryModel,
    ManufacturerModel,
    MiniCategoryModel,
    MiniModel,
    MiniProxyTypeModel,
    MiniTagModel,
    MiniTypeModel,
    PaintedByModel,
    ProductLineModel,
    ProductSetModel,
    TagModel,
    TypeModel,
)

logger = get_logger(__name__)

ORDERABLE_COLUMNS = {
    "id": MiniModel.id,
    "name": MiniModel.name,
    "location": MiniModel.location,
    "quantity": MiniModel.quantity,
    "created_at": MiniModel.created_at,
    "updated_at": MiniModel.updated_at,
}

# (view names attr, view ids attr, row id label, row name label)
_RELATIONS = (
    ("category_names", "category_ids", "category_id", "category_name"),
    ("type_names", "type_ids", "type_id", "type_name"),
    ("proxy_type_names", "proxy_type_ids", "proxy_type_id", "proxy_type_name"),
    ("tag_names", "tag_ids", "tag_id", "tag_name"),
)


class _Accumulator:
    """Per-mini collapse state. dicts keep insertion order and drop repeats."""

    def __init__(self, view: MiniView):
        self.view = view
        self.names: dict[str, dict[str, None]] = {r[0]: {} for r in _RELATIONS}
        self.ids: dict[str, dict[int, None]] = {r[1]: {} for r in _RELATIONS}

    def add(self, row) -> None:
        for names_attr, ids_attr, id_label, name_label in _RELATIONS:
            target_id = getattr(row, id_label)
            if target_id is None:
                continue
            self.ids[ids_attr][target_id] = None
            name = getattr(row, name_label)
            if name is not None:
                self.names[names_attr][name] = None

    def finish(self) -> MiniView:
        for names_attr, ids_attr, _, _ in _RELATIONS:
            setattr(self.view, names_attr, list(self.names[names_attr]))
            setattr(self.view, ids_attr, list(self.ids[ids_attr]))
        if self.view.product_set_id is not None:
            self.view.product_set_ids = [self.view.product_set_id]
        return self.view


class MiniReader:
    """Read side: single and list views of minis with their relationships."""

    def __init__(self, db: Session, settings: Settings):
        self._db = db
        self._url_prefix = settings.IMAGE_URL_PREFIX
        self._extension = settings.IMAGE_FORMAT.lower()

    def fetch_one(self, mini_id: int) -> MiniView:
        views = self._fetch(
            self._joined_query().where(MiniModel.id == mini_id), [mini_id]
        )
        if not views:
            raise NotFoundError(f"Mini not found: {mini_id}")
        return views[0]

    def fetch_many(self, filters: Optional[MiniFilter] = None) -> list[MiniView]:
        filters = filters or MiniFilter()
        order_column = ORDERABLE_COLUMNS.get(filters.order_by)
        if order_column is None:
            raise ValidationError(
                f"Cannot order by {filters.order_by!r}; "
                f"expected one of {sorted(ORDERABLE_COLUMNS)}",
                field="order_by",
            )

        mini_ids = self._select_ids(filters, order_column)
        if not mini_ids:
            return []

        query = self._joined_query().where(MiniModel.id.in_(mini_ids))
        return self._fetch(query, mini_ids)

    # === Query building ===

    def _select_ids(self, filters: MiniFilter, order_column) -> list[int]:
        """Apply filters and paging on minis alone, before the fan-out join."""
        query = select(MiniModel.id)

        if filters.name:
            query = query.where(MiniModel.name.ilike(f"%{filters.name.strip()}%"))
        if filters.location:
            query = query.where(MiniModel.location == filters.location.strip())
        if filters.product_set_id is not None:
            query = query.where(MiniModel.product_set_id == filters.product_set_id)
        if filters.category_id is not None:
            query = query.where(
                MiniModel.id.in_(
                    select(MiniCategoryModel.mini_id).where(
                        MiniCategoryModel.category_id == filters.category_id
                    )
                )
            )
        if filters.type_id is not None:
            query = query.where(
                MiniModel.id.in_(
                    select(MiniTypeModel.mini_id)
                    .where(MiniTypeModel.type_id == filters.type_id)
                    .union(
                        select(MiniProxyTypeModel.mini_id).where(
                            MiniProxyTypeModel.type_id == filters.type_id
                        )
                    )
                )
            )
        if filters.tag:
            query = query.where(
                MiniModel.id.in_(
                    select(MiniTagModel.mini_id)
                    .join(TagModel, MiniTagModel.tag_id == TagModel.id)
                    .where(TagModel.name == filters.tag.strip())
                )
            )

        query = query.order_by(*self._ordering(order_column, filters.descending))
        if filters.offset:
            query = query.offset(filters.offset)
        if filters.limit is not None:
            query = query.limit(filters.limit)
        return list(self._db.scalars(query))

    @staticmethod
    def _ordering(order_column, descending: bool) -> tuple:
        if order_column is MiniModel.id:
            return (MiniModel.id.desc() if descending else MiniModel.id.asc(),)
        primary = order_column.desc() if descending else order_column.asc()
        return primary, MiniModel.id.desc()

    @staticmethod
    def _joined_query() -> Select:
        regular_type = aliased(TypeModel, name="regular_type")
        proxy_type = aliased(TypeModel, name="proxy_type")

        return (
            select(
                MiniModel,
                PaintedByModel.painted_by_name,
                BaseSizeModel.base_size_name,
                ProductSetModel.name.label("product_set_name"),
                ProductLineModel.name.label("product_line_name"),
                ManufacturerModel.name.label("manufacturer_name"),
                CategoryModel.id.label("category_id"),
                CategoryModel.name.label("category_name"),
                regular_type.id.label("type_id"),
                regular_type.name.label("type_name"),
                proxy_type.id.label("proxy_type_id"),
                proxy_type.name.label("proxy_type_name"),
                TagModel.id.label("tag_id"),
                TagModel.name.label("tag_name"),
            )
            .outerjoin(PaintedByModel, MiniModel.painted_by_id == PaintedByModel.id)
            .outerjoin(BaseSizeModel, MiniModel.base_size_id == BaseSizeModel.id)
            .outerjoin(ProductSetModel, MiniModel.product_set_id == ProductSetModel.id)
            .outerjoin(
                ProductLineModel, ProductSetModel.product_line_id == ProductLineModel.id
            )
            .outerjoin(
                ManufacturerModel, ProductLineModel.company_id == ManufacturerModel.id
            )
            .outerjoin(MiniCategoryModel, MiniModel.id == MiniCategoryModel.mini_id)
            .outerjoin(CategoryModel, MiniCategoryModel.category_id == CategoryModel.id)
            .outerjoin(MiniTypeModel, MiniModel.id == MiniTypeModel.mini_id)
            .outerjoin(regular_type, MiniTypeModel.type_id == regular_type.id)
            .outerjoin(MiniProxyTypeModel, MiniModel.id == MiniProxyTypeModel.mini_id)
            .outerjoin(proxy_type, MiniProxyTypeModel.type_id == proxy_type.id)
            .outerjoin(MiniTagModel, MiniModel.id == MiniTagModel.mini_id)
            .outerjoin(TagModel, MiniTagModel.tag_id == TagModel.id)
            # stable list order inside each mini
            .order_by(
                CategoryModel.name,
                regular_type.name,
                proxy_type.name,
                TagModel.name,
            )
        )

    # === Collapse ===

    def _fetch(self, query: Select, mini_ids: list[int]) -> list[MiniView]:
        """Run the joined query and return views in ``mini_ids`` order."""
        rows = self._db.execute(query).all()
        accumulators = self._collapse(rows)
        return [accumulators[i].finish() for i in mini_ids if i in accumulators]

    def _collapse(self, rows: Iterable) -> dict[int, _Accumulator]:
        accumulators: dict[int, _Accumulator] = {}
        for row in rows:
            mini = row.MiniModel
            acc = accumulators.get(mini.id)
            if acc is None:
                acc = _Accumulator(self._base_view(mini, row))
                accumulators[mini.id] = acc
            acc.add(row)
        return accumulators

    def _base_view(self, mini: MiniModel, row) -> MiniView:
        return MiniView(
            id=mini.id,
            name=mini.name,
            description=mini.description,
            location=mini.location,
            quantity=mini.quantity,
            painted_by_id=mini.painted_by_id,
            base_size_id=mini.base_size_id,
            product_set_id=mini.product_set_id,
            created_at=mini.created_at,
            updated_at=mini.updated_at,
            painted_by_name=row.painted_by_name,
            base_size_name=row.base_size_name,
            product_set_name=row.product_set_name,
            product_line_name=row.product_line_name,
            manufacturer_name=row.manufacturer_name,
            image_path=thumbnail_url(mini.id, self._url_prefix, self._extension),
            original_image_path=original_url(
                mini.id, self._url_prefix, self._extension
            ),
        )

"""Reference data: categories, types, product hierarchy, lookups.

Deletes refuse to remove rows that still have dependents (types under a
category, minis using a type, product lines under a manufacturer, ...).

Type, product line and product set reads return rows that carry their parent
names (and, for types, how many minis use them) next to the table columns.
"""

from typing import Optional, TypeVar

from sqlalchemy import Row, Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from minicatalog.core.errors import (
    ConflictError,
    DependentDataError,
    NotFoundError,
)
from minicatalog.core.logging import get_logger
from minicatalog.core.validation import require_text
from minicatalog.db.models import (
    Base,
    BaseSizeModel,
    CategoryModel,
    ManufacturerModel,
    MiniCategoryModel,
    MiniModel,
    MiniProxyTypeModel,
    MiniTypeModel,
    PaintedByModel,
    ProductLineModel,
    ProductSetModel,
    TypeModel,
)

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class ReferenceService:
    def __init__(self, db: Session):
        self._db = db

    # === Lookups ===

    def list_painted_by(self) -> list[PaintedByModel]:
        return list(self._db.scalars(select(PaintedByModel).order_by(PaintedByModel.id)))

    def list_base_sizes(self) -> list[BaseSizeModel]:
        return list(self._db.scalars(select(BaseSizeModel).order_by(BaseSizeModel.id)))

    # === Categories ===

    def list_categories(self) -> list[CategoryModel]:
        return list(self._db.scalars(select(CategoryModel).order_by(CategoryModel.name)))

    def create_category(self, name: str, image_path: Optional[str] = None) -> CategoryModel:
        category = CategoryModel(name=require_text(name, "name"), image_path=image_path)
        return self._insert(category, f"A category named {category.name!r} already exists")

    def update_category(self, category_id: int, name: str) -> CategoryModel:
        name = require_text(name, "name")
        category = self._get_or_raise(CategoryModel, category_id, "Category")
        category.name = name
        return self._save(category, f"A category named {name!r} already exists")

    def delete_category(self, category_id: int) -> None:
        category = self._get_or_raise(CategoryModel, category_id, "Category")
        if self._count(select(TypeModel).where(TypeModel.category_id == category_id)):
            raise DependentDataError(
                "Cannot delete category as it contains one or more types"
            )
        if self._count(
            select(MiniCategoryModel).where(MiniCategoryModel.category_id == category_id)
        ):
            raise DependentDataError(
                "Cannot delete category as it is being used by one or more minis"
            )
        self._delete(category)

    # === Types ===

    def list_types(self) -> list[Row]:
        """Types with ``category_name``, ``type_count`` and ``proxy_count``."""
        query = self._type_query().order_by(CategoryModel.name, TypeModel.name)
        return list(self._db.execute(query).all())

    def get_type(self, type_id: int) -> Row:
        row = self._db.execute(self._type_query().where(TypeModel.id == type_id)).first()
        if row is None:
            raise NotFoundError(f"Type not found: {type_id}")
        return row

    def create_type(self, name: str, category_id: int) -> Row:
        self._get_or_raise(CategoryModel, category_id, "Category")
        mini_type = TypeModel(name=require_text(name, "name"), category_id=category_id)
        self._insert(
            mini_type, f"A type named {mini_type.name!r} already exists in this category"
        )
        return self.get_type(mini_type.id)

    def update_type(self, type_id: int, name: str, category_id: int) -> Row:
        name = require_text(name, "name")
        mini_type = self._get_or_raise(TypeModel, type_id, "Type")
        self._get_or_raise(CategoryModel, category_id, "Category")
        mini_type.name = name
        mini_type.category_id = category_id
        self._save(mini_type, f"A type named {name!r} already exists in this category")
        return self.get_type(type_id)

    def delete_type(self, type_id: int) -> None:
        mini_type = self._get_or_raise(TypeModel, type_id, "Type")
        used = self._count(
            select(MiniTypeModel).where(MiniTypeModel.type_id == type_id)
        ) + self._count(
            select(MiniProxyTypeModel).where(MiniProxyTypeModel.type_id == type_id)
        )
        if used:
            raise DependentDataError(
                "Cannot delete type as it is being used by one or more minis"
            )
        self._delete(mini_type)

    @staticmethod
    def _type_query() -> Select:
        type_count = (
            select(func.count())
            .select_from(MiniTypeModel)
            .where(MiniTypeModel.type_id == TypeModel.id)
            .correlate(TypeModel)
            .scalar_subquery()
        )
        proxy_count = (
            select(func.count())
            .select_from(MiniProxyTypeModel)
            .where(MiniProxyTypeModel.type_id == TypeModel.id)
            .correlate(TypeModel)
            .scalar_subquery()
        )
        return select(
            TypeModel.id,
            TypeModel.name,
            TypeModel.category_id,
            TypeModel.image_path,
            CategoryModel.name.label("category_name"),
            type_count.label("type_count"),
            proxy_count.label("proxy_count"),
        ).join(CategoryModel, TypeModel.category_id == CategoryModel.id)

    # === Manufacturers ===

    def list_manufacturers(self) -> list[ManufacturerModel]:
        return list(
            self._db.scalars(select(ManufacturerModel).order_by(ManufacturerModel.name))
        )

    def create_manufacturer(self, name: str) -> ManufacturerModel:
        manufacturer = ManufacturerModel(name=require_text(name, "name"))
        return self._insert(
            manufacturer, "A manufacturer with this name already exists"
        )

    def update_manufacturer(self, manufacturer_id: int, name: str) -> ManufacturerModel:
        name = require_text(name, "name")
        manufacturer = self._get_or_raise(
            ManufacturerModel, manufacturer_id, "Manufacturer"
        )
        manufacturer.name = name
        return self._save(manufacturer, "A manufacturer with this name already exists")

    def delete_manufacturer(self, manufacturer_id: int) -> None:
        manufacturer = self._get_or_raise(
            ManufacturerModel, manufacturer_id, "Manufacturer"
        )
        if self._count(
            select(ProductLineModel).where(ProductLineModel.company_id == manufacturer_id)
        ):
            raise DependentDataError(
                "Cannot delete manufacturer as it has associated product lines"
            )
        self._delete(manufacturer)

    # === Product lines ===

    def list_product_lines(self) -> list[Row]:
        """Product lines with ``manufacturer_name``."""
        query = self._product_line_query().order_by(
            ManufacturerModel.name, ProductLineModel.name
        )
        return list(self._db.execute(query).all())

    def get_product_line(self, product_line_id: int) -> Row:
        row = self._db.execute(
            self._product_line_query().where(ProductLineModel.id == product_line_id)
        ).first()
        if row is None:
            raise NotFoundError(f"Product line not found: {product_line_id}")
        return row

    def create_product_line(self, name: str, company_id: int) -> Row:
        self._get_or_raise(ManufacturerModel, company_id, "Manufacturer")
        line = ProductLineModel(name=require_text(name, "name"), company_id=company_id)
        self._insert(
            line, "A product line with this name already exists for this manufacturer"
        )
        return self.get_product_line(line.id)

    def update_product_line(self, product_line_id: int, name: str, company_id: int) -> Row:
        name = require_text(name, "name")
        line = self._get_or_raise(ProductLineModel, product_line_id, "Product line")
        self._get_or_raise(ManufacturerModel, company_id, "Manufacturer")
        line.name = name
        line.company_id = company_id
        self._save(
            line, "A product line with this name already exists for this manufacturer"
        )
        return self.get_product_line(product_line_id)

    def delete_product_line(self, product_line_id: int) -> None:
        line = self._get_or_raise(ProductLineModel, product_line_id, "Product line")
        if self._count(
            select(ProductSetModel).where(
                ProductSetModel.product_line_id == product_line_id
            )
        ):
            raise DependentDataError(
                "Cannot delete product line as it has associated product sets"
            )
        self._delete(line)

    @staticmethod
    def _product_line_query() -> Select:
        return select(
            ProductLineModel.id,
            ProductLineModel.name,
            ProductLineModel.company_id,
            ManufacturerModel.name.label("manufacturer_name"),
        ).join(ManufacturerModel, ProductLineModel.company_id == ManufacturerModel.id)

    # === Product sets ===

    def list_product_sets(self) -> list[Row]:
        """Product sets with ``product_line_name`` and ``manufacturer_name``."""
        query = self._product_set_query().order_by(
            ManufacturerModel.name, ProductLineModel.name, ProductSetModel.name
        )
        return list(self._db.execute(query).all())

    def list_sets_for_line(self, product_line_id: int) -> list[Row]:
        self._get_or_raise(ProductLineModel, product_line_id, "Product line")
        query = (
            self._product_set_query()
            .where(ProductSetModel.product_line_id == product_line_id)
            .order_by(ProductSetModel.name)
        )
        return list(self._db.execute(query).all())

    def get_product_set(self, product_set_id: int) -> Row:
        row = self._db.execute(
            self._product_set_query().where(ProductSetModel.id == product_set_id)
        ).first()
        if row is None:
            raise NotFoundError(f"Product set not found: {product_set_id}")
        return row

    def create_product_set(self, name: str, product_line_id: int) -> Row:
        self._get_or_raise(ProductLineModel, product_line_id, "Product line")
        product_set = ProductSetModel(
            name=require_text(name, "name"), product_line_id=product_line_id
        )
        self._insert(
            product_set, "A product set with this name already exists in this line"
        )
        return self.get_product_set(product_set.id)

    def update_product_set(
        self, product_set_id: int, name: str, product_line_id: int
    ) -> Row:
        name = require_text(name, "name")
        product_set = self._get_or_raise(ProductSetModel, product_set_id, "Product set")
        self._get_or_raise(ProductLineModel, product_line_id, "Product line")
        product_set.name = name
        product_set.product_line_id = product_line_id
        self._save(
            product_set, "A product set with this name already exists in this line"
        )
        return self.get_product_set(product_set_id)

    def delete_product_set(self, product_set_id: int) -> None:
        product_set = self._get_or_raise(ProductSetModel, product_set_id, "Product set")
        if self._count(
            select(MiniModel).where(MiniModel.product_set_id == product_set_id)
        ):
            raise DependentDataError(
                "Cannot delete product set as it is being used by one or more minis"
            )
        self._delete(product_set)

    @staticmethod
    def _product_set_query() -> Select:
        return (
            select(
                ProductSetModel.id,
                ProductSetModel.name,
                ProductSetModel.product_line_id,
                ProductLineModel.name.label("product_line_name"),
                ManufacturerModel.name.label("manufacturer_name"),
            )
            .join(
                ProductLineModel, ProductSetModel.product_line_id == ProductLineModel.id
            )
            .join(
                ManufacturerModel, ProductLineModel.company_id == ManufacturerModel.id
            )
        )

    # === Helpers ===

    def _get_or_raise(self, model: type[ModelT], entity_id: int, label: str) -> ModelT:
        entity = self._db.get(model, entity_id)
        if entity is None:
            raise NotFoundError(f"{label} not found: {entity_id}")
        return entity

    def _count(self, query) -> int:
        return self._db.scalar(
            select(func.count()).select_from(query.subquery())
        ) or 0

    def _insert(self, entity: ModelT, conflict_message: str) -> ModelT:
        self._db.add(entity)
        return self._save(entity, conflict_message)

    def _save(self, entity: ModelT, conflict_message: str) -> ModelT:
        """Commit pending changes to ``entity``; unique violations become conflicts."""
        try:
            self._db.commit()
        except IntegrityError as e:
            self._db.rollback()
            raise ConflictError(conflict_message) from e
        self._db.refresh(entity)
        logger.info("Saved %s %d", entity.__tablename__, entity.id)
        return entity

    def _delete(self, entity: Base) -> None:
        entity_id = entity.id
        try:
            self._db.delete(entity)
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise
        logger.info("Deleted %s %d", entity.__tablename__, entity_id)

"""SQLAlchemy declarative base and ORM models for the mini catalog."""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


# ── Lookup tables ─────────────────────────────────────────


class PaintedByModel(Base):
    """Who painted a mini (prepainted / self / other)."""

    __tablename__ = "painted_by"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    painted_by_name: Mapped[str] = mapped_column(String, nullable=False, unique=True)


class BaseSizeModel(Base):
    """Base footprint of a mini (tiny ... gargantuan)."""

    __tablename__ = "base_sizes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    base_size_name: Mapped[str] = mapped_column(String, nullable=False, unique=True)


# ── Classification ────────────────────────────────────────


class CategoryModel(Base):
    __tablename__ = "mini_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    image_path: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    __table_args__ = (Index("idx_mini_categories_name", "name"),)


class TypeModel(Base):
    """A type belongs to one category; minis use it as regular or proxy type."""

    __tablename__ = "mini_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("mini_categories.id", ondelete="CASCADE"), nullable=False
    )
    image_path: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("name", "category_id", name="uq_mini_types_name_category"),
        Index("idx_mini_types_category", "category_id"),
        Index("idx_mini_types_name", "name"),
    )


class TagModel(Base):
    """Freeform label. Case-sensitive unique name."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)

    __table_args__ = (Index("idx_tags_name", "name"), {"sqlite_autoincrement": True})


# ── Product hierarchy ─────────────────────────────────────


class ManufacturerModel(Base):
    __tablename__ = "production_companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)


class ProductLineModel(Base):
    __tablename__ = "product_lines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    company_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("production_companies.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("name", "company_id", name="uq_product_lines_name_company"),
        Index("idx_product_lines_company", "company_id"),
    )


class ProductSetModel(Base):
    __tablename__ = "product_sets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    product_line_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("product_lines.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("name", "product_line_id", name="uq_product_sets_name_line"),
        Index("idx_product_sets_line", "product_line_id"),
    )


# ── Minis ─────────────────────────────────────────────────


class MiniModel(Base):
    __tablename__ = "minis"
    # AUTOINCREMENT: ids are never reused, image paths depend on them
    __table_args__ = (
        Index("idx_minis_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[str] = mapped_column(String, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    painted_by_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("painted_by.id"), nullable=True
    )
    base_size_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("base_sizes.id"), nullable=True
    )
    product_set_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("product_sets.id"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


# ── Association relations ─────────────────────────────────
# Composite primary keys: a (mini, target) pair appears at most once.


class MiniCategoryModel(Base):
    __tablename__ = "mini_to_categories"

    mini_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("minis.id", ondelete="CASCADE"), primary_key=True
    )
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("mini_categories.id", ondelete="CASCADE"), primary_key=True
    )

    __table_args__ = (Index("idx_mini_to_categories_category", "category_id"),)


class MiniTypeModel(Base):
    __tablename__ = "mini_to_types"

    mini_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("minis.id", ondelete="CASCADE"), primary_key=True
    )
    type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("mini_types.id", ondelete="CASCADE"), primary_key=True
    )

    __table_args__ = (Index("idx_mini_to_types_type", "type_id"),)


class MiniProxyTypeModel(Base):
    __tablename__ = "mini_to_proxy_types"

    mini_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("minis.id", ondelete="CASCADE"), primary_key=True
    )
    type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("mini_types.id", ondelete="CASCADE"), primary_key=True
    )

    __table_args__ = (Index("idx_mini_to_proxy_types_type", "type_id"),)


class MiniTagModel(Base):
    __tablename__ = "mini_to_tags"

    mini_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("minis.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    )

    __table_args__ = (Index("idx_mini_to_tags_tag", "tag_id"),)

"""Mini domain models (DB independent)"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional


@dataclass
class MiniInput:
    """Fields accepted by create/update. Not incremental: every call is the full state."""

    name: Optional[str]
    location: Optional[str]
    description: Optional[str] = None
    quantity: Optional[int] = None

    painted_by_id: Optional[int] = None
    base_size_id: Optional[int] = None
    product_set_id: Optional[int] = None

    category_ids: list[int] = field(default_factory=list)
    type_ids: list[int] = field(default_factory=list)
    proxy_type_ids: list[int] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    # base64 or data URL payload
    image_data: Optional[str] = None


@dataclass(frozen=True)
class NormalizedMini:
    """MiniInput after validation: trimmed, defaulted, de-duplicated."""

    name: str
    location: str
    description: Optional[str]
    quantity: int
    painted_by_id: int
    base_size_id: int
    product_set_id: Optional[int]
    category_ids: tuple[int, ...]
    type_ids: tuple[int, ...]
    proxy_type_ids: tuple[int, ...]
    tags: tuple[str, ...]


@dataclass(frozen=True)
class ImagePaths:
    original_path: Path
    thumbnail_path: Path


@dataclass
class MiniFilter:
    """fetch_many filter. Every criterion is optional and they combine with AND."""

    name: Optional[str] = None  # case-insensitive substring
    location: Optional[str] = None
    category_id: Optional[int] = None
    type_id: Optional[int] = None  # regular or proxy
    tag: Optional[str] = None
    product_set_id: Optional[int] = None

    order_by: str = "id"
    descending: bool = True
    limit: Optional[int] = None
    offset: int = 0


@dataclass
class MiniView:
    """Aggregate view of one mini and all its relationships."""

    id: int
    name: str
    description: Optional[str]
    location: Optional[str]
    quantity: int
    painted_by_id: Optional[int]
    base_size_id: Optional[int]
    product_set_id: Optional[int]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    painted_by_name: Optional[str] = None
    base_size_name: Optional[str] = None
    product_set_name: Optional[str] = None
    product_line_name: Optional[str] = None
    manufacturer_name: Optional[str] = None

    category_names: list[str] = field(default_factory=list)
    type_names: list[str] = field(default_factory=list)
    proxy_type_names: list[str] = field(default_factory=list)
    tag_names: list[str] = field(default_factory=list)

    category_ids: list[int] = field(default_factory=list)
    type_ids: list[int] = field(default_factory=list)
    proxy_type_ids: list[int] = field(default_factory=list)
    tag_ids: list[int] = field(default_factory=list)
    product_set_ids: list[int] = field(default_factory=list)

    image_path: str = ""
    original_image_path: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

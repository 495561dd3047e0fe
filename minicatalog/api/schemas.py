"""API request/response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from minicatalog.core.models import MiniInput, MiniView

LABEL_DELIMITER = ","


# === Request Schemas ===


class MiniCreateRequest(BaseModel):
    """Create a mini. ``image`` is a base64 string or data URL."""

    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    quantity: Optional[int] = None
    categories: list[int] = Field(default_factory=list)
    types: list[int] = Field(default_factory=list)
    proxy_types: list[int] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    painted_by: Optional[int] = Field(default=None, description="painted_by id")
    base_size_id: Optional[int] = None
    product_sets: list[int] = Field(
        default_factory=list, description="only the first product set is used"
    )
    image: Optional[str] = None

    def to_input(self) -> MiniInput:
        return MiniInput(
            name=self.name,
            description=self.description,
            location=self.location,
            quantity=self.quantity,
            painted_by_id=self.painted_by,
            base_size_id=self.base_size_id,
            product_set_id=self.product_sets[0] if self.product_sets else None,
            category_ids=self.categories,
            type_ids=self.types,
            proxy_type_ids=self.proxy_types,
            tags=self.tags,
            image_data=self.image,
        )


class MiniUpdateRequest(BaseModel):
    """Full replacement of a mini. Omitted lists clear the relation."""

    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    quantity: Optional[int] = None
    categories: list[int] = Field(default_factory=list)
    types: list[int] = Field(default_factory=list)
    proxy_types: list[int] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    painted_by_id: Optional[int] = None
    base_size_id: Optional[int] = None
    product_set_id: Optional[int] = None
    image: Optional[str] = None

    def to_input(self) -> MiniInput:
        return MiniInput(
            name=self.name,
            description=self.description,
            location=self.location,
            quantity=self.quantity,
            painted_by_id=self.painted_by_id,
            base_size_id=self.base_size_id,
            product_set_id=self.product_set_id,
            category_ids=self.categories,
            type_ids=self.types,
            proxy_type_ids=self.proxy_types,
            tags=self.tags,
        )


class NameRequest(BaseModel):
    name: str


class TypeRequest(BaseModel):
    name: str
    category_id: int


class ProductLineRequest(BaseModel):
    name: str
    company_id: int


class ProductSetRequest(BaseModel):
    name: str
    product_line_id: int


# === Response Schemas ===


class MiniResponse(BaseModel):
    """Aggregate view of a mini. Name lists are comma-delimited, null when empty."""

    id: int
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    quantity: int
    painted_by_id: Optional[int] = None
    base_size_id: Optional[int] = None
    product_set_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    painted_by_name: Optional[str] = None
    base_size_name: Optional[str] = None
    product_set_name: Optional[str] = None
    product_line_name: Optional[str] = None
    manufacturer_name: Optional[str] = None

    category_names: Optional[str] = None
    type_names: Optional[str] = None
    proxy_type_names: Optional[str] = None
    tag_names: Optional[str] = None

    image_path: str
    original_image_path: str

    @classmethod
    def from_view(cls, view: MiniView) -> "MiniResponse":
        data = view.to_dict()
        for key in ("category_names", "type_names", "proxy_type_names", "tag_names"):
            data[key] = LABEL_DELIMITER.join(data[key]) or None
        return cls.model_validate(data)


class MiniRelationshipsResponse(MiniResponse):
    """Editor variant: adds the matched ids of every relation."""

    category_ids: list[int] = []
    type_ids: list[int] = []
    proxy_type_ids: list[int] = []
    tag_ids: list[int] = []
    product_set_ids: list[int] = []


class TagResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    image_path: Optional[str] = None


class TypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category_id: int
    category_name: Optional[str] = None
    type_count: int = 0
    proxy_count: int = 0


class ManufacturerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ProductLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    company_id: int
    manufacturer_name: Optional[str] = None


class ProductSetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    product_line_id: int
    product_line_name: Optional[str] = None
    manufacturer_name: Optional[str] = None


class PaintedByResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    painted_by_name: str


class BaseSizeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    base_size_name: str


class ErrorResponse(BaseModel):
    """Error body"""

    message: str
    code: str
    field: Optional[str] = None

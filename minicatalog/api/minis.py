"""Mini API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from minicatalog.api.deps import get_image_service, get_mini_reader, get_mini_service
from minicatalog.api.schemas import (
    ErrorResponse,
    MiniCreateRequest,
    MiniRelationshipsResponse,
    MiniResponse,
    MiniUpdateRequest,
)
from minicatalog.core.models import MiniFilter
from minicatalog.services.image_service import ImageService
from minicatalog.services.mini_reader import MiniReader
from minicatalog.services.mini_service import MiniService

router = APIRouter(prefix="/minis", tags=["minis"])

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}


@router.get("", response_model=list[MiniResponse])
def list_minis(
    name: Optional[str] = None,
    location: Optional[str] = None,
    category_id: Optional[int] = None,
    type_id: Optional[int] = None,
    tag: Optional[str] = None,
    product_set_id: Optional[int] = None,
    order_by: str = "id",
    descending: bool = True,
    limit: Optional[int] = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    reader: MiniReader = Depends(get_mini_reader),
) -> list[MiniResponse]:
    """List minis, newest first unless another ordering is requested."""
    filters = MiniFilter(
        name=name,
        location=location,
        category_id=category_id,
        type_id=type_id,
        tag=tag,
        product_set_id=product_set_id,
        order_by=order_by,
        descending=descending,
        limit=limit,
        offset=offset,
    )
    return [MiniResponse.from_view(v) for v in reader.fetch_many(filters)]


@router.post(
    "",
    response_model=MiniResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
)
def create_mini(
    request: MiniCreateRequest,
    service: MiniService = Depends(get_mini_service),
) -> MiniResponse:
    return MiniResponse.from_view(service.create(request.to_input()))


@router.get("/{mini_id}", response_model=MiniResponse, responses=_ERRORS)
def get_mini(
    mini_id: int,
    reader: MiniReader = Depends(get_mini_reader),
) -> MiniResponse:
    return MiniResponse.from_view(reader.fetch_one(mini_id))


@router.get(
    "/{mini_id}/relationships",
    response_model=MiniRelationshipsResponse,
    responses=_ERRORS,
)
def get_mini_relationships(
    mini_id: int,
    reader: MiniReader = Depends(get_mini_reader),
) -> MiniRelationshipsResponse:
    """Mini with the ids of every related row, for edit forms."""
    return MiniRelationshipsResponse.from_view(reader.fetch_one(mini_id))


@router.put("/{mini_id}", response_model=MiniResponse, responses=_ERRORS)
def update_mini(
    mini_id: int,
    request: MiniUpdateRequest,
    service: MiniService = Depends(get_mini_service),
    images: ImageService = Depends(get_image_service),
) -> MiniResponse:
    image_bytes = images.decode_payload(request.image) if request.image else None
    view = service.update(mini_id, request.to_input(), image_bytes=image_bytes)
    return MiniResponse.from_view(view)


@router.delete(
    "/{mini_id}", status_code=status.HTTP_204_NO_CONTENT, responses=_ERRORS
)
def delete_mini(
    mini_id: int,
    service: MiniService = Depends(get_mini_service),
) -> Response:
    service.delete(mini_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

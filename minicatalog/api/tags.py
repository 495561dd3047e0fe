"""Tag API endpoints."""

from fastapi import APIRouter, Depends, Response, status

from minicatalog.api.deps import get_tag_service
from minicatalog.api.schemas import TagResponse
from minicatalog.services.tag_service import TagService

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("", response_model=list[TagResponse])
def list_tags(service: TagService = Depends(get_tag_service)) -> list[TagResponse]:
    return [TagResponse.model_validate(t) for t in service.list_tags()]


@router.delete("/cleanup", status_code=status.HTTP_204_NO_CONTENT)
def cleanup_tags(service: TagService = Depends(get_tag_service)) -> Response:
    """Remove tags no mini uses anymore."""
    service.sweep_unused()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

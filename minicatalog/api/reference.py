"""Reference data API endpoints (categories, types, product hierarchy, lookups)."""

from fastapi import APIRouter, Depends, Response, status

from minicatalog.api.deps import get_reference_service
from minicatalog.api.schemas import (
    BaseSizeResponse,
    CategoryResponse,
    ErrorResponse,
    ManufacturerResponse,
    NameRequest,
    PaintedByResponse,
    ProductLineRequest,
    ProductLineResponse,
    ProductSetRequest,
    ProductSetResponse,
    TypeRequest,
    TypeResponse,
)
from minicatalog.services.reference_service import ReferenceService

router = APIRouter(tags=["reference"])

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}

ServiceDep = Depends(get_reference_service)


def _no_content() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# === Lookups ===


@router.get("/reference/painted-by", response_model=list[PaintedByResponse])
def list_painted_by(service: ReferenceService = ServiceDep):
    return service.list_painted_by()


@router.get("/reference/base-sizes", response_model=list[BaseSizeResponse])
def list_base_sizes(service: ReferenceService = ServiceDep):
    return service.list_base_sizes()


# === Categories ===


@router.get("/categories", response_model=list[CategoryResponse])
def list_categories(service: ReferenceService = ServiceDep):
    return service.list_categories()


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
)
def create_category(request: NameRequest, service: ReferenceService = ServiceDep):
    return service.create_category(request.name)


@router.put(
    "/categories/{category_id}", response_model=CategoryResponse, responses=_ERRORS
)
def update_category(
    category_id: int, request: NameRequest, service: ReferenceService = ServiceDep
):
    return service.update_category(category_id, request.name)


@router.delete(
    "/categories/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_ERRORS,
)
def delete_category(category_id: int, service: ReferenceService = ServiceDep):
    service.delete_category(category_id)
    return _no_content()


# === Types ===


@router.get("/types", response_model=list[TypeResponse])
def list_types(service: ReferenceService = ServiceDep) -> list[TypeResponse]:
    """Types with their category name and how many minis use them."""
    return [TypeResponse.model_validate(row) for row in service.list_types()]


@router.post(
    "/types",
    response_model=TypeResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
)
def create_type(request: TypeRequest, service: ReferenceService = ServiceDep) -> TypeResponse:
    return TypeResponse.model_validate(
        service.create_type(request.name, request.category_id)
    )


@router.put("/types/{type_id}", response_model=TypeResponse, responses=_ERRORS)
def update_type(
    type_id: int, request: TypeRequest, service: ReferenceService = ServiceDep
) -> TypeResponse:
    return TypeResponse.model_validate(
        service.update_type(type_id, request.name, request.category_id)
    )


@router.delete(
    "/types/{type_id}", status_code=status.HTTP_204_NO_CONTENT, responses=_ERRORS
)
def delete_type(type_id: int, service: ReferenceService = ServiceDep):
    service.delete_type(type_id)
    return _no_content()


# === Manufacturers ===


@router.get("/manufacturers", response_model=list[ManufacturerResponse])
def list_manufacturers(service: ReferenceService = ServiceDep):
    return service.list_manufacturers()


@router.post(
    "/manufacturers",
    response_model=ManufacturerResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
)
def create_manufacturer(request: NameRequest, service: ReferenceService = ServiceDep):
    return service.create_manufacturer(request.name)


@router.put(
    "/manufacturers/{manufacturer_id}",
    response_model=ManufacturerResponse,
    responses=_ERRORS,
)
def update_manufacturer(
    manufacturer_id: int, request: NameRequest, service: ReferenceService = ServiceDep
):
    return service.update_manufacturer(manufacturer_id, request.name)


@router.delete(
    "/manufacturers/{manufacturer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_ERRORS,
)
def delete_manufacturer(manufacturer_id: int, service: ReferenceService = ServiceDep):
    service.delete_manufacturer(manufacturer_id)
    return _no_content()


# === Product lines ===


@router.get("/product-lines", response_model=list[ProductLineResponse])
def list_product_lines(service: ReferenceService = ServiceDep) -> list[ProductLineResponse]:
    return [ProductLineResponse.model_validate(row) for row in service.list_product_lines()]


@router.get(
    "/product-lines/{product_line_id}/sets",
    response_model=list[ProductSetResponse],
    responses=_ERRORS,
)
def list_sets_for_line(
    product_line_id: int, service: ReferenceService = ServiceDep
) -> list[ProductSetResponse]:
    return [
        ProductSetResponse.model_validate(row)
        for row in service.list_sets_for_line(product_line_id)
    ]


@router.post(
    "/product-lines",
    response_model=ProductLineResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
)
def create_product_line(
    request: ProductLineRequest, service: ReferenceService = ServiceDep
) -> ProductLineResponse:
    return ProductLineResponse.model_validate(
        service.create_product_line(request.name, request.company_id)
    )


@router.put(
    "/product-lines/{product_line_id}",
    response_model=ProductLineResponse,
    responses=_ERRORS,
)
def update_product_line(
    product_line_id: int,
    request: ProductLineRequest,
    service: ReferenceService = ServiceDep,
) -> ProductLineResponse:
    return ProductLineResponse.model_validate(
        service.update_product_line(product_line_id, request.name, request.company_id)
    )


@router.delete(
    "/product-lines/{product_line_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_ERRORS,
)
def delete_product_line(product_line_id: int, service: ReferenceService = ServiceDep):
    service.delete_product_line(product_line_id)
    return _no_content()


# === Product sets ===


@router.get("/product-sets", response_model=list[ProductSetResponse])
def list_product_sets(service: ReferenceService = ServiceDep) -> list[ProductSetResponse]:
    return [ProductSetResponse.model_validate(row) for row in service.list_product_sets()]


@router.post(
    "/product-sets",
    response_model=ProductSetResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
)
def create_product_set(
    request: ProductSetRequest, service: ReferenceService = ServiceDep
) -> ProductSetResponse:
    return ProductSetResponse.model_validate(
        service.create_product_set(request.name, request.product_line_id)
    )


@router.put(
    "/product-sets/{product_set_id}",
    response_model=ProductSetResponse,
    responses=_ERRORS,
)
def update_product_set(
    product_set_id: int,
    request: ProductSetRequest,
    service: ReferenceService = ServiceDep,
) -> ProductSetResponse:
    return ProductSetResponse.model_validate(
        service.update_product_set(product_set_id, request.name, request.product_line_id)
    )


@router.delete(
    "/product-sets/{product_set_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_ERRORS,
)
def delete_product_set(product_set_id: int, service: ReferenceService = ServiceDep):
    service.delete_product_set(product_set_id)
    return _no_content()

"""
Service catalog API endpoints.

Browsing is public; creating, editing and deleting services is admin only.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.config import settings
from marketplace.core.deps import require_admin
from marketplace.core.exceptions import ValidationError
from marketplace.db.session import get_db
from marketplace.models.user import User
from marketplace.schemas.service import (
    ServiceCreate,
    ServiceListResponse,
    ServiceResponse,
    ServiceUpdate,
)
from marketplace.services.catalog_service import CatalogService, total_pages


router = APIRouter(prefix="/services", tags=["services"])


@router.get("", response_model=ServiceListResponse, summary="Browse services")
async def list_services(
    search: Optional[str] = Query(None, description="Substring of the service name"),
    category: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    min_price: Optional[int] = Query(None, ge=0),
    max_price: Optional[int] = Query(None, ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
) -> ServiceListResponse:
    """
    Raises:
        ValidationError (400): If min_price exceeds max_price
    """
    if min_price is not None and max_price is not None and min_price > max_price:
        raise ValidationError(
            message="min_price must not exceed max_price",
            min_price=min_price,
            max_price=max_price,
        )

    items, total = await CatalogService(db).search(
        search=search,
        category=category,
        location=location,
        min_price=min_price,
        max_price=max_price,
        page=page,
        limit=limit,
    )
    return ServiceListResponse(
        items=[ServiceResponse.model_validate(s) for s in items],
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages(total, limit),
    )


# Registered before /{service_id} so the literal paths win
@router.get("/locations", response_model=List[str], summary="Distinct service locations")
async def list_locations(db: AsyncSession = Depends(get_db)) -> List[str]:
    return await CatalogService(db).locations()


@router.get("/categories", response_model=List[str], summary="Distinct service categories")
async def list_categories(db: AsyncSession = Depends(get_db)) -> List[str]:
    return await CatalogService(db).categories()


@router.get("/{service_id}", response_model=ServiceResponse, summary="Get service")
async def get_service(service_id: int, db: AsyncSession = Depends(get_db)) -> ServiceResponse:
    service = await CatalogService(db).get_service(service_id)
    return ServiceResponse.model_validate(service)


@router.post(
    "",
    response_model=ServiceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create service (admin)",
)
async def create_service(
    data: ServiceCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ServiceResponse:
    service = await CatalogService(db).create_service(current_user, data.model_dump())
    return ServiceResponse.model_validate(service)


@router.patch("/{service_id}", response_model=ServiceResponse, summary="Update service (admin)")
async def update_service(
    service_id: int,
    data: ServiceUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ServiceResponse:
    service = await CatalogService(db).update_service(service_id, data.model_dump(exclude_unset=True))
    return ServiceResponse.model_validate(service)


@router.delete(
    "/{service_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete service (admin)",
)
async def delete_service(
    service_id: int,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await CatalogService(db).delete_service(service_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

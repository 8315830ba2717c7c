"""
Domain registry routes
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from src.models.domain import DomainRecordCreate, DomainRecordUpdate, DomainStatus
from src.web.container import AppContainer, get_container
from src.web.schemas import dump, envelope

router = APIRouter(prefix="/domain-records", tags=["domain-records"])


@router.get("")
def list_records(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    status_filter: Optional[DomainStatus] = Query(None, alias="status"),
    client_id: Optional[str] = Query(None, alias="clientId"),
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    container: AppContainer = Depends(get_container)
):
    result = container.domain_record_service.list(
        page=page,
        limit=limit,
        search=search,
        status=status_filter,
        client_id=client_id,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return envelope([dump(record) for record in result.data], meta=result.meta())


@router.get("/{record_id}")
def get_record(record_id: str, container: AppContainer = Depends(get_container)):
    return envelope(dump(container.domain_record_service.get(record_id)))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_record(body: DomainRecordCreate, container: AppContainer = Depends(get_container)):
    return envelope(dump(container.domain_record_service.create(body)))


@router.patch("/{record_id}")
def update_record(
    record_id: str,
    body: DomainRecordUpdate,
    container: AppContainer = Depends(get_container)
):
    return envelope(dump(container.domain_record_service.update(record_id, body)))


@router.delete("/{record_id}")
def delete_record(record_id: str, container: AppContainer = Depends(get_container)):
    container.domain_record_service.remove(record_id)
    return envelope({"message": "Domain record deleted"})


@router.post("/{record_id}/refresh-whois")
def refresh_whois(record_id: str, container: AppContainer = Depends(get_container)):
    return envelope(dump(container.domain_record_service.refresh_whois(record_id)))


@router.post("/refresh-statuses")
def refresh_statuses(container: AppContainer = Depends(get_container)):
    changed = container.domain_record_service.refresh_statuses()
    return envelope({"changed": changed})

"""
Table management endpoints with bulk creation and deletion.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shared.config.settings import Settings
from shared.infrastructure.db import get_db
from shared.utils.schemas import TableBulkCreate, TableBulkDelete, TableCreate, TableOutput
from rest_api.models import Establishment
from rest_api.routers._common import current_establishment, get_app_settings
from rest_api.services.domain import TableService


router = APIRouter(tags=["admin-tables"])


def get_table_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> TableService:
    return TableService(db, settings.public_base_url)


@router.get("/tables", response_model=list[TableOutput])
def list_tables(
    service: TableService = Depends(get_table_service),
    establishment: Establishment = Depends(current_establishment),
) -> list[TableOutput]:
    return [TableOutput.model_validate(t) for t in service.list(establishment.id)]


@router.post("/tables", response_model=TableOutput, status_code=status.HTTP_201_CREATED)
def create_table(
    body: TableCreate,
    service: TableService = Depends(get_table_service),
    establishment: Establishment = Depends(current_establishment),
) -> TableOutput:
    """Create the next table. The name defaults to ``Table {number}``."""
    return TableOutput.model_validate(service.create(establishment.id, body.name))


@router.post("/tables/bulk", response_model=list[TableOutput], status_code=status.HTTP_201_CREATED)
def create_tables_bulk(
    body: TableBulkCreate,
    service: TableService = Depends(get_table_service),
    establishment: Establishment = Depends(current_establishment),
) -> list[TableOutput]:
    tables = service.create_bulk(establishment.id, body.count)
    return [TableOutput.model_validate(t) for t in tables]


@router.post("/tables/bulk-delete")
def delete_tables_bulk(
    body: TableBulkDelete,
    service: TableService = Depends(get_table_service),
    establishment: Establishment = Depends(current_establishment),
) -> dict:
    """Delete several tables at once. Nothing is deleted if any id is unknown."""
    deleted = service.delete_bulk(body.ids, establishment.id)
    return {"deleted": deleted}


@router.delete("/tables/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_table(
    table_id: int,
    service: TableService = Depends(get_table_service),
    establishment: Establishment = Depends(current_establishment),
) -> None:
    service.delete(table_id, establishment.id)

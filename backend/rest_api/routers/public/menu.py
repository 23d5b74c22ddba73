"""
Public menu endpoints (no authentication).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.config.settings import Settings
from shared.infrastructure.db import get_db
from shared.utils.schemas import PublicMenu, PublicTableOutput
from rest_api.routers._common import get_app_settings
from rest_api.services.domain import EstablishmentService, MenuService, TableService


router = APIRouter(prefix="/api/public", tags=["public-menu"])


@router.get("/menu/{slug}", response_model=PublicMenu)
def menu_by_slug(slug: str, db: Session = Depends(get_db)) -> PublicMenu:
    """Menu of the restaurant published under ``slug``."""
    establishment = EstablishmentService(db).get_by_slug(slug)
    return MenuService(db).build(establishment)


@router.get("/restaurants/{restaurant_id}/menu", response_model=PublicMenu)
def menu_by_id(restaurant_id: int, db: Session = Depends(get_db)) -> PublicMenu:
    establishment = EstablishmentService(db).get_by_id(restaurant_id)
    return MenuService(db).build(establishment)


@router.get("/tables/{token}", response_model=PublicTableOutput)
def resolve_table(
    token: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> PublicTableOutput:
    """Resolve the token printed in a table's QR code."""
    table, establishment = TableService(db, settings.public_base_url).resolve_token(token)
    return PublicTableOutput(
        table_id=table.id,
        table_name=table.name,
        table_number=table.number,
        restaurant_id=establishment.id,
        restaurant_name=establishment.name,
        restaurant_slug=establishment.slug,
    )

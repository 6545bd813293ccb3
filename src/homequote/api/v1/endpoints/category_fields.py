"""
Category field API endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from homequote.core.dependencies import get_db
from homequote.schemas.base import SuccessResponse
from homequote.schemas.catalog import (
    CategoryFieldCreate,
    CategoryFieldResponse,
    CategoryFieldUpdate,
    ReorderRequest,
)
from homequote.services.catalog_service import CatalogService, ReorderError
from homequote.utils.exceptions import DatabaseError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/category-fields")


@router.get("", response_model=List[CategoryFieldResponse])
async def list_category_fields(
    category_id: Optional[str] = Query(None, alias="categoryId"),
    db: Session = Depends(get_db)
):
    """Fields of a category ordered by display_order"""
    try:
        return CatalogService(db).list_fields(category_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error fetching category fields:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch fields")


@router.post("", response_model=CategoryFieldResponse)
async def create_category_field(
    body: CategoryFieldCreate,
    db: Session = Depends(get_db)
):
    """Create a field; the key must be unique within the category"""
    try:
        return CatalogService(db).create_field(body)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error creating category field:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to create field")


# Declared before /{field_id} so "reorder" is not taken for an id
@router.patch("/reorder", response_model=SuccessResponse)
async def reorder_category_fields(
    body: ReorderRequest,
    db: Session = Depends(get_db)
):
    """
    Apply new display positions.

    Each update is committed on its own: when one fails the whole request
    reports 500, and the updates before it stay applied.
    """
    try:
        CatalogService(db).reorder_fields(body.updates)
        return {"success": True}
    except ReorderError as e:
        logger.error(f"[red]Error reordering fields[/red] after {e.applied} update(s): {e}")
        raise DatabaseError("Failed to reorder fields")


@router.get("/{field_id}", response_model=CategoryFieldResponse)
async def get_category_field(field_id: str, db: Session = Depends(get_db)):
    try:
        return CatalogService(db).get_field(field_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error fetching category field {field_id}:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch field")


@router.patch("/{field_id}", response_model=CategoryFieldResponse)
async def update_category_field(
    field_id: str,
    body: CategoryFieldUpdate,
    db: Session = Depends(get_db)
):
    """Update a field; key and field_type are never changed"""
    try:
        return CatalogService(db).update_field(field_id, body)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error updating category field {field_id}:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to update field")


@router.delete("/{field_id}", response_model=SuccessResponse)
async def delete_category_field(field_id: str, db: Session = Depends(get_db)):
    try:
        CatalogService(db).delete_field(field_id)
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error deleting category field {field_id}:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to delete field")

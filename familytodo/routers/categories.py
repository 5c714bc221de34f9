"""API router for task categories."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from familytodo.database import get_db
from familytodo.routers.realtime import CATEGORY_CREATED, CATEGORY_DELETED, CATEGORY_UPDATED, publish
from familytodo.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from familytodo.services.category_service import CategoryService

router = APIRouter()


def _dump(category) -> dict:
    return CategoryResponse.model_validate(category).model_dump(mode="json")


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(category: CategoryCreate, db: Session = Depends(get_db)) -> CategoryResponse:
    """Create a new category."""
    created = CategoryService.create_category(db, category)
    payload = _dump(created)
    publish(CATEGORY_CREATED, payload)
    return payload


@router.get("/", response_model=list[CategoryResponse])
def list_categories(db: Session = Depends(get_db)) -> list[CategoryResponse]:
    """List categories in display order."""
    categories = CategoryService.get_all_categories(db)
    return [CategoryResponse.model_validate(category) for category in categories]


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(category_id: int, db: Session = Depends(get_db)) -> CategoryResponse:
    """Get a single category."""
    category = CategoryService.get_category(db, category_id)
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return CategoryResponse.model_validate(category)


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    category_update: CategoryUpdate,
    db: Session = Depends(get_db),
) -> CategoryResponse:
    """Update a category."""
    category = CategoryService.update_category(db, category_id, category_update)
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    payload = _dump(category)
    publish(CATEGORY_UPDATED, payload)
    return payload


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: int, db: Session = Depends(get_db)) -> None:
    """Remove a category. Its tasks keep existing; default categories stay."""
    try:
        success = CategoryService.delete_category(db, category_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if not success:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    publish(CATEGORY_DELETED, {"id": category_id})

"""
Category API routes for the Taskboard API
All endpoints act on the authenticated user's categories only
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...models.category import (
    CategoryCreate,
    CategoryPublic,
    CategoryReorder,
    CategoryStats,
    CategoryUpdate,
)
from ...services.category_service import CategoryService
from ...storage import Store
from ..deps import get_current_user_id, get_store
from ..responses import ApiResponse


router = APIRouter()


@router.get("/stats/overview", response_model=ApiResponse[CategoryStats])
def get_category_stats(
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    """Category totals and the five categories with the most tasks."""
    return ApiResponse(data=CategoryService.get_stats(store, user_id))


@router.get("", response_model=ApiResponse[List[CategoryPublic]])
def list_categories(
    is_active: Optional[bool] = Query(None, alias="isActive"),
    is_default: Optional[bool] = Query(None, alias="isDefault"),
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    categories = CategoryService.list_categories(store, user_id, is_active=is_active, is_default=is_default)
    return ApiResponse(data=[CategoryPublic.from_category(c) for c in categories])


@router.post("", response_model=ApiResponse[CategoryPublic], status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    category = CategoryService.create_category(store, user_id, payload)
    return ApiResponse(data=CategoryPublic.from_category(category), message="Category created successfully")


@router.get("/{category_id}", response_model=ApiResponse[CategoryPublic])
def get_category(
    category_id: int,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    category = CategoryService.get_category(store, user_id, category_id)
    return ApiResponse(data=CategoryPublic.from_category(category))


@router.put("/{category_id}", response_model=ApiResponse[CategoryPublic])
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    category = CategoryService.update_category(store, user_id, category_id, payload)
    return ApiResponse(data=CategoryPublic.from_category(category), message="Category updated successfully")


@router.patch("/{category_id}/toggle", response_model=ApiResponse[CategoryPublic])
def toggle_category(
    category_id: int,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    category = CategoryService.toggle_active(store, user_id, category_id)
    state = "activated" if category.is_active else "deactivated"
    return ApiResponse(data=CategoryPublic.from_category(category), message=f"Category {state} successfully")


@router.patch("/{category_id}/reorder", response_model=ApiResponse[CategoryPublic])
def reorder_category(
    category_id: int,
    payload: CategoryReorder,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    category = CategoryService.reorder(store, user_id, category_id, payload.sort_order)
    return ApiResponse(data=CategoryPublic.from_category(category), message="Category order updated successfully")


@router.delete("/{category_id}", response_model=ApiResponse)
def delete_category(
    category_id: int,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    """Delete a custom category; blocked while any task references it."""
    CategoryService.delete_category(store, user_id, category_id)
    return ApiResponse(message="Category deleted successfully")

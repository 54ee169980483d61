"""Admin user management routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from app.api.deps import get_users_service
from app.api.responses import ok
from app.schemas.admin import CreateUserRequest, UpdateUserRequest, UserList, UserListParams
from app.schemas.auth import UserResponse
from app.schemas.common import ApiResponse, MessageResponse
from app.services.admin import UsersService

router = APIRouter()

UsersServiceDep = Annotated[UsersService, Depends(get_users_service)]


@router.get("", response_model=ApiResponse[UserList])
def list_users(
    request: Request,
    service: UsersServiceDep,
    page: int = 1,
    page_size: Annotated[int, Query(alias="pageSize")] = 10,
    search: str = "",
    sort_by: Annotated[str, Query(alias="sortBy")] = "created_at",
    sort_dir: Annotated[str, Query(alias="sortDir")] = "desc",
    role: str | None = None,
    is_active: Annotated[bool | None, Query(alias="isActive")] = None,
) -> ApiResponse[UserList]:
    """Paginated user list. pageSize outside 1..100 falls back to 10; unknown sortBy to created_at."""
    params = UserListParams(
        page=page,
        page_size=page_size,
        search=search,
        sort_by=sort_by,
        sort_dir=sort_dir,
        role=role or None,
        is_active=is_active,
    )
    return ok(request, service.list_users(params))


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(request: Request, user_id: str, service: UsersServiceDep) -> ApiResponse[UserResponse]:
    return ok(request, UserResponse.model_validate(service.get(user_id)))


@router.post("", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
def create_user(
    request: Request,
    body: CreateUserRequest,
    service: UsersServiceDep,
) -> ApiResponse[UserResponse]:
    return ok(request, UserResponse.model_validate(service.create(body)))


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
def update_user(
    request: Request,
    user_id: str,
    body: UpdateUserRequest,
    service: UsersServiceDep,
) -> ApiResponse[UserResponse]:
    return ok(request, UserResponse.model_validate(service.update(user_id, body)))


@router.delete("/{user_id}", response_model=ApiResponse[MessageResponse])
def delete_user(request: Request, user_id: str, service: UsersServiceDep) -> ApiResponse[MessageResponse]:
    service.delete(user_id)
    return ok(request, MessageResponse(message="User deleted successfully"))

"""User directory endpoints.

POST registers, GET lists, PUT merge-patches and DELETE removes users. All
lookups are keyed by email taken from the JSON body.
"""

from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

from peoplecount.services import user_service
from peoplecount.services.user_store import UserStore, get_user_store


router = APIRouter(prefix="/api/users", tags=["users"])


class RegisterUserRequest(BaseModel):
    """Request body for user registration."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str | None = None
    email: str | None = None
    password: str | None = None
    company: str | None = None
    telnummer: str | None = None
    client_id: str | None = Field(default=None, alias="clientID")


class UpdateUserRequest(BaseModel):
    """Request body for a merge-patch update."""

    email: str | None = None
    updates: dict[str, Any] | None = Field(
        default=None,
        description="Fields to overwrite; password changes need oldPassword",
    )


class DeleteUserRequest(BaseModel):
    """Request body for deleting a user."""

    email: str | None = None


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_class=PlainTextResponse,
)
def register_user(
    request: RegisterUserRequest,
    store: UserStore = Depends(get_user_store),
) -> str:
    """Register a new user.

    Example:
        curl -u user:pass -X POST http://localhost:3000/api/users \\
            -H "Content-Type: application/json" \\
            -d '{"name":"Test User","email":"test@user.ch","password":"Password1"}'
    """
    user_service.register_user(store, request.model_dump(by_alias=True))
    return "User created"


@router.get("")
def list_users(store: UserStore = Depends(get_user_store)) -> list[dict[str, Any]]:
    """Fetch all users, excluding passwords."""
    return user_service.list_users(store)


@router.put("", response_class=PlainTextResponse)
def update_user(
    request: UpdateUserRequest,
    store: UserStore = Depends(get_user_store),
) -> str:
    """Update user data by email.

    A password change requires ``updates.oldPassword``; the new password is
    hashed before saving.
    """
    user_service.update_user(store, request.email, request.updates)
    return "User updated"


@router.delete("", response_class=PlainTextResponse)
def delete_user(
    request: DeleteUserRequest,
    store: UserStore = Depends(get_user_store),
) -> str:
    user_service.delete_user(store, request.email)
    return "User deleted"

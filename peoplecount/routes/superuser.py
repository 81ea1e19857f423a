"""Privileged endpoints guarded by the superuser credentials."""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

from peoplecount.security import SuperUserPolicy, get_superuser_policy
from peoplecount.services import user_service
from peoplecount.services.user_store import UserStore, get_user_store


router = APIRouter(prefix="/api/superuser", tags=["superuser"])


class ResetPasswordRequest(BaseModel):
    """Request body for a forced password reset."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email: str | None = Field(default=None, description="User to update")
    new_password: str | None = Field(default=None, alias="newPassword")
    super_user_email: str | None = Field(default=None, alias="superUserEmail")
    super_user_password: str | None = Field(default=None, alias="superUserPassword")
    force: Any = Field(default=None, description="Must be truthy")


@router.put("/reset-password", response_class=PlainTextResponse)
def reset_password(
    request: ResetPasswordRequest,
    store: UserStore = Depends(get_user_store),
    policy: SuperUserPolicy = Depends(get_superuser_policy),
) -> str:
    """Force reset a user's password without the old password.

    Example:
        curl -u user:pass -X PUT \\
            http://localhost:3000/api/superuser/reset-password \\
            -H "Content-Type: application/json" \\
            -d '{"email": "ramzi@tester.ch", "newPassword": "ResetPass123",
                 "superUserEmail": "...", "superUserPassword": "...",
                 "force": true}'
    """
    user_service.force_reset_password(store, policy, request.model_dump(by_alias=True))
    return "Password reset successfully"

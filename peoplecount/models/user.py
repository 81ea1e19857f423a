"""Pydantic model for user documents stored in MongoDB."""

from datetime import datetime
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field

SWISS_TIMEZONE = ZoneInfo("Europe/Zurich")
CREATED_AT_FORMAT = "%d.%m.%Y %H:%M:%S"


def swiss_timestamp(now: datetime | None = None) -> str:
    """Format a moment as Zurich local time, e.g. ``03.06.2025 14:05:09``."""
    moment = now or datetime.now(SWISS_TIMEZONE)
    return moment.astimezone(SWISS_TIMEZONE).strftime(CREATED_AT_FORMAT)


class User(BaseModel):
    """User directory record with hashed password."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Unique email address")
    password: str = Field(..., description="Password hash, never plaintext")
    company: str | None = Field(default=None, description="Company name")
    telnummer: str | None = Field(default=None, description="Phone number")
    client_id: str | None = Field(
        default=None,
        alias="clientID",
        description="Client identifier",
    )
    created_at: str = Field(
        default_factory=swiss_timestamp,
        alias="createdAt",
        description="When the user registered (Zurich local time)",
    )

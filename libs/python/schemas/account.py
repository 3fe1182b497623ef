"""Account Steward DTOs shared across services."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AccountBusiness(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    domicile: str | None = None


class RemoteAccount(BaseModel):
    """Account resource as served by the Account Steward."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    email: str
    identity_id: str = Field(..., alias="identityId")
    locale: str | None = None
    zone_id: str | None = Field(default=None, alias="zoneId")
    business: AccountBusiness | None = None

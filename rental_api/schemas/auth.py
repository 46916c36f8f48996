"""Pydantic schemas for the auth routes.

Field names are snake_case in Python and camelCase on the wire, matching the
marketplace's JavaScript clients.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from rental_api.services.accounts import AccountType


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EmailRequest(CamelModel):
    """Body of check-email and forgot-password requests."""

    email: EmailStr = Field(..., description="Account email address")


class CheckEmailResponse(CamelModel):
    """Which account types exist for an email."""

    has_renter: bool = Field(..., description="A renter account exists for this email.")
    has_landlord: bool = Field(..., description="A landlord account exists for this email.")
    account_count: int = Field(..., ge=0, description="Number of accounts using this email.")


class SignupRequest(CamelModel):
    email: EmailStr = Field(..., description="Account email address")
    first_name: str = Field(..., min_length=1, description="First name")
    last_name: str = Field(..., min_length=1, description="Last name")
    account_type: AccountType = Field(..., description="RENTER or LANDLORD")


class SignupResponse(CamelModel):
    email: str
    first_name: str
    last_name: str
    account_type: AccountType


class MessageResponse(BaseModel):
    message: str

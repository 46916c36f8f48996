import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from rental_api.api.dependencies import get_account_directory
from rental_api.core.logging import hash_identifier
from rental_api.core.rate_limit import (
    RATE_LIMITS,
    add_rate_limit_headers,
    check_rate_limit,
    get_client_ip,
)
from rental_api.schemas.auth import (
    CheckEmailResponse,
    EmailRequest,
    MessageResponse,
    SignupRequest,
    SignupResponse,
)
from rental_api.services.accounts import AccountDirectory, normalize_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

PASSWORD_RESET_MESSAGE = "If an account exists with this email, a reset link has been sent."


@router.post("/check-email", response_model=CheckEmailResponse)
async def check_email(
    body: EmailRequest,
    request: Request,
    response: Response,
    accounts: Annotated[AccountDirectory, Depends(get_account_directory)],
) -> CheckEmailResponse:
    """Report which account types exist for an email.

    Rate limited per client IP, since the endpoint reveals whether an email
    is registered.
    """
    result = check_rate_limit(
        request,
        f"check-email:{get_client_ip(request)}",
        RATE_LIMITS.check_email,
    )

    lookup = accounts.lookup(body.email)
    add_rate_limit_headers(response, result)
    return CheckEmailResponse(
        has_renter=lookup.has_renter,
        has_landlord=lookup.has_landlord,
        account_count=lookup.account_count,
    )


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
)
async def signup(
    body: SignupRequest,
    request: Request,
    response: Response,
    accounts: Annotated[AccountDirectory, Depends(get_account_directory)],
) -> SignupResponse:
    """Register a renter or landlord account.

    Raises:
        ValidationAppError: 400 if the email already has this account type.
    """
    result = check_rate_limit(
        request,
        f"signup:{get_client_ip(request)}",
        RATE_LIMITS.signup,
    )

    account = accounts.register(
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        account_type=body.account_type,
    )
    add_rate_limit_headers(response, result)
    return SignupResponse(
        email=account.email,
        first_name=account.first_name,
        last_name=account.last_name,
        account_type=account.account_type,
    )


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: EmailRequest,
    request: Request,
    response: Response,
) -> MessageResponse:
    """Accept a password reset request.

    Limited per email address (not per IP) to stop mail flooding of a single
    inbox. The response never reveals whether the account exists.
    """
    email = normalize_email(body.email)
    result = check_rate_limit(
        request,
        f"forgot-password:{email}",
        RATE_LIMITS.forgot_password,
    )

    # TODO: issue a reset token and hand it to the mailer once one is wired in.
    logger.info(
        "password_reset.requested",
        extra={"email_hash": hash_identifier(email)},
    )

    add_rate_limit_headers(response, result)
    return MessageResponse(message=PASSWORD_RESET_MESSAGE)

"""
session.py — Cvent login and session state.

Calls ``Login`` through the gateway, stores the session token and the
session-specific endpoint on success, and classifies failures by the
message text the service returns.  Credentials never leave this module in
an error message.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

from cvent_client.core.errors import AuthFailure, AuthLockout, RemoteCallError
from cvent_client.core.normalize import unwrap
from cvent_client.data.soap_api import SoapGateway

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"

# Exact service prose; any rewording on Cvent's side falls through to
# LoginFailure.SERVICE_MESSAGE.
ACCESS_DENIED_MESSAGE = "Access is denied."
LOCKOUT_MESSAGE = (
    "Your account has been locked out. Please contact Customer care or wait for 30 minutes"
)


class LoginFailure(Enum):
    """Why a ``Login`` call did not produce a session."""

    ACCESS_DENIED = "access_denied"
    LOCKED_OUT = "locked_out"
    SERVICE_MESSAGE = "service_message"
    NO_MESSAGE = "no_message"


def classify_login_failure(message: str | None) -> LoginFailure:
    """Map the service's ``ErrorMessage`` to a ``LoginFailure`` kind."""
    if message == ACCESS_DENIED_MESSAGE:
        return LoginFailure.ACCESS_DENIED
    if message == LOCKOUT_MESSAGE:
        return LoginFailure.LOCKED_OUT
    if message:
        return LoginFailure.SERVICE_MESSAGE
    return LoginFailure.NO_MESSAGE


def redact(text: str, secrets: Iterable[str | None]) -> str:
    """Replace every literal occurrence of *secrets* in *text* with ``[REDACTED]``.

    Longer secrets are replaced first so a username that is a substring of
    the password cannot leave part of the password behind.
    """
    values = sorted({str(s) for s in secrets if s}, key=len, reverse=True)
    for value in values:
        text = text.replace(value, REDACTED)
    return text


def login(gateway: SoapGateway, account_number: str, username: str, password: str) -> bool:
    """Authenticate and store the session on ``gateway.session``.

    Returns:
        ``True`` once the session token and endpoint are stored.

    Raises:
        AuthFailure: Credentials rejected or IP address not approved.
        AuthLockout: Account temporarily locked.
        RemoteCallError: Any other failure, with credentials redacted.
    """
    secrets = (account_number, username, password)
    try:
        result = gateway.call(
            "Login",
            AccountNumber=account_number,
            UserName=username,
            Password=password,
        )
    except RemoteCallError as e:
        message = redact(e.message or "", secrets)
        logger.warning("Cvent login failed with a remote fault: %s", message)
        # Chaining would expose the unredacted envelope in tracebacks.
        raise RemoteCallError(
            message,
            code=e.code,
            request=redact(e.request, secrets) if e.request else None,
        ) from None

    body = unwrap(result, "LoginResult") or {}
    if body.get("LoginSuccess") and body.get("CventSessionHeader"):
        server_url = body.get("ServerURL")
        gateway.session.token = body["CventSessionHeader"]
        gateway.session.endpoint_override = f"{server_url}?WSDL" if server_url else None
        logger.info("Cvent session established on %s", gateway.endpoint)
        return True

    error_message = body.get("ErrorMessage")
    kind = classify_login_failure(error_message)
    logger.warning("Cvent login rejected: %s", kind.value)

    if kind is LoginFailure.ACCESS_DENIED:
        raise AuthFailure(
            "Access is denied. Please check your Account Number, Username, Password "
            "and that your request is coming from an approved IP address"
        )
    if kind is LoginFailure.LOCKED_OUT:
        raise AuthLockout("Account Locked")
    if kind is LoginFailure.SERVICE_MESSAGE:
        message = (
            "Error authenticating with Cvent. An error message was found.\n"
            f"Error Message: {error_message}"
        )
    else:
        message = "Error authenticating with Cvent. No error message was received."
    raise RemoteCallError(redact(message, secrets))

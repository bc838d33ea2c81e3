"""
errors.py — Exception types raised by the Cvent client.

Everything the client raises on purpose derives from ``CventError``.
"""
from __future__ import annotations


class CventError(Exception):
    """Base class for all Cvent client errors."""


class RemoteCallError(CventError):
    """A SOAP call failed at the transport or service level.

    Attributes:
        code: SOAP fault code (e.g. ``q0:CV10000``), HTTP status, or ``None``.
        message: Fault message reported by the service or transport.
        request: Last outgoing HTTP headers and envelope, if one was sent.
    """

    def __init__(self, message: str, code: str | None = None, request: str | None = None) -> None:
        self.code = code
        self.message = message
        self.request = request
        super().__init__(self.as_text())

    def as_text(self) -> str:
        lines = ["Error with Cvent API. Exception occurred."]
        if self.code:
            lines.append(f"faultcode: {self.code}")
        lines.append(f"Message: {self.message}")
        if self.request:
            lines.append(f"Sent Request:\n{self.request}")
        return "\n".join(lines)


class AuthFailure(CventError):
    """Credentials rejected or the caller's IP address is not approved."""


class AuthLockout(CventError):
    """The account is temporarily locked out."""

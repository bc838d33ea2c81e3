"""
soap_api.py — Cvent SOAP transport shared by the client and the CLI.

Wraps a zeep client: picks the endpoint, attaches the session header, and
turns every zeep / requests failure into ``RemoteCallError``.
No field resolution, no login logic — pure API I/O.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

import requests
from lxml import etree
from zeep import Client, Transport, xsd
from zeep.exceptions import Error as ZeepError
from zeep.exceptions import Fault
from zeep.helpers import serialize_object
from zeep.plugins import HistoryPlugin

from cvent_client.core.errors import RemoteCallError

logger = logging.getLogger(__name__)

PRODUCTION_WSDL = "https://api.cvent.com/soap/V200611.ASMX?WSDL"
EU_WSDL = "https://api-eur.cvent.com/SOAP/V200611.ASMX?wsdl"
CVENT_NAMESPACE = "http://api.cvent.com/2006-11"
DEFAULT_TIMEOUT = 30

SUPPORTED_METHODS: frozenset[str] = frozenset({
    "Login", "Search", "Retrieve", "DescribeCvObject",
})

# Faults on these echo request values (credentials), so their text is not logged here.
SENSITIVE_METHODS: frozenset[str] = frozenset({"Login"})

SESSION_HEADER = xsd.Element(
    f"{{{CVENT_NAMESPACE}}}CventSessionHeader",
    xsd.ComplexType([
        xsd.Element(f"{{{CVENT_NAMESPACE}}}CventSessionValue", xsd.String()),
    ]),
)

ClientFactory = Callable[[str, list, int], Client]


@dataclass
class Session:
    """Authentication state established by ``Login``.

    ``token`` is the ``CventSessionHeader`` value; ``endpoint_override`` is
    the session-specific WSDL URL returned alongside it.
    """

    token: str | None = None
    endpoint_override: str | None = None

    @property
    def active(self) -> bool:
        return self.token is not None


def build_client(wsdl: str, plugins: list, timeout: int = DEFAULT_TIMEOUT) -> Client:
    """Create a zeep client for *wsdl* on a fresh ``requests`` session.

    Raises:
        requests.RequestException / zeep.exceptions.Error / OSError: If the
            WSDL cannot be fetched, read or parsed.
    """
    http = requests.Session()
    transport = Transport(session=http, timeout=timeout, operation_timeout=timeout)
    return Client(wsdl, transport=transport, plugins=plugins)


class SoapGateway:
    """Single entry point for outbound Cvent SOAP calls.

    Args:
        wsdl: Default service WSDL, used until login sets an override.
        session: Shared session state, read on every call.
        timeout: HTTP timeout in seconds for WSDL loads and operations.
        client_factory: Builds the zeep client; defaults to ``build_client``.
    """

    def __init__(
        self,
        wsdl: str,
        session: Session,
        timeout: int = DEFAULT_TIMEOUT,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.wsdl = wsdl
        self.session = session
        self.timeout = timeout
        self._client_factory = client_factory or build_client
        self._history = HistoryPlugin()
        self._client: Client | None = None
        self._client_url: str | None = None

    @property
    def endpoint(self) -> str:
        return self.session.endpoint_override or self.wsdl

    def call(self, method: str, **params: Any) -> Any:
        """Invoke SOAP operation *method* and return its body as plain data.

        Returns:
            The response converted to ``dict`` / ``list`` / scalars.

        Raises:
            ValueError: If *method* is not a supported Cvent operation.
            RemoteCallError: On any fault, transport or WSDL error.
        """
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported Cvent operation: {method!r}")

        headers = None
        if self.session.token:
            headers = [SESSION_HEADER(CventSessionValue=self.session.token)]

        previous = self._last_sent()
        try:
            client = self._get_client()
            logger.debug("Calling %s on %s", method, self.endpoint)
            result = getattr(client.service, method)(_soapheaders=headers, **params)
        except Fault as e:
            raise self._remote_error(method, e.message, e.code, previous) from e
        except ZeepError as e:
            status = getattr(e, "status_code", None)
            code = str(status) if status else None
            raise self._remote_error(method, e.message or str(e), code, previous) from e
        except (requests.RequestException, OSError) as e:
            raise self._remote_error(method, str(e), None, previous) from e
        return serialize_object(result, dict)

    # ── Internals ────────────────────────────────────────────────────────────

    def _get_client(self) -> Client:
        url = self.endpoint
        if self._client is None or self._client_url != url:
            logger.debug("Loading WSDL %s", url)
            self._client = self._client_factory(url, [self._history], self.timeout)
            self._client_url = url
        return self._client

    def _last_sent(self) -> dict | None:
        try:
            return self._history.last_sent
        except IndexError:
            return None

    def _remote_error(
        self, method: str, message: str, code: str | None, previous: dict | None,
    ) -> RemoteCallError:
        if method in SENSITIVE_METHODS:
            logger.warning("Cvent %s failed: %s", method, code or "-")
        else:
            logger.warning("Cvent %s failed: %s %s", method, code or "-", message)
        sent = self._last_sent()
        request = format_request(sent) if sent is not None and sent is not previous else None
        return RemoteCallError(message, code=code, request=request)


def format_request(sent: dict) -> str:
    """Render a ``HistoryPlugin`` entry as headers followed by the envelope."""
    headers = "\n".join(f"{k}: {v}" for k, v in (sent.get("http_headers") or {}).items())
    envelope = sent.get("envelope")
    body = ""
    if envelope is not None:
        body = etree.tostring(envelope, pretty_print=True, encoding="unicode")
    return f"{headers}\n\n{body}".strip()

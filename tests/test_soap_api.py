"""Tests for the SOAP gateway — endpoint choice, session header, fault translation."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests
from lxml import etree
from zeep.exceptions import Fault, TransportError

from cvent_client.core.errors import RemoteCallError
from cvent_client.data.soap_api import (
    PRODUCTION_WSDL,
    Session,
    SoapGateway,
    format_request,
)


# ── Fixtures ──────────────────────────────────────────────────────────────────

class FactoryStub:
    """Client factory that hands out one MagicMock zeep client and records its args."""

    def __init__(self) -> None:
        self.client = MagicMock()
        self.calls: list[tuple[str, list, int]] = []

    def __call__(self, url: str, plugins: list, timeout: int):
        self.calls.append((url, plugins, timeout))
        return self.client

    @property
    def history(self):
        return self.calls[-1][1][0]


@pytest.fixture
def factory() -> FactoryStub:
    return FactoryStub()


@pytest.fixture
def soap(factory) -> SoapGateway:
    return SoapGateway(PRODUCTION_WSDL, Session(), timeout=12, client_factory=factory)


def _send(history, method: str) -> None:
    """Record an outgoing envelope the way zeep does before dispatch."""
    envelope = etree.fromstring(f"<Envelope><Body><{method}>payload</{method}></Body></Envelope>")
    history.egress(envelope, {"SOAPAction": f"http://api.cvent.com/2006-11/{method}"}, None, {})


# ── Dispatch ─────────────────────────────────────────────────────────────────

class TestDispatch:
    def test_returns_plain_data(self, soap, factory):
        factory.client.service.Search.return_value = {"Id": ["A", "B"]}
        assert soap.call("Search", ObjectType="User") == {"Id": ["A", "B"]}
        factory.client.service.Search.assert_called_once_with(
            _soapheaders=None, ObjectType="User",
        )

    def test_default_endpoint_and_timeout(self, soap, factory):
        factory.client.service.Search.return_value = None
        soap.call("Search", ObjectType="User")
        url, plugins, timeout = factory.calls[0]
        assert url == PRODUCTION_WSDL
        assert timeout == 12
        assert len(plugins) == 1

    def test_client_reused_for_same_endpoint(self, soap, factory):
        factory.client.service.Search.return_value = None
        soap.call("Search", ObjectType="User")
        soap.call("Search", ObjectType="Event")
        assert len(factory.calls) == 1

    def test_session_endpoint_used_after_login(self, soap, factory):
        factory.client.service.Search.return_value = None
        soap.call("Search", ObjectType="User")
        soap.session.endpoint_override = "https://sandbox.cvent.com/soap/V200611.ASMX?WSDL"
        soap.call("Search", ObjectType="User")
        assert [c[0] for c in factory.calls] == [
            PRODUCTION_WSDL,
            "https://sandbox.cvent.com/soap/V200611.ASMX?WSDL",
        ]

    def test_session_header_attached(self, soap, factory):
        soap.session.token = "TOKEN-XYZ"
        factory.client.service.Retrieve.return_value = None
        soap.call("Retrieve", ObjectType="User", Ids={"Id": ["A"]})
        headers = factory.client.service.Retrieve.call_args.kwargs["_soapheaders"]
        assert len(headers) == 1
        assert headers[0].CventSessionValue == "TOKEN-XYZ"

    def test_unsupported_method_rejected(self, soap, factory):
        with pytest.raises(ValueError, match="Unsupported"):
            soap.call("DeleteEverything")
        assert factory.calls == []


# ── Fault translation ────────────────────────────────────────────────────────

class TestFaults:
    def test_soap_fault(self, soap, factory):
        factory.client.service.Search.side_effect = Fault("UNKNOWN_EXCEPTION", code="q0:CV10000")
        with pytest.raises(RemoteCallError) as exc:
            soap.call("Search", ObjectType="User")
        assert exc.value.code == "q0:CV10000"
        assert exc.value.message == "UNKNOWN_EXCEPTION"
        assert isinstance(exc.value.__cause__, Fault)
        assert "faultcode: q0:CV10000" in str(exc.value)

    def test_transport_error_carries_status(self, soap, factory):
        factory.client.service.Search.side_effect = TransportError("Server error", status_code=500)
        with pytest.raises(RemoteCallError) as exc:
            soap.call("Search", ObjectType="User")
        assert exc.value.code == "500"
        assert exc.value.message == "Server error"

    def test_wsdl_load_failure(self, factory):
        def broken(url, plugins, timeout):
            raise requests.ConnectionError("connection refused")

        soap = SoapGateway(PRODUCTION_WSDL, Session(), client_factory=broken)
        with pytest.raises(RemoteCallError, match="connection refused") as exc:
            soap.call("Login", AccountNumber="A", UserName="U", Password="P")
        assert exc.value.request is None

    def test_local_wsdl_missing(self, tmp_path):
        soap = SoapGateway(str(tmp_path / "missing.wsdl"), Session())
        with pytest.raises(RemoteCallError, match="missing.wsdl") as exc:
            soap.call("Search", ObjectType="User")
        assert isinstance(exc.value.__cause__, OSError)

    def test_os_error_from_factory(self):
        def unreadable(url, plugins, timeout):
            raise PermissionError(13, "Permission denied", url)

        soap = SoapGateway("/etc/cvent.wsdl", Session(), client_factory=unreadable)
        with pytest.raises(RemoteCallError, match="Permission denied"):
            soap.call("Search", ObjectType="User")

    def test_login_fault_text_not_logged(self, soap, factory, caplog):
        factory.client.service.Login.side_effect = Fault("Invalid password hunter2")
        with pytest.raises(RemoteCallError):
            soap.call("Login", AccountNumber="A", UserName="U", Password="hunter2")
        assert "Login failed" in caplog.text
        assert "hunter2" not in caplog.text

    def test_sent_request_included(self, soap, factory):
        def fail_after_send(**kwargs):
            _send(factory.history, "Search")
            raise Fault("Invalid filter", code="q0:CV40000")

        factory.client.service.Search.side_effect = fail_after_send
        with pytest.raises(RemoteCallError) as exc:
            soap.call("Search", ObjectType="User")
        assert "SOAPAction: http://api.cvent.com/2006-11/Search" in exc.value.request
        assert "<Search>payload</Search>" in exc.value.request
        assert "Sent Request:" in str(exc.value)

    def test_stale_request_not_reused(self, soap, factory):
        def fail_after_send(**kwargs):
            _send(factory.history, "Search")
            raise Fault("first")

        factory.client.service.Search.side_effect = fail_after_send
        with pytest.raises(RemoteCallError):
            soap.call("Search", ObjectType="User")

        factory.client.service.Retrieve.side_effect = Fault("second")
        with pytest.raises(RemoteCallError) as exc:
            soap.call("Retrieve", ObjectType="User", Ids={"Id": ["A"]})
        assert exc.value.request is None


class TestFormatRequest:
    def test_headers_then_envelope(self):
        sent = {
            "http_headers": {"Content-Type": "text/xml"},
            "envelope": etree.fromstring("<Envelope/>"),
        }
        text = format_request(sent)
        assert text.startswith("Content-Type: text/xml")
        assert text.endswith("<Envelope/>")

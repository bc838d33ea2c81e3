"""Shared pytest fixtures for Cvent client tests."""
from __future__ import annotations

from typing import Any

import pytest

from cvent_client.core.client import CventClient
from cvent_client.data.soap_api import PRODUCTION_WSDL, Session


class FakeGateway:
    """Stands in for ``SoapGateway``: records calls, replays canned responses."""

    def __init__(self) -> None:
        self.wsdl = PRODUCTION_WSDL
        self.session = Session()
        self.responses: dict[str, Any] = {}
        self.errors: dict[str, Exception] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []

    @property
    def endpoint(self) -> str:
        return self.session.endpoint_override or self.wsdl

    def call(self, method: str, **params: Any) -> Any:
        self.calls.append((method, params))
        if method in self.errors:
            raise self.errors[method]
        return self.responses.get(method)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def client(gateway: FakeGateway) -> CventClient:
    return CventClient(gateway=gateway)


@pytest.fixture
def registration_record() -> dict:
    """A Registration as zeep serializes it, with custom fields and survey answers."""
    return {
        "Id": "REG-001",
        "FirstName": "Ada",
        "LastName": "Lovelace",
        "Email": "ada@example.com",
        "Company": "",
        "CustomFieldDetail": [
            {"FieldName": "Dietary Needs", "FieldValue": "Vegetarian", "FieldId": "CF-1"},
            {"FieldName": "Email", "FieldValue": "custom@example.com", "FieldId": "CF-2"},
            {"FieldName": "Company", "FieldValue": "Analytical Engines Ltd", "FieldId": "CF-3"},
        ],
        "EventSurveyDetail": [
            {
                "QuestionText": "Which sessions will you attend?",
                "Answer": [
                    {"AnswerText": "Keynote"},
                    {"AnswerText": "Workshop A"},
                ],
            },
            {
                "QuestionText": "T-shirt size",
                "Answer": {"AnswerText": "M"},
            },
        ],
    }


@pytest.fixture
def user_records() -> dict:
    """A ``Retrieve`` response for two users, wrapped as the service sends it."""
    return {
        "RetrieveResult": {
            "CvObject": [
                {
                    "Id": "7EE3FBC2-006F-4EBD-B4F2-16B4E7E719BE",
                    "Email": "someguy@example.com",
                    "UserType": "Application",
                    "UserRole": "Administrators",
                },
                {
                    "Id": "668AZX5C-A1F6-415D-BF41-6903CEF47340",
                    "Email": "somegal@example.com",
                    "UserType": "Application",
                    "UserRole": "Administrators",
                },
            ]
        }
    }

"""
client.py — ``CventClient``, the public face of the package.

Owns one session and one gateway.  Each public method is a single SOAP
call plus normalization; the logic lives in ``records``, ``schema`` and
``session``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Union

from cvent_client.core import records, schema
from cvent_client.core import session as session_mod
from cvent_client.core.normalize import as_list, as_text, collection
from cvent_client.data.soap_api import (
    DEFAULT_TIMEOUT,
    EU_WSDL,
    PRODUCTION_WSDL,
    Session,
    SoapGateway,
)

logger = logging.getLogger(__name__)

SEARCH_TYPES: dict[str, str] = {"AND": "AndSearch", "OR": "OrSearch"}


@dataclass
class SearchFilter:
    """One ``Field Operator Value`` condition of a search."""

    field: str
    operator: str
    value: Any

    def as_dict(self) -> dict[str, Any]:
        """Serialise to the ``Filter`` element shape expected on the wire."""
        return {"Field": self.field, "Operator": self.operator, "Value": self.value}

    @classmethod
    def parse(cls, text: str) -> "SearchFilter":
        """Parse ``"Field:Operator:Value"``; the value may itself contain colons."""
        parts = text.split(":", 2)
        if len(parts) != 3 or not parts[0] or not parts[1]:
            raise ValueError(f"Filter must look like 'Field:Operator:Value', got {text!r}")
        return cls(parts[0], parts[1], parts[2])


FilterLike = Union[SearchFilter, Mapping[str, Any]]


def search_type(mode: str) -> str:
    """Map ``AND``/``OR`` (or the wire names) to a ``CvSearchObject`` type."""
    if mode in SEARCH_TYPES.values():
        return mode
    try:
        return SEARCH_TYPES[mode.upper()]
    except KeyError:
        raise ValueError(f"Unknown search mode {mode!r}; use 'AND' or 'OR'") from None


def filter_payload(item: FilterLike) -> dict[str, Any]:
    """Accept a ``SearchFilter``, a wire-shaped mapping, or ``field/operator/value``."""
    if isinstance(item, SearchFilter):
        return item.as_dict()
    if "Field" in item:
        return dict(item)
    return SearchFilter(item["field"], item["operator"], item["value"]).as_dict()


class CventClient:
    """Client for the Cvent ``V200611`` SOAP API.

    Not safe for concurrent use: login rewrites the shared session.

    Args:
        eu: Use the EU data-center WSDL instead of production.
        wsdl: Explicit WSDL URL; overrides *eu*.
        timeout: HTTP timeout in seconds.
        gateway: Pre-built gateway (tests, custom transports).
    """

    def __init__(
        self,
        eu: bool = False,
        wsdl: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
        gateway: SoapGateway | None = None,
    ) -> None:
        if gateway is None:
            gateway = SoapGateway(wsdl or (EU_WSDL if eu else PRODUCTION_WSDL), Session(), timeout)
        self.gateway = gateway

    @property
    def session(self) -> Session:
        return self.gateway.session

    def login(self, account_number: str, username: str, password: str) -> bool:
        """Authenticate; see ``session.login`` for the failure modes."""
        return session_mod.login(self.gateway, account_number, username, password)

    def search(
        self,
        object_type: str,
        filters: Iterable[FilterLike] = (),
        search_mode: str = "AND",
    ) -> list[str]:
        """Return the ids of *object_type* records matching *filters*.

        Always a list: ``[]`` for no matches, one element for a single match.
        """
        result = self.gateway.call(
            "Search",
            ObjectType=object_type,
            CvSearchObject={
                "SearchType": search_type(search_mode),
                "Filter": [filter_payload(f) for f in filters],
            },
        )
        ids = [as_text(i) for i in collection(result, "SearchResult", "Id")]
        logger.debug("Search %s matched %d record(s)", object_type, len(ids))
        return ids

    def retrieve(
        self,
        object_type: str,
        ids: str | Iterable[str],
        fields: str | Iterable[str] | None = ("Id",),
        flatten: bool = True,
    ) -> dict[str, dict[str, Any]]:
        """Fetch records by id and resolve the requested fields.

        Returns:
            ``{record_id: {field: value}}``.  Every requested field plus
            ``Id`` is present; missing values are ``""``.  With
            ``flatten=False`` an ``Answer`` request also adds ``Answer Array``.
        """
        id_list = as_list(ids) if isinstance(ids, str) else list(ids)
        if not id_list:
            return {}
        result = self.gateway.call("Retrieve", ObjectType=object_type, Ids={"Id": id_list})
        resolved = records.resolve_records(result, fields, flatten)
        logger.debug("Retrieved %d of %d %s record(s)", len(resolved), len(id_list), object_type)
        return resolved

    def search_and_retrieve(
        self,
        object_type: str,
        filters: Iterable[FilterLike],
        fields: str | Iterable[str] | None,
        search_mode: str = "AND",
        flatten: bool = True,
    ) -> dict[str, dict[str, Any]]:
        """``retrieve`` over the ids returned by ``search``."""
        return self.retrieve(
            object_type,
            self.search(object_type, filters, search_mode),
            fields,
            flatten,
        )

    def describe_object(self, object_type: str) -> dict[str, Any]:
        """Return the raw describe payload for *object_type*."""
        result = self.gateway.call(
            "DescribeCvObject", ObjectTypes={"CvObjectType": [object_type]},
        )
        return schema.first_description(result)

    def describe_fields(self, object_type: str, include_custom: bool = True) -> list[str]:
        """Field names of *object_type*: standard first, then custom."""
        names = schema.field_names(self.describe_object(object_type), include_custom)
        logger.debug("Described %s: %d field(s)", object_type, len(names))
        return names

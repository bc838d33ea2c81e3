"""
records.py — Resolve retrieved Cvent records into flat field maps.

A requested field can live in three places on a ``CvObject``: a standard
attribute, an entry of ``CustomFieldDetail``, or (for the reserved ``Answer``
field) the ``EventSurveyDetail`` question/answer list.  Each source is a
resolver; they are tried in ``RESOLVERS`` order and the first non-empty
value wins.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable

from cvent_client.core.normalize import as_list, as_text, collection, is_blank

logger = logging.getLogger(__name__)

ID_FIELD = "Id"
ANSWER_FIELD = "Answer"
ANSWER_ARRAY_FIELD = "Answer Array"


class FieldSource(Enum):
    STANDARD = "standard"
    CUSTOM = "custom"
    SURVEY = "survey"


@dataclass
class Resolution:
    """A resolved field value tagged with where it came from.

    ``extra`` holds sibling keys to merge into the record map (only the
    survey resolver uses it, for ``Answer Array``).
    """

    value: str
    source: FieldSource
    extra: dict[str, Any] = field(default_factory=dict)


Resolver = Callable[[dict, str, bool], "Resolution | None"]


# ── Resolvers ────────────────────────────────────────────────────────────────

def resolve_standard(record: dict, field_name: str, flatten: bool) -> Resolution | None:
    """Use a non-empty scalar attribute named *field_name*."""
    value = record.get(field_name)
    if is_blank(value) or isinstance(value, (list, dict)):
        return None
    return Resolution(as_text(value), FieldSource.STANDARD)


def resolve_custom(record: dict, field_name: str, flatten: bool) -> Resolution | None:
    """Scan ``CustomFieldDetail`` for *field_name*; the last match wins."""
    match = None
    for entry in as_list(record.get("CustomFieldDetail")):
        if isinstance(entry, dict) and entry.get("FieldName") == field_name:
            match = entry.get("FieldValue")
    if is_blank(match):
        return None
    return Resolution(as_text(match), FieldSource.CUSTOM)


def resolve_survey(record: dict, field_name: str, flatten: bool) -> Resolution | None:
    """Render ``EventSurveyDetail`` as question/response text blocks.

    Only applies to the reserved ``Answer`` field.  When *flatten* is false
    the result also carries ``Answer Array``: question text -> answer.
    """
    if field_name != ANSWER_FIELD:
        return None
    details = [d for d in as_list(record.get("EventSurveyDetail")) if isinstance(d, dict)]
    if not details:
        return None

    blocks = []
    answers: dict[str, str] = {}
    for detail in details:
        question = as_text(detail.get("QuestionText"))
        answer = format_answer(detail.get("Answer"))
        blocks.append(f"Question:\n{question}\nResponse:\n{answer}\n\n")
        answers[question] = answer

    text = "".join(blocks).removesuffix("\n\n")
    extra = {} if flatten else {ANSWER_ARRAY_FIELD: answers}
    return Resolution(text, FieldSource.SURVEY, extra)


RESOLVERS: tuple[Resolver, ...] = (resolve_standard, resolve_custom, resolve_survey)


# ── Public API ───────────────────────────────────────────────────────────────

def format_answer(answer: Any) -> str:
    """Flatten one survey ``Answer`` payload into text.

    A list of parts joins each ``AnswerText`` with ``", "`` and appends
    ``"AnswerPart: AnswerOther"`` segments; a single part object yields its
    ``AnswerText``.  The service serializes the two shapes differently, so
    they are not coerced into one.
    """
    if isinstance(answer, list) and answer:
        text = ""
        for part in answer:
            if not isinstance(part, dict):
                continue
            if not is_blank(part.get("AnswerText")):
                text += as_text(part["AnswerText"]) + ", "
            if not is_blank(part.get("AnswerPart")):
                text += as_text(part["AnswerPart"]) + ": "
                if not is_blank(part.get("AnswerOther")):
                    text += as_text(part["AnswerOther"])
        return text.removesuffix(", ")
    if isinstance(answer, dict) and not is_blank(answer.get("AnswerText")):
        return as_text(answer["AnswerText"])
    return ""


def with_id_field(fields: str | Iterable[str] | None) -> list[str]:
    """Return *fields* as a list that always includes ``Id``."""
    if fields is None or isinstance(fields, str):
        names = as_list(fields)
    else:
        names = list(fields)
    if ID_FIELD not in names:
        names.append(ID_FIELD)
    return names


def resolve_record(record: dict, fields: Iterable[str], flatten: bool = True) -> dict[str, Any]:
    """Build the field map for one raw record.

    Every non-empty name in *fields* ends up as a key; unresolved fields
    map to ``""``.
    """
    resolved: dict[str, Any] = {}
    for name in fields:
        if not name:
            continue
        resolved[name] = ""
        for resolver in RESOLVERS:
            outcome = resolver(record, name, flatten)
            if outcome is not None and outcome.value != "":
                resolved[name] = outcome.value
                resolved.update(outcome.extra)
                break
    return resolved


def resolve_records(
    payload: Any, fields: str | Iterable[str] | None, flatten: bool = True,
) -> dict[str, dict[str, Any]]:
    """Resolve a ``Retrieve`` response into ``{record_id: field_map}``.

    Args:
        payload: Serialized ``Retrieve`` response (wrapped or not).
        fields: Requested field names; ``Id`` is always added.
        flatten: ``False`` adds ``Answer Array`` next to ``Answer``.
    """
    names = with_id_field(fields)
    result: dict[str, dict[str, Any]] = {}
    for record in collection(payload, "RetrieveResult", "CvObject"):
        if not isinstance(record, dict) or is_blank(record.get(ID_FIELD)):
            logger.debug("Skipping retrieved object without an Id")
            continue
        result[as_text(record[ID_FIELD])] = resolve_record(record, names, flatten)
    return result

"""
Data model of the records we read from the data store

Only the fields needed to build the report are decoded,
everything else in the stored documents is ignored.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from typing import Any

from attrs import define, field
from bson import ObjectId

from activity_time_report.exceptions import SchemaDecodeError
from activity_time_report.identity import canonical_identity

USERS_SOURCE: str = "users"
"""Name used for the person collection in error messages"""

ACTIVITIES_SOURCE: str = "activities"
"""Name used for the activity collection in error messages"""


@define(frozen=True)
class Person:
    """
    A tracked person
    """

    native_id: ObjectId
    """
    Unique identity of the person
    """

    display_name: str
    """
    Name to show in the report
    """

    student_id: str = ""
    """
    Student number (stored as `id`), not part of the report
    """

    groups: tuple[ObjectId, ...] = field(default=(), converter=tuple)
    """
    Groups the person belongs to, not used when building the report
    """


@define(frozen=True)
class ActivityMembership:
    """
    A person's participation in an activity
    """

    person: str
    """
    Canonical (hex) identity of the person taking part
    """

    mode: str | None
    """
    Category of the participation, `None` if not recorded
    """

    duration: float
    """
    Time credited for the participation
    """


def decode_person(doc: Mapping[str, Any]) -> Person:
    """
    Decode a user document

    Parameters
    ----------
    doc
        Document from the users collection

    Returns
    -------
    :
        Decoded person

    Raises
    ------
    SchemaDecodeError
        The document is missing required fields or has fields of the wrong type
    """
    doc_id = doc.get("_id")
    if not isinstance(doc_id, ObjectId):
        raise SchemaDecodeError(
            USERS_SOURCE, doc_id, f"`_id` must be an ObjectId, received {doc_id!r}"
        )

    name = doc.get("name")
    if not isinstance(name, str):
        raise SchemaDecodeError(
            USERS_SOURCE, doc_id, f"`name` must be a string, received {name!r}"
        )

    student_id = doc.get("id", "")
    if not isinstance(student_id, str):
        raise SchemaDecodeError(
            USERS_SOURCE, doc_id, f"`id` must be a string, received {student_id!r}"
        )

    groups = doc.get("group", [])
    if not isinstance(groups, list) or not all(
        isinstance(g, ObjectId) for g in groups
    ):
        raise SchemaDecodeError(
            USERS_SOURCE,
            doc_id,
            f"`group` must be a list of ObjectIds, received {groups!r}",
        )

    return Person(
        native_id=doc_id, display_name=name, student_id=student_id, groups=groups
    )


def decode_duration(value: Any, source: str, document_id: object) -> float:
    """
    Decode a duration

    Parameters
    ----------
    value
        Raw value

    source
        Where `value` came from, only used in error messages

    document_id
        Document `value` came from, only used in error messages

    Returns
    -------
    :
        `value` as a float

    Raises
    ------
    SchemaDecodeError
        `value` is not a finite number
    """
    # bool is an int subclass, but never a valid duration
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SchemaDecodeError(
            source, document_id, f"duration must be a number, received {value!r}"
        )

    if not math.isfinite(value):
        raise SchemaDecodeError(
            source, document_id, f"duration must be finite, received {value!r}"
        )

    return float(value)


def iter_activity_memberships(doc: Mapping[str, Any]) -> Iterator[ActivityMembership]:
    """
    Decode the members of an activity document

    Parameters
    ----------
    doc
        Document from the activities collection

    Yields
    ------
    :
        One membership per entry in the activity's `members`

    Raises
    ------
    SchemaDecodeError
        A member entry cannot be decoded
    """
    doc_id = doc.get("_id")
    members = doc.get("members", [])
    if not isinstance(members, list):
        raise SchemaDecodeError(
            ACTIVITIES_SOURCE, doc_id, f"`members` must be a list, received {members!r}"
        )

    for member in members:
        if not isinstance(member, Mapping) or "_id" not in member:
            raise SchemaDecodeError(
                ACTIVITIES_SOURCE, doc_id, f"member without an `_id`: {member!r}"
            )

        mode = member.get("mode")
        if mode is not None and not isinstance(mode, str):
            raise SchemaDecodeError(
                ACTIVITIES_SOURCE, doc_id, f"`mode` must be a string, received {mode!r}"
            )

        yield ActivityMembership(
            person=canonical_identity(member["_id"], source=ACTIVITIES_SOURCE),
            mode=mode,
            duration=decode_duration(
                member.get("duration"), source=ACTIVITIES_SOURCE, document_id=doc_id
            ),
        )

"""
Unit tests of `activity_time_report.model`
"""

from __future__ import annotations

import re

import pytest
from bson import ObjectId

from activity_time_report.exceptions import SchemaDecodeError
from activity_time_report.model import (
    ActivityMembership,
    Person,
    decode_duration,
    decode_person,
    iter_activity_memberships,
)
from activity_time_report.testing import make_activity_doc, make_user_doc

OID = ObjectId("65f1c0a4e4b0a1b2c3d4e5f6")


def test_decode_person():
    group = ObjectId()
    doc = make_user_doc(OID, "Alice", student_id="20230101", group=[group])

    res = decode_person(doc)

    assert res == Person(
        native_id=OID, display_name="Alice", student_id="20230101", groups=(group,)
    )


def test_decode_person_minimal():
    res = decode_person({"_id": OID, "name": "Alice"})

    assert res == Person(native_id=OID, display_name="Alice")


@pytest.mark.parametrize(
    "doc, exp_problem",
    (
        pytest.param({"name": "Alice"}, "`_id` must be an ObjectId", id="no-id"),
        pytest.param(
            {"_id": str(OID), "name": "Alice"},
            "`_id` must be an ObjectId",
            id="hex-id",
        ),
        pytest.param({"_id": OID}, "`name` must be a string", id="no-name"),
        pytest.param(
            {"_id": OID, "name": "Alice", "id": 20230101},
            "`id` must be a string",
            id="int-student-id",
        ),
        pytest.param(
            {"_id": OID, "name": "Alice", "group": "g1"},
            "`group` must be a list of ObjectIds",
            id="bad-group",
        ),
    ),
)
def test_decode_person_invalid(doc, exp_problem):
    with pytest.raises(SchemaDecodeError, match=re.escape(exp_problem)):
        decode_person(doc)


def test_iter_activity_memberships():
    doc = make_activity_doc(
        [
            (OID, "on-campus", 2.0),
            (str(OID), "off-campus", 1),
            (OID, None, 0.5),
        ]
    )

    res = list(iter_activity_memberships(doc))

    assert res == [
        ActivityMembership(person=str(OID), mode="on-campus", duration=2.0),
        ActivityMembership(person=str(OID), mode="off-campus", duration=1.0),
        ActivityMembership(person=str(OID), mode=None, duration=0.5),
    ]
    assert all(isinstance(m.duration, float) for m in res)


def test_iter_activity_memberships_no_members():
    assert list(iter_activity_memberships({"_id": ObjectId()})) == []


@pytest.mark.parametrize(
    "members, exp_problem",
    (
        pytest.param("everyone", "`members` must be a list", id="members-not-list"),
        pytest.param([{"duration": 1.0}], "member without an `_id`", id="no-id"),
        pytest.param(
            [{"_id": OID, "mode": 3, "duration": 1.0}],
            "`mode` must be a string",
            id="int-mode",
        ),
        pytest.param(
            [{"_id": OID, "mode": "on-campus", "duration": "1.0"}],
            "duration must be a number",
            id="str-duration",
        ),
        pytest.param(
            [{"_id": OID, "mode": "on-campus"}],
            "duration must be a number",
            id="no-duration",
        ),
        pytest.param(
            [{"_id": "someone", "mode": "on-campus", "duration": 1.0}],
            "neither an ObjectId nor its hex string",
            id="bad-identity",
        ),
    ),
)
def test_iter_activity_memberships_invalid(members, exp_problem):
    doc = {"_id": ObjectId(), "members": members}

    with pytest.raises(SchemaDecodeError, match=re.escape(exp_problem)):
        list(iter_activity_memberships(doc))


@pytest.mark.parametrize(
    "value, exp",
    (
        (1, 1.0),
        (2.5, 2.5),
        (0, 0.0),
    ),
)
def test_decode_duration(value, exp):
    res = decode_duration(value, source="activities", document_id=None)

    assert res == exp
    assert isinstance(res, float)


def test_decode_duration_bool():
    with pytest.raises(SchemaDecodeError, match="duration must be a number"):
        decode_duration(True, source="activities", document_id=None)


@pytest.mark.parametrize(
    "value",
    (
        pytest.param(float("nan"), id="nan"),
        pytest.param(float("inf"), id="inf"),
        pytest.param(-float("inf"), id="-inf"),
    ),
)
def test_decode_duration_not_finite(value):
    with pytest.raises(SchemaDecodeError, match="duration must be finite"):
        decode_duration(value, source="activities", document_id=None)


def test_iter_activity_memberships_nan_duration():
    oid = ObjectId()
    doc = {"_id": ObjectId(), "members": [{"_id": oid, "duration": float("nan")}]}

    with pytest.raises(SchemaDecodeError, match="duration must be finite"):
        list(iter_activity_memberships(doc))

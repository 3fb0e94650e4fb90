"""
Unit tests of `activity_time_report.aggregation`
"""

from __future__ import annotations

import pandas as pd
import pytest
from bson import ObjectId

from activity_time_report.aggregation import (
    ABSENT,
    TimeTotals,
    aggregate_person_time,
    memberships_to_frame,
    sum_durations_by_mode,
    totals_from_mode_sums,
)
from activity_time_report.exceptions import (
    DataStoreConnectionError,
    QueryError,
    SchemaDecodeError,
)
from activity_time_report.identity import normalise_identity
from activity_time_report.model import ActivityMembership

PERSON = normalise_identity(ObjectId("65f1c0a4e4b0a1b2c3d4e5f6"))
OTHER = normalise_identity(ObjectId("65f1c0a4e4b0a1b2c3d4e5f7"))


def get_memberships(*rows):
    return memberships_to_frame(
        ActivityMembership(person=person.hex, mode=mode, duration=duration)
        for person, mode, duration in rows
    )


@pytest.mark.parametrize(
    "rows, exp",
    (
        pytest.param(
            [(PERSON, "on-campus", 2.0), (PERSON, "off-campus", 1.5)],
            TimeTotals(on_campus=2.0, off_campus=1.5, social_practice=0.0, total=3.5),
            id="on-and-off-campus",
        ),
        pytest.param(
            [(PERSON, "volunteer", 4.0)],
            TimeTotals(on_campus=0.0, off_campus=0.0, social_practice=0.0, total=4.0),
            id="unrecognised-mode-only-in-total",
        ),
        pytest.param(
            [(PERSON, "on-campus", 0.0)],
            TimeTotals(on_campus=0.0, off_campus=0.0, social_practice=0.0, total=0.0),
            id="zero-duration-is-present",
        ),
        pytest.param(
            [
                (PERSON, "social-practice", 1.25),
                (PERSON, "social-practice", 0.75),
                (PERSON, None, 3.0),
                (PERSON, "on-campus", 0.5),
                (OTHER, "on-campus", 100.0),
                (OTHER, "social-practice", 100.0),
            ],
            TimeTotals(on_campus=0.5, off_campus=0.0, social_practice=2.0, total=5.5),
            id="missing-mode-and-other-people",
        ),
        pytest.param(
            [(OTHER, "on-campus", 2.0)],
            ABSENT,
            id="only-other-people",
        ),
        pytest.param([], ABSENT, id="no-memberships"),
    ),
)
def test_aggregate_in_memory(rows, exp):
    memberships = get_memberships(*rows)

    res = aggregate_person_time(
        PERSON, query=lambda identity: sum_durations_by_mode(memberships, identity)
    )

    assert res == exp


def test_absent_is_not_zero_totals():
    assert ABSENT != TimeTotals(
        on_campus=0.0, off_campus=0.0, social_practice=0.0, total=0.0
    )


def test_sum_durations_by_mode():
    memberships = get_memberships(
        (PERSON, "on-campus", 2.0),
        (PERSON, "on-campus", 1.0),
        (PERSON, "off-campus", 1.5),
        (OTHER, "off-campus", 7.0),
    )

    res = sum_durations_by_mode(memberships, PERSON)

    pd.testing.assert_series_equal(
        res,
        pd.Series(
            [1.5, 3.0],
            index=pd.Index(["off-campus", "on-campus"], name="mode"),
            name="duration",
        ),
        check_index_type=False,
    )


@pytest.mark.parametrize(
    "rows",
    (
        pytest.param([(PERSON, "on-campus", 1.0)], id="single"),
        pytest.param(
            [
                (PERSON, "on-campus", 1.0),
                (PERSON, "off-campus", 2.0),
                (PERSON, "social-practice", 4.0),
            ],
            id="all-named",
        ),
        pytest.param(
            [
                (PERSON, "on-campus", 1.0),
                (PERSON, "field-trip", 2.0),
                (PERSON, None, 0.5),
            ],
            id="with-unrecognised",
        ),
    ),
)
def test_categories_never_exceed_total(rows):
    res = totals_from_mode_sums(
        sum_durations_by_mode(get_memberships(*rows), PERSON)
    )

    category_sum = res.on_campus + res.off_campus + res.social_practice
    all_named = all(
        mode in ("on-campus", "off-campus", "social-practice") for _, mode, _ in rows
    )
    if all_named:
        assert category_sum == res.total
    else:
        assert category_sum < res.total


def test_totals_from_empty_mode_sums():
    assert totals_from_mode_sums(pd.Series([], dtype=float)) is ABSENT


def test_query_failure_becomes_query_error():
    def failing_query(identity):
        raise RuntimeError("cursor exploded")

    with pytest.raises(QueryError, match=f"Aggregation query failed for {PERSON.hex}"):
        aggregate_person_time(PERSON, query=failing_query)


@pytest.mark.parametrize(
    "exc",
    (
        pytest.param(DataStoreConnectionError("gone"), id="connection"),
        pytest.param(SchemaDecodeError("activities", None, "bad"), id="decode"),
        pytest.param(QueryError("already wrapped"), id="query"),
    ),
)
def test_package_errors_pass_through(exc):
    def failing_query(identity):
        raise exc

    with pytest.raises(type(exc)) as exc_info:
        aggregate_person_time(PERSON, query=failing_query)

    assert exc_info.value is exc

"""
Aggregation of activity time per person
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Callable, Union

import pandas as pd
from attrs import define
from typing_extensions import TypeAlias

from activity_time_report.exceptions import ActivityReportError, QueryError
from activity_time_report.identity import IdentityForms
from activity_time_report.model import ActivityMembership
from activity_time_report.typing import ModeDurationSums

ON_CAMPUS_MODE: str = "on-campus"
OFF_CAMPUS_MODE: str = "off-campus"
SOCIAL_PRACTICE_MODE: str = "social-practice"

MODE_TO_TOTALS_FIELD: dict[str, str] = {
    ON_CAMPUS_MODE: "on_campus",
    OFF_CAMPUS_MODE: "off_campus",
    SOCIAL_PRACTICE_MODE: "social_practice",
}
"""
Map from the membership modes we report separately to fields of [TimeTotals][(m).]

Any other mode only contributes to the total.
"""


@define(frozen=True)
class TimeTotals:
    """
    Time spent by one person, split by category
    """

    on_campus: float
    off_campus: float
    social_practice: float

    total: float
    """
    Time across all memberships, including those with unrecognised modes
    """


@define(frozen=True)
class Absent:
    """
    Marker that no membership references a person

    This is not the same as a [TimeTotals][(m).] of zeros:
    someone whose memberships all have zero duration is still present.
    """


ABSENT = Absent()
"""
The only instance of [Absent][(m).] you should need
"""

AggregationResult: TypeAlias = Union[TimeTotals, Absent]

ModeDurationQuery: TypeAlias = Callable[[IdentityForms], ModeDurationSums]
"""
Query returning summed durations by mode for the memberships of one person
"""


def memberships_to_frame(memberships: Iterable[ActivityMembership]) -> pd.DataFrame:
    """
    Convert memberships to a [pd.DataFrame][pandas.DataFrame]

    Parameters
    ----------
    memberships
        Memberships to convert

    Returns
    -------
    :
        One row per membership, with columns `person`, `mode` and `duration`
    """
    res = pd.DataFrame(
        [(m.person, m.mode, m.duration) for m in memberships],
        columns=["person", "mode", "duration"],
    )
    res["duration"] = res["duration"].astype(float)

    return res


def sum_durations_by_mode(
    memberships: pd.DataFrame, identity: IdentityForms
) -> ModeDurationSums:
    """
    Sum the durations of one person's memberships by mode

    Parameters
    ----------
    memberships
        Memberships, as returned by [memberships_to_frame][(m).]

        The `person` column must already be in canonical form.

    identity
        Identity of the person of interest

    Returns
    -------
    :
        Summed durations, indexed by mode.
        Empty if no membership references `identity`.
    """
    # Memberships are normalised on the way in
    # so comparing the canonical form covers both representations
    selected = memberships.loc[memberships["person"] == identity.hex]

    return selected.groupby("mode", dropna=False, sort=True)["duration"].sum()


def totals_from_mode_sums(mode_sums: ModeDurationSums) -> AggregationResult:
    """
    Convert summed durations by mode into totals

    Parameters
    ----------
    mode_sums
        Summed durations, indexed by mode

    Returns
    -------
    :
        [ABSENT][(m).] if `mode_sums` is empty, otherwise the totals
    """
    if mode_sums.empty:
        return ABSENT

    by_field = {totals_field: 0.0 for totals_field in MODE_TO_TOTALS_FIELD.values()}
    for mode, duration in mode_sums.items():
        if mode in MODE_TO_TOTALS_FIELD:
            by_field[MODE_TO_TOTALS_FIELD[mode]] += float(duration)

    return TimeTotals(**by_field, total=float(mode_sums.sum()))


def aggregate_person_time(
    identity: IdentityForms, query: ModeDurationQuery
) -> AggregationResult:
    """
    Aggregate the time spent by one person

    Parameters
    ----------
    identity
        Identity of the person

    query
        Query to use to retrieve summed durations by mode

    Returns
    -------
    :
        Totals for the person, or [ABSENT][(m).] if nothing references them

    Raises
    ------
    QueryError
        The query failed.
        Errors from this package (e.g. a failure to decode the query's result)
        are passed on unchanged.
    """
    try:
        mode_sums = query(identity)
    except ActivityReportError:
        raise
    except Exception as exc:
        msg = f"Aggregation query failed for {identity.hex}"
        raise QueryError(msg) from exc

    return totals_from_mode_sums(mode_sums)

"""
Production of the report from a store
"""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Union

from attrs import define, field, validators
from pandas_openscm.parallelisation import ParallelOpConfig, apply_op_parallel_progress
from typing_extensions import TypeAlias

from activity_time_report.aggregation import (
    AggregationResult,
    Absent,
    ModeDurationQuery,
    aggregate_person_time,
)
from activity_time_report.assertions import assert_is_valid_report_table
from activity_time_report.exceptions import QueryError
from activity_time_report.identity import normalise_identity
from activity_time_report.model import USERS_SOURCE, Person
from activity_time_report.report import ReportTableBuilder
from activity_time_report.store import ActivityStore
from activity_time_report.typing import ReportTable

logger = logging.getLogger(__name__)

ON_QUERY_ERROR_OPTIONS: tuple[str, ...] = ("raise", "skip")


@define(frozen=True)
class Skipped:
    """
    Marker for a person whose aggregation failed and was skipped
    """

    error: QueryError


PersonOutcome: TypeAlias = Union[AggregationResult, Skipped]


def aggregate_indexed_person(
    indexed_person: tuple[int, Person],
    query: ModeDurationQuery,
    on_query_error: str,
) -> tuple[int, Person, PersonOutcome]:
    """
    Aggregate the time of one person, keeping track of where they came from

    Parameters
    ----------
    indexed_person
        Position of the person in the iteration and the person

    query
        Query to pass to
        [aggregate_person_time][activity_time_report.aggregation.]

    on_query_error
        What to do if the query fails.
        `"raise"` re-raises the error, `"skip"` returns a [Skipped][(m).].

    Returns
    -------
    :
        Position of the person, the person
        and the outcome of aggregating their time
    """
    i, person = indexed_person
    identity = normalise_identity(person.native_id, source=USERS_SOURCE)
    try:
        return i, person, aggregate_person_time(identity, query=query)
    except QueryError as exc:
        if on_query_error == "skip":
            return i, person, Skipped(exc)

        raise


@define
class ActivityTimeReporter:
    """
    Reporter of the time people spent on activities

    People are taken from the store once each,
    in the order in which the store gives them.
    """

    store: ActivityStore
    """
    Store from which to get people and their activity time
    """

    on_query_error: str = field(
        default="raise", validator=validators.in_(ON_QUERY_ERROR_OPTIONS)
    )
    """
    What to do when the aggregation query for one person fails

    With `"raise"`, the whole run is aborted and no report is produced.
    With `"skip"`, the person is left out of the report and we carry on.
    Other errors (e.g. losing the connection) always abort the run.
    """

    run_checks: bool = True
    """
    If `True`, check the report before returning it
    """

    progress: bool = False
    """
    Should a progress bar be shown while aggregating?
    """

    n_processes: int | None = field(
        default=None,
        validator=validators.optional(
            validators.and_(validators.instance_of(int), validators.gt(0))
        ),
    )
    """
    Number of threads to use to run the aggregation queries

    Set to `None` to process in serial.
    The report is the same either way.
    """

    def __call__(self) -> ReportTable:
        """
        Produce the report

        Returns
        -------
        :
            Report table, one row per person with at least one membership

        Raises
        ------
        ActivityReportError
            Any failure while producing the report.
            No partial report is returned.
        """
        parallel_op_config = ParallelOpConfig.from_user_facing(
            progress=self.progress,
            max_workers=self.n_processes,
            progress_results_kwargs=dict(desc="Persons to aggregate"),
            # Store clients don't survive pickling, threads are enough for I/O
            parallel_pool_cls=concurrent.futures.ThreadPoolExecutor,
        )
        try:
            # People are read from the store as they are submitted,
            # so in serial each one is fully aggregated before the next is read
            outcomes = apply_op_parallel_progress(
                func_to_call=aggregate_indexed_person,
                iterable_input=enumerate(self.store.iter_persons()),
                parallel_op_config=parallel_op_config,
                query=self.store.mode_duration_sums,
                on_query_error=self.on_query_error,
            )
        finally:
            if parallel_op_config.executor_created_in_class_method:
                if parallel_op_config.executor is None:  # pragma: no cover
                    raise AssertionError

                # Don't leave queued queries running once the run has stopped
                parallel_op_config.executor.shutdown(wait=True, cancel_futures=True)

        builder = ReportTableBuilder()
        n_absent = 0
        n_skipped = 0
        # Results can come back out of order when run in parallel
        for _, person, outcome in sorted(outcomes, key=lambda v: v[0]):
            identity = normalise_identity(person.native_id, source=USERS_SOURCE)
            if isinstance(outcome, Skipped):
                logger.warning(
                    "Skipping %s (%s): %s",
                    identity.hex,
                    person.display_name,
                    outcome.error,
                )
                n_skipped += 1
                continue

            if isinstance(outcome, Absent):
                logger.debug(
                    "No activity for %s (%s)", identity.hex, person.display_name
                )
                n_absent += 1

            builder.append(identity.hex, person.display_name, outcome)

        res = builder.finalize()
        logger.info(
            "Aggregated activity time for %d persons. "
            "Report has %d rows (%d persons without activity, %d skipped)",
            len(outcomes),
            len(res),
            n_absent,
            n_skipped,
        )

        if self.run_checks:
            assert_is_valid_report_table(res)

        return res

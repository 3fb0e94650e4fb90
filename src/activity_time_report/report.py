"""
Assembly of the report table
"""

from __future__ import annotations

import pandas as pd

from activity_time_report.aggregation import AggregationResult, Absent
from activity_time_report.exceptions import ReportFinalizedError
from activity_time_report.typing import ReportTable

IDENTITY_COLUMN: str = "id"
NAME_COLUMN: str = "name"
PLACEHOLDER_COLUMN: str = "class"

TEXT_COLUMNS: tuple[str, ...] = (IDENTITY_COLUMN, NAME_COLUMN, PLACEHOLDER_COLUMN)

TIME_COLUMNS: tuple[str, ...] = ("on_campus", "off_campus", "social_practice", "total")
"""
Numeric columns

Named after the fields of
[TimeTotals][activity_time_report.aggregation.TimeTotals]
"""

REPORT_COLUMNS: tuple[str, ...] = (*TEXT_COLUMNS, *TIME_COLUMNS)
"""
Columns of the report, in the order in which they are written
"""


def get_empty_report_table() -> ReportTable:
    """
    Get a report table with no rows

    Returns
    -------
    :
        Empty table with the report's columns and dtypes
    """
    return pd.DataFrame(
        {
            **{c: pd.Series([], dtype=object) for c in TEXT_COLUMNS},
            **{c: pd.Series([], dtype=float) for c in TIME_COLUMNS},
        },
        columns=list(REPORT_COLUMNS),
    )


class ReportTableBuilder:
    """
    Append-only builder of the report table

    Rows are kept in the order in which they are appended.
    There is no de-duplication,
    appending the same identity twice gives two rows.
    """

    def __init__(self) -> None:
        self._rows: list[tuple[str, str, str, float, float, float, float]] = []
        self._table: ReportTable | None = None

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def finalized(self) -> bool:
        """
        Whether [finalize][(c).] has been called
        """
        return self._table is not None

    def append(
        self, identity: str, display_name: str, result: AggregationResult
    ) -> None:
        """
        Add a person to the report

        Parameters
        ----------
        identity
            Canonical (hex) identity of the person

        display_name
            Name of the person

        result
            Result of aggregating the person's time.

            If this is [ABSENT][activity_time_report.aggregation.ABSENT],
            this is a no-op and the person does not appear in the report.

        Raises
        ------
        ReportFinalizedError
            The table has already been finalized
        """
        if self.finalized:
            msg = f"Cannot append {identity} to a finalized report table"
            raise ReportFinalizedError(msg)

        if isinstance(result, Absent):
            return

        self._rows.append(
            (
                identity,
                display_name,
                # Filled by later enrichment (e.g. class names), never by us
                "",
                float(result.on_campus),
                float(result.off_campus),
                float(result.social_practice),
                float(result.total),
            )
        )

    def finalize(self) -> ReportTable:
        """
        Finish building

        After this, no more rows can be appended.
        Calling this more than once returns a fresh copy of the same table.

        Returns
        -------
        :
            The report table
        """
        if self._table is None:
            if self._rows:
                table = pd.DataFrame(self._rows, columns=list(REPORT_COLUMNS))
                table = table.astype({c: float for c in TIME_COLUMNS})
            else:
                table = get_empty_report_table()

            self._table = table

        return self._table.copy()

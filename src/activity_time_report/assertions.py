"""
Useful assertions
"""

from __future__ import annotations

import pandas as pd

from activity_time_report.report import REPORT_COLUMNS, TEXT_COLUMNS, TIME_COLUMNS
from activity_time_report.typing import ReportTable


def assert_has_report_columns(table: ReportTable) -> None:
    """
    Assert that a table has exactly the report columns, in the report order

    Parameters
    ----------
    table
        Table to verify

    Raises
    ------
    AssertionError
        `table`'s columns are not [REPORT_COLUMNS][activity_time_report.report.]
    """
    columns = table.columns.tolist()
    if columns != list(REPORT_COLUMNS):
        msg = f"Unexpected report columns. {columns=} expected={list(REPORT_COLUMNS)}"
        raise AssertionError(msg)


def assert_report_dtypes(table: ReportTable) -> None:
    """
    Assert that the text columns hold text and the time columns hold floats

    Parameters
    ----------
    table
        Table to verify

    Raises
    ------
    AssertionError
        A column has an unexpected dtype
    """
    wrong = {
        c: str(table[c].dtype)
        for c in TEXT_COLUMNS
        if not (
            pd.api.types.is_object_dtype(table[c])
            or pd.api.types.is_string_dtype(table[c])
        )
    }
    wrong.update(
        {
            c: str(table[c].dtype)
            for c in TIME_COLUMNS
            if not pd.api.types.is_float_dtype(table[c])
        }
    )
    if wrong:
        msg = f"Report columns with unexpected dtypes: {wrong}"
        raise AssertionError(msg)


def assert_totals_are_consistent(table: ReportTable, rtol: float = 1e-9) -> None:
    """
    Assert that no row's categories add up to more than its total

    Parameters
    ----------
    table
        Table to verify

    rtol
        Relative tolerance to allow for floating point error

    Raises
    ------
    AssertionError
        Some rows have categories which sum to more than their total
    """
    category_sum = table[["on_campus", "off_campus", "social_practice"]].sum(
        axis="columns"
    )
    too_big = category_sum > table["total"] * (1 + rtol) + rtol
    if too_big.any():
        msg = (
            "The following rows have categories which add up to more than the total:\n"
            f"{table.loc[too_big]}"
        )
        raise AssertionError(msg)


def assert_is_valid_report_table(table: ReportTable) -> None:
    """
    Run all our checks of a report table

    Parameters
    ----------
    table
        Table to verify

    Raises
    ------
    AssertionError
        Any of the checks fail
    """
    assert_has_report_columns(table)
    assert_report_dtypes(table)
    assert_totals_are_consistent(table)

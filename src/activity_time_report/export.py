"""
Writing of the report to files
"""

from __future__ import annotations

import importlib.util
import logging
import os
from pathlib import Path

import pandas as pd

from activity_time_report.assertions import assert_has_report_columns
from activity_time_report.exceptions import MissingOptionalDependencyError
from activity_time_report.report import TEXT_COLUMNS
from activity_time_report.typing import ReportTable

logger = logging.getLogger(__name__)


def write_report_csv(table: ReportTable, path: Path) -> None:
    """
    Write the report as UTF-8 CSV

    Parameters
    ----------
    table
        Report to write

    path
        Where to write the CSV
    """
    assert_has_report_columns(table)
    table.to_csv(path, index=False, encoding="utf-8")


def transcode_csv(
    in_path: Path,
    out_path: Path,
    encoding: str = "gbk",
    in_encoding: str = "utf-8",
) -> None:
    """
    Write a copy of a CSV file in a different encoding

    Every field is kept as text, so rows and columns are unchanged.
    Characters which can't be represented in `encoding`
    are written as XML character references (e.g. `&#8364;`).

    Parameters
    ----------
    in_path
        CSV to transcode

    out_path
        Where to write the transcoded CSV

    encoding
        Encoding to write

    in_encoding
        Encoding of `in_path`
    """
    fields = pd.read_csv(
        in_path, dtype=str, keep_default_na=False, encoding=in_encoding
    )
    fields.to_csv(out_path, index=False, encoding=encoding, errors="xmlcharrefreplace")


def convert_csv_to_excel(csv_path: Path, excel_path: Path) -> None:
    """
    Convert a report CSV to an Excel spreadsheet

    Parameters
    ----------
    csv_path
        UTF-8 CSV written by [write_report_csv][(m).]

    excel_path
        Where to write the spreadsheet
    """
    if importlib.util.find_spec("openpyxl") is None:
        raise MissingOptionalDependencyError(
            "convert_csv_to_excel", requirement="openpyxl"
        )

    # Identities can look like numbers, keep them as written
    table = pd.read_csv(
        csv_path,
        dtype={c: str for c in TEXT_COLUMNS},
        keep_default_na=False,
        encoding="utf-8",
    )
    table.to_excel(excel_path, index=False, engine="openpyxl")


def _partial_path(path: Path) -> Path:
    # Keep the suffix, some writers pick their format from it
    return path.with_name(f".{path.stem}.partial{path.suffix}")


def export_report(  # noqa: PLR0913
    table: ReportTable,
    output_dir: Path,
    csv_name: str = "output.csv",
    transcoded_name: str | None = "gbk.csv",
    transcode_encoding: str = "gbk",
    excel_name: str | None = "output.xlsx",
) -> list[Path]:
    """
    Write all the report files

    Either all files are written or none is:
    everything is first written to temporary files
    which only replace the real files once every step has succeeded.

    Parameters
    ----------
    table
        Report to write

    output_dir
        Directory in which to write

    csv_name
        Name of the UTF-8 CSV

    transcoded_name
        Name of the transcoded CSV, `None` to not write it

    transcode_encoding
        Encoding of the transcoded CSV

    excel_name
        Name of the spreadsheet, `None` to not write it

    Returns
    -------
    :
        Paths of the files written
    """
    if excel_name is not None and importlib.util.find_spec("openpyxl") is None:
        raise MissingOptionalDependencyError("export_report", requirement="openpyxl")

    output_dir.mkdir(parents=True, exist_ok=True)

    csv_path = output_dir / csv_name
    partials = {csv_path: _partial_path(csv_path)}
    try:
        write_report_csv(table, partials[csv_path])

        if transcoded_name is not None:
            transcoded_path = output_dir / transcoded_name
            partials[transcoded_path] = _partial_path(transcoded_path)
            transcode_csv(
                partials[csv_path],
                partials[transcoded_path],
                encoding=transcode_encoding,
            )

        if excel_name is not None:
            excel_path = output_dir / excel_name
            partials[excel_path] = _partial_path(excel_path)
            convert_csv_to_excel(partials[csv_path], partials[excel_path])

    except BaseException:
        for partial in partials.values():
            partial.unlink(missing_ok=True)

        raise

    for final, partial in partials.items():
        os.replace(partial, final)
        logger.info("Wrote %s", final)

    return list(partials)

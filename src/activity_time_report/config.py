"""
Configuration of an export run
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Union

import yaml
from attrs import define, field, validators

from activity_time_report.exceptions import ConfigError
from activity_time_report.pipeline import ON_QUERY_ERROR_OPTIONS

DEFAULT_CONFIG_PATH: Path = Path("config.json")


def _non_empty_str(instance: Any, attribute: Any, value: Any) -> None:
    if not isinstance(value, str) or not value.strip():
        msg = f"`{attribute.name}` must be a non-empty string, received {value!r}"
        raise ValueError(msg)


@define(frozen=True)
class ExportConfig:
    """
    Configuration of an export run

    Loaded once at startup, see [load_config][(m).].
    """

    server: str = field(validator=_non_empty_str)
    """
    MongoDB connection string
    """

    database: str = field(default="zvms", validator=_non_empty_str)
    users_collection: str = field(default="users", validator=_non_empty_str)
    activities_collection: str = field(default="activities", validator=_non_empty_str)

    server_selection_timeout_ms: int = field(
        default=5000,
        validator=[validators.instance_of(int), validators.gt(0)],
    )
    """
    How long to wait for the server before giving up, in milliseconds
    """

    output_dir: Path = field(default=Path("."), converter=Path)
    """
    Directory in which to write the report files
    """

    csv_name: str = field(default="output.csv", validator=_non_empty_str)
    transcoded_name: str = field(default="gbk.csv", validator=_non_empty_str)

    transcode_encoding: str = field(default="gbk", validator=_non_empty_str)
    """
    Encoding of the transcoded copy of the CSV
    """

    excel_name: str = field(default="output.xlsx", validator=_non_empty_str)

    write_excel: bool = field(default=True, validator=validators.instance_of(bool))
    """
    Whether to also write the report as a spreadsheet
    """

    on_query_error: str = field(
        default="raise", validator=validators.in_(ON_QUERY_ERROR_OPTIONS)
    )
    """
    Passed to [ActivityTimeReporter][activity_time_report.pipeline.]
    """

    n_processes: int | None = field(
        default=None,
        validator=validators.optional(
            validators.and_(validators.instance_of(int), validators.gt(0))
        ),
    )
    """
    Passed to [ActivityTimeReporter][activity_time_report.pipeline.]
    """

    progress: bool = field(default=False, validator=validators.instance_of(bool))

    log_level: str = field(
        default="INFO",
        converter=str.upper,
        validator=validators.in_(("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")),
    )


def load_config(path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> ExportConfig:
    """
    Load the configuration from a file

    The file can be YAML or JSON (JSON is valid YAML).

    Parameters
    ----------
    path
        Path to the configuration file

    Returns
    -------
    :
        Loaded configuration

    Raises
    ------
    ConfigError
        The file does not exist or does not hold a valid configuration
    """
    path = Path(path)
    if not path.exists():
        msg = f"Config file not found: {path}"
        raise ConfigError(msg)

    with path.open("r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            msg = f"Could not parse config file {path}"
            raise ConfigError(msg) from exc

    if not isinstance(data, dict):
        msg = f"Config root must be a mapping: {path}"
        raise ConfigError(msg)

    try:
        return ExportConfig(**data)
    except (TypeError, ValueError) as exc:
        msg = f"Invalid config in {path}: {exc}"
        raise ConfigError(msg) from exc

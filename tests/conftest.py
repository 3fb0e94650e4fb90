"""
Re-useable fixtures etc. for tests

See https://docs.pytest.org/en/7.1.x/reference/fixtures.html#conftest-py-sharing-fixtures-across-multiple-files
"""

import pandas as pd
import pytest
from bson import ObjectId


@pytest.fixture(scope="session", autouse=True)
def pandas_terminal_width():
    # Set pandas terminal width so that doctests don't depend on terminal width.

    # We set the display width to 120 because examples should be short,
    # anything more than this is too wide to read in the source.
    pd.set_option("display.width", 120)

    # Display as many columns as you want (i.e. let the display width do the
    # truncation)
    pd.set_option("display.max_columns", 1000)


@pytest.fixture
def person_ids():
    return {
        "a": ObjectId("65f1c0a4e4b0a1b2c3d4e5f1"),
        "b": ObjectId("65f1c0a4e4b0a1b2c3d4e5f2"),
        "c": ObjectId("65f1c0a4e4b0a1b2c3d4e5f3"),
        "d": ObjectId("65f1c0a4e4b0a1b2c3d4e5f4"),
    }

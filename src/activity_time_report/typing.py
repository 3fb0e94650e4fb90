"""
Type hints that are used throughout
"""

from __future__ import annotations

import pandas as pd
from typing_extensions import TypeAlias

ModeDurationSums: TypeAlias = "pd.Series[float]"
"""
Type alias for summed durations, indexed by membership mode

An empty series means that no membership matched.
Memberships without a mode are summed under a missing (`None`/`NaN`) label.

```python
mode
off-campus         1.5
on-campus          2.0
Name: duration, dtype: float64
```
"""

ReportTable: TypeAlias = pd.DataFrame
"""
Type alias for the [pandas.DataFrame][pd.DataFrame] shape of the final report

For typing purposes, this is just a direct alias of [pandas.DataFrame][pd.DataFrame].
However, the point of defining this
is to provide greater clarity of the kind of data we expect.

We expect one row per reported person
and exactly the columns given by
[REPORT_COLUMNS][activity_time_report.report.REPORT_COLUMNS], in that order.
The index is a plain range index and carries no information.

```python
                         id   name class  on_campus  off_campus  social_practice  total
0  65f1c0a4e4b0a1b2c3d4e5f6  Alice            2.0         1.5              0.0    3.5
1  65f1c0a4e4b0a1b2c3d4e5f7    Bob            0.0         0.0              0.0    4.0
```
"""

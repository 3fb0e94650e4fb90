"""
Code to support our tests

This is here, rather than in our `tests` directory
because of the issues that come
when you turn your tests into a package using `__init__.py` files
(for details, see https://docs.pytest.org/en/7.1.x/explanation/goodpractices.html#choosing-an-import-mode).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from bson import ObjectId


def make_user_doc(
    native_id: ObjectId, name: str, student_id: str = "", **kwargs: Any
) -> dict[str, Any]:
    """
    Make a document shaped like those in the users collection

    Parameters
    ----------
    native_id
        Identity of the user

    name
        Name of the user

    student_id
        Student number of the user

    **kwargs
        Extra fields to put in the document

    Returns
    -------
    :
        User document
    """
    return {
        "_id": native_id,
        "id": student_id,
        "name": name,
        "group": [],
        "password": "not-a-real-hash",
        **kwargs,
    }


def make_activity_doc(
    members: Iterable[tuple[ObjectId | str, str | None, float]],
    name: str = "activity",
) -> dict[str, Any]:
    """
    Make a document shaped like those in the activities collection

    Parameters
    ----------
    members
        Members of the activity, as (identity, mode, duration).

        A mode of `None` leaves the mode out of the member entry.

    name
        Name of the activity

    Returns
    -------
    :
        Activity document
    """
    members_l = []
    for identity, mode, duration in members:
        member: dict[str, Any] = {"_id": identity, "duration": duration}
        if mode is not None:
            member["mode"] = mode

        members_l.append(member)

    return {"_id": ObjectId(), "name": name, "members": members_l}

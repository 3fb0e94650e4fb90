"""
Normalisation of person identities

Activity memberships refer to people either by their native
[ObjectId][bson.ObjectId] or by its hex string.
Everything downstream of this module compares the canonical (hex) form only.
"""

from __future__ import annotations

from attrs import define
from bson import ObjectId

from activity_time_report.exceptions import SchemaDecodeError


@define(frozen=True)
class IdentityForms:
    """
    The two equivalent representations of a person's identity
    """

    native: ObjectId
    """
    Native identity, as stored in the person's `_id`
    """

    hex: str
    """
    Canonical string rendering of `native` (lower-case hex)
    """


def normalise_identity(
    value: ObjectId | str, source: str = "identity"
) -> IdentityForms:
    """
    Get both representations of an identity

    Parameters
    ----------
    value
        Identity, either an [ObjectId][bson.ObjectId]
        or its 24-character hex string (any case)

    source
        Where `value` came from, only used in error messages

    Returns
    -------
    :
        Native and canonical string forms of `value`

    Raises
    ------
    SchemaDecodeError
        `value` is not a valid identity
    """
    if isinstance(value, ObjectId):
        return IdentityForms(native=value, hex=str(value))

    if isinstance(value, str) and ObjectId.is_valid(value):
        native = ObjectId(value)
        return IdentityForms(native=native, hex=str(native))

    raise SchemaDecodeError(
        source, None, f"{value!r} is neither an ObjectId nor its hex string"
    )


def canonical_identity(value: ObjectId | str, source: str = "identity") -> str:
    """
    Get the canonical string form of an identity

    Parameters
    ----------
    value
        Identity in either representation

    source
        Where `value` came from, only used in error messages

    Returns
    -------
    :
        Lower-case hex string of the identity
    """
    return normalise_identity(value, source=source).hex

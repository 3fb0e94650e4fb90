"""
Access to the people and activities data

The rest of the package only relies on the [ActivityStore][(m).] protocol.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import pandas as pd
from attrs import define, field
from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError

from activity_time_report.aggregation import (
    memberships_to_frame,
    sum_durations_by_mode,
)
from activity_time_report.exceptions import (
    DataStoreConnectionError,
    QueryError,
    SchemaDecodeError,
)
from activity_time_report.identity import IdentityForms
from activity_time_report.model import (
    ACTIVITIES_SOURCE,
    Person,
    decode_duration,
    decode_person,
    iter_activity_memberships,
)
from activity_time_report.typing import ModeDurationSums

if TYPE_CHECKING:
    from pymongo.collection import Collection
    from pymongo.database import Database

    from activity_time_report.config import ExportConfig


@runtime_checkable
class ActivityStore(Protocol):
    """
    Source of people and of their activity time
    """

    def iter_persons(self) -> Iterator[Person]:
        """
        Iterate over every tracked person, once each
        """

    def mode_duration_sums(self, identity: IdentityForms) -> ModeDurationSums:
        """
        Get summed durations by mode of the memberships referencing a person
        """

    def close(self) -> None:
        """
        Release any resources held by the store
        """


def build_mode_duration_pipeline(identity: IdentityForms) -> list[dict[str, Any]]:
    """
    Build the aggregation pipeline that sums a person's durations by mode

    Parameters
    ----------
    identity
        Identity of the person

    Returns
    -------
    :
        Pipeline to run against the activities collection
    """
    # Memberships may store either form of the identity
    match_person = {"$match": {"members._id": {"$in": [identity.native, identity.hex]}}}

    return [
        # First match uses the index on members._id to find candidate activities,
        # the second drops the other members of those activities
        match_person,
        {"$unwind": "$members"},
        match_person,
        {
            "$group": {
                "_id": "$members.mode",
                "totalDuration": {"$sum": "$members.duration"},
                # $sum skips anything which is not a number, so count those
                "invalidDurations": {
                    "$sum": {"$cond": [{"$isNumber": "$members.duration"}, 0, 1]}
                },
            }
        },
        {"$sort": {"_id": 1}},
    ]


def mode_duration_docs_to_series(
    docs: Iterable[Mapping[str, Any]],
) -> ModeDurationSums:
    """
    Convert the output of the mode duration pipeline to a series

    Parameters
    ----------
    docs
        Documents returned by the pipeline

    Returns
    -------
    :
        Summed durations, indexed by mode

    Raises
    ------
    SchemaDecodeError
        A document is not of the expected shape
        or some memberships have a missing or non-numeric duration
    """
    modes = []
    durations = []
    for doc in docs:
        mode = doc.get("_id")
        if mode is not None and not isinstance(mode, str):
            raise SchemaDecodeError(
                ACTIVITIES_SOURCE, mode, f"mode must be a string, received {mode!r}"
            )

        n_invalid = doc.get("invalidDurations", 0)
        if n_invalid:
            raise SchemaDecodeError(
                ACTIVITIES_SOURCE,
                mode,
                f"{n_invalid} membership(s) in mode {mode!r} "
                "have a missing or non-numeric duration",
            )

        modes.append(mode)
        durations.append(
            decode_duration(
                doc.get("totalDuration"), source=ACTIVITIES_SOURCE, document_id=mode
            )
        )

    return pd.Series(
        durations,
        index=pd.Index(modes, dtype=object, name="mode"),
        dtype=float,
        name="duration",
    )


@define
class MongoActivityStore:
    """
    Store backed by a MongoDB database
    """

    client: MongoClient[dict[str, Any]]
    """
    Client connected to the server
    """

    database: str = "zvms"
    """
    Name of the database holding the collections
    """

    users_collection: str = "users"
    """
    Collection holding one document per person
    """

    activities_collection: str = "activities"
    """
    Collection holding one document per activity, with its `members`
    """

    @classmethod
    def from_config(cls, config: ExportConfig) -> MongoActivityStore:
        """
        Connect to the server given in a config

        Parameters
        ----------
        config
            Configuration to use

        Returns
        -------
        :
            Initialised store

        Raises
        ------
        DataStoreConnectionError
            The server could not be reached
        """
        try:
            client: MongoClient[dict[str, Any]] = MongoClient(
                config.server,
                serverSelectionTimeoutMS=config.server_selection_timeout_ms,
            )
            # Fail here rather than halfway through the report
            client.admin.command("ping")
        except PyMongoError as exc:
            msg = f"Could not connect to the data store at {config.server}"
            raise DataStoreConnectionError(msg) from exc

        return cls(
            client=client,
            database=config.database,
            users_collection=config.users_collection,
            activities_collection=config.activities_collection,
        )

    @property
    def db(self) -> Database[dict[str, Any]]:
        """
        Database holding the collections
        """
        return self.client[self.database]

    @property
    def users(self) -> Collection[dict[str, Any]]:
        """
        Users collection
        """
        return self.db[self.users_collection]

    @property
    def activities(self) -> Collection[dict[str, Any]]:
        """
        Activities collection
        """
        return self.db[self.activities_collection]

    def close(self) -> None:
        """
        Close the connection to the server
        """
        self.client.close()

    def iter_persons(self) -> Iterator[Person]:
        """
        Iterate over every person, in the server's natural order

        Yields
        ------
        :
            Decoded people

        Raises
        ------
        DataStoreConnectionError
            The connection to the server was lost

        QueryError
            The server returned an error

        SchemaDecodeError
            A user document could not be decoded
        """
        try:
            for doc in self.users.find({}):
                yield decode_person(doc)
        except ConnectionFailure as exc:
            msg = "Lost connection to the data store while reading users"
            raise DataStoreConnectionError(msg) from exc
        except PyMongoError as exc:
            msg = "Failed to read users"
            raise QueryError(msg) from exc

    def mode_duration_sums(self, identity: IdentityForms) -> ModeDurationSums:
        """
        Get summed durations by mode for one person

        Parameters
        ----------
        identity
            Identity of the person

        Returns
        -------
        :
            Summed durations, indexed by mode

        Raises
        ------
        DataStoreConnectionError
            The connection to the server was lost

        QueryError
            The server returned an error

        SchemaDecodeError
            The server returned something we could not decode
        """
        try:
            pipeline = build_mode_duration_pipeline(identity)
            docs = list(self.activities.aggregate(pipeline))
        except ConnectionFailure as exc:
            msg = f"Lost connection to the data store while aggregating {identity.hex}"
            raise DataStoreConnectionError(msg) from exc
        except PyMongoError as exc:
            msg = f"Aggregation query failed for {identity.hex}"
            raise QueryError(msg) from exc

        return mode_duration_docs_to_series(docs)


@define
class InMemoryActivityStore:
    """
    Store holding already loaded people and memberships

    Useful for exports of the database and for testing.
    """

    persons: tuple[Person, ...] = field(converter=tuple)
    """
    People, in the order in which they will be iterated
    """

    memberships: pd.DataFrame
    """
    All memberships of all activities, with canonical person identities

    See [memberships_to_frame][activity_time_report.aggregation.].
    """

    @classmethod
    def from_documents(
        cls,
        users: Iterable[Mapping[str, Any]],
        activities: Iterable[Mapping[str, Any]],
    ) -> InMemoryActivityStore:
        """
        Initialise from raw documents

        Documents are decoded straight away,
        so any decoding error surfaces here rather than while reporting.

        Parameters
        ----------
        users
            Documents from the users collection

        activities
            Documents from the activities collection

        Returns
        -------
        :
            Initialised store

        Raises
        ------
        SchemaDecodeError
            A document could not be decoded
        """
        return cls(
            persons=[decode_person(doc) for doc in users],
            memberships=memberships_to_frame(
                membership
                for doc in activities
                for membership in iter_activity_memberships(doc)
            ),
        )

    def iter_persons(self) -> Iterator[Person]:
        """
        Iterate over every person, in the order they were given
        """
        yield from self.persons

    def close(self) -> None:
        """
        Nothing to release, present so that the stores can be used the same way
        """

    def mode_duration_sums(self, identity: IdentityForms) -> ModeDurationSums:
        """
        Get summed durations by mode for one person

        Parameters
        ----------
        identity
            Identity of the person

        Returns
        -------
        :
            Summed durations, indexed by mode
        """
        return sum_durations_by_mode(self.memberships, identity)

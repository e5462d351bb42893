import dataclasses
from unittest import mock

from datepartition.schema import SchemaSnapshot
from datepartition.statements import (
    AddColumn,
    AddIndex,
    AddPartitions,
    AddPrimaryKey,
    DropColumn,
    DropIndex,
    DropPrimaryKey,
    PartitionByRange,
    RemovePartitioning,
    ReorganizePartition,
    quote_name,
)


def events_snapshot(**kwargs) -> SchemaSnapshot:
    """An unpartitioned ``events`` table with an auto increment ``id`` key."""
    values = {
        "table": "events",
        "columns": ("id", "name", "created_at"),
        "primary_key": ("id",),
    }
    values.update(kwargs)
    return SchemaSnapshot(**values)


def mock_connection(vendor: str = "mysql"):
    connection = mock.MagicMock()
    connection.vendor = vendor
    connection.ops.quote_name.side_effect = quote_name
    cursor = connection.cursor.return_value.__enter__.return_value
    cursor.fetchone.return_value = (1,)
    return connection


class FakeTable:
    """
    Applies statements to a snapshot the way MySQL changes the table, failing
    where MySQL would refuse the statement.
    """

    def __init__(self, snapshot: SchemaSnapshot):
        self.snapshot = snapshot

    def apply(self, statements) -> SchemaSnapshot:
        for statement in statements:
            self.snapshot = self._apply(self.snapshot, statement)
        return self.snapshot

    def _apply(self, snapshot, statement):
        replace = dataclasses.replace
        if isinstance(statement, AddColumn):
            if statement.column in snapshot.columns:
                raise AssertionError(f"Duplicate column {statement.column}")
            return replace(snapshot, columns=(*snapshot.columns, statement.column))
        if isinstance(statement, DropColumn):
            return replace(
                snapshot,
                columns=tuple(c for c in snapshot.columns if c != statement.column),
            )
        if isinstance(statement, AddIndex):
            if statement.name in snapshot.unique_keys or statement.name in snapshot.indexes:
                raise AssertionError(f"Duplicate index {statement.name}")
            if statement.unique:
                unique_keys = {**snapshot.unique_keys, statement.name: statement.columns}
                return replace(snapshot, unique_keys=unique_keys)
            indexes = {**snapshot.indexes, statement.name: statement.columns}
            return replace(snapshot, indexes=indexes)
        if isinstance(statement, DropIndex):
            if statement.name in snapshot.unique_keys:
                unique_keys = dict(snapshot.unique_keys)
                del unique_keys[statement.name]
                return replace(snapshot, unique_keys=unique_keys)
            indexes = dict(snapshot.indexes)
            del indexes[statement.name]
            return replace(snapshot, indexes=indexes)
        if isinstance(statement, DropPrimaryKey):
            if not snapshot.primary_key:
                raise AssertionError("No primary key to drop")
            other_keys = [*snapshot.unique_keys.values(), *snapshot.indexes.values()]
            if "id" in snapshot.primary_key and not any(
                columns[:1] == ("id",) for columns in other_keys
            ):
                raise AssertionError("Incorrect table definition; auto column must be a key")
            return replace(snapshot, primary_key=())
        if isinstance(statement, AddPrimaryKey):
            if snapshot.primary_key:
                raise AssertionError("Multiple primary key defined")
            return replace(snapshot, primary_key=statement.columns)
        if isinstance(statement, PartitionByRange):
            return replace(
                snapshot,
                is_partitioned=True,
                partitions=statement.partitions,
                partition_method="RANGE COLUMNS",
            )
        if isinstance(statement, ReorganizePartition):
            names = [partition.name for partition in snapshot.partitions]
            position = names.index(statement.partition)
            partitions = (
                *snapshot.partitions[:position],
                *statement.partitions,
                *snapshot.partitions[position + 1 :],
            )
            return replace(snapshot, partitions=partitions)
        if isinstance(statement, AddPartitions):
            if snapshot.catchall is not None:
                raise AssertionError("MAXVALUE can only be used in last partition definition")
            return replace(snapshot, partitions=(*snapshot.partitions, *statement.partitions))
        if isinstance(statement, RemovePartitioning):
            return replace(
                snapshot, is_partitioned=False, partitions=(), partition_method=None
            )
        raise AssertionError(f"Unexpected statement {statement!r}")

"""
DDL statements emitted by the partition generator and remover.

Statements are plain values; rendering to SQL happens at execution time with the
connection's own identifier quoting. ``str()`` renders with MySQL quoting.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from django.db.backends.utils import truncate_name

from datepartition.planner import PartitionDescriptor

# MySQL identifier length limit
MAX_NAME_LENGTH = 64


def quote_name(name: str) -> str:
    if name.startswith("`") and name.endswith("`"):
        return name
    return f"`{name}`"


def index_name(table: str, columns: Iterable[str], suffix: str) -> str:
    name = "_".join([table, *columns, suffix])
    return truncate_name(name, MAX_NAME_LENGTH)


class Statement:
    def as_sql(self, qn: Callable[[str], str] = quote_name) -> str:
        raise NotImplementedError("Statements must implement as_sql")

    def __str__(self):
        return self.as_sql()


def _columns(qn, columns: Iterable[str]) -> str:
    return ", ".join(qn(column) for column in columns)


def _partition_list(qn, partitions: Iterable[PartitionDescriptor]) -> str:
    return ", ".join(
        f"PARTITION {qn(partition.name)} VALUES LESS THAN ({partition.bound_literal})"
        for partition in partitions
    )


@dataclass(frozen=True)
class AddColumn(Statement):
    table: str
    column: str
    definition: str

    def as_sql(self, qn=quote_name):
        return f"ALTER TABLE {qn(self.table)} ADD COLUMN {qn(self.column)} {self.definition};"


@dataclass(frozen=True)
class DropColumn(Statement):
    table: str
    column: str

    def as_sql(self, qn=quote_name):
        return f"ALTER TABLE {qn(self.table)} DROP COLUMN {qn(self.column)};"


@dataclass(frozen=True)
class AddIndex(Statement):
    table: str
    name: str
    columns: tuple[str, ...]
    unique: bool = False

    def as_sql(self, qn=quote_name):
        kind = "UNIQUE INDEX" if self.unique else "INDEX"
        return (
            f"ALTER TABLE {qn(self.table)} ADD {kind} {qn(self.name)} "
            f"({_columns(qn, self.columns)});"
        )


@dataclass(frozen=True)
class DropIndex(Statement):
    table: str
    name: str

    def as_sql(self, qn=quote_name):
        return f"ALTER TABLE {qn(self.table)} DROP INDEX {qn(self.name)};"


@dataclass(frozen=True)
class AddPrimaryKey(Statement):
    table: str
    columns: tuple[str, ...]

    def as_sql(self, qn=quote_name):
        return f"ALTER TABLE {qn(self.table)} ADD PRIMARY KEY ({_columns(qn, self.columns)});"


@dataclass(frozen=True)
class DropPrimaryKey(Statement):
    table: str

    def as_sql(self, qn=quote_name):
        return f"ALTER TABLE {qn(self.table)} DROP PRIMARY KEY;"


@dataclass(frozen=True)
class PartitionByRange(Statement):
    table: str
    column: str
    partitions: tuple[PartitionDescriptor, ...]

    def as_sql(self, qn=quote_name):
        return (
            f"ALTER TABLE {qn(self.table)} PARTITION BY RANGE COLUMNS({qn(self.column)}) "
            f"({_partition_list(qn, self.partitions)});"
        )


@dataclass(frozen=True)
class ReorganizePartition(Statement):
    table: str
    partition: str
    partitions: tuple[PartitionDescriptor, ...]

    def as_sql(self, qn=quote_name):
        return (
            f"ALTER TABLE {qn(self.table)} REORGANIZE PARTITION {qn(self.partition)} "
            f"INTO ({_partition_list(qn, self.partitions)});"
        )


@dataclass(frozen=True)
class AddPartitions(Statement):
    table: str
    partitions: tuple[PartitionDescriptor, ...]

    def as_sql(self, qn=quote_name):
        return (
            f"ALTER TABLE {qn(self.table)} ADD PARTITION "
            f"({_partition_list(qn, self.partitions)});"
        )


@dataclass(frozen=True)
class RemovePartitioning(Statement):
    table: str

    def as_sql(self, qn=quote_name):
        return f"ALTER TABLE {qn(self.table)} REMOVE PARTITIONING;"

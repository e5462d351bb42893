from collections.abc import Sequence

from datepartition.exceptions import (
    DatePartitionError,
    PartitionConflictError,
    UnsupportedKeyError,
)
from datepartition.log import get_logger
from datepartition.planner import MAXVALUE, PartitionColumn, PartitionDescriptor
from datepartition.schema import DATE_RANGE_METHOD, SchemaSnapshot
from datepartition.statements import (
    AddColumn,
    AddIndex,
    AddPartitions,
    AddPrimaryKey,
    DropPrimaryKey,
    PartitionByRange,
    ReorganizePartition,
    Statement,
    index_name,
)

ID_COLUMN = "id"


def generate_add_statements(
    table_name: str,
    planned_partitions: Sequence[PartitionDescriptor],
    snapshot: SchemaSnapshot,
    partition_column: PartitionColumn,
) -> list[Statement]:
    """
    Build the statements that bring ``table_name`` to the planned partitions.

    An unpartitioned table gets the partition column, the key changes MySQL
    requires for range partitioning and the full partition list. A partitioned
    table only gets the partitions past its highest bound, split off its
    catch-all partition. Partitions that already exist are skipped, so running
    this again over an overlapping range returns an empty list.
    """
    planned = list(planned_partitions)
    _check_planned(planned)

    if not snapshot.is_partitioned:
        return _partition_table(table_name, planned, snapshot, partition_column)

    if snapshot.partition_method != DATE_RANGE_METHOD:
        raise DatePartitionError(
            f"Table '{table_name}' is partitioned by {snapshot.partition_method}; "
            f"only {DATE_RANGE_METHOD} partitioning on a date column is supported."
        )
    return _extend_partitions(table_name, planned, snapshot)


def _check_planned(planned: list[PartitionDescriptor]):
    if not planned or not planned[-1].is_catchall:
        raise ValueError("Planned partitions must end with the MAXVALUE partition.")
    bounds = [partition.upper_bound for partition in planned[:-1]]
    if any(partition.is_catchall for partition in planned[:-1]):
        raise ValueError("Only the last planned partition may use MAXVALUE.")
    if any(lower >= upper for lower, upper in zip(bounds, bounds[1:])):
        raise ValueError("Planned partition bounds must be strictly increasing.")


def _partition_table(
    table_name: str,
    planned: list[PartitionDescriptor],
    snapshot: SchemaSnapshot,
    partition_column: PartitionColumn,
) -> list[Statement]:
    column = partition_column.name
    for name, columns in snapshot.unique_keys.items():
        if column not in columns:
            raise UnsupportedKeyError(
                f"Unique key '{name}' of '{table_name}' does not include "
                f"'{column}'; MySQL requires every unique key of a partitioned "
                "table to include the partition column."
            )

    statements = []

    if column not in snapshot.columns:
        statements.append(AddColumn(table_name, column, partition_column.definition))

    if not any(columns[:1] == (column,) for columns in snapshot.indexes.values()):
        statements.append(
            AddIndex(table_name, index_name(table_name, [column], "index"), (column,))
        )

    if snapshot.primary_key and column not in snapshot.primary_key:
        # Keep the auto increment id indexed while the primary key is replaced.
        unique_columns = (ID_COLUMN, column)
        if snapshot.primary_key == (ID_COLUMN,) and (
            unique_columns not in snapshot.unique_keys.values()
        ):
            statements.append(
                AddIndex(
                    table_name,
                    index_name(table_name, unique_columns, "unique"),
                    unique_columns,
                    unique=True,
                )
            )
        statements.append(DropPrimaryKey(table_name))
        statements.append(AddPrimaryKey(table_name, (*snapshot.primary_key, column)))

    statements.append(PartitionByRange(table_name, column, tuple(planned)))
    return statements


def _extend_partitions(
    table_name: str,
    planned: list[PartitionDescriptor],
    snapshot: SchemaSnapshot,
) -> list[Statement]:
    by_name = {partition.name: partition for partition in snapshot.partitions}
    by_bound = {partition.upper_bound: partition for partition in snapshot.partitions}
    ceiling = snapshot.max_boundary
    catchall = snapshot.catchall

    new_partitions = []
    for partition in planned[:-1]:
        existing = by_bound.get(partition.upper_bound)
        if existing is not None:
            if existing.name != partition.name:
                raise PartitionConflictError(
                    f"Partition '{partition.name}' of '{table_name}' would bound "
                    f"{partition.upper_bound.isoformat()}, which partition "
                    f"'{existing.name}' already uses."
                )
            continue
        if partition.name in by_name:
            raise PartitionConflictError(
                f"Partition '{partition.name}' of '{table_name}' already exists "
                f"with bound {by_name[partition.name].bound_literal}."
            )
        if ceiling is not None and partition.upper_bound <= ceiling:
            get_logger().debug(
                "Skipping partition %s of %s, it falls inside an existing range.",
                partition.name,
                table_name,
            )
            continue
        new_partitions.append(partition)

    if catchall is None:
        planned_catchall = planned[-1]
        if planned_catchall.name in by_name:
            raise PartitionConflictError(
                f"Partition '{planned_catchall.name}' of '{table_name}' already exists "
                "and is not the MAXVALUE partition."
            )
        return [AddPartitions(table_name, (*new_partitions, planned_catchall))]

    if not new_partitions:
        return []

    return [
        ReorganizePartition(
            table_name,
            catchall.name,
            (*new_partitions, PartitionDescriptor(catchall.name, MAXVALUE)),
        )
    ]

from datepartition.exceptions import NotPartitionedError
from datepartition.planner import PartitionColumn
from datepartition.schema import SchemaSnapshot
from datepartition.statements import (
    AddPrimaryKey,
    DropColumn,
    DropIndex,
    DropPrimaryKey,
    RemovePartitioning,
    Statement,
)


def generate_remove_statements(
    table_name: str, snapshot: SchemaSnapshot, partition_column: PartitionColumn
) -> list[Statement]:
    """
    Build the statements that merge all partitions of ``table_name`` back into
    one table and undo the key changes made when it was partitioned.

    Raises :class:`NotPartitionedError` for a table without partitions; callers
    must check the table state before removing partitioning.
    """
    if not snapshot.is_partitioned:
        raise NotPartitionedError(table_name)

    column = partition_column.name
    statements = [RemovePartitioning(table_name)]

    if column in snapshot.primary_key:
        statements.append(DropPrimaryKey(table_name))
        restored = tuple(c for c in snapshot.primary_key if c != column)
        if restored:
            statements.append(AddPrimaryKey(table_name, restored))

    for name, columns in snapshot.unique_keys.items():
        if column in columns:
            statements.append(DropIndex(table_name, name))

    for name, columns in snapshot.indexes.items():
        if column in columns:
            statements.append(DropIndex(table_name, name))

    if column in snapshot.columns:
        statements.append(DropColumn(table_name, column))

    return statements

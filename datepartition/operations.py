import datetime

from datepartition.conf import settings
from datepartition.executor import execute, maintenance_lock
from datepartition.generator import generate_add_statements
from datepartition.log import get_logger
from datepartition.planner import PartitionColumn, plan
from datepartition.remover import generate_remove_statements
from datepartition.schema import SchemaStateReader
from datepartition.statements import Statement


def get_partition_column(partition_column_name: str | None = None) -> PartitionColumn:
    return PartitionColumn(
        name=partition_column_name or settings.DATEPARTITION_COLUMN_NAME,
        definition=settings.DATEPARTITION_COLUMN_DEFINITION,
    )


def partition_by_date_range(
    connection,
    table_name: str,
    start_date: datetime.date,
    end_date: datetime.date,
    partition_column_name: str | None = None,
    *,
    granularity: str | None = None,
    dry_run: bool = False,
) -> list[Statement]:
    """
    Split ``table_name`` into partitions from ``start_date`` to ``end_date``.

    Partitions the table when it is not partitioned yet, otherwise adds the
    missing partitions past its last bound. Returns the statements that were
    executed, or that would be with ``dry_run``.
    """
    column = get_partition_column(partition_column_name)
    partitions = plan(
        start_date,
        end_date,
        granularity or settings.DATEPARTITION_GRANULARITY,
        settings.DATEPARTITION_CATCHALL_NAME,
    )

    with maintenance_lock(connection, table_name):
        snapshot = SchemaStateReader(connection).read(table_name)
        statements = generate_add_statements(table_name, partitions, snapshot, column)
        if not statements:
            get_logger().info("Partitions of %s are up to date.", table_name)
        elif not dry_run:
            execute(connection, statements)
    return statements


def remove_date_range_partition(
    connection,
    table_name: str,
    partition_column_name: str | None = None,
    *,
    dry_run: bool = False,
) -> list[Statement]:
    """
    Remove the partitioning added by :func:`partition_by_date_range` from
    ``table_name``, including its partition column and key changes.
    """
    column = get_partition_column(partition_column_name)

    with maintenance_lock(connection, table_name):
        snapshot = SchemaStateReader(connection).read(table_name)
        statements = generate_remove_statements(table_name, snapshot, column)
        if not dry_run:
            execute(connection, statements)
    return statements

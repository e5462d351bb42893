import datetime
from dataclasses import dataclass, field

from dateutil import parser

from datepartition.exceptions import DatePartitionError, TableNotFoundError
from datepartition.planner import MAXVALUE, PartitionDescriptor

# Only RANGE COLUMNS partitions hold plain date bounds
DATE_RANGE_METHOD = "RANGE COLUMNS"


@dataclass(frozen=True)
class SchemaSnapshot:
    """
    The partitioning and key layout of a table at the time it was read.
    """

    table: str
    is_partitioned: bool = False
    partitions: tuple[PartitionDescriptor, ...] = ()
    partition_method: str | None = None
    columns: tuple[str, ...] = ()
    primary_key: tuple[str, ...] = ()
    unique_keys: dict[str, tuple[str, ...]] = field(default_factory=dict)
    indexes: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def catchall(self) -> PartitionDescriptor | None:
        for partition in self.partitions:
            if partition.is_catchall:
                return partition
        return None

    @property
    def max_boundary(self) -> datetime.date | None:
        bounds = [
            p.upper_bound
            for p in self.partitions
            if isinstance(p.upper_bound, datetime.date)
        ]
        return max(bounds) if bounds else None


class SchemaStateReader:
    """Reads a :class:`SchemaSnapshot` of a MySQL table through a Django connection."""

    def __init__(self, connection):
        self.connection = connection

    def read(self, table_name: str) -> SchemaSnapshot:
        introspection = self.connection.introspection
        with self.connection.cursor() as cursor:
            if table_name not in introspection.table_names(cursor):
                raise TableNotFoundError(table_name)
            columns = tuple(
                column.name
                for column in introspection.get_table_description(cursor, table_name)
            )
            constraints = introspection.get_constraints(cursor, table_name)
            rows = self._partition_rows(cursor, table_name)

        primary_key = ()
        unique_keys = {}
        indexes = {}
        for name, info in constraints.items():
            constraint_columns = tuple(info["columns"])
            if info["primary_key"]:
                primary_key = constraint_columns
            elif info["unique"]:
                unique_keys[name] = constraint_columns
            elif info.get("index"):
                indexes[name] = constraint_columns

        partitions = tuple(
            PartitionDescriptor(
                name=name, upper_bound=_parse_description(description, method)
            )
            for name, method, description in rows
        )
        return SchemaSnapshot(
            table=table_name,
            is_partitioned=bool(partitions),
            partitions=partitions,
            partition_method=rows[0][1] if rows else None,
            columns=columns,
            primary_key=primary_key,
            unique_keys=unique_keys,
            indexes=indexes,
        )

    def _partition_rows(self, cursor, table_name: str) -> list[tuple]:
        cursor.execute(
            """
            SELECT PARTITION_NAME, PARTITION_METHOD, PARTITION_DESCRIPTION
            FROM information_schema.PARTITIONS
            WHERE TABLE_SCHEMA = DATABASE()
              AND TABLE_NAME = %s
              AND PARTITION_NAME IS NOT NULL
            ORDER BY PARTITION_ORDINAL_POSITION;
            """,
            [table_name],
        )
        return list(cursor.fetchall())


def _parse_description(description, method: str | None) -> datetime.date | str:
    # "MAXVALUE" or "'2024-01-02'" for RANGE COLUMNS; other methods keep their raw bound
    value = str(description).strip()
    if value.upper() == MAXVALUE:
        return MAXVALUE
    if method != DATE_RANGE_METHOD:
        return value
    try:
        return parser.isoparse(value.strip("'\"")).date()
    except ValueError as exc:
        raise DatePartitionError(
            f"Unable to read partition bound '{description}' as a date."
        ) from exc

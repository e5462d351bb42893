class DatePartitionError(Exception):
    """Base class for errors raised while maintaining date range partitions."""


class InvalidRangeError(DatePartitionError, ValueError):
    pass


class TableNotFoundError(DatePartitionError):
    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"Table '{table_name}' does not exist.")


class PartitionConflictError(DatePartitionError):
    pass


class UnsupportedKeyError(DatePartitionError):
    """A unique key of the table leaves out the partition column."""


class NotPartitionedError(DatePartitionError):
    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"Table '{table_name}' is not partitioned.")


class MaintenanceLockError(DatePartitionError):
    pass


class ExecutionError(DatePartitionError):
    """
    A statement of a plan failed at the database.

    Partition DDL is not transactional, so the statements in ``applied`` remain in
    effect and the ones in ``pending`` were never run.
    """

    def __init__(self, statement, applied, pending):
        self.statement = statement
        self.applied = tuple(applied)
        self.pending = tuple(pending)
        super().__init__(
            f"Statement failed after {len(self.applied)} applied statement(s), "
            f"{len(self.pending)} not run: {statement}"
        )

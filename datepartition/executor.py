import contextlib
from collections.abc import Iterable

from django.db import DatabaseError
from django.db.backends.utils import truncate_name

from datepartition.conf import settings
from datepartition.exceptions import ExecutionError, MaintenanceLockError
from datepartition.log import get_logger
from datepartition.statements import MAX_NAME_LENGTH, Statement


def execute(connection, plan: Iterable[Statement]) -> list[Statement]:
    """
    Run the statements of ``plan`` one by one, stopping at the first failure.

    Nothing is rolled back: the raised :class:`ExecutionError` tells which
    statements were applied and which were not run.
    """
    logger = get_logger()
    statements = list(plan)
    for position, statement in enumerate(statements):
        sql = statement.as_sql(connection.ops.quote_name)
        logger.log(settings.DATEPARTITION_LEVEL, "Executing %s", sql)
        try:
            with connection.cursor() as cursor:
                cursor.execute(sql)
        except DatabaseError as exc:
            logger.error("Statement failed: %s (%s)", sql, exc)
            raise ExecutionError(
                statement,
                applied=statements[:position],
                pending=statements[position + 1 :],
            ) from exc
    return statements


@contextlib.contextmanager
def maintenance_lock(connection, table_name: str, timeout: int | None = None):
    """Hold a MySQL named lock so only one maintenance run touches a table."""
    if timeout is None:
        timeout = settings.DATEPARTITION_LOCK_TIMEOUT
    lock_name = truncate_name(f"datepartition:{table_name}", MAX_NAME_LENGTH)
    with connection.cursor() as cursor:
        cursor.execute("SELECT GET_LOCK(%s, %s);", [lock_name, timeout])
        acquired = cursor.fetchone()[0]
    if acquired != 1:
        raise MaintenanceLockError(
            f"Could not acquire the maintenance lock for '{table_name}' "
            f"within {timeout} second(s)."
        )
    try:
        yield
    finally:
        with connection.cursor() as cursor:
            cursor.execute("SELECT RELEASE_LOCK(%s);", [lock_name])

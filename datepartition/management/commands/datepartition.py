import datetime

from django.core.management.base import BaseCommand, CommandError
from django.db import DEFAULT_DB_ALIAS, connections
from django.utils.connection import ConnectionDoesNotExist

from datepartition.conf import settings
from datepartition.exceptions import DatePartitionError, ExecutionError
from datepartition.operations import partition_by_date_range, remove_date_range_partition
from datepartition.planner import GRANULARITIES, advance
from datepartition.schema import SchemaStateReader


class Command(BaseCommand):
    help = "Manage MySQL date range partitions of a table."

    def add_arguments(self, parser):
        subparsers = parser.add_subparsers(dest="subcommand")
        subparsers.required = True

        add_parser = subparsers.add_parser(
            "add",
            help="Partition a table over a date range, or extend its partitions.",
        )
        self._add_common_arguments(add_parser)
        add_parser.add_argument(
            "start",
            type=datetime.date.fromisoformat,
            help="First partition date (ISO 8601).",
        )
        add_parser.add_argument(
            "end",
            type=datetime.date.fromisoformat,
            help="Last partition date, inclusive (ISO 8601).",
        )
        self._add_granularity_argument(add_parser)
        self._add_dry_run_argument(add_parser)

        update_parser = subparsers.add_parser(
            "update",
            help="Create partitions from today up to the configured horizon.",
        )
        self._add_common_arguments(update_parser)
        update_parser.add_argument(
            "--ahead",
            type=int,
            default=None,
            help="Number of granularity units to cover past today "
            "(defaults to DATEPARTITION_AHEAD).",
        )
        self._add_granularity_argument(update_parser)
        self._add_dry_run_argument(update_parser)

        remove_parser = subparsers.add_parser(
            "remove",
            help="Remove partitioning and the partition column from a table.",
        )
        self._add_common_arguments(remove_parser)
        self._add_dry_run_argument(remove_parser)

        status_parser = subparsers.add_parser(
            "status",
            help="Display partitioning status and existing partitions.",
        )
        self._add_common_arguments(status_parser)

    def _add_common_arguments(self, parser):
        parser.add_argument("table", help="Name of the table.")
        parser.add_argument(
            "--column",
            default=None,
            help="Partition column (defaults to DATEPARTITION_COLUMN_NAME).",
        )
        parser.add_argument(
            "--database",
            default=DEFAULT_DB_ALIAS,
            help="Database alias to operate on.",
        )

    def _add_granularity_argument(self, parser):
        parser.add_argument(
            "--granularity",
            choices=list(GRANULARITIES),
            default=None,
            help="Partition size (defaults to DATEPARTITION_GRANULARITY).",
        )

    def _add_dry_run_argument(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show the statements without executing them.",
        )

    def handle(self, *args, **options):
        subcommand = options.pop("subcommand")
        database = options.pop("database", DEFAULT_DB_ALIAS)
        connection = self._get_mysql_connection(database)

        try:
            if subcommand == "add":
                self._handle_add(connection, **options)
            elif subcommand == "update":
                self._handle_update(connection, **options)
            elif subcommand == "remove":
                self._handle_remove(connection, **options)
            elif subcommand == "status":
                self._handle_status(connection, **options)
            else:
                raise CommandError(f"Unknown subcommand: {subcommand}")
        except ExecutionError as exc:
            for statement in exc.applied:
                self.stderr.write(f"Applied: {statement}")
            raise CommandError(str(exc)) from exc
        except DatePartitionError as exc:
            raise CommandError(str(exc)) from exc

    def _handle_add(
        self,
        connection,
        table: str,
        *,
        start: datetime.date,
        end: datetime.date,
        column: str | None,
        granularity: str | None,
        dry_run: bool,
        **_,
    ):
        statements = partition_by_date_range(
            connection,
            table,
            start,
            end,
            column,
            granularity=granularity,
            dry_run=dry_run,
        )
        self._report(statements, dry_run)

    def _handle_update(
        self,
        connection,
        table: str,
        *,
        ahead: int | None,
        column: str | None,
        granularity: str | None,
        dry_run: bool,
        **_,
    ):
        snapshot = SchemaStateReader(connection).read(table)
        if not snapshot.is_partitioned:
            raise CommandError(
                "Table is not partitioned. Run 'datepartition add' first."
            )

        ahead = ahead if ahead is not None else settings.DATEPARTITION_AHEAD
        if ahead < 0:
            raise CommandError("Ahead must be zero or positive.")
        granularity = granularity or settings.DATEPARTITION_GRANULARITY
        start = datetime.date.today()
        end = advance(start, granularity, ahead)

        statements = partition_by_date_range(
            connection,
            table,
            start,
            end,
            column,
            granularity=granularity,
            dry_run=dry_run,
        )
        self._report(statements, dry_run)

    def _handle_remove(
        self, connection, table: str, *, column: str | None, dry_run: bool, **_
    ):
        statements = remove_date_range_partition(
            connection, table, column, dry_run=dry_run
        )
        if dry_run:
            self._report(statements, dry_run)
        else:
            self.stdout.write("Partitioning removed.")

    def _handle_status(self, connection, table: str, **_):
        snapshot = SchemaStateReader(connection).read(table)
        if not snapshot.is_partitioned:
            self.stdout.write("Partitioned: no")
            return

        self.stdout.write(f"Partitioned: yes ({snapshot.partition_method})")
        self.stdout.write("Partitions:")
        for partition in snapshot.partitions:
            self.stdout.write(f"  - {partition.name} < {partition.bound_literal}")

    def _report(self, statements, dry_run: bool):
        if not statements:
            self.stdout.write("No new partitions were created.")
            return
        if dry_run:
            self.stdout.write("Statements that would be executed:")
            for statement in statements:
                self.stdout.write(f"  {statement}")
            return
        self.stdout.write(f"Executed {len(statements)} statement(s).")

    def _get_mysql_connection(self, alias: str):
        try:
            connection = connections[alias]
        except ConnectionDoesNotExist:
            raise CommandError(f"Unknown database alias '{alias}'.")

        if connection.vendor != "mysql":
            raise CommandError(
                f"datepartition only supports MySQL. Database '{alias}' "
                f"uses vendor '{connection.vendor}'."
            )
        return connection

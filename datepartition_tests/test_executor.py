"""Tests for datepartition.executor"""

from unittest import mock

from django.db import DatabaseError
from django.test import SimpleTestCase

from datepartition.exceptions import ExecutionError, MaintenanceLockError
from datepartition.executor import execute, maintenance_lock
from datepartition.statements import AddColumn, DropColumn, RemovePartitioning
from datepartition_tests.fakes import mock_connection


class ExecuteTest(SimpleTestCase):
    def setUp(self):
        self.connection = mock_connection()
        self.cursor = self.connection.cursor.return_value.__enter__.return_value
        self.plan = [
            RemovePartitioning("events"),
            AddColumn("events", "day", "DATE NOT NULL"),
            DropColumn("events", "day"),
        ]

    def test_runs_statements_in_order(self):
        executed = execute(self.connection, self.plan)

        self.assertEqual(executed, self.plan)
        self.assertEqual(
            self.cursor.execute.call_args_list,
            [
                mock.call("ALTER TABLE `events` REMOVE PARTITIONING;"),
                mock.call("ALTER TABLE `events` ADD COLUMN `day` DATE NOT NULL;"),
                mock.call("ALTER TABLE `events` DROP COLUMN `day`;"),
            ],
        )

    def test_uses_connection_quoting(self):
        self.connection.ops.quote_name.side_effect = lambda name: f'"{name}"'

        execute(self.connection, self.plan[:1])

        self.cursor.execute.assert_called_once_with(
            'ALTER TABLE "events" REMOVE PARTITIONING;'
        )

    def test_stops_at_first_failure(self):
        failure = DatabaseError("Duplicate column name 'day'")
        self.cursor.execute.side_effect = [None, failure, None]

        with self.assertRaises(ExecutionError) as context:
            execute(self.connection, self.plan)

        error = context.exception
        self.assertEqual(error.statement, self.plan[1])
        self.assertEqual(error.applied, (self.plan[0],))
        self.assertEqual(error.pending, (self.plan[2],))
        self.assertIs(error.__cause__, failure)
        self.assertEqual(self.cursor.execute.call_count, 2)

    def test_logs_statements(self):
        with self.assertLogs("datepartition", level="INFO") as logs:
            execute(self.connection, self.plan[:1])

        self.assertIn("REMOVE PARTITIONING", logs.output[0])

    def test_empty_plan(self):
        self.assertEqual(execute(self.connection, []), [])
        self.connection.cursor.assert_not_called()


class MaintenanceLockTest(SimpleTestCase):
    def setUp(self):
        self.connection = mock_connection()
        self.cursor = self.connection.cursor.return_value.__enter__.return_value

    def test_acquires_and_releases(self):
        with maintenance_lock(self.connection, "events", timeout=5):
            self.cursor.execute.assert_called_once_with(
                "SELECT GET_LOCK(%s, %s);", ["datepartition:events", 5]
            )

        self.cursor.execute.assert_called_with(
            "SELECT RELEASE_LOCK(%s);", ["datepartition:events"]
        )

    def test_releases_on_error(self):
        with self.assertRaises(RuntimeError):
            with maintenance_lock(self.connection, "events"):
                raise RuntimeError

        self.cursor.execute.assert_called_with(
            "SELECT RELEASE_LOCK(%s);", ["datepartition:events"]
        )

    def test_default_timeout_from_settings(self):
        with self.settings(DATEPARTITION_LOCK_TIMEOUT=3):
            with maintenance_lock(self.connection, "events"):
                pass

        self.assertEqual(
            self.cursor.execute.call_args_list[0],
            mock.call("SELECT GET_LOCK(%s, %s);", ["datepartition:events", 3]),
        )

    def test_long_table_name_fits_lock_name(self):
        table_name = "e" * 64

        with maintenance_lock(self.connection, table_name, timeout=5):
            pass

        acquire, release = self.cursor.execute.call_args_list
        lock_name = acquire.args[1][0]
        self.assertLessEqual(len(lock_name), 64)
        self.assertTrue(lock_name.startswith("datepartition:"))
        self.assertEqual(release, mock.call("SELECT RELEASE_LOCK(%s);", [lock_name]))

    def test_lock_not_acquired(self):
        self.cursor.fetchone.return_value = (0,)

        with self.assertRaises(MaintenanceLockError):
            with maintenance_lock(self.connection, "events"):
                self.fail("Lock body must not run")

        self.assertEqual(self.cursor.execute.call_count, 1)

import unittest
from types import SimpleNamespace
from unittest import mock

import psycopg2

from domain.errors import StorageUnavailable
from domain.models import TableNames
from infrastructure.db.postgres_connector import PostgresConnector
from infrastructure.db.sql_account_repository import SqlAccountRepository


class PostgresConnectorTests(unittest.TestCase):
    def test_dialect_flags(self):
        connector = PostgresConnector()
        self.assertEqual(connector.name, "PostgreSQL")
        self.assertTrue(connector.supports_modification)
        self.assertEqual(connector.placeholder, "%s")

    def test_config_defaults(self):
        defaults = PostgresConnector.config_defaults()
        self.assertEqual(set(defaults), {"host", "port", "dbname", "user", "password"})
        self.assertEqual(defaults["port"], "5432")

    @mock.patch("infrastructure.db.postgres_connector.psycopg2.connect")
    def test_connect_merges_params_and_enables_autocommit(self, connect):
        conn = mock.MagicMock()
        connect.return_value = conn

        result = PostgresConnector({"host": "db.example", "dbname": "economy"}).connect()

        self.assertIs(result, conn)
        self.assertTrue(conn.autocommit)
        kwargs = connect.call_args.kwargs
        self.assertEqual(kwargs["host"], "db.example")
        self.assertEqual(kwargs["dbname"], "economy")
        self.assertEqual(kwargs["port"], "5432")

    @mock.patch(
        "infrastructure.db.postgres_connector.psycopg2.connect",
        side_effect=psycopg2.OperationalError("connection refused"),
    )
    def test_connect_failure_is_storage_unavailable(self, connect):
        with self.assertRaises(StorageUnavailable):
            PostgresConnector().connect()

    def test_closed_and_disconnect_detection(self):
        connector = PostgresConnector()
        self.assertFalse(connector.is_closed(SimpleNamespace(closed=0)))
        self.assertTrue(connector.is_closed(SimpleNamespace(closed=2)))
        self.assertTrue(connector.is_disconnect(psycopg2.OperationalError()))
        self.assertTrue(connector.is_disconnect(psycopg2.InterfaceError()))
        self.assertFalse(connector.is_disconnect(psycopg2.ProgrammingError()))

    @mock.patch(
        "infrastructure.db.postgres_connector.psycopg2.connect",
        side_effect=psycopg2.OperationalError("connection refused"),
    )
    def test_repository_without_server_stays_usable(self, connect):
        repo = SqlAccountRepository(
            PostgresConnector(),
            is_active=lambda name: False,
            names=TableNames(),
            scheduler=mock.MagicMock(),
        )
        self.addCleanup(repo.close)
        self.assertFalse(repo.init())
        self.assertEqual(repo.get_version(), 0)
        self.assertEqual(repo.load_top_accounts(3), [])


if __name__ == "__main__":
    unittest.main()

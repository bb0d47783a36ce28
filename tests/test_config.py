import tempfile
import unittest

from application.bootstrap import build_connector, create_account_repository
from application.config import Settings, load_settings
from domain.models import TableNames


class LoadSettingsTests(unittest.TestCase):
    def test_defaults(self):
        settings = load_settings({})
        self.assertEqual(settings.database, "sqlite")
        self.assertEqual(settings.data_dir, "data")
        self.assertEqual(settings.default_holdings, 0.0)
        self.assertEqual(settings.names, TableNames())
        self.assertEqual(settings.probe_interval, 60.0)
        self.assertEqual(settings.db_options, {})

    def test_overrides(self):
        settings = load_settings(
            {
                "FE_DATABASE": "Postgres",
                "FE_DEFAULT_HOLDINGS": "25.5",
                "FE_ACCOUNTS_TABLE": "balances",
                "FE_COLUMN_MONEY": "coins",
                "FE_DB_HOST": "db.example",
                "FE_PROBE_INTERVAL": "15",
                "FE_LOG_LEVEL": "debug",
            }
        )
        self.assertEqual(settings.database, "postgres")
        self.assertEqual(settings.default_holdings, 25.5)
        self.assertEqual(settings.names.accounts, "balances")
        self.assertEqual(settings.names.money_column, "coins")
        self.assertEqual(settings.db_options["host"], "db.example")
        self.assertEqual(settings.db_options["port"], "5432")
        self.assertEqual(settings.probe_interval, 15.0)
        self.assertEqual(settings.log_level, "DEBUG")

    def test_unknown_backend(self):
        with self.assertRaises(ValueError):
            load_settings({"FE_DATABASE": "mongo"})

    def test_malformed_numbers(self):
        with self.assertRaises(ValueError):
            load_settings({"FE_DEFAULT_HOLDINGS": "lots"})
        with self.assertRaises(ValueError):
            load_settings({"FE_PROBE_INTERVAL": "0"})

    def test_invalid_column_name(self):
        with self.assertRaises(ValueError):
            load_settings({"FE_COLUMN_NAME": "name--"})


class BootstrapTests(unittest.TestCase):
    def test_builds_connector_for_backend(self):
        self.assertEqual(build_connector(Settings()).name, "SQLite")
        self.assertEqual(build_connector(load_settings({"FE_DATABASE": "postgres"})).name, "PostgreSQL")

    def test_create_account_repository(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        settings = Settings(data_dir=tmp.name, default_holdings=10.0)

        repo = create_account_repository(settings, is_active=lambda name: False)
        self.addCleanup(repo.close)

        self.assertTrue(repo.init())
        repo.save_account("Alice", None, 10.0)
        repo.save_account("Bob", None, 11.0)
        repo.clean()
        self.assertEqual([a.name for a in repo.get_accounts()], ["Bob"])


if __name__ == "__main__":
    unittest.main()

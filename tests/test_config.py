"""
Unit tests for runtime configuration and the service factory.
"""
import unittest

from teamsheet.services import (
    InMemorySelectionStorage, JsonFileSelectionStorage, RestSelectionStorage, ServiceFactory
)
from teamsheet.models import FixtureDefinition
from teamsheet.utils import StorageSettings, configure_logging


class TestStorageSettings(unittest.TestCase):

    def test_defaults(self):
        settings = StorageSettings.from_env({})
        self.assertEqual(settings.backend, "memory")
        self.assertEqual(settings.rest_timeout, 10.0)
        self.assertEqual(settings.table, "fixture_team_selections")

    def test_rest_settings(self):
        settings = StorageSettings.from_env({
            "TEAMSHEET_STORAGE": "REST",
            "TEAMSHEET_REST_URL": "https://db.example.com",
            "TEAMSHEET_REST_KEY": "secret",
            "TEAMSHEET_REST_TIMEOUT": "2.5",
        })
        self.assertEqual(settings.backend, "rest")
        self.assertEqual(settings.rest_key, "secret")
        self.assertEqual(settings.rest_timeout, 2.5)

    def test_invalid_settings(self):
        for env in (
            {"TEAMSHEET_STORAGE": "ftp"},
            {"TEAMSHEET_STORAGE": "rest"},
            {"TEAMSHEET_REST_TIMEOUT": "soon"},
            {"TEAMSHEET_REST_TIMEOUT": "0"},
        ):
            with self.subTest(env=env):
                with self.assertRaises(ValueError):
                    StorageSettings.from_env(env)

    def test_configure_logging_rejects_unknown_level(self):
        with self.assertRaises(ValueError):
            configure_logging("CHATTY")


class TestServiceFactory(unittest.TestCase):

    def test_backend_selection(self):
        self.assertIsInstance(ServiceFactory().create_storage(), InMemorySelectionStorage)
        self.assertIsInstance(
            ServiceFactory(StorageSettings(backend="file", data_dir="out")).create_storage(),
            JsonFileSelectionStorage,
        )
        rest = ServiceFactory(StorageSettings(backend="rest", rest_url="https://db.example.com")).create_storage()
        self.assertIsInstance(rest, RestSelectionStorage)
        self.assertEqual(rest.endpoint, "https://db.example.com/rest/v1/fixture_team_selections")

    def test_sessions_share_storage(self):
        factory = ServiceFactory()
        first = factory.create_session(FixtureDefinition("fx-1"))
        second = factory.create_session(FixtureDefinition("fx-2"))
        self.assertIs(first.persistence, second.persistence)


if __name__ == "__main__":
    unittest.main()

"""
core/tests/test_config_service.py

Layered configuration: embedded defaults, environment overlay, typing.
"""

from __future__ import annotations

import os
import unittest
from pathlib import Path
from unittest import mock

from core.config.config_service import ConfigService


class TestConfigService(unittest.TestCase):
    def test_typed_sections(self) -> None:
        svc = ConfigService()
        self.assertIsInstance(svc.database.app_data, Path)
        self.assertIsInstance(svc.signature.line_width, float)
        self.assertIsInstance(svc.signature.pen_only, bool)
        self.assertIsInstance(svc.imaging.max_width, int)
        self.assertEqual(svc.imaging.max_width, 800)
        self.assertEqual(svc.imaging.jpeg_quality, 70)

    def test_env_overrides_defaults(self) -> None:
        with mock.patch.dict(os.environ, {
            "SAFETYFORMS_SIGNATURE__PEN_ONLY": "yes",
            "SAFETYFORMS_IMAGING__MAX_WIDTH": "640",
        }):
            svc = ConfigService()
        self.assertTrue(svc.signature.pen_only)
        self.assertEqual(svc.imaging.max_width, 640)
        self.assertEqual(svc.meta_source("Imaging", "max_width")["layer"], "env")

    def test_test_databases_are_redirected(self) -> None:
        svc = ConfigService()
        self.assertEqual(svc.meta_source("Database", "logging")["layer"], "env")
        self.assertEqual(str(svc.database.logging), os.environ["SAFETYFORMS_DATABASE__LOGGING"])

    def test_generic_get_with_cast(self) -> None:
        svc = ConfigService()
        self.assertEqual(svc.get("Imaging", "max_width", cast=int), svc.imaging.max_width)
        self.assertIsNone(svc.get("Imaging", "missing"))
        self.assertIsNone(svc.meta_source("Nope", "nothing"))

    def test_loader_exports_resolved_paths(self) -> None:
        from core.config import config_loader as loader

        svc = loader.config_loader.service
        self.assertIs(loader.ConfigLoader(), loader.config_loader)
        self.assertEqual(loader.APP_DB_PATH, svc.database.app_data)
        self.assertEqual(loader.CACHE_DB_PATH, svc.database.local_cache)
        self.assertEqual(loader.LOG_DB_PATH, svc.database.logging)


if __name__ == "__main__":
    unittest.main()

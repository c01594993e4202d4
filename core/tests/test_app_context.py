"""
core/tests/test_app_context.py

Service composition from configuration.
"""

from __future__ import annotations

import os
import unittest
from unittest import mock

from core.common.app_context import build_app_context
from core.config.config_service import ConfigService
from core.storage.remote_sync import ThreadedRemoteSync
from drafts.models.report_type import ReportType


class TestBuildAppContext(unittest.TestCase):
    def _config(self, **env: str) -> ConfigService:
        with mock.patch.dict(os.environ, env):
            return ConfigService()

    def test_memory_backend_with_threaded_sync(self) -> None:
        ctx = build_app_context(self._config(
            SAFETYFORMS_STORAGE__BACKEND="memory",
            SAFETYFORMS_STORAGE__THREADED_SYNC="true",
            SAFETYFORMS_IMAGING__MAX_WIDTH="640",
        ))
        self.assertIsInstance(ctx.sync, ThreadedRemoteSync)
        self.assertEqual(ctx.images.max_width, 640)

        draft_id = ctx.drafts.save(None, ReportType.SAFETY_PLAN, {"project": "A"})
        ctx.drafts.save(draft_id, ReportType.SAFETY_PLAN, {"project": "B"})
        ctx.close()

        self.assertEqual(ctx.document_store.get_one("drafts", draft_id)["data"], {"project": "B"})

    def test_capture_config_follows_signature_section(self) -> None:
        ctx = build_app_context(self._config(
            SAFETYFORMS_STORAGE__BACKEND="memory",
            SAFETYFORMS_SIGNATURE__PEN_ONLY="true",
        ))
        cfg = ctx.capture_config(keep_open=True)
        self.assertTrue(cfg.pen_only)
        self.assertTrue(cfg.keep_open_on_save)
        ctx.close()

    def test_unknown_backend_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            build_app_context(self._config(SAFETYFORMS_STORAGE__BACKEND="cloud"))


if __name__ == "__main__":
    unittest.main()

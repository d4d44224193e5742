"""Tests for layered config parsing and validation."""

import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from TrialSearch.config import merge_config_dicts, parse_config_dict


def _base_raw_config() -> dict:
    return {
        "log": {"level": "info", "to_file": False, "dir": "log"},
        "storage": {"db_path": "database/trial_search.db"},
        "remote": {
            "enabled": True,
            "base_url": "http://localhost:8000/",
            "timeout": 15,
            "max_attempts": 3,
            "token_env": "TRIAL_SEARCH_API_TOKEN",
        },
        "history": {"retention_days": 30, "warn_days": 7, "max_entries": 50},
        "search": {"default_query_type": "dashboard"},
    }


class TestConfigLayering(unittest.TestCase):
    def test_parse_success_nested_access(self) -> None:
        with patch.dict(os.environ, {"TRIAL_SEARCH_API_TOKEN": " tok "}, clear=False):
            cfg = parse_config_dict(_base_raw_config())
        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertEqual(cfg.storage.db_path, "database/trial_search.db")
        self.assertEqual(cfg.remote.base_url, "http://localhost:8000")
        self.assertEqual(cfg.remote.timeout, 15.0)
        self.assertEqual(cfg.remote.token, "tok")
        self.assertEqual(cfg.history.retention_days, 30)
        self.assertEqual(cfg.search.default_query_type, "dashboard")

    def test_missing_token_is_empty(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            cfg = parse_config_dict(_base_raw_config())
        self.assertEqual(cfg.remote.token, "")

    def test_optional_sections_default(self) -> None:
        raw = _base_raw_config()
        del raw["history"]
        del raw["search"]
        cfg = parse_config_dict(raw)
        self.assertEqual((cfg.history.retention_days, cfg.history.warn_days, cfg.history.max_entries), (30, 7, 50))
        self.assertEqual(cfg.search.default_query_type, "dashboard")

    def test_missing_required_section(self) -> None:
        raw = _base_raw_config()
        del raw["storage"]
        with self.assertRaisesRegex(ValueError, "storage"):
            parse_config_dict(raw)

    def test_bad_log_level(self) -> None:
        raw = _base_raw_config()
        raw["log"]["level"] = "LOUD"
        with self.assertRaisesRegex(ValueError, "log\\.level"):
            parse_config_dict(raw)

    def test_timeout_type_error_contains_key(self) -> None:
        raw = _base_raw_config()
        raw["remote"]["timeout"] = "15"
        with self.assertRaisesRegex(TypeError, "remote\\.timeout"):
            parse_config_dict(raw)

    def test_base_url_required_only_when_enabled(self) -> None:
        raw = _base_raw_config()
        raw["remote"]["base_url"] = "localhost"
        with self.assertRaisesRegex(ValueError, "remote\\.base_url"):
            parse_config_dict(raw)
        raw["remote"]["enabled"] = False
        self.assertFalse(parse_config_dict(raw).remote.enabled)

    def test_warn_days_must_be_below_retention(self) -> None:
        raw = _base_raw_config()
        raw["history"]["warn_days"] = 30
        with self.assertRaisesRegex(ValueError, "history\\.warn_days"):
            parse_config_dict(raw)

    def test_max_entries_bool_rejected(self) -> None:
        raw = _base_raw_config()
        raw["history"]["max_entries"] = True
        with self.assertRaisesRegex(TypeError, "history\\.max_entries"):
            parse_config_dict(raw)

    def test_query_type_must_be_path_safe(self) -> None:
        raw = _base_raw_config()
        raw["search"]["default_query_type"] = "my queries/"
        with self.assertRaisesRegex(ValueError, "search\\.default_query_type"):
            parse_config_dict(raw)

    def test_merge_is_deep(self) -> None:
        merged = merge_config_dicts(_base_raw_config(), {"remote": {"enabled": False}})
        self.assertFalse(merged["remote"]["enabled"])
        self.assertEqual(merged["remote"]["max_attempts"], 3)


if __name__ == "__main__":
    unittest.main()

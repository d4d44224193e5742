"""End-to-end tests for the click command line with the remote disabled."""

from __future__ import annotations

import json
import sys
import tempfile
import unittest
from pathlib import Path

from click.testing import CliRunner

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from TrialSearch.cli.ui import cli

_CONFIG_TEMPLATE = """
log:
  level: ERROR
  to_file: false
  dir: {tmp}/log
storage:
  db_path: {tmp}/trial_search.db
remote:
  enabled: false
  base_url: http://localhost:8000
  timeout: 5
  max_attempts: 1
  token_env: TRIAL_SEARCH_API_TOKEN
history:
  retention_days: 30
  warn_days: 7
  max_entries: 50
search:
  default_query_type: dashboard
"""

_CRITERIA = [
    {"id": "1", "field": "status", "operator": "is", "value": "open", "connective": "AND"},
    {"id": "2", "field": "country", "operator": "is", "value": "Canada", "connective": "AND"},
]

_RECORDS = [
    {"trial_id": "T-1", "title": "HER2 study", "status": "Open", "country": "Canada"},
    {"trial_id": "T-2", "title": "Lung study", "status": "Open", "country": "Germany"},
]


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmpdir.name)
        self.config_path = self.tmp / "config.yml"
        self.config_path.write_text(_CONFIG_TEMPLATE.format(tmp=self.tmp.as_posix()), encoding="utf-8")
        self.criteria_path = self._write_json("criteria.json", _CRITERIA)
        self.records_path = self._write_json("records.json", {"records": _RECORDS})
        self.runner = CliRunner()

    def tearDown(self) -> None:
        self._tmpdir.cleanup()

    def _write_json(self, name: str, data) -> str:
        path = self.tmp / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    def _invoke(self, *args: str):
        return self.runner.invoke(cli, ["--config", str(self.config_path), *args])

    def test_fields_lists_registry(self) -> None:
        result = self._invoke("fields")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("trial_phase", result.output)
        self.assertIn("contains-only", result.output)

    def test_operators_for_numeric_field(self) -> None:
        result = self._invoke("operators", "enrollment")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn(">=", result.output)
        self.assertNotIn("contains", result.output)

    def test_operators_unknown_field_is_usage_error(self) -> None:
        result = self._invoke("operators", "bogus")
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Unknown search field", result.output)

    def test_save_list_delete_offline(self) -> None:
        saved = self._invoke("save", "--title", "Open in Canada", self.criteria_path)
        self.assertEqual(saved.exit_code, 0, saved.output)
        self.assertIn("Saved query", saved.output)

        listed = self._invoke("list", "--json")
        self.assertEqual(listed.exit_code, 0, listed.output)
        queries = json.loads(listed.output)
        self.assertEqual([q["title"] for q in queries], ["Open in Canada"])
        self.assertEqual(queries[0]["criteria_snapshot"], _CRITERIA)

        deleted = self._invoke("delete", queries[0]["id"])
        self.assertEqual(deleted.exit_code, 0, deleted.output)
        self.assertIn("No saved queries.", self._invoke("list").output)

    def test_save_edit_replaces_in_place(self) -> None:
        self._invoke("save", "--title", "First", self.criteria_path)
        query_id = json.loads(self._invoke("list", "--json").output)[0]["id"]

        edited = self._invoke("save", "--title", "Renamed", "--edit", query_id, self.criteria_path)
        self.assertEqual(edited.exit_code, 0, edited.output)
        self.assertIn("Updated query", edited.output)

        queries = json.loads(self._invoke("list", "--json").output)
        self.assertEqual([(q["id"], q["title"]) for q in queries], [(query_id, "Renamed")])

    def test_save_without_runnable_criteria_is_usage_error(self) -> None:
        empty = self._write_json("empty.json", [{"id": "1", "field": "", "operator": "", "value": ""}])
        result = self._invoke("save", "--title", "Nothing", empty)
        self.assertEqual(result.exit_code, 2)
        self.assertIn("criterion", result.output)

    def test_save_rejects_operator_not_offered_for_field(self) -> None:
        bad = self._write_json("bad.json", [{"id": "1", "field": "status", "operator": ">", "value": "open"}])
        result = self._invoke("save", "--title", "Bad", bad)
        self.assertEqual(result.exit_code, 2)
        self.assertIn("not valid for field", result.output)
        self.assertEqual(json.loads(self._invoke("list", "--json").output), [])

    def test_run_rejects_unknown_field_without_logging(self) -> None:
        bad = self._write_json("bad.json", [{"id": "1", "field": "bogus", "operator": "is", "value": "x"}])
        result = self._invoke("run", bad, self.records_path)
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Unknown search field", result.output)
        self.assertEqual(json.loads(self._invoke("logs", "--json").output), [])

    def test_invalid_json_is_usage_error(self) -> None:
        path = self.tmp / "broken.json"
        path.write_text("[{", encoding="utf-8")
        result = self._invoke("save", "--title", "Broken", str(path))
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Invalid criteria JSON", result.output)

    def test_run_filters_and_logs_execution(self) -> None:
        result = self._invoke("run", self.criteria_path, self.records_path, "--title", "Canada check")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("1 matching record(s)", result.output)
        self.assertIn("trial_id=T-1", result.output)
        self.assertNotIn("T-2", result.output)

        logs = self._invoke("logs", "--json")
        self.assertEqual(logs.exit_code, 0, logs.output)
        entries = json.loads(logs.output)
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0]["query_title"], "Canada check")
        self.assertEqual(entries[0]["result_count"], 1)
        self.assertEqual(entries[0]["query_type"], "advanced_search")
        self.assertEqual(entries[0]["days_remaining"], 30)

        text = self._invoke("logs", "--search", "canada")
        self.assertIn("Expires in: 30 day(s)", text.output)

    def test_logs_rejects_unknown_type(self) -> None:
        result = self._invoke("logs", "--type", "nope")
        self.assertEqual(result.exit_code, 2)

    def test_options_offline_uses_static_values(self) -> None:
        result = self._invoke("options", "trial_phase")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("phase_iii\tPhase III", result.output)


if __name__ == "__main__":
    unittest.main()

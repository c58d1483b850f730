"""
Unit Tests — Scenario Manifest
==============================
YAML manifest parsing and schema validation.
"""
import textwrap
from unittest.mock import patch

import pytest

from imagetest.parser.scenario_manifest import (
    ManifestError,
    ScenarioManifest,
    load_manifest,
    parse_manifest,
)

MANIFEST = textwrap.dedent("""
    scenarios:
      - name: ruby-22
        builder_image: ruby-22-centos7
        source: https://example/app
        output_image: app-test
        checks:
          - command: ruby --version
            expected_output: ruby 2.2
          - command: gem --version
            expected_output: "2."
      - builder_image: python-35-centos7
        source: https://example/py-app
        context_dir: web
        output_image: py-test
""")


class TestParseManifest:

    def test_parses_scenarios(self):
        manifest = parse_manifest(MANIFEST)
        assert len(manifest.scenarios) == 2

        ruby, python = manifest.scenarios
        assert ruby.display_name == "ruby-22"
        assert ruby.context_dir == ""
        assert [c.command for c in ruby.checks] == ["ruby --version", "gem --version"]
        assert python.display_name == "py-test"
        assert python.context_dir == "web"
        assert python.checks == []

    def test_empty_document(self):
        assert parse_manifest("") == ScenarioManifest()

    def test_invalid_yaml(self):
        with pytest.raises(ManifestError, match="invalid YAML"):
            parse_manifest("scenarios: [unclosed")

    def test_not_a_mapping(self):
        with pytest.raises(ManifestError):
            parse_manifest("- just\n- a list\n")

    def test_missing_required_field(self):
        with pytest.raises(ManifestError, match="invalid manifest"):
            parse_manifest("scenarios:\n  - source: https://example/app\n")

    def test_empty_expected_output_accepted(self):
        text = textwrap.dedent("""
            scenarios:
              - builder_image: b
                source: s
                output_image: o
                checks:
                  - command: ruby --version
                    expected_output: ""
        """)
        manifest = parse_manifest(text)
        assert manifest.scenarios[0].checks[0].expected_output == ""

    def test_empty_command_rejected(self):
        text = textwrap.dedent("""
            scenarios:
              - builder_image: b
                source: s
                output_image: o
                checks:
                  - command: ""
                    expected_output: ruby
        """)
        with pytest.raises(ManifestError):
            parse_manifest(text)


class TestScenarioChecks:

    def test_first_check_replaces_default(self, fake_runtime):
        ruby = parse_manifest(MANIFEST).scenarios[0]
        fake_runtime.command_output = b"ruby 2.2.2p95"
        with patch("imagetest.executor.container_runner.run_command", side_effect=fake_runtime):
            ruby.output_check()("app-test", "abc123")
        assert fake_runtime.calls_for("exec")[0][-1] == "ruby --version"

    def test_remaining_checks_are_extra(self):
        ruby = parse_manifest(MANIFEST).scenarios[0]
        assert len(ruby.extra_checks()) == 1

    def test_no_checks_keeps_default(self):
        python = parse_manifest(MANIFEST).scenarios[1]
        assert python.output_check() is None
        assert python.extra_checks() == []


class TestLoadManifest:

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "scenarios.yaml"
        path.write_text(MANIFEST)
        manifest = load_manifest(path)
        assert len(manifest.scenarios) == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(ManifestError, match="cannot read manifest"):
            load_manifest(tmp_path / "nope.yaml")

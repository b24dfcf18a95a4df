"""Tests for the ravenscan CLI."""

from __future__ import annotations

import json

from click.testing import CliRunner

from ravenscan.cli import main


def _repo(make_project, name: str, manifest) -> str:
    project = make_project(name, manifest=manifest)
    (project / ".git").mkdir()
    return str(project)


class TestScanCommand:
    def test_clean_project(self, make_project):
        root = make_project(manifest={"dependencies": {"react": "^18.0.0"}})
        result = CliRunner().invoke(main, ["scan", str(root)])
        assert result.exit_code == 0
        assert "All projects are clean" in result.output

    def test_infected_project(self, make_project):
        root = make_project(manifest={"dependencies": {"unused-imports": "^1.0.0"}})
        result = CliRunner().invoke(main, ["scan", str(root)])
        assert result.exit_code == 1
        assert "unused-imports" in result.output
        assert "Recommended actions:" in result.output

    def test_broken_manifest_exits_2(self, make_project):
        root = make_project(manifest="{ broken")
        result = CliRunner().invoke(main, ["scan", str(root)])
        assert result.exit_code == 2

    def test_no_manifest(self, tmp_path):
        result = CliRunner().invoke(main, ["scan", str(tmp_path)])
        assert result.exit_code == 0
        assert "No package.json files found" in result.output

    def test_signature_override(self, make_project, tmp_path):
        sig = tmp_path / "sig.json"
        sig.write_text(json.dumps({"packages": ["react"]}))
        root = make_project(manifest={"dependencies": {"react": "^18.0.0"}})
        result = CliRunner().invoke(main, ["--signatures", str(sig), "scan", str(root)])
        assert result.exit_code == 1

    def test_bad_signature_file(self, make_project, tmp_path):
        sig = tmp_path / "sig.json"
        sig.write_text("nope")
        root = make_project(manifest={})
        result = CliRunner().invoke(main, ["--signatures", str(sig), "scan", str(root)])
        assert result.exit_code == 2


class TestBatchCommand:
    def test_directory_json_report(self, make_project, tmp_path):
        _repo(make_project, "clean", {"dependencies": {"react": "^18.0.0"}})
        infected = _repo(make_project, "bad", {"dependencies": {"fq-ui": "1.0.0"}})
        out = tmp_path / "report.json"

        result = CliRunner().invoke(
            main,
            ["batch", str(tmp_path), "-w", "2", "-f", "json", "-o", str(out), "--summary-only"],
        )
        assert result.exit_code == 1
        payload = json.loads(out.read_text())
        assert payload["total"] == 2
        assert payload["infected"] == 1
        assert payload["infected_repositories"][0]["path"] == infected

    def test_list_file_csv(self, make_project, tmp_path):
        a = _repo(make_project, "a", {"dependencies": {"react": "^18.0.0"}})
        b = _repo(make_project, "b", "{ broken")
        listing = tmp_path / "repos.txt"
        listing.write_text(f"# repos\n{a}\n\n{b}\n")
        out = tmp_path / "report.csv"

        result = CliRunner().invoke(main, ["batch", str(listing), "-f", "csv", "-o", str(out)])
        assert result.exit_code == 2
        text = out.read_text()
        assert not text.endswith("\n\n")
        lines = text.splitlines()
        assert lines[0] == "Repository,Status,Findings"
        assert len(lines) == 3

    def test_progress_names_signature_set(self, make_project, tmp_path):
        _repo(make_project, "a", {"dependencies": {"react": "^18.0.0"}})
        result = CliRunner().invoke(main, ["batch", str(tmp_path)])
        assert result.exit_code == 0
        assert "Signature set: phantomraven-2025.10" in result.output
        assert "Progress: [1/1] a" in result.output

    def test_no_repositories(self, tmp_path):
        result = CliRunner().invoke(main, ["batch", str(tmp_path)])
        assert result.exit_code == 0

    def test_rejects_zero_workers(self, tmp_path):
        result = CliRunner().invoke(main, ["batch", str(tmp_path), "-w", "0"])
        assert result.exit_code != 0

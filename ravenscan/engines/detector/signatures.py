"""Signature store: known PhantomRaven indicators.

The built-in signature is loaded once per process and shared read-only by
every worker. :func:`load_signature` can merge an override file on top of it
so the data set can be updated without a code change.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path

from ravenscan.exceptions import SignatureError

SIGNATURE_VERSION = "phantomraven-2025.10"

MALICIOUS_PACKAGES = frozenset(
    {
        "fq-ui", "mocha-no-only", "ft-flow", "ul-inline", "jest-hoist",
        "jfrog-npm-actions-example", "@acme-types/acme-package", "react-web-api",
        "mourner", "unused-imports", "jira-ticket-todo-comment", "polyfill-corejs3",
        "polyfill-regenerator", "@aio-commerce-sdk/config-tsdown",
        "@aio-commerce-sdk/config-typedoc", "@aio-commerce-sdk/config-typescript",
        "@aio-commerce-sdk/config-vitest", "powerbi-visuals-sunburst",
        "@gitlab-lsp/pkg-1", "@gitlab-lsp/pkg-2", "@gitlab-lsp/workflow-api",
        "@gitlab-test/bun-v1", "@gitlab-test/npm-v10", "@gitlab-test/pnpm-v9",
        "@gitlab-test/yarn-v4", "acme-package", "add-module-exports",
        "add-shopify-header", "jsx-a11y", "prefer-object-spread", "preferred-import",
        "durablefunctionsmonitor", "durablefunctionsmonitor-vscodeext",
        "durablefunctionsmonitor.react", "e-voting-libraries-ui-kit",
        "named-asset-import", "chai-friendly", "aikido-module", "airbnb-babel",
        "airbnb-base-hf", "airbnb-base-typescript-prettier", "airbnb-bev",
        "airbnb-calendar", "airbnb-opentracing-javascript", "airbnb-scraper",
        "airbnb-types", "ais-sn-components", "goji-js-org",
        "google-cloud-functions-framework", "chromestatus-openapi", "elemefe",
        "labelbox-custom-ui", "rxjs-angular", "@apache-felix/felix-antora-ui",
        "@apache-netbeans/netbeans-antora-ui", "syntax-dynamic-import",
        "no-floating-promise", "no-only-tests", "@i22-td-smarthome/component-library",
        "vuejs-accessibility", "lfs-ui", "react-async-component-lifecycle-hooks",
        "eslint-comments", "wdr-beam", "lion-based-ui", "lion-based-ui-labs",
        "eslint-disable-next-line", "eslint-github-bot", "eslint-plugin-cli-microsoft365",
        "eslint-plugin-custom-eslint-rules", "@item-shop-data/client",
        "@msdyn365-commerce-marketplace/address-extensions",
        "@msdyn365-commerce-marketplace/tax-registration-numbers",
        "artifactregistry-login", "crowdstrike", "wm-tests-helper", "external-helpers",
        "react-important-stuff", "audio-game", "faltest", "only-warn",
        "op-cli-installer", "react-naming-convention", "skyscanner-with-prettier",
        "xo-form-components", "xo-login-components", "xo-page-components",
        "xo-shipping-change", "xo-shipping-options", "xo-title", "xo-tracking",
        "xo-validation", "badgekit-api-client", "important-stuff",
        "transform-es2015-modules-commonjs", "transform-merge-sibling-variables",
        "transform-react-constant-elements", "transform-react-jsx-source",
        "transform-react-remove-prop-types", "transform-strict-mode", "trezor-rollout",
        "filename-rules", "ing-web-es", "inline-react-svg", "ts-important-stuff",
        "firefly-sdk-js", "firefly-shared-js", "zeus-me-ops-tool",
        "zeus-mex-user-profile", "ts-migrate-example", "ts-react-important-stuff",
        "zohocrm-nodejs-sdk-3.0", "iot-cardboard-js", "pensions-portals-fe",
        "sort-class-members", "sort-keys-fix", "sort-keys-plus", "flowtype-errors",
        "twilio-react", "twilio-ts", "bernie-core", "bernie-plugin-l10n", "spaintest1",
        "typescript-compat", "typescript-sort-keys", "uach-retrofill",
    }
)

MALICIOUS_DOMAIN = "packages.storeartifact.com"
MALICIOUS_IP = "54.173.15.59"

# Checked in order; the first hit decides, so one script yields one finding.
SCRIPT_PATTERNS = (
    r"curl.*\|.*sh",
    r"wget.*\|.*sh",
    r"eval.*\$",
    r"base64.*-d",
    r"/tmp/.*\.sh",
    r"chmod.*\+x.*&&",
)


@dataclass(frozen=True)
class Signature:
    package_names: frozenset[str]
    domain: str
    ip: str
    script_patterns: tuple[re.Pattern[str], ...]
    version: str = SIGNATURE_VERSION


def _compile(patterns) -> tuple[re.Pattern[str], ...]:
    try:
        return tuple(re.compile(p) for p in patterns)
    except re.error as exc:
        raise SignatureError(f"invalid script pattern: {exc}") from exc


DEFAULT_SIGNATURE = Signature(
    package_names=MALICIOUS_PACKAGES,
    domain=MALICIOUS_DOMAIN,
    ip=MALICIOUS_IP,
    script_patterns=_compile(SCRIPT_PATTERNS),
)


def load_signature(path: str | Path | None = None) -> Signature:
    """Return the built-in signature, optionally overridden by a JSON file.

    The override file may contain any of ``packages`` (list), ``domain``,
    ``ip``, ``script_patterns`` (list) and ``version``. Missing keys keep
    their built-in values.

    Raises :class:`SignatureError` if the file is unreadable or malformed.
    """
    if path is None:
        return DEFAULT_SIGNATURE

    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SignatureError(f"cannot load signature file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SignatureError(f"signature file {path} must contain a JSON object")

    packages = data.get("packages")
    if packages is not None and not (
        isinstance(packages, list) and all(isinstance(p, str) for p in packages)
    ):
        raise SignatureError("'packages' must be a list of strings")
    patterns = data.get("script_patterns")
    if patterns is not None and not (
        isinstance(patterns, list) and all(isinstance(p, str) for p in patterns)
    ):
        raise SignatureError("'script_patterns' must be a list of strings")

    return Signature(
        package_names=frozenset(packages) if packages is not None else MALICIOUS_PACKAGES,
        domain=str(data.get("domain", MALICIOUS_DOMAIN)),
        ip=str(data.get("ip", MALICIOUS_IP)),
        script_patterns=(
            _compile(patterns) if patterns is not None else DEFAULT_SIGNATURE.script_patterns
        ),
        version=str(data.get("version", f"{SIGNATURE_VERSION}+{Path(path).name}")),
    )

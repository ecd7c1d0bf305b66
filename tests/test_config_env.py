import json
from pathlib import Path

import pytest

from cfml_ls.config import CONFIG_FILENAME, CFMLLSConfig, DiagnosticSettings, load_config


def _write_config(tmp_path: Path, data) -> Path:
    config_path = tmp_path / CONFIG_FILENAME
    config_path.write_text(json.dumps(data))
    return config_path


def test_missing_config_uses_defaults(tmp_path: Path):
    cfg, warnings = load_config(tmp_path)

    assert warnings == []
    assert cfg.diagnostics == DiagnosticSettings()
    assert cfg.hover.enabled


def test_load_config_values(tmp_path: Path):
    _write_config(
        tmp_path,
        {
            "diagnostics": {"enabled": False, "severity": "Warning", "scriptExtensions": [".cfc", ".cfs"]},
            "hover": {"enabled": False},
        },
    )

    cfg, warnings = load_config(tmp_path)

    assert warnings == []
    assert not cfg.diagnostics.enabled
    assert cfg.diagnostics.severity == "warning"
    assert cfg.diagnostics.script_extensions == (".cfc", ".cfs")
    assert not cfg.hover.enabled


def test_load_config_env_substitution(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("CFML_GLOBAL", "appConfig")
    monkeypatch.setenv("CFML_HELPERS", "helpers")
    _write_config(tmp_path, {"diagnostics": {"extraKnownNames": ["${CFML_GLOBAL}", "$CFML_HELPERS"]}})

    cfg, warnings = load_config(tmp_path)

    assert warnings == []
    assert cfg.diagnostics.extra_known_names == ("appConfig", "helpers")


def test_load_config_workspace_root_substitution(tmp_path: Path):
    _write_config(tmp_path, {"diagnostics": {"extraKnownNames": ["${workspaceRoot}"]}})

    cfg, warnings = load_config(tmp_path)

    assert warnings == []
    assert cfg.diagnostics.extra_known_names == (str(tmp_path),)


def test_load_config_missing_env_warns(tmp_path: Path):
    _write_config(
        tmp_path,
        {
            "diagnostics": {
                "severity": "${MISSING_CFML_SEVERITY}",
                "extraKnownNames": ["$MISSING_CFML_NAME"],
            },
        },
    )

    cfg, warnings = load_config(tmp_path)

    assert any("MISSING_CFML_SEVERITY" in warning for warning in warnings)
    assert any("MISSING_CFML_NAME" in warning for warning in warnings)
    assert cfg.diagnostics.severity == DiagnosticSettings.severity
    assert cfg.diagnostics.extra_known_names == ()


def test_invalid_json_warns(tmp_path: Path):
    (tmp_path / CONFIG_FILENAME).write_text("{not json")

    cfg, warnings = load_config(tmp_path)

    assert len(warnings) == 1
    assert cfg.diagnostics == DiagnosticSettings()


def test_invalid_sections_warn(tmp_path: Path):
    _write_config(tmp_path, {"diagnostics": [], "hover": "yes"})

    cfg, warnings = load_config(tmp_path)

    assert len(warnings) == 2
    assert cfg.diagnostics.enabled


def test_treats_tagless_components_as_script(tmp_path: Path):
    cfg = CFMLLSConfig.default(tmp_path)

    assert cfg.treats_as_script("/src/Widget.cfc", "component {\n}")
    assert not cfg.treats_as_script("/src/Widget.cfc", "<cfcomponent>\n</cfcomponent>")
    assert not cfg.treats_as_script("/src/index.cfm", "x = 1;")

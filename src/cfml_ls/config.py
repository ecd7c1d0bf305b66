from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Tuple

CONFIG_FILENAME = ".cfml-ls.json"
SEVERITY_LEVELS = ("error", "warning", "info")

log = logging.getLogger(__name__)

_ENV_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


@dataclass
class DiagnosticSettings:
    enabled: bool = True
    severity: str = "error"
    extra_known_names: Tuple[str, ...] = ()
    script_extensions: Tuple[str, ...] = (".cfc",)


@dataclass
class HoverSettings:
    enabled: bool = True


@dataclass
class CFMLLSConfig:
    workspace_root: Path
    diagnostics: DiagnosticSettings = field(default_factory=DiagnosticSettings)
    hover: HoverSettings = field(default_factory=HoverSettings)

    @classmethod
    def default(cls, workspace_root: Path) -> "CFMLLSConfig":
        return cls(workspace_root=workspace_root)

    def treats_as_script(self, path: str, source: str) -> bool:
        """Tagless files with a script extension are analysed as one script block."""
        if not any(path.lower().endswith(ext.lower()) for ext in self.diagnostics.script_extensions):
            return False
        return "<cf" not in source.lower()


def load_config(workspace_root: Path) -> Tuple[CFMLLSConfig, List[str]]:
    config = CFMLLSConfig.default(workspace_root)
    warnings: list[str] = []
    path = workspace_root / CONFIG_FILENAME
    if not path.exists():
        return config, warnings

    try:
        raw = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        warnings.append(f"Failed to read {path}: {exc}")
        return config, warnings
    if not isinstance(raw, dict):
        warnings.append(f"{path} must contain a JSON object")
        return config, warnings

    data = _substitute(raw, workspace_root, warnings)
    config.diagnostics = _diagnostic_settings(data.get("diagnostics"), warnings)
    config.hover = _hover_settings(data.get("hover"), warnings)
    log.debug("Loaded config from %s", path)
    return config, warnings


def _diagnostic_settings(data: Any, warnings: List[str]) -> DiagnosticSettings:
    settings = DiagnosticSettings()
    if data is None:
        return settings
    if not isinstance(data, dict):
        warnings.append("'diagnostics' must be an object; using defaults")
        return settings

    enabled = data.get("enabled")
    if isinstance(enabled, bool):
        settings.enabled = enabled

    severity = data.get("severity")
    if isinstance(severity, str) and severity.lower() in SEVERITY_LEVELS:
        settings.severity = severity.lower()
    elif severity is not None:
        warnings.append(f"Unknown diagnostic severity '{severity}'; expected one of {', '.join(SEVERITY_LEVELS)}")

    names = _string_list(data.get("extraKnownNames"), "diagnostics.extraKnownNames", warnings)
    if names is not None:
        settings.extra_known_names = tuple(names)

    extensions = _string_list(data.get("scriptExtensions"), "diagnostics.scriptExtensions", warnings)
    if extensions is not None:
        settings.script_extensions = tuple(extensions)
    return settings


def _hover_settings(data: Any, warnings: List[str]) -> HoverSettings:
    settings = HoverSettings()
    if data is None:
        return settings
    if not isinstance(data, dict):
        warnings.append("'hover' must be an object; using defaults")
        return settings
    enabled = data.get("enabled")
    if isinstance(enabled, bool):
        settings.enabled = enabled
    return settings


def _string_list(value: Any, label: str, warnings: List[str]) -> List[str] | None:
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        warnings.append(f"'{label}' must be a list of strings")
        return None
    # Entries that expanded to an empty string (missing env var) are dropped.
    return [item for item in value if item]


def _substitute(value: Any, workspace_root: Path, warnings: List[str]) -> Any:
    if isinstance(value, dict):
        return {key: _substitute(item, workspace_root, warnings) for key, item in value.items()}
    if isinstance(value, list):
        return [_substitute(item, workspace_root, warnings) for item in value]
    if isinstance(value, str):
        return _expand(value, workspace_root, warnings)
    return value


def _expand(text: str, workspace_root: Path, warnings: List[str]) -> str:
    missing: list[str] = []

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1) or match.group(2)
        if name == "workspaceRoot":
            return str(workspace_root)
        resolved = os.environ.get(name)
        if resolved is None:
            missing.append(name)
            return ""
        return resolved

    expanded = _ENV_RE.sub(_replace, text)
    for name in dict.fromkeys(missing):
        warnings.append(f"Environment variable '{name}' is not set (referenced in {text!r})")
    return expanded


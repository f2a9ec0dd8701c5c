"""
Engine configuration with a layered loader.

Precedence (lowest to highest):
    defaults < config file (YAML) < profile < env vars < explicit overrides
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from genui.schemas import MAX_SUGGESTIONS
from genui.types import SchemaVersion


@dataclass
class LLMConfig:
    name: str = "openai-compat"
    model: str = "gpt-4o"
    api_base: str = "https://api.openai.com/v1"
    api_key_env: str = "OPENAI_API_KEY"
    temperature: float = 0.0
    timeout_seconds: int = 120
    max_retries: int = 2

    @property
    def api_key(self) -> str | None:
        return os.environ.get(self.api_key_env) if self.api_key_env else None


@dataclass
class EngineSection:
    schema_version: str = SchemaVersion.V1.value
    suggestion_count: int = MAX_SUGGESTIONS
    native_decision_tool: bool = True


@dataclass
class EngineConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    engine: EngineSection = field(default_factory=EngineSection)
    profiles: dict[str, dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


def _apply_dotpath(obj: Any, dotpath: str, value: Any) -> None:
    parts = dotpath.split(".")
    for part in parts[:-1]:
        obj = getattr(obj, part)
    if not hasattr(obj, parts[-1]):
        raise KeyError(f"Unknown config key: {dotpath}")
    setattr(obj, parts[-1], value)


def _deep_merge(base: dict, overlay: dict) -> dict:
    merged = dict(base)
    for k, v in overlay.items():
        if k in merged and isinstance(merged[k], dict) and isinstance(v, dict):
            merged[k] = _deep_merge(merged[k], v)
        else:
            merged[k] = v
    return merged


def _coerce(value: str, target_type: type) -> Any:
    if target_type is bool:
        return value.lower() in ("1", "true", "yes", "on")
    if target_type is int:
        return int(value)
    if target_type is float:
        return float(value)
    return value


def _build_section(cls: type, raw: dict) -> Any:
    """Build a section dataclass, ignoring unknown keys."""
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in raw.items() if k in known})


_ENV_MAP: dict[str, tuple[str, type]] = {
    "GENUI_LLM_NAME":              ("llm.name", str),
    "GENUI_LLM_MODEL":             ("llm.model", str),
    "GENUI_LLM_API_BASE":          ("llm.api_base", str),
    "GENUI_LLM_API_KEY_ENV":       ("llm.api_key_env", str),
    "GENUI_LLM_TEMPERATURE":       ("llm.temperature", float),
    "GENUI_LLM_TIMEOUT":           ("llm.timeout_seconds", int),
    "GENUI_LLM_MAX_RETRIES":       ("llm.max_retries", int),
    "GENUI_SCHEMA_VERSION":        ("engine.schema_version", str),
    "GENUI_SUGGESTION_COUNT":      ("engine.suggestion_count", int),
    "GENUI_NATIVE_DECISION_TOOL":  ("engine.native_decision_tool", bool),
}


def load_config(
    config_path: str | Path | None = None,
    *,
    profile: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> EngineConfig:
    """
    Build an EngineConfig by layering sources in precedence order.

    Parameters
    ----------
    config_path : path to a YAML config file (optional, ignored if missing)
    profile : name of a profile under ``profiles:`` to overlay
    overrides : dotpath -> value, applied last (e.g. ``{"llm.model": "x"}``)
    """
    raw: dict[str, Any] = {}

    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.is_file():
            with p.open("r", encoding="utf-8") as f:
                raw = _deep_merge(raw, yaml.safe_load(f) or {})

    if profile:
        profile_data = raw.get("profiles", {}).get(profile)
        if profile_data is None:
            raise KeyError(f"Unknown profile: {profile}")
        raw = _deep_merge(raw, profile_data)

    cfg = EngineConfig(
        llm=_build_section(LLMConfig, raw.get("llm", {})),
        engine=_build_section(EngineSection, raw.get("engine", {})),
        profiles=raw.get("profiles", {}),
    )

    for env_var, (dotpath, target_type) in _ENV_MAP.items():
        val = os.environ.get(env_var)
        if val is not None:
            _apply_dotpath(cfg, dotpath, _coerce(val, target_type))

    for dotpath, value in (overrides or {}).items():
        _apply_dotpath(cfg, dotpath, value)

    # Validates the version string early.
    SchemaVersion(cfg.engine.schema_version)
    return cfg

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from glossator.core.errors import ConfigurationError


@dataclass(frozen=True)
class AppPaths:
    project_root: Path
    glossator_dir: Path
    db_path: Path


@dataclass(frozen=True)
class ProviderConfig:
    base_url: str
    model: str
    api_key: str | None
    timeout_seconds: float
    temperature: float


DEFAULT_GLOSSATOR_DIRNAME = ".glossator"
DEFAULT_LLM_BASE_URL = "https://api.openai.com/v1"
DEFAULT_LLM_MODEL = "gpt-4o-mini"
DEFAULT_LLM_TIMEOUT_SECONDS = 30.0
DEFAULT_LLM_TEMPERATURE = 0.2


def load_paths(project_root: Path | None = None) -> AppPaths:
    root = (project_root or Path.cwd()).expanduser().resolve()

    home_raw = os.getenv("GLOSSATOR_HOME")
    if home_raw:
        glossator_dir = Path(home_raw).expanduser().resolve()
    else:
        glossator_dir = root / DEFAULT_GLOSSATOR_DIRNAME

    return AppPaths(
        project_root=root,
        glossator_dir=glossator_dir,
        db_path=glossator_dir / "glossator.db",
    )


def load_provider_config() -> ProviderConfig:
    base_url = (os.getenv("GLOSSATOR_LLM_BASE_URL") or DEFAULT_LLM_BASE_URL).strip().rstrip("/")
    if not base_url.startswith(("http://", "https://")):
        raise ConfigurationError(f"GLOSSATOR_LLM_BASE_URL must be an http(s) URL: {base_url}")

    api_key = os.getenv("GLOSSATOR_LLM_API_KEY") or os.getenv("OPENAI_API_KEY")

    return ProviderConfig(
        base_url=base_url,
        model=(os.getenv("GLOSSATOR_LLM_MODEL") or DEFAULT_LLM_MODEL).strip(),
        api_key=api_key.strip() if api_key else None,
        timeout_seconds=_read_positive_float_env("GLOSSATOR_LLM_TIMEOUT_SECONDS", DEFAULT_LLM_TIMEOUT_SECONDS),
        temperature=_read_float_env("GLOSSATOR_LLM_TEMPERATURE", DEFAULT_LLM_TEMPERATURE),
    )


def _read_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _read_positive_float_env(name: str, default: float) -> float:
    value = _read_float_env(name, default)
    return value if value > 0 else default

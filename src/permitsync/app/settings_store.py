from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from permitsync.app.permit_transport import (
    DEFAULT_PERMIT_API_TIMEOUT_SECONDS,
    DEFAULT_PERMIT_API_URL,
    DEFAULT_PERMIT_COLLECTION_PATH,
    PermitApiConfig,
)


_APP_SETTINGS_DIRNAME = "permitsync"
_SETTINGS_FILENAME = "settings.json"
_SETTINGS_PATH_ENV = "PERMITSYNC_SETTINGS_PATH"
_PERMIT_API_URL_KEY = "permitApiUrl"
_PERMIT_COLLECTION_PATH_KEY = "permitCollectionPath"
_PERMIT_API_TIMEOUT_KEY = "permitApiTimeoutSeconds"


def _env_text(name: str) -> str:
    return str(os.environ.get(name, "") or "").strip()


def _settings_path_candidates() -> list[Path]:
    override = _env_text(_SETTINGS_PATH_ENV)
    if override:
        return [Path(override).expanduser()]

    if os.name == "nt":
        layout = (
            ("APPDATA", (_APP_SETTINGS_DIRNAME, "config")),
            ("LOCALAPPDATA", (_APP_SETTINGS_DIRNAME, "config")),
        )
    else:
        layout = (
            ("XDG_CONFIG_HOME", (_APP_SETTINGS_DIRNAME,)),
            ("HOME", (".config", _APP_SETTINGS_DIRNAME)),
        )
    candidates: list[Path] = []
    for env_name, parts in layout:
        root = _env_text(env_name)
        if root:
            candidates.append(Path(root).joinpath(*parts, _SETTINGS_FILENAME))
    return candidates


def _resolve_settings_path() -> Path:
    candidates = _settings_path_candidates()
    if candidates:
        return candidates[0]
    return Path.cwd() / ".permitsync" / _SETTINGS_FILENAME


def settings_path() -> Path:
    return _resolve_settings_path()


def load_settings() -> dict[str, Any]:
    path = settings_path()
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def save_settings(settings: dict[str, Any]) -> None:
    path = settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings, indent=2), encoding="utf-8")


def load_permit_api_config() -> PermitApiConfig:
    settings = load_settings()
    return PermitApiConfig.from_mapping(
        {
            "base_url": settings.get(_PERMIT_API_URL_KEY, DEFAULT_PERMIT_API_URL),
            "collection_path": settings.get(
                _PERMIT_COLLECTION_PATH_KEY,
                DEFAULT_PERMIT_COLLECTION_PATH,
            ),
            "timeout_seconds": settings.get(
                _PERMIT_API_TIMEOUT_KEY,
                DEFAULT_PERMIT_API_TIMEOUT_SECONDS,
            ),
        }
    )


def save_permit_api_config(config: PermitApiConfig) -> PermitApiConfig:
    normalized = PermitApiConfig.from_mapping(config.to_mapping())
    settings = load_settings()
    settings[_PERMIT_API_URL_KEY] = normalized.base_url
    settings[_PERMIT_COLLECTION_PATH_KEY] = normalized.collection_path
    settings[_PERMIT_API_TIMEOUT_KEY] = normalized.timeout_seconds
    save_settings(settings)
    return normalized

import os
from typing import Any, TypedDict

import orjson


class Settings(TypedDict):
    socket_path: str
    initial_tag: str
    log_level: str


DEFAULTS: Settings = {
    "socket_path": "/tmp/swayless.sock",
    "initial_tag": "1",
    "log_level": "INFO",
}


def default_settings_path() -> str:
    if path := os.environ.get("SWAYLESS_CONFIG"):
        return os.path.expanduser(path)
    settings_path = os.path.join(
        os.getenv("XDG_CONFIG_HOME", "~/.config"), "swayless", "settings.json"
    )
    return os.path.expanduser(settings_path)


def ensure_default_settings_exist(destination: str) -> None:
    if os.path.exists(destination):
        return

    os.makedirs(os.path.dirname(destination), exist_ok=True)
    template = os.path.join(os.path.dirname(__file__), "settings.json")
    with open(template, "rb") as src, open(destination, "wb") as dest:
        dest.write(src.read())


def parse_settings(raw: dict[str, Any]) -> Settings:
    settings: Settings = {**DEFAULTS}
    for key, default in DEFAULTS.items():
        if key not in raw:
            continue
        if not isinstance(raw[key], type(default)) or not raw[key]:
            raise ValueError(f"Setting {key} must be a non-empty string: {raw[key]!r}")
        settings[key] = raw[key]
    return settings


def load_settings(settings_path: str | None = None) -> Settings:
    """
    Reads the settings file. Without an explicit path the default location is
    used, and populated from the packaged template on first run.
    """
    if settings_path is None:
        settings_path = default_settings_path()
        ensure_default_settings_exist(settings_path)
    if not os.path.exists(settings_path):
        raise FileNotFoundError(f"Path to file does not exist: {settings_path}")

    with open(settings_path, "rb") as f:
        raw = orjson.loads(f.read())
    if not isinstance(raw, dict):
        raise ValueError(f"Settings must be a JSON object: {settings_path}")
    return parse_settings(raw)

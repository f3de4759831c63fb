"""
Configuration of the upload tool

Values come from a JSON configuration file, then the environment, then
command-line flags; later sources win.
"""

import json
import os
from dataclasses import dataclass, fields, replace

from .errors import invalid_value

# JSON configuration file keys
JSON_KEYS = {
    "slack_team_name": "team_name",
    "slack_emoji_cookie": "cookie",
    "slack_emoji_directory": "directory",
    "slack_emoji_alias_prefix": "prefix",
    "slack_emoji_alias_suffix": "suffix",
    "slack_emoji_alias_taken_prefix": "taken_prefix",
    "slack_emoji_alias_taken_suffix": "taken_suffix",
}

ENVIRONMENT_KEYS = {
    "SLACK_TEAM": "team_name",
    "SLACK_COOKIE": "cookie",
    "EMOJI_NAME_PREFIX": "prefix",
    "EMOJI_NAME_SUFFIX": "suffix",
}


@dataclass(frozen=True)
class Configuration:
    team_name: str = ""
    cookie: str = ""
    directory: str = ""
    prefix: str = ""
    suffix: str = ""
    taken_prefix: str = ""
    taken_suffix: str = ""

    @classmethod
    def from_mapping(cls, mapping):
        values = {}
        for key, field_name in JSON_KEYS.items():
            value = mapping.get(key)
            if value is None:
                continue
            if not isinstance(value, str):
                raise invalid_value(f"configuration key {key} must be a string, got {value!r}")
            values[field_name] = value
        return cls(**values)

    @classmethod
    def from_json_file(cls, path):
        """Read a configuration from a .json file"""
        if not path:
            raise invalid_value("configuration file path is empty")
        if os.path.splitext(path)[1] != ".json":
            raise invalid_value(f"unsupported configuration file extension: {path}")

        try:
            with open(path, "r") as f:
                content = f.read()
        except OSError as exc:
            raise invalid_value(f"reading configuration file failed: {path}: {exc}") from exc

        if not content.strip():
            raise invalid_value(f"configuration file is empty: {path}")
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise invalid_value(f"parsing configuration file failed: {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise invalid_value(f"configuration file must hold a JSON object: {path}")
        return cls.from_mapping(data)

    @classmethod
    def from_environment(cls, environ=None):
        environ = os.environ if environ is None else environ
        values = {field_name: environ[key] for key, field_name in ENVIRONMENT_KEYS.items() if environ.get(key)}
        return cls(**values)

    def merged(self, **overrides):
        """Return a copy with every override that is not None applied"""
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})

    def require(self, *names):
        for name in names:
            if not getattr(self, name):
                raise invalid_value(f"required configuration value {name} is empty")
        return self

    def as_overrides(self):
        """Non-empty values, suitable for merged()"""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name)}


def load_configuration(path=None, environ=None, **overrides):
    """Combine file, environment and explicit values into one configuration"""
    configuration = Configuration.from_json_file(path) if path else Configuration()
    configuration = configuration.merged(**Configuration.from_environment(environ).as_overrides())
    return configuration.merged(**overrides)

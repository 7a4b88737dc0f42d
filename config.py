"""
Configuration loading for jiratime.

Settings come from a JSON file (default: <user config dir>/jiratime.json) with keys
baseurl, username, userkey and optional workers. Environment variables JIRATIME_BASEURL,
JIRATIME_USERNAME, JIRATIME_USERKEY and JIRATIME_WORKERS override the file.
"""

import json
import os
from typing import Optional, Dict, Any

API_PATH = "/rest/api/3"
DEFAULT_WORKERS = 20

ENV_OVERRIDES = {
    'baseurl': 'JIRATIME_BASEURL',
    'username': 'JIRATIME_USERNAME',
    'userkey': 'JIRATIME_USERKEY',
    'workers': 'JIRATIME_WORKERS',
}
REQUIRED_KEYS = ('baseurl', 'username', 'userkey')


class ConfigError(ValueError):
    """Config file unreadable, malformed or missing required values."""


def user_config_dir() -> str:
    """Same lookup as XDG: $XDG_CONFIG_HOME, else ~/.config."""
    return os.getenv('XDG_CONFIG_HOME') or os.path.join(os.path.expanduser('~'), '.config')


def default_config_path() -> str:
    return os.path.join(user_config_dir(), 'jiratime.json')


class Config:
    def __init__(self, baseurl: str, username: str, userkey: str, workers: int = DEFAULT_WORKERS):
        self.baseurl = baseurl
        self.username = username
        self.userkey = userkey
        self.workers = workers

    @property
    def api_url(self) -> str:
        return self.baseurl.rstrip('/') + API_PATH

    def __repr__(self):
        # never echo the key
        return f"Config(baseurl={self.baseurl!r}, username={self.username!r}, workers={self.workers})"


def _read_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read config {path}: {e}") from e
    except ValueError as e:
        raise ConfigError(f"Failed to decode config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a JSON object")
    # keys are case-insensitive: Baseurl and baseurl both work
    return {str(k).lower(): v for k, v in data.items()}


def _parse_workers(value: Any) -> int:
    """Worker count from the file or environment; absent, empty or 0 means DEFAULT_WORKERS."""
    if value is None or value == '':
        return DEFAULT_WORKERS
    try:
        workers = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"workers must be an integer, got {value!r}") from e
    if workers == 0:
        return DEFAULT_WORKERS
    if workers < 0:
        raise ConfigError(f"workers must be > 0, got {workers}")
    return workers


def load_config(path: Optional[str] = None, env: Optional[Dict[str, str]] = None, require_file: bool = True) -> Config:
    """Load config from path (or the default location) and apply environment overrides.

    With require_file=False a missing file is tolerated so environment-only setups work.
    """
    env = os.environ if env is None else env
    path = path or default_config_path()
    if os.path.exists(path) or require_file:
        values = _read_file(path)
    else:
        values = {}

    for key, var in ENV_OVERRIDES.items():
        if env.get(var):
            values[key] = env[var]

    missing = [k for k in REQUIRED_KEYS if not values.get(k)]
    if missing:
        raise ConfigError("Not defined in config: " + ",".join(missing))

    return Config(
        baseurl=str(values['baseurl']),
        username=str(values['username']),
        userkey=str(values['userkey']),
        workers=_parse_workers(values.get('workers')),
    )

"""Environment variable expansion for configuration values."""
import os
import re
from typing import Any

# ${VAR}, ${VAR:default} and $VAR
_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def expand_env_vars(value: Any) -> Any:
    """
    Expand environment variables in strings, recursively through dicts and lists.

    Unknown variables without a default are left untouched. Non-string
    scalars are returned unchanged.
    """
    if isinstance(value, str):
        return _ENV_PATTERN.sub(_replace, value)
    if isinstance(value, dict):
        return {key: expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def _replace(match: "re.Match[str]") -> str:
    name = match.group(1) or match.group(3)
    default = match.group(2)
    if name in os.environ:
        return os.environ[name]
    if default is not None:
        return default
    return match.group(0)

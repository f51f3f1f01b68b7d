"""Output formatting for the CLI."""
import json
from typing import Any

import yaml


def to_printable(data: Any) -> Any:
    """Replace bytes, such as user data, with text so every format can render them."""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    if isinstance(data, dict):
        return {key: to_printable(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [to_printable(item) for item in data]
    return data


def format_output(data: Any, format_type: str) -> str:
    """Format data according to the specified format type."""
    data = to_printable(data)
    if format_type == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    return json.dumps(data, indent=2, default=str)

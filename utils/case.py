"""
Case conversion between storage (snake_case) and the frontend's camelCase payloads.
Uses Pydantic's alias_generators so keys match the step schemas' aliases exactly.
"""
from collections.abc import Container, Iterable
from typing import Any

from pydantic.alias_generators import to_camel


def dict_keys_to_camel(obj: Any) -> Any:
    """Recursively convert dict keys from snake_case to camelCase for API responses."""
    if isinstance(obj, dict):
        return {to_camel(k): dict_keys_to_camel(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [dict_keys_to_camel(x) for x in obj]
    return obj


def row_to_camel(row: Any, fields: Iterable[str], verbatim: Container[str] = ()) -> dict[str, Any]:
    """
    Pick `fields` off an ORM row and camelCase their names. Nested JSON values are
    camelCased too, except for fields in `verbatim`, which hold client data as sent.
    """
    out = {}
    for name in fields:
        value = getattr(row, name)
        out[to_camel(name)] = value if name in verbatim else dict_keys_to_camel(value)
    return out

from typing import Any, Mapping
from urllib.parse import quote

from pydantic.alias_generators import to_snake


# ---------- query string -------------

def _encode_component(value: Any) -> str:
    if isinstance(value, bool):
        value = "true" if value else "false"
    # same reserved set as JavaScript's encodeURIComponent
    return quote(str(value), safe="-_.!~*'()")


def encode_params(params: Mapping[str, Any] | None) -> str:
    """Flat mapping -> ``k=v&k=v`` keeping insertion order, ``None`` values dropped."""
    if not params:
        return ""
    return "&".join(
        f"{_encode_component(k)}={_encode_component(v)}"
        for k, v in params.items()
        if v is not None
    )


# ---------- key casing -------------

def snake_case_keys(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {to_snake(k) if isinstance(k, str) else k: snake_case_keys(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [snake_case_keys(v) for v in obj]
    return obj

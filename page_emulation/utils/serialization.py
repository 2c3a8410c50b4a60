"""camelCase helpers for tool arguments and API payloads.

Tool arguments arrive from the controller in camelCase
(``throttlingOption``, ``customUserAgent``) while the models
use snake_case attribute names.
"""

from __future__ import annotations

from typing import Any

import pydantic


def snake_to_camel(name: str) -> str:
    """Convert a snake_case identifier such as ``"custom_user_agent"`` to camelCase."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def to_camel_dict(model: pydantic.BaseModel) -> dict[str, Any]:
    """Dump *model* with camelCase keys, recursing into nested models."""
    return model.model_dump(by_alias=True, mode="json")

"""JSON type aliases used by Problem Details and log formatting."""

from __future__ import annotations

__all__ = [
    "JsonPrimitive",
    "JsonValue",
]

type JsonPrimitive = str | int | float | bool | None

type JsonValue = JsonPrimitive | dict[str, JsonValue] | list[JsonValue]

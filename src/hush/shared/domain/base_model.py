"""
Base domain model with camelCase JSON compatibility.

Analysis results are exchanged in the ESLint JSON shape (filePath, ruleId,
errorCount, ...). Python code works with snake_case fields; this base class
converts between the two.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Type, TypeVar, get_args, get_origin, get_type_hints

T = TypeVar("T", bound="BaseDomainModel")

_SCALARS: Dict[Any, tuple] = {
    str: (str,),
    int: (int,),
    float: (int, float),
    bool: (bool,),
}


def to_camel_case(snake_str: str) -> str:
    """
    Convert snake_case to camelCase.

    Examples:
        >>> to_camel_case("file_path")
        'filePath'
        >>> to_camel_case("fatal_error_count")
        'fatalErrorCount'
    """
    components = snake_str.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def to_snake_case(camel_str: str) -> str:
    """
    Convert camelCase to snake_case.

    Examples:
        >>> to_snake_case("ruleId")
        'rule_id'
    """
    result = [camel_str[0].lower()]
    for char in camel_str[1:]:
        if char.isupper():
            result.extend(["_", char.lower()])
        else:
            result.append(char)
    return "".join(result)


def _strip_optional(annotation: Any) -> Any:
    """Return X for `X | None` / Optional[X], the annotation otherwise."""
    if get_origin(annotation) in (typing.Union, types.UnionType):
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _decode(annotation: Any, value: Any) -> Any:
    annotation = _strip_optional(annotation)

    if isinstance(annotation, type) and issubclass(annotation, BaseDomainModel):
        if not isinstance(value, dict):
            raise ValueError(f"Expected an object for {annotation.__name__}, got {type(value).__name__}")
        return annotation.from_json(value)

    if isinstance(annotation, type) and issubclass(annotation, Enum):
        if isinstance(value, bool):
            raise ValueError(f"Expected {annotation.__name__}, got bool")
        return annotation(value)

    if get_origin(annotation) is list:
        if not isinstance(value, list):
            raise ValueError(f"Expected a list, got {type(value).__name__}")
        (item_type,) = get_args(annotation) or (Any,)
        return [_decode(item_type, item) for item in value]

    if annotation in _SCALARS:
        # bool is an int subclass; JSON true/false must not pass as a number
        accepted = _SCALARS[annotation]
        if not isinstance(value, accepted) or (annotation is not bool and isinstance(value, bool)):
            raise ValueError(f"Expected {annotation.__name__}, got {type(value).__name__}")

    return value


@dataclass
class BaseDomainModel:
    """
    Base class for JSON-exchanged domain models.

    - to_json() serializes to camelCase
    - from_json() deserializes camelCase JSON, including nested models
    - Enum values are serialized by value
    - Fields declared with init=False are derived and only ever written
    """

    def to_json(self) -> Dict[str, Any]:
        """
        Serialize to camelCase JSON.

        Returns:
            Dictionary with camelCase keys and Enum values unwrapped
        """
        result: Dict[str, Any] = {}

        for field in fields(self):
            value = getattr(self, field.name)
            json_key = to_camel_case(field.name)

            if value is None:
                continue

            if isinstance(value, Enum):
                result[json_key] = value.value
            elif isinstance(value, list):
                result[json_key] = [
                    item.to_json() if isinstance(item, BaseDomainModel) else item
                    for item in value
                ]
            elif isinstance(value, BaseDomainModel):
                result[json_key] = value.to_json()
            else:
                result[json_key] = value

        return result

    @classmethod
    def from_json(cls: Type[T], data: Dict[str, Any]) -> T:
        """
        Deserialize from camelCase JSON.

        Unknown keys are ignored so newer producers stay readable.

        Raises:
            ValueError: If required fields are missing or have the wrong shape
        """
        hints = get_type_hints(cls)
        kwargs: Dict[str, Any] = {}

        for field in fields(cls):
            if not field.init:
                continue

            json_key = to_camel_case(field.name)
            if json_key not in data:
                if field.default is not dataclasses.MISSING or field.default_factory is not dataclasses.MISSING:
                    continue
                raise ValueError(f"Missing required field: {json_key}")

            value = data[json_key]
            kwargs[field.name] = None if value is None else _decode(hints[field.name], value)

        return cls(**kwargs)

"""Conversion between external (camelCase) and native (snake_case) field names."""

import re

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?<!_)(?=[A-Z])")


def camel_to_snake(camel: str) -> str:
    """
    Convert a camelCase name to snake_case.

    Already snake_case input is returned unchanged.

    Example:
        >>> camel_to_snake("createdAt")
        'created_at'
    """
    return _CAMEL_BOUNDARY.sub("_", camel).lower()


def snake_to_camel(snake: str) -> str:
    """
    Convert a snake_case name to camelCase.

    Leading underscores (such as MongoDB's ``_id``) are preserved.

    Example:
        >>> snake_to_camel("created_at")
        'createdAt'
    """
    stripped = snake.lstrip("_")
    prefix = snake[: len(snake) - len(stripped)]
    head, *rest = stripped.split("_")
    return prefix + head + "".join(part[:1].upper() + part[1:] for part in rest)

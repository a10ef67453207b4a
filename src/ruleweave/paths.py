"""
Field path resolution.

Constraint fields are either plain property names (optionally dotted) or
JSONPath-lite expressions rooted at `$`:

    $.user.name        property access
    $.items[0]         array index
    $.items[*].name    wildcard, maps the rest of the path over each element
    $..target          recursive descent, first match depth-first
    $.items[?(@.x)]    filter, selects every element (not interpreted)

A path that does not exist, or runs through a null, resolves to MISSING
instead of raising.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from .core.config import get_settings
from .core.constants import MISSING, SELF_REFERENCE_MARKER

_EXPRESSION_RE = re.compile(r"\$[^\s,()]+(?:\[[^\[\]]*]|\([^()]*\))*")
_SIMPLE_PATH_RE = re.compile(r"^\$\.\w+$")


@dataclass
class PathSegment:
    """One step of a parsed path."""

    type: str  # property, index, wildcard, recursive, filter
    value: str | int | None
    raw: str


@dataclass
class PathValidation:
    """Result of a syntactic path check."""

    valid: bool
    error: str | None = None


# =============================================================================
# Parsing
# =============================================================================


def _read_name(path: str, start: int) -> int:
    """Return the index where a bare property name starting at `start` ends."""
    end = start
    while end < len(path) and path[end] not in ".[":
        end += 1
    return end


def _find_closing_bracket(path: str, start: int) -> int:
    depth = 0
    for i in range(start, len(path)):
        if path[i] == "[":
            depth += 1
        elif path[i] == "]":
            depth -= 1
            if depth == 0:
                return i
    return -1


def _bracket_segment(content: str, raw: str) -> PathSegment:
    if content == "*":
        return PathSegment("wildcard", None, raw)
    if content.startswith("?"):
        return PathSegment("filter", content, raw)
    if content.isdigit():
        return PathSegment("index", int(content), raw)
    if len(content) >= 2 and content[0] == content[-1] and content[0] in "'\"":
        return PathSegment("property", content[1:-1], raw)
    raise ValueError(f"Invalid bracket expression: {raw}")


def parse_json_path(path: str) -> list[PathSegment]:
    """
    Parse a JSONPath-lite expression into segments.

    Args:
        path: Expression starting with `$`

    Returns:
        Ordered list of segments (the root `$` is implicit)

    Raises:
        ValueError: If the expression is malformed
    """
    if not path.startswith("$"):
        raise ValueError("JSON Path must start with $")

    segments: list[PathSegment] = []
    i = 1
    while i < len(path):
        if path.startswith("..", i):
            end = _read_name(path, i + 2)
            name = path[i + 2 : end]
            if not name:
                raise ValueError(f"Missing property name after '..' at position {i}")
            segments.append(PathSegment("recursive", name, path[i:end]))
            i = end
        elif path[i] == ".":
            end = _read_name(path, i + 1)
            name = path[i + 1 : end]
            if not name:
                raise ValueError(f"Missing property name at position {i}")
            segments.append(PathSegment("property", name, path[i:end]))
            i = end
        elif path[i] == "[":
            close = _find_closing_bracket(path, i)
            if close == -1:
                raise ValueError(f"Unterminated bracket at position {i}")
            raw = path[i : close + 1]
            segments.append(_bracket_segment(path[i + 1 : close].strip(), raw))
            i = close + 1
        else:
            raise ValueError(f"Unexpected character '{path[i]}' at position {i}")

    return segments


def build_json_path(segments: list[PathSegment]) -> str:
    """Build a path string back from segments."""
    path = "$"
    for segment in segments:
        if segment.type == "property":
            path += f".{segment.value}"
        elif segment.type == "index":
            path += f"[{segment.value}]"
        elif segment.type == "wildcard":
            path += "[*]"
        elif segment.type == "recursive":
            path += f"..{segment.value}"
        elif segment.type == "filter":
            path += f"[{segment.value}]"
    return path


def validate_json_path(path: str | None) -> PathValidation:
    """
    Syntactic pre-check of a path, independent of any data.

    Args:
        path: Path expression to check

    Returns:
        PathValidation with the first problem found
    """
    if not path:
        return PathValidation(valid=False, error="Path is required")
    if not path.startswith("$"):
        return PathValidation(valid=False, error="Path must start with $")
    try:
        parse_json_path(path)
    except ValueError as e:
        return PathValidation(valid=False, error=str(e))
    return PathValidation(valid=True)


# =============================================================================
# Resolution
# =============================================================================


def find_recursive(data: Any, key: str) -> Any:
    """Depth-first search for the first value stored under `key`."""
    if isinstance(data, Mapping):
        if key in data:
            return data[key]
        children = list(data.values())
    elif isinstance(data, (list, tuple)):
        children = list(data)
    else:
        return MISSING

    for child in children:
        found = find_recursive(child, key)
        if found is not MISSING:
            return found
    return MISSING


def get_value_by_path(data: Any, path: str) -> Any:
    """
    Resolve a `$` path against data.

    A `[*]` or filter step applies the rest of the path to every element and
    collects the values that resolve; as the last step it returns the array.

    Returns:
        The value, or MISSING if the path is malformed or does not exist
    """
    try:
        segments = parse_json_path(path)
    except ValueError:
        return MISSING
    return _walk(data, segments)


def _walk(current: Any, segments: list[PathSegment]) -> Any:
    for position, segment in enumerate(segments):
        if current is None or current is MISSING:
            return MISSING

        if segment.type == "property":
            if not isinstance(current, Mapping) or segment.value not in current:
                return MISSING
            current = current[segment.value]
        elif segment.type == "index":
            if not isinstance(current, (list, tuple)) or segment.value >= len(current):
                return MISSING
            current = current[segment.value]
        elif segment.type in ("wildcard", "filter"):
            # Filter expressions are not interpreted; they select every element
            if not isinstance(current, (list, tuple)):
                return MISSING
            rest = segments[position + 1 :]
            if not rest:
                return current
            values = [_walk(item, rest) for item in current]
            return [value for value in values if value is not MISSING]
        elif segment.type == "recursive":
            current = find_recursive(current, segment.value)

    return current


def resolve_property(path: str, data: Any) -> Any:
    """
    Resolve a constraint field against data.

    Plain names are looked up directly; a dotted name that is not itself a key
    is resolved as `$.<name>`. Anything containing `$.` or starting with `$`
    goes through the path resolver.
    """
    if not isinstance(path, str):
        return MISSING
    if path.startswith("$") or SELF_REFERENCE_MARKER in path:
        return get_value_by_path(data, path)
    if not isinstance(data, Mapping):
        return MISSING
    if path in data:
        return data[path]
    if "." in path:
        return get_value_by_path(data, f"$.{path}")
    return MISSING


def update_property(path: str, data: Any, value: Any) -> Any:
    """
    Set the value stored at a property path, in place.

    Args:
        path: Plain property name or `$` path made of property/index/recursive steps
        data: Object to modify
        value: New value

    Returns:
        The modified data

    Raises:
        ValueError: If the path cannot address a single location
    """
    if not path.startswith("$") and isinstance(data, dict):
        if path in data or "." not in path:
            data[path] = value
            return data
        path = f"$.{path}"

    segments = parse_json_path(path)
    if not segments:
        raise ValueError("Cannot replace the root object")

    parent = data
    for segment in segments[:-1]:
        parent = _step(parent, segment)
        if parent is MISSING:
            raise ValueError(f"Path does not exist: {path}")

    last = segments[-1]
    if last.type == "recursive":
        parent = _find_recursive_parent(parent, last.value)
        if parent is MISSING:
            raise ValueError(f"Path does not exist: {path}")
        parent[last.value] = value
    elif last.type in ("property", "index"):
        parent[last.value] = value
    else:
        raise ValueError(f"Cannot update through a {last.type} segment: {path}")
    return data


def _step(current: Any, segment: PathSegment) -> Any:
    if segment.type == "property" and isinstance(current, Mapping):
        return current.get(segment.value, MISSING)
    if segment.type == "index" and isinstance(current, list):
        return current[segment.value] if segment.value < len(current) else MISSING
    if segment.type == "recursive":
        return find_recursive(current, segment.value)
    return MISSING


def _find_recursive_parent(data: Any, key: str) -> Any:
    if isinstance(data, dict):
        if key in data:
            return data
        children = list(data.values())
    elif isinstance(data, list):
        children = data
    else:
        return MISSING
    for child in children:
        found = _find_recursive_parent(child, key)
        if found is not MISSING:
            return found
    return MISSING


# =============================================================================
# Text Expressions
# =============================================================================


def _iter_expressions(text: str) -> Iterator[tuple[int, str]]:
    """Yield (start offset, expression) for each `$` path found in text."""
    for match in _EXPRESSION_RE.finditer(text):
        expression = match.group(0)

        # Drop unbalanced closers picked up from surrounding prose
        while expression.count(")") > expression.count("("):
            expression = expression[: expression.rindex(")")]
        while expression.count("]") > expression.count("["):
            expression = expression[: expression.rindex("]")]

        expression = expression.rstrip(".")
        if expression != "$":
            yield match.start(), expression


def extract_json_path_expressions(text: str) -> list[str]:
    """
    Find `$...` path expressions embedded in free text.

    Example:
        extract_json_path_expressions("Hello $.name, you are $.age.")
        # ["$.name", "$.age"]
    """
    return [expression for _, expression in _iter_expressions(text)]


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, bool)) or value is None:
        return json.dumps(value, default=str)
    return str(value)


def resolve_text_path_expressions(text: str, data: Any) -> str:
    """
    Replace `$...` expressions in text with the values they resolve to.

    Expressions that do not resolve are left untouched.
    """
    parts: list[str] = []
    cursor = 0
    for start, expression in _iter_expressions(text):
        value = resolve_property(expression, data)
        if value is MISSING:
            continue
        parts.append(text[cursor:start])
        parts.append(_stringify(value))
        cursor = start + len(expression)
    parts.append(text[cursor:])
    return "".join(parts)


# =============================================================================
# Discovery and Conversion
# =============================================================================


def get_all_paths(data: Any, max_depth: int | None = None) -> list[str]:
    """
    List the `$` paths present in a sample object.

    Arrays contribute a wildcard path plus their first three items. The
    depth limit defaults to the max_path_depth setting.
    """
    if max_depth is None:
        max_depth = get_settings().max_path_depth
    paths: list[str] = []

    def traverse(current: Any, path: str, depth: int) -> None:
        if depth > max_depth or current is None:
            return
        if isinstance(current, (list, tuple)):
            paths.append(f"{path}[*]")
            for index, item in enumerate(current[:3]):
                item_path = f"{path}[{index}]"
                paths.append(item_path)
                traverse(item, item_path, depth + 1)
        elif isinstance(current, Mapping):
            for key, value in current.items():
                child_path = f"{path}.{key}"
                paths.append(child_path)
                traverse(value, child_path, depth + 1)

    traverse(data, "$", 0)
    return paths


def field_to_json_path(field: str) -> str:
    """Convert a plain field name to a `$` path."""
    if field.startswith("$"):
        return field
    return f"$.{field}"


def json_path_to_field(path: str) -> str:
    """Convert a simple `$.name` path back to a plain field name."""
    if _SIMPLE_PATH_RE.match(path):
        return path[2:]
    return path


def build_path(*parts: str | int) -> str:
    """
    Build a `$` path from parts.

    Example:
        build_path("users", 0, "name")  # "$.users[0].name"
    """
    path = "$"
    for part in parts:
        if isinstance(part, int):
            path += f"[{part}]"
        elif part == "*":
            path += "[*]"
        elif part.startswith("[") and part.endswith("]"):
            path += part
        else:
            path += f".{part}"
    return path

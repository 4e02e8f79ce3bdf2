"""
Path matching for HTTP subscriptions.

Patterns are made of static segments, ``:name`` parameters and an optional
trailing ``*name`` wildcard, which captures one or more segments. When
several patterns match the same path the most specific one wins: static
segments beat parameters, parameters beat wildcards, compared segment by
segment from the left.
"""
from typing import Dict, List, Optional, Tuple

STATIC, PARAM, WILDCARD = 0, 1, 2


def split(path: str) -> List[str]:
    return [segment for segment in path.split("/") if segment]


def _kind(segment: str) -> int:
    if segment.startswith(":"):
        return PARAM
    if segment.startswith("*"):
        return WILDCARD
    return STATIC


def match(pattern: str, path: str) -> Optional[Dict[str, str]]:
    """
    Match a concrete path against a pattern.

    Returns:
        The extracted parameters, or None if the pattern does not match
    """
    pattern_segments = split(pattern)
    path_segments = split(path)
    params: Dict[str, str] = {}

    for index, segment in enumerate(pattern_segments):
        kind = _kind(segment)
        if kind == WILDCARD:
            if index >= len(path_segments):
                return None
            params[segment[1:]] = "/".join(path_segments[index:])
            return params
        if index >= len(path_segments):
            return None
        if kind == PARAM:
            params[segment[1:]] = path_segments[index]
        elif segment != path_segments[index]:
            return None

    if len(path_segments) != len(pattern_segments):
        return None
    return params


def specificity(pattern: str) -> Tuple[int, ...]:
    """Sort key: lower tuples are more specific."""
    return tuple(_kind(segment) for segment in split(pattern)) + (WILDCARD + 1,)


def conflicts(first: str, second: str) -> bool:
    """
    Whether two patterns are ambiguous: same shape, so no precedence rule can
    pick one of them for a path both match.

    ``/users/:id`` and ``/users/:name`` conflict, ``/users/:id`` and
    ``/users/me`` do not (the static segment wins).
    """
    first_segments = split(first)
    second_segments = split(second)
    if len(first_segments) != len(second_segments):
        return False

    for a, b in zip(first_segments, second_segments):
        kind_a, kind_b = _kind(a), _kind(b)
        if kind_a != kind_b:
            return False
        if kind_a == STATIC and a != b:
            return False
    return True


def best_match(
    patterns: List[str],
    path: str,
) -> Optional[Tuple[str, Dict[str, str]]]:
    """Return the most specific pattern matching ``path`` and its parameters."""
    for pattern in sorted(patterns, key=specificity):
        params = match(pattern, path)
        if params is not None:
            return pattern, params
    return None

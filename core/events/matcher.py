"""
ERP Module Bus — Topic Matcher
================================
Pure functions deciding whether a subscription pattern matches a topic.

Two pattern forms only:
- exact topic        'inventory.low_stock'
- namespace wildcard 'inventory.*'

The wildcard is generated from the FIRST segment of the topic.
No nested wildcards, no multi-level globbing.
"""

from __future__ import annotations

from core.events.errors import InvalidTopicPattern

WILDCARD_SUFFIX = ".*"


def wildcard_for(topic: str) -> str:
    """'inventory.low_stock' → 'inventory.*'"""
    return topic.split(".")[0] + WILDCARD_SUFFIX


def candidate_patterns(topic: str) -> tuple[str, str]:
    """The only two subscription patterns that can select this topic."""
    return (topic, wildcard_for(topic))


def matches(pattern: str, topic: str) -> bool:
    if not pattern or not topic:
        return False
    return pattern == topic or pattern == wildcard_for(topic)


def is_wildcard(pattern: str) -> bool:
    return pattern.endswith(WILDCARD_SUFFIX)


def validate_pattern(pattern: str) -> str:
    """
    Validate a subscription pattern at registration time.

    Returns the stripped pattern, raises InvalidTopicPattern otherwise.
    """
    if not pattern or not isinstance(pattern, str):
        raise InvalidTopicPattern(pattern or "")

    pattern = pattern.strip()
    segments = pattern.split(".")
    if any(not segment for segment in segments):
        raise InvalidTopicPattern(pattern)

    if "*" in pattern:
        # Only '<namespace>.*' is allowed.
        if len(segments) != 2 or segments[1] != "*" or "*" in segments[0]:
            raise InvalidTopicPattern(pattern)
    elif len(segments) < 2:
        raise InvalidTopicPattern(pattern)

    return pattern

from typing import Any

# Placeholder shown by clients for transactions without tags; never stored.
RESERVED_TAG = "untagged"


def normalize_tag(tag: str) -> str:
    return tag.strip().lower()


def parse_tag_list(raw_tags: str | None) -> list[str]:
    if not raw_tags:
        return []
    return normalize_tags(raw_tags.split(","))


def normalize_tags(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return parse_tag_list(value)
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    tags: list[str] = []
    seen = set()
    for item in value:
        tag = normalize_tag(str(item))
        if tag and tag != RESERVED_TAG and tag not in seen:
            tags.append(tag)
            seen.add(tag)
    return tags


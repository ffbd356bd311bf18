"""Simple data models for AWS resource tags."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Any

from aws_hygiene.core.constants import (
    AWS_RESERVED_TAG_PREFIX,
    COPIED_TAG_PREFIX,
    TAG_NOT_FOUND,
)


def tags_to_dict(tags: Optional[List[Dict[str, Any]]]) -> Dict[str, str]:
    """Convert an AWS ``[{"Key": .., "Value": ..}]`` list into an ordered dict."""
    result = {}
    for tag in tags or []:
        if tag.get("Key"):
            result[tag["Key"]] = tag.get("Value", "")
    return result


def copy_tags(tags: Optional[List[Dict[str, str]]]) -> List[Dict[str, str]]:
    """Copy tags for another resource.

    AWS owns every key starting with ``aws:`` so those cannot be written back;
    they are prefixed with ``X-`` to keep them searchable.
    """
    copied = []
    for tag in tags or []:
        key = tag["Key"]
        if key.startswith(AWS_RESERVED_TAG_PREFIX):
            key = COPIED_TAG_PREFIX + key
        copied.append({"Key": key, "Value": tag.get("Value", "")})
    return copied


@dataclass
class TagFilter:
    """Tag selection criteria; empty key or value matches anything."""
    key: str = ""
    value: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.key and not self.value

    def match(self, tags: Dict[str, str]) -> Tuple[bool, Tuple[str, str]]:
        """Match against a resource's tags.

        The first tag whose key equals the filter key (any tag when no key is
        set) decides the outcome. Returns the match flag and the tag that was
        inspected, or ``(key, "not found")`` when no tag had the key.
        """
        for tag_key, tag_value in tags.items():
            if not self.key or self.key == tag_key:
                if not self.value or self.value == tag_value:
                    return True, (tag_key, tag_value)
                return False, (tag_key, tag_value)

        return False, (self.key, TAG_NOT_FOUND)

    def has_tag(self, tags: Dict[str, str]) -> bool:
        """True when the exact key/value pair is present."""
        return bool(self.key) and tags.get(self.key) == self.value

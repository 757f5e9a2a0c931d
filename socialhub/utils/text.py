"""
Text helpers for post content and handles.

Hashtags and mentions are ASCII word runs after `#` / `@`. Hashtags are
compared lower-cased; mentions keep their case because usernames are
matched exactly.
"""

import random
import re
from typing import List, Optional

HASHTAG_PATTERN = re.compile(r"#([A-Za-z0-9_]+)")
# hashtags.name is String(100); longer runs are not treated as tags
MAX_HASHTAG_LENGTH = 100
MENTION_PATTERN = re.compile(r"@([A-Za-z0-9_]+)")

_HANDLE_UNSAFE = re.compile(r"[^a-z0-9]+")


def _unique(items: List[str]) -> List[str]:
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def extract_hashtags(content: Optional[str]) -> List[str]:
    """
    Lower-cased hashtag names in first-seen order, without duplicates.

    Tags over MAX_HASHTAG_LENGTH characters are dropped, not truncated.
    """
    if not content:
        return []
    return _unique([
        tag.lower() for tag in HASHTAG_PATTERN.findall(content)
        if len(tag) <= MAX_HASHTAG_LENGTH
    ])


def extract_mentions(content: Optional[str]) -> List[str]:
    """Mentioned usernames in first-seen order, without duplicates."""
    if not content:
        return []
    return _unique(MENTION_PATTERN.findall(content))


def _slug(value: Optional[str]) -> str:
    return _HANDLE_UNSAFE.sub("", (value or "").lower())


def generate_username(first_name: Optional[str], last_name: Optional[str], email: str) -> str:
    """
    `first_last_1234`: slugged names plus a random four-digit suffix.

    Joined with underscores so generated handles are mentionable.

    Falls back to the email's local part when neither name is usable.
    """
    parts = [p for p in (_slug(first_name), _slug(last_name)) if p]
    if not parts:
        parts = [_slug(email.split("@", 1)[0]) or "user"]
    base = "_".join(parts)[:40]
    return f"{base}_{random.randint(0, 9999):04d}"

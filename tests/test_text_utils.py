"""
SocialHub Backend — Text Utility Tests
========================================

What we test:
    ✅ Hashtags are lower-cased, de-duplicated, first-seen order
    ✅ Tags longer than the stored column are ignored
    ✅ Mentions keep their case and stop at punctuation
    ✅ Generated usernames are `first_last_NNNN` and mentionable
"""

import re

from socialhub.utils.text import (
    MAX_HASHTAG_LENGTH,
    MENTION_PATTERN,
    extract_hashtags,
    extract_mentions,
    generate_username,
)


class TestExtractHashtags:

    def test_lowercases_and_deduplicates(self):
        assert extract_hashtags("#Python and #python and #FastAPI") == ["python", "fastapi"]

    def test_underscores_and_digits_are_part_of_the_tag(self):
        assert extract_hashtags("ship #v2_launch today") == ["v2_launch"]

    def test_empty_or_missing_content(self):
        assert extract_hashtags(None) == []
        assert extract_hashtags("no tags here") == []

    def test_overlong_tag_is_dropped_not_truncated(self):
        longest = "a" * MAX_HASHTAG_LENGTH
        too_long = "b" * (MAX_HASHTAG_LENGTH + 1)
        content = f"#{longest} #{too_long} #ok"
        assert extract_hashtags(content) == [longest, "ok"]


class TestExtractMentions:

    def test_stops_at_punctuation(self):
        assert extract_mentions("thanks @alice, @bob_99!") == ["alice", "bob_99"]

    def test_deduplicates_in_first_seen_order(self):
        assert extract_mentions("@carol @dave @carol") == ["carol", "dave"]

    def test_missing_content(self):
        assert extract_mentions(None) == []


class TestGenerateUsername:

    def test_first_and_last_name(self):
        username = generate_username("Ada", "Lovelace", "ada@example.com")
        assert re.fullmatch(r"ada_lovelace_\d{4}", username)

    def test_strips_unsafe_characters(self):
        username = generate_username("Jean-Luc", "O'Brien", "jl@example.com")
        assert re.fullmatch(r"jeanluc_obrien_\d{4}", username)

    def test_falls_back_to_email_local_part(self):
        username = generate_username(None, None, "Grace.Hopper@example.com")
        assert re.fullmatch(r"gracehopper_\d{4}", username)

    def test_generated_username_is_mentionable(self):
        username = generate_username("Linus", "Torvalds", "linus@example.com")
        assert MENTION_PATTERN.fullmatch(f"@{username}")

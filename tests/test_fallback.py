"""
Tests for the keyword-matched fallback responder.
"""

import random

import pytest

from shanti.core.fallback import RESPONSES, FallbackResponder


@pytest.fixture
def responder():
    return FallbackResponder(random.Random(42))


class TestCategorize:

    @pytest.mark.parametrize("message,category", [
        ("Hello there", "greeting"),
        ("HEY", "greeting"),
        ("tell me something funny", "joke"),
        ("write me a poem", "creative"),
        ("what time is it?", "question"),
        ("can you assist me", "help"),
        ("you are awesome", "compliment"),
        ("xyz", "default"),
        ("", "default"),
    ])
    def test_categories(self, responder, message, category):
        assert responder.categorize(message) == category

    def test_earlier_category_wins(self, responder):
        assert responder.categorize("hi, tell me a joke") == "greeting"
        assert responder.categorize("a funny story") == "joke"
        assert responder.categorize("could you write a story?") == "creative"
        assert responder.categorize("can you help?") == "question"

    def test_matching_is_substring_based(self, responder):
        assert responder.categorize("this") == "greeting"
        assert responder.categorize("rewrite") == "creative"


class TestRespond:

    def test_reply_comes_from_category(self, responder):
        for _ in range(20):
            assert responder.respond("tell me a joke") in RESPONSES["joke"]

    def test_every_category_has_variants(self):
        for category, replies in RESPONSES.items():
            assert len(replies) >= 2, category

    def test_seeded_choice_is_reproducible(self):
        first = FallbackResponder(random.Random(7))
        second = FallbackResponder(random.Random(7))
        replies = [first.respond("xyz") for _ in range(5)]
        assert replies == [second.respond("xyz") for _ in range(5)]

    def test_variants_are_all_reachable(self, responder):
        seen = {responder.respond("hello") for _ in range(200)}
        assert seen == set(RESPONSES["greeting"])

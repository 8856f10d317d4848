"""
Tests for slug generation
"""

import pytest

from devevent.services.slug_service import base_slug, generate_unique_slug


@pytest.mark.parametrize("title, expected", [
    ("React Summit 2024", "react-summit-2024"),
    ("  Next.js Conf 2024  ", "nextjs-conf-2024"),
    ("AI & Tech Conference", "ai-tech-conference"),
    ("DevOps -- Days   NYC", "devops-days-nyc"),
    ("snake_case_meetup", "snake_case_meetup"),
    ("Café Conf", "caf-conf"),
])
def test_base_slug(title, expected):
    assert base_slug(title) == expected


def test_base_slug_of_symbols_only_is_empty():
    assert base_slug("!!! ???") == "-"
    assert base_slug("@#$") == ""


def test_unique_slug_without_collision():
    slug = generate_unique_slug("Web Summit", "a" * 32, lambda slug, exclude_id: False)
    assert slug == "web-summit"


def test_unique_slug_appends_id_on_collision():
    calls = []

    def slug_taken(slug, exclude_id):
        calls.append((slug, exclude_id))
        return True

    event_id = "b" * 32
    assert generate_unique_slug("Web Summit", event_id, slug_taken) == f"web-summit-{event_id}"
    # The suffixed slug is not checked again
    assert calls == [("web-summit", event_id)]

import pytest

from careshare.services.skill_matcher import match_skill


@pytest.mark.parametrize("text, skill", [
    ("I need a ride to the doctor", "Driving"),
    ("Can someone pick up groceries for me", "Grocery Shopping"),
    ("my computer is acting up", "Tech Help"),
    ("help with weeding the garden", "Gardening"),
    ("I would like someone to talk to", "Companionship"),
])
def test_keywords_map_to_skills(text, skill):
    assert match_skill(text) == skill


def test_first_keyword_in_text_wins():
    # "phone" appears before "ride"
    assert match_skill("my phone broke and I need a ride") == "Tech Help"
    assert match_skill("a ride, then my phone") == "Driving"


def test_matching_ignores_case_and_punctuation():
    assert match_skill("GROCERIES, please!") == "Grocery Shopping"
    assert match_skill("Doctor's appointment tomorrow") == "Driving"


@pytest.mark.parametrize("text", ["", None, "hello there", "gardening tips"])
def test_no_keyword_returns_none(text):
    assert match_skill(text) is None

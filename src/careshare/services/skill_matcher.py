import re
from typing import Dict, Optional

from careshare.database.models import SkillName

SKILL_KEYWORDS: Dict[str, SkillName] = {
    "groceries": SkillName.GROCERY_SHOPPING,
    "shopping": SkillName.GROCERY_SHOPPING,
    "ride": SkillName.DRIVING,
    "appointment": SkillName.DRIVING,
    "doctor": SkillName.DRIVING,
    "tech": SkillName.TECH_HELP,
    "computer": SkillName.TECH_HELP,
    "phone": SkillName.TECH_HELP,
    "garden": SkillName.GARDENING,
    "weeding": SkillName.GARDENING,
    "visit": SkillName.COMPANIONSHIP,
    "talk": SkillName.COMPANIONSHIP,
}

WORD = re.compile(r"[a-z]+")


def match_skill(request_details: Optional[str]) -> Optional[str]:
    """Return the skill for the first keyword in the text, scanning left to right"""
    for word in WORD.findall((request_details or "").lower()):
        skill = SKILL_KEYWORDS.get(word)
        if skill:
            return skill.value
    return None

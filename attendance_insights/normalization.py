"""
Class name normalization.

Maps the free-text class names found in attendance exports onto the
studio's fixed taxonomy of class categories.
"""

import logging
from typing import List, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
INVALID = "Invalid"


class ClassRule(NamedTuple):
    """
    One entry of the ordered rule chain.

    A name matches when it contains at least one of ``any_of``, every
    substring in ``requires`` and none of ``excludes``.
    """

    category: str
    any_of: Tuple[str, ...]
    requires: Tuple[str, ...] = ()
    excludes: Tuple[str, ...] = ()

    def matches(self, name: str) -> bool:
        return (
            any(token in name for token in self.any_of)
            and all(token in name for token in self.requires)
            and not any(token in name for token in self.excludes)
        )


def _express_pair(keyword: str, category: str) -> List[ClassRule]:
    """Plain variant first, then its express variant."""
    return [
        ClassRule(category, (keyword,), excludes=("express",)),
        ClassRule(f"{category} Express", (keyword,), requires=("express",)),
    ]


# Order is significant: the first matching rule wins.
CLASS_RULES: List[ClassRule] = [
    ClassRule("Studio Amped Up!", ("amped",)),
    ClassRule("Studio Hosted Class", ("hosted", "bridal shower class!", "sign up link", "hc")),
    ClassRule("Outdoor Class", ("please see pop up @ kitab mahal",)),
    ClassRule(INVALID, ("n/a",)),
    ClassRule("Studio Back Body Blaze Express", ("back",), requires=("express",)),
    ClassRule("Studio Back Body Blaze", ("back",), excludes=("express",)),
    *_express_pair("barre 57", "Studio Barre 57"),
    *_express_pair("cardio", "Studio Cardio Barre"),
    *_express_pair("mat", "Studio Mat 57"),
    *_express_pair("hiit", "Studio HIIT"),
    *_express_pair("foundation", "Studio Foundations"),
    *_express_pair("fit", "Studio FIT"),
    *_express_pair("trainer", "Studio Trainers Choice"),
    ClassRule("Studio Sweat in 30", ("sweat",)),
    ClassRule("Studio Recovery", ("recovery",)),
    ClassRule(
        "Studio Hosted Class",
        ("p57 x", "physique 57 x", "x physique 57", "birthday", "sundowner", "bridal"),
    ),
    ClassRule("Studio powerCycle Express", ("powercycle",), requires=("express",)),
    ClassRule("Studio powerCycle", ("powercycle",)),
    ClassRule(
        "Others",
        (
            "studio pre/post natal class",
            "olympics finale",
            "pop up class at raheja vivarea",
            "bangalore rugby club x physique 57",
        ),
    ),
    ClassRule("Flex 30 Single Class", ("flex 30 single class",)),
    ClassRule("Studio 1 Month Unlimited", ("studio 1 month unlimited",)),
    ClassRule("Studio 8 Class Package", ("studio 8 class package",)),
    ClassRule("Studio Single Class", ("studio single class",)),
    ClassRule("Studio 12 Class Package", ("studio 12 class package",)),
    ClassRule("Studio 4 Class Package", ("studio 4 class package",)),
    ClassRule("Studio Open Barre Class", ("studio open barre class",)),
    ClassRule("Studio 2 Week Unlimited", ("studio 2 week unlimited",)),
    ClassRule("Studio Complimentary Class", ("studio complimentary class",)),
    ClassRule("Studio Free Influencer Class", ("studio free influencer class",)),
    ClassRule("Studio Newcomers 2 Week Unlimited", ("studio newcomers 2 week unlimited",)),
    ClassRule("Studio Annual Unlimited", ("studio annual unlimited",)),
    ClassRule("Outdoor Complimentary Class", ("outdoor complimentary class",)),
    ClassRule("Studio Community Barre", ("studio community barre",)),
    ClassRule("SUNRISE CLASS", ("sunrise class",)),
    ClassRule("Virtual Private Apt", ("virtual private apt",)),
    ClassRule("Studio Private Apt", ("studio private apt",)),
    ClassRule("OPEN BARRE CLASS", ("open barre complimentary class",)),
    ClassRule("FF CLASS TEST", ("ff class test",)),
    ClassRule("OPEN BARRE CLASS", ("open barre class",)),
]


def normalize_class_name(raw_name: Optional[str]) -> str:
    """
    Map a raw class name to its canonical class category.

    Rules are evaluated in order and the first match wins, so
    express-qualified variants are resolved before their plain
    counterparts.

    Args:
        raw_name: Class name as it appears in the export (may be None)

    Returns:
        Canonical category, or "Uncategorized" when no rule matches
    """
    name = str(raw_name or "").lower()

    for rule in CLASS_RULES:
        if rule.matches(name):
            return rule.category

    logger.debug(f"No class category match for: {raw_name!r}")
    return UNCATEGORIZED

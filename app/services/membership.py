from typing import List

FREE = "Free"
ADVANCED = "Advanced"
PRO = "Pro"

MEMBERSHIP_TIERS = (FREE, ADVANCED, PRO)

BASE_FEATURES = [
    "Basic stroke analysis",
    "Basic footwork assessment",
    "Technique suggestions",
]

ADVANCED_FEATURES = BASE_FEATURES + [
    "Detailed frame-by-frame analysis",
    "Personalized improvement plan",
    "Side-by-side comparisons with pros",
]

PRO_FEATURES = ADVANCED_FEATURES + [
    "Weekly coaching sessions",
    "Custom training program",
]


def membership_for_plan(plan_name: str) -> str:
    """Map a pricing plan name onto a membership tier; unknown plans are Free."""
    for tier in MEMBERSHIP_TIERS:
        if plan_name and plan_name.strip().lower() == tier.lower():
            return tier
    return FREE


def can_connect_with_players(membership: str) -> bool:
    return membership in (ADVANCED, PRO)


def get_analysis_features(membership: str) -> List[str]:
    if membership == PRO:
        return list(PRO_FEATURES)
    if membership == ADVANCED:
        return list(ADVANCED_FEATURES)
    return list(BASE_FEATURES)

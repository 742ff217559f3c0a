from typing import Dict, Pattern

from tsforward.models.metrics import MetricFamily


def matches(family_name: str, pattern: Pattern[str]) -> bool:
    """Whether a family is forwarded at all; families are never partially included"""
    return pattern.search(family_name) is not None


def select_families(
    families: Dict[str, MetricFamily], pattern: Pattern[str]
) -> Dict[str, MetricFamily]:
    return {name: family for name, family in families.items() if matches(name, pattern)}

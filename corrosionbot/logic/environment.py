"""Corrosivity category estimation from a free-text location.

Keyword heuristics, applied in fixed order, only ever move the category toward
higher corrosivity:
  1. baseline (C4 unless configured otherwise)
  2. port / harbour / marina → C5M
  3. industrial site → one step up, capped at C5I
  4. offshore / splash zone → CX, overriding everything else

Keyword lists are config-aware with hardcoded fallbacks for tests and
bootstrapping.
"""

import logging
from typing import Optional

from corrosionbot.models import EnvironmentCategory

logger = logging.getLogger(__name__)

# =============================================================================
# HARDCODED FALLBACKS (used when config isn't loaded or lacks these fields)
# =============================================================================

BASELINE = EnvironmentCategory.C4

PORT_KEYWORDS = ("porto", "port", "marina", "banchina", "dock", "harbor", "harbour")

INDUSTRIAL_KEYWORDS = (
    "zona industriale", "industrial", "raffineria", "refinery", "steel",
    "shipyard", "cantiere", "impianto", "plant", "terminal",
)

OFFSHORE_KEYWORDS = ("offshore", "piattaforma", "platform", "splash zone", "frangiflutti", "breakwater")

# C5I and C5M share a rank: industrial and marine severity are not comparable.
ENV_RANK = {
    EnvironmentCategory.C3: 0,
    EnvironmentCategory.C4: 1,
    EnvironmentCategory.C5I: 2,
    EnvironmentCategory.C5M: 2,
    EnvironmentCategory.CX: 3,
}

SEVERE_ENVIRONMENTS = frozenset({EnvironmentCategory.C5I, EnvironmentCategory.C5M, EnvironmentCategory.CX})

_INDUSTRIAL_STEP = {
    EnvironmentCategory.C3: EnvironmentCategory.C4,
    EnvironmentCategory.C4: EnvironmentCategory.C5I,
}


# =============================================================================
# CONFIG-AWARE GETTERS
# =============================================================================

def _get_rules_safe():
    """Try to get environment rules from config; return None if unavailable."""
    try:
        from corrosionbot.config_loader import get_config
        return get_config().environment
    except Exception as e:
        logger.debug(f"Environment rules unavailable, using defaults: {e}")
        return None


def get_baseline() -> EnvironmentCategory:
    rules = _get_rules_safe()
    if rules:
        parsed = parse_environment(rules.baseline)
        if parsed is not None:
            return parsed
    return BASELINE


def get_keyword_sets() -> tuple[tuple[str, ...], tuple[str, ...], tuple[str, ...]]:
    """(port, industrial, offshore) keywords, lowercased."""
    rules = _get_rules_safe()
    port = tuple(rules.port_keywords) if rules and rules.port_keywords else PORT_KEYWORDS
    industrial = tuple(rules.industrial_keywords) if rules and rules.industrial_keywords else INDUSTRIAL_KEYWORDS
    offshore = tuple(rules.offshore_keywords) if rules and rules.offshore_keywords else OFFSHORE_KEYWORDS
    return (
        tuple(k.lower() for k in port),
        tuple(k.lower() for k in industrial),
        tuple(k.lower() for k in offshore),
    )


# =============================================================================
# CATEGORY HELPERS
# =============================================================================

def parse_environment(value) -> Optional[EnvironmentCategory]:
    """Case-insensitive parse; None for anything that is not a known category."""
    if isinstance(value, EnvironmentCategory):
        return value
    try:
        return EnvironmentCategory(str(value or "").strip().upper())
    except ValueError:
        return None


def environment_rank(value) -> int:
    """Rank used for ordering; unknown values rank as the configured baseline."""
    env = parse_environment(value)
    return ENV_RANK[env if env is not None else get_baseline()]


def is_severe(value) -> bool:
    return parse_environment(value) in SEVERE_ENVIRONMENTS


def _escalate(current: EnvironmentCategory, candidate: EnvironmentCategory) -> EnvironmentCategory:
    if ENV_RANK[candidate] > ENV_RANK[current]:
        return candidate
    return current


def _matches(text: str, keywords: tuple[str, ...]) -> bool:
    return any(k in text for k in keywords)


# =============================================================================
# ESTIMATION
# =============================================================================

def estimate_environment(location_text: Optional[str]) -> EnvironmentCategory:
    """Map a location string to a corrosivity category. Never raises."""
    text = str(location_text or "").lower()
    env = get_baseline()
    if not text.strip():
        return env

    port, industrial, offshore = get_keyword_sets()

    if _matches(text, offshore):
        return EnvironmentCategory.CX

    if _matches(text, port) and ENV_RANK[env] <= ENV_RANK[EnvironmentCategory.C5M]:
        env = EnvironmentCategory.C5M

    if _matches(text, industrial):
        env = _escalate(env, _INDUSTRIAL_STEP.get(env, env))

    return env

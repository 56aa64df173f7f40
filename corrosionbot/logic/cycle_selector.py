"""Coating cycle decision table: area × defect type × environment → cycle.

Area dispatch is an ordered list of (family, predicate, handler) rules
evaluated first-match-wins. Order is load-bearing because predicates overlap:
"Fresh/Drinking Water Tank" and "Ballast Tank" both contain "tank", "Underwater
Hull" contains "hull", "Internal Decks" contains "deck". Anything unmatched
lands on the generic fallback, so selection is total and never raises.

Inside a family the defect type picks the narrative and sequence:
  - pitting          stripe coat prepended to the baseline sequence
  - blistering       barrier rebuild
  - delamination     removal of non-adherent coating + film rebuild
  - mechanical_damage fast-dry primer spot repair
  - fouling          antifouling (hull areas) or immersion-grade system (tanks)
  - anything else    the family baseline
A severe environment (C5I, C5M, CX) swaps in the barrier-grade intermediate
where the family defines one.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from corrosionbot.logic import catalog as c
from corrosionbot.logic.environment import is_severe
from corrosionbot.models import AlternativeCycle, CoatingCycle, DefectType, ProductRef

logger = logging.getLogger(__name__)

Products = tuple[ProductRef, ...]

# =============================================================================
# SURFACE PREPARATION NARRATIVES
# =============================================================================

PREP_GENERIC = "St 3 local preparation, removal of salts and contaminants, profile restoration"
PREP_HULL = "Fresh-water wash, St 3 local preparation (Sa 2½ where accessible), remove salts and feather edges"
PREP_DECK = "Degrease, St 3 / Sa 2½ spot blasting, remove loose non-skid, vacuum dust"
PREP_SUPERSTRUCTURE = "Fresh-water wash, St 3 hand/power tool cleaning, abrade sound coating for adhesion"
PREP_UNDERWATER = "High-pressure fresh-water wash in dock, Sa 2½ spot blast on corroded areas, remove marine growth"
PREP_TANK = "Remove sediment and scale, Sa 2½ abrasive blast, soluble salts below 50 mg/m², dehumidify during work"
PREP_POTABLE = "Sa 2½ abrasive blast, remove dust and soluble salts; use potable-water approved products only, ventilate before re-filling"
PREP_HEAT = "Sa 2½ abrasive blast to bare metal; apply only on cold, dry steel"
PREP_HOLD = "Sweep and wash out cargo residues, St 3 / Sa 2 spot preparation, remove loose coating"
PREP_INTERNAL = "Degrease, St 2–St 3 hand/power tool cleaning, abrade sound coating"

PREP_STRIPE_SUFFIX = "stripe coat on edges/welds, fill pits before the full coat"
PREP_BLISTERING = "Remove blisters, feather edges, fresh-water wash, seal with barrier rebuild coat"
PREP_DELAMINATION = "Remove all non-adherent coating to a sound edge, St 3 preparation, rebuild film"
PREP_MECHANICAL = "Sand/abrade damaged area, restore profile, spot-prime with fast-drying primer"
PREP_FOULING = "Underwater cleaning, biofouling removal, light sanding"
PREP_IMMERSION_FOULING = "Remove mud, sediment and biofilm, fresh-water wash and dry before coating"
PREP_SURFACE_FOULING = "Scrape and wash off growth/deposits, St 3 local preparation"

NOTE_EPOXY_FINISH = "Epoxy finish instead of polyurethane: lower cost, chalks and fades under UV"
NOTE_ALKYD = "Two-coat alkyd substitute: cheaper and easier to apply, shorter service life"
NOTE_FOULING_RELEASE = "Silicone fouling-release: higher cost, needs full tie coat, better fuel performance"
NOTE_PU_FINISH = "Polyurethane finish instead of alkyd: higher cost, better gloss and colour retention"
NOTE_NO_FINISH = "Epoxy only, no topcoat: cheaper, accepts chalking and colour loss"


# =============================================================================
# AREA SYSTEMS (one per family)
# =============================================================================

@dataclass(frozen=True)
class AreaSystem:
    """Baseline coating system of one area family."""
    family: str
    prep: str
    base: Products
    finish: Products
    stripe: ProductRef
    barrier_base: Optional[Products] = None
    rebuild: Products = (c.REBUILD_BARRIER,)
    delamination: Products = (c.REBUILD_FILM,)
    fast_dry: Products = (c.FAST_DRY_PRIMER,)
    # "antifouling", "immersion" or "surface"
    fouling: str = "surface"


FRESH_WATER_TANK = AreaSystem(
    family="fresh_water_tank", prep=PREP_POTABLE,
    base=(c.POTABLE_EPOXY,), finish=(), stripe=c.STRIPE_POTABLE,
    rebuild=(c.POTABLE_EPOXY,), delamination=(c.POTABLE_EPOXY,), fast_dry=(c.POTABLE_EPOXY,),
    fouling="immersion",
)

BALLAST_TANK = AreaSystem(
    family="ballast_tank", prep=PREP_TANK,
    base=(c.TANK_EPOXY,), finish=(), stripe=c.STRIPE_TANK,
    rebuild=(c.TANK_EPOXY,), delamination=(c.TANK_EPOXY,), fast_dry=(c.TANK_EPOXY,),
    fouling="immersion",
)

HEAT_RESISTANCE = AreaSystem(
    family="heat_resistance", prep=PREP_HEAT,
    base=(c.HEAT_ZINC_PRIMER,), finish=(c.HEAT_SILICONE,), stripe=c.STRIPE_HEAT,
    rebuild=(c.HEAT_ZINC_PRIMER,), delamination=(c.HEAT_ZINC_PRIMER,), fast_dry=(c.HEAT_ZINC_PRIMER,),
)

UNDERWATER_HULL = AreaSystem(
    family="underwater_hull", prep=PREP_UNDERWATER,
    base=(c.UNDERWATER_PRIMER,), finish=(c.ANTIFOULING_SPC,), stripe=c.STRIPE_HIGH_SOLIDS,
    rebuild=(c.UNDERWATER_PRIMER,), delamination=(c.UNDERWATER_PRIMER,), fast_dry=(c.UNDERWATER_SPOT_PRIMER,),
    fouling="antifouling",
)

DECK_OR_HATCH = AreaSystem(
    family="deck_or_hatch", prep=PREP_DECK,
    base=(c.ABRASION_EPOXY,), finish=(c.PU_FINISH,), stripe=c.STRIPE_HIGH_SOLIDS,
    barrier_base=(c.ANTICORROSIVE_BARRIER, c.ABRASION_EPOXY),
    rebuild=(c.REBUILD_BARRIER, c.ABRASION_EPOXY),
)

SUPERSTRUCTURE = AreaSystem(
    family="superstructure", prep=PREP_SUPERSTRUCTURE,
    base=(c.ANTICORROSIVE_STD,), finish=(c.PU_GLOSS_FINISH,), stripe=c.STRIPE_HIGH_SOLIDS,
    barrier_base=(c.ANTICORROSIVE_BARRIER,),
)

CARGO_HOLD = AreaSystem(
    family="cargo_hold", prep=PREP_HOLD,
    base=(c.HOLD_EPOXY,), finish=(), stripe=c.STRIPE_HIGH_SOLIDS,
    rebuild=(c.HOLD_EPOXY,), delamination=(c.HOLD_EPOXY,), fast_dry=(c.FAST_DRY_PRIMER, c.HOLD_EPOXY),
)

INTERNAL_VISIBLE_STEEL = AreaSystem(
    family="internal_visible_steel", prep=PREP_INTERNAL,
    base=(c.UNIVERSAL_PRIMER,), finish=(c.ALKYD_FINISH,), stripe=c.STRIPE_HIGH_SOLIDS,
    rebuild=(c.UNIVERSAL_PRIMER,), delamination=(c.UNIVERSAL_PRIMER,),
)

INTERNAL_DECKS = AreaSystem(
    family="internal_decks", prep=PREP_INTERNAL,
    base=(c.UNIVERSAL_PRIMER,), finish=(c.EPOXY_FINISH,), stripe=c.STRIPE_HIGH_SOLIDS,
    rebuild=(c.UNIVERSAL_PRIMER,), delamination=(c.UNIVERSAL_PRIMER,),
)

HULL_TOPSIDE = AreaSystem(
    family="hull_topside", prep=PREP_HULL,
    base=(c.ANTICORROSIVE_STD,), finish=(c.PU_FINISH,), stripe=c.STRIPE_HIGH_SOLIDS,
    barrier_base=(c.ANTICORROSIVE_BARRIER,),
    fouling="antifouling",
)

GENERIC = AreaSystem(
    family="generic", prep=PREP_GENERIC,
    base=(c.ANTICORROSIVE_STD,), finish=(c.PU_FINISH,), stripe=c.STRIPE_HIGH_SOLIDS,
    barrier_base=(c.ANTICORROSIVE_BARRIER,),
    fouling="antifouling",
)


# =============================================================================
# CYCLE CONSTRUCTION
# =============================================================================

def _cycle(prep: str, products: Products, alternatives: Optional[list[AlternativeCycle]] = None) -> CoatingCycle:
    return CoatingCycle(
        surface_prep=prep,
        products=products,
        alternatives=tuple(alternatives) if alternatives else None,
    )


def _antifouling_cycle() -> CoatingCycle:
    return _cycle(
        PREP_FOULING,
        (c.ANTIFOULING_SPC,),
        [AlternativeCycle(products=(c.TIE_COAT_SILICONE, c.FOULING_RELEASE), note=NOTE_FOULING_RELEASE)],
    )


def build_cycle(system: AreaSystem, defect_type: DefectType, environment) -> CoatingCycle:
    """Apply the per-defect dispatch to one area system."""
    base = system.base
    if system.barrier_base and is_severe(environment):
        base = system.barrier_base

    if defect_type == DefectType.FOULING:
        if system.fouling == "antifouling":
            return _antifouling_cycle()
        prep = PREP_IMMERSION_FOULING if system.fouling == "immersion" else PREP_SURFACE_FOULING
        return _cycle(prep, base + system.finish)

    if defect_type == DefectType.PITTING:
        return _cycle(f"{system.prep}; {PREP_STRIPE_SUFFIX}", (system.stripe,) + base + system.finish)

    if defect_type == DefectType.BLISTERING:
        return _cycle(PREP_BLISTERING, system.rebuild + system.finish)

    if defect_type == DefectType.DELAMINATION:
        return _cycle(PREP_DELAMINATION, system.delamination + system.finish)

    if defect_type == DefectType.MECHANICAL_DAMAGE:
        return _cycle(PREP_MECHANICAL, system.fast_dry + system.finish)

    return _cycle(system.prep, base + system.finish)


def _swap_last(products: Products, replacement: Products) -> Products:
    """Replace the finish (last product) with another finish family."""
    return products[:-1] + replacement


def _with_alternatives(cycle: CoatingCycle, alternatives: list[AlternativeCycle]) -> CoatingCycle:
    if not alternatives:
        return cycle
    return cycle.model_copy(update={"alternatives": tuple(alternatives)})


# =============================================================================
# AREA HANDLERS
# =============================================================================

def _fresh_water_tank(defect_type: DefectType, environment) -> CoatingCycle:
    return build_cycle(FRESH_WATER_TANK, defect_type, environment)


def _ballast_tank(defect_type: DefectType, environment) -> CoatingCycle:
    return build_cycle(BALLAST_TANK, defect_type, environment)


def _heat_resistance(defect_type: DefectType, environment) -> CoatingCycle:
    return build_cycle(HEAT_RESISTANCE, defect_type, environment)


def _underwater_hull(defect_type: DefectType, environment) -> CoatingCycle:
    cycle = build_cycle(UNDERWATER_HULL, defect_type, environment)
    if defect_type in (DefectType.GENERAL_CORROSION, DefectType.PITTING):
        swapped = _swap_last(cycle.products, (c.TIE_COAT_SILICONE, c.FOULING_RELEASE))
        cycle = _with_alternatives(cycle, [AlternativeCycle(products=swapped, note=NOTE_FOULING_RELEASE)])
    return cycle


def _deck_or_hatch(defect_type: DefectType, environment) -> CoatingCycle:
    cycle = build_cycle(DECK_OR_HATCH, defect_type, environment)
    if defect_type == DefectType.GENERAL_CORROSION:
        cycle = _with_alternatives(cycle, [
            AlternativeCycle(products=cycle.products[:-1], note=NOTE_NO_FINISH),
        ])
    return cycle


def _superstructure(defect_type: DefectType, environment) -> CoatingCycle:
    cycle = build_cycle(SUPERSTRUCTURE, defect_type, environment)
    alternatives = []
    if defect_type in (DefectType.GENERAL_CORROSION, DefectType.PITTING, DefectType.MECHANICAL_DAMAGE):
        alternatives.append(AlternativeCycle(products=_swap_last(cycle.products, (c.EPOXY_FINISH,)), note=NOTE_EPOXY_FINISH))
        if not is_severe(environment):
            alternatives.append(AlternativeCycle(products=(c.ALKYD_PRIMER, c.ALKYD_FINISH), note=NOTE_ALKYD))
    return _with_alternatives(cycle, alternatives)


def _cargo_hold(defect_type: DefectType, environment) -> CoatingCycle:
    return build_cycle(CARGO_HOLD, defect_type, environment)


def _internal_visible_steel(defect_type: DefectType, environment) -> CoatingCycle:
    cycle = build_cycle(INTERNAL_VISIBLE_STEEL, defect_type, environment)
    if defect_type in (DefectType.GENERAL_CORROSION, DefectType.MECHANICAL_DAMAGE):
        cycle = _with_alternatives(cycle, [
            AlternativeCycle(products=_swap_last(cycle.products, (c.PU_FINISH,)), note=NOTE_PU_FINISH),
        ])
    return cycle


def _internal_decks(defect_type: DefectType, environment) -> CoatingCycle:
    return build_cycle(INTERNAL_DECKS, defect_type, environment)


def _hull_topside(defect_type: DefectType, environment) -> CoatingCycle:
    cycle = build_cycle(HULL_TOPSIDE, defect_type, environment)
    if defect_type in (DefectType.GENERAL_CORROSION, DefectType.PITTING):
        cycle = _with_alternatives(cycle, [
            AlternativeCycle(products=_swap_last(cycle.products, (c.EPOXY_FINISH,)), note=NOTE_EPOXY_FINISH),
        ])
    return cycle


def _generic(defect_type: DefectType, environment) -> CoatingCycle:
    return build_cycle(GENERIC, defect_type, environment)


# =============================================================================
# AREA TABLE
# =============================================================================

_HEAT_RE = re.compile(r"\bheat\b|\btemperature\b")
_HOLD_RE = re.compile(r"\bcargo\b|\bholds?\b")


@dataclass(frozen=True)
class AreaRule:
    family: str
    predicate: Callable[[str], bool]
    handler: Callable[[DefectType, object], CoatingCycle]


AREA_RULES: tuple[AreaRule, ...] = (
    AreaRule("fresh_water_tank", lambda a: any(k in a for k in ("fresh", "drinking", "potable")), _fresh_water_tank),
    AreaRule("ballast_tank", lambda a: "ballast" in a, _ballast_tank),
    AreaRule("heat_resistance", lambda a: bool(_HEAT_RE.search(a)), _heat_resistance),
    AreaRule("underwater_hull", lambda a: "underwater" in a or "under water" in a or "bottom" in a, _underwater_hull),
    AreaRule("deck_or_hatch", lambda a: "hatch" in a or ("deck" in a and "internal" not in a), _deck_or_hatch),
    AreaRule("superstructure", lambda a: "superstructure" in a, _superstructure),
    AreaRule("cargo_hold", lambda a: bool(_HOLD_RE.search(a)), _cargo_hold),
    AreaRule("internal_visible_steel", lambda a: "internal" in a and "deck" not in a, _internal_visible_steel),
    AreaRule("internal_decks", lambda a: "internal" in a, _internal_decks),
    AreaRule("hull_topside", lambda a: "hull" in a or "topside" in a or "side shell" in a, _hull_topside),
)

FALLBACK_FAMILY = "generic"


def normalize_area(area) -> str:
    return str(area or "").strip().lower()


def normalize_defect_type(defect_type) -> DefectType:
    if isinstance(defect_type, DefectType):
        return defect_type
    try:
        return DefectType(str(defect_type or "").strip().lower())
    except ValueError:
        return DefectType.GENERAL_CORROSION


def _match_rule(area) -> Optional[AreaRule]:
    key = normalize_area(area)
    for rule in AREA_RULES:
        if rule.predicate(key):
            return rule
    return None


def match_area_family(area) -> str:
    """Name of the area family `area` dispatches to ("generic" when unmatched)."""
    rule = _match_rule(area)
    return rule.family if rule else FALLBACK_FAMILY


def area_families() -> list[str]:
    return [rule.family for rule in AREA_RULES] + [FALLBACK_FAMILY]


def select_cycle(area, defect_type, environment) -> CoatingCycle:
    """Select the repair cycle for one defect. Total: unknown inputs use fallbacks."""
    defect = normalize_defect_type(defect_type)
    rule = _match_rule(area)
    if rule is None:
        logger.debug(f"Area {area!r} not recognised, using generic cycle")
        return _generic(defect, environment)
    return rule.handler(defect, environment)

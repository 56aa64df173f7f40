"""Product catalog: the only place ProductRef instances are created.

Every entry is a frozen pydantic model and the lookup table is a read-only
mapping, so the catalog can be shared by concurrent requests.
"""

from types import MappingProxyType

from corrosionbot.models import ProductRef

# =============================================================================
# STRIPE COATS (edges, welds, pits; always first in a sequence)
# =============================================================================

STRIPE_HIGH_SOLIDS = ProductRef(name="Sigmacover 456", dft="100 µm (stripe)", notes="high-solids epoxy for edges, welds and pits")
STRIPE_TANK = ProductRef(name="Sigmaguard CSF 585", dft="100 µm (stripe)", notes="solvent-free epoxy stripe coat, brush applied")
STRIPE_POTABLE = ProductRef(name="Sigmaguard CSF 650", dft="100 µm (stripe)", notes="potable-water approved stripe coat")
STRIPE_HEAT = ProductRef(name="Sigmatherm 540", dft="25 µm (stripe)", notes="brush stripe on edges before full coat")

# =============================================================================
# PRIMERS / INTERMEDIATES
# =============================================================================

ANTICORROSIVE_STD = ProductRef(name="Sigmacover 350", dft="125 µm (1x)", notes="anticorrosive intermediate")
ANTICORROSIVE_BARRIER = ProductRef(name="Sigmacover 380", dft="150 µm (1x)", notes="barrier-grade high-build intermediate")
REBUILD_BARRIER = ProductRef(name="Sigmacover 380", dft="125 µm (1x)", notes="barrier / film rebuild")
REBUILD_FILM = ProductRef(name="Sigmacover 350", dft="150 µm (1x)", notes="film rebuild")
FAST_DRY_PRIMER = ProductRef(name="Sigmarine 28", dft="75 µm (1x)", notes="fast-drying primer")
UNIVERSAL_PRIMER = ProductRef(name="Sigmacover 280", dft="75 µm (1x)", notes="universal epoxy primer")
ALKYD_PRIMER = ProductRef(name="Sigmarine 24", dft="2 x 40 µm", notes="alkyd primer")
UNDERWATER_PRIMER = ProductRef(name="Sigmaprime 200", dft="2 x 125 µm", notes="anticorrosive underwater epoxy")
UNDERWATER_SPOT_PRIMER = ProductRef(name="Sigmaprime 200", dft="125 µm (spot)", notes="spot repair on bare steel")
TIE_COAT_SILICONE = ProductRef(name="Sigmaglide 790", dft="150 µm (1x)", notes="tie coat for fouling-release finish")
ABRASION_EPOXY = ProductRef(name="Sigmashield 880", dft="200 µm (1x)", notes="abrasion-resistant epoxy for decks and hatch covers")
HOLD_EPOXY = ProductRef(name="Sigmashield 220", dft="2 x 150 µm", notes="abrasion-resistant epoxy for dry cargo holds")
TANK_EPOXY = ProductRef(name="Sigmaguard CSF 585", dft="2 x 160 µm", notes="solvent-free immersion epoxy for ballast tanks")
POTABLE_EPOXY = ProductRef(name="Sigmaguard CSF 650", dft="2 x 150 µm", notes="solvent-free epoxy approved for drinking water")
HEAT_ZINC_PRIMER = ProductRef(name="Sigmazinc 109 HS", dft="75 µm (1x)", notes="zinc silicate primer for high-temperature service")

# =============================================================================
# FINISHES
# =============================================================================

PU_FINISH = ProductRef(name="Sigmadur 550", dft="50 µm (1x)", notes="polyurethane finish")
PU_GLOSS_FINISH = ProductRef(name="Sigmadur 520", dft="50 µm (1x)", notes="high-gloss polyurethane finish, colour retention")
EPOXY_FINISH = ProductRef(name="Sigmacover 435", dft="75 µm (1x)", notes="epoxy finish; chalks under UV")
ALKYD_FINISH = ProductRef(name="Sigmarine 48", dft="2 x 35 µm", notes="alkyd finish")
HEAT_SILICONE = ProductRef(name="Sigmatherm 540", dft="2 x 25 µm", notes="silicone aluminium finish up to 540 °C")
ANTIFOULING_SPC = ProductRef(name="Ecofleet 530", dft="follow TDS", notes="antifouling; check tie-coat compatibility")
FOULING_RELEASE = ProductRef(name="Sigmaglide 990", dft="150 µm (1x)", notes="silicone fouling-release finish")


CATALOG = MappingProxyType({
    "stripe_high_solids": STRIPE_HIGH_SOLIDS,
    "stripe_tank": STRIPE_TANK,
    "stripe_potable": STRIPE_POTABLE,
    "stripe_heat": STRIPE_HEAT,
    "anticorrosive_std": ANTICORROSIVE_STD,
    "anticorrosive_barrier": ANTICORROSIVE_BARRIER,
    "rebuild_barrier": REBUILD_BARRIER,
    "rebuild_film": REBUILD_FILM,
    "fast_dry_primer": FAST_DRY_PRIMER,
    "universal_primer": UNIVERSAL_PRIMER,
    "alkyd_primer": ALKYD_PRIMER,
    "underwater_primer": UNDERWATER_PRIMER,
    "underwater_spot_primer": UNDERWATER_SPOT_PRIMER,
    "tie_coat_silicone": TIE_COAT_SILICONE,
    "abrasion_epoxy": ABRASION_EPOXY,
    "hold_epoxy": HOLD_EPOXY,
    "tank_epoxy": TANK_EPOXY,
    "potable_epoxy": POTABLE_EPOXY,
    "heat_zinc_primer": HEAT_ZINC_PRIMER,
    "pu_finish": PU_FINISH,
    "pu_gloss_finish": PU_GLOSS_FINISH,
    "epoxy_finish": EPOXY_FINISH,
    "alkyd_finish": ALKYD_FINISH,
    "heat_silicone": HEAT_SILICONE,
    "antifouling_spc": ANTIFOULING_SPC,
    "fouling_release": FOULING_RELEASE,
})

STRIPE_COATS = frozenset({STRIPE_HIGH_SOLIDS, STRIPE_TANK, STRIPE_POTABLE, STRIPE_HEAT})


def is_stripe_coat(product: ProductRef) -> bool:
    return product in STRIPE_COATS


def catalog_entries() -> list[dict]:
    """Catalog as plain dicts, keyed entries first-declared first."""
    return [{"key": key, **product.model_dump()} for key, product in CATALOG.items()]

"""Reconciles raw classifier output into exactly one Item per submitted image.

The classifier returns free text that should contain
`{"items": [{"defect": {...}}, ...]}` but is treated as untrusted:

1. `parse_strict`: plain `json.loads` of the whole text
2. `extract_json_block`: first `{` to last `}` substring, reparsed
3. both failing → empty result

A missing or non-list `items` yields one default defect per image. Longer
lists are clamped to the image count; shorter ones are padded with default
defects so index i always describes image i.
"""

import json
import logging
import re
from typing import Any

from corrosionbot.logic.cycle_selector import select_cycle
from corrosionbot.logic.errors import UpstreamMalformed
from corrosionbot.models import Defect, Item

logger = logging.getLogger(__name__)

_JSON_BLOCK_RE = re.compile(r"\{.*\}", re.DOTALL)

DEFAULT_NOTE = "default"
MISSING_NOTE = "no classification returned for this image"


def default_defect(notes: str = DEFAULT_NOTE) -> Defect:
    """Low-confidence placeholder used whenever the classifier gave nothing usable."""
    return Defect(type="general_corrosion", severity="moderate", confidence=0.5, notes=notes)


# =============================================================================
# PARSING
# =============================================================================

def parse_strict(text: str) -> Any:
    """Parse the whole text as JSON.

    Raises:
        UpstreamMalformed: If the text is not valid JSON.
    """
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise UpstreamMalformed(f"Classifier output is not valid JSON: {e}") from e


def extract_json_block(text: str) -> Any:
    """Parse the first brace-delimited block embedded in surrounding prose.

    Raises:
        UpstreamMalformed: If no block is found or it does not parse.
    """
    match = _JSON_BLOCK_RE.search(text or "")
    if not match:
        raise UpstreamMalformed("No JSON object found in classifier output")
    return parse_strict(match.group(0))


def parse_classifier_output(raw: Any) -> Any:
    """Strict parse, then block extraction; `{"items": []}` when both fail."""
    if isinstance(raw, (dict, list)):
        return raw
    text = (raw or "").strip() if isinstance(raw, str) else str(raw or "")
    if not text:
        return {"items": []}
    try:
        return parse_strict(text)
    except UpstreamMalformed:
        pass
    try:
        parsed = extract_json_block(text)
        logger.warning("Recovered classifier JSON embedded in surrounding text")
        return parsed
    except UpstreamMalformed as e:
        logger.warning(f"Unrecoverable classifier output, using defaults: {e}")
        return {"items": []}


# =============================================================================
# DEFECT NORMALIZATION
# =============================================================================

def _defect_from_entry(entry: Any) -> Defect:
    if not isinstance(entry, dict):
        return default_defect()
    raw_defect = entry.get("defect")
    if not isinstance(raw_defect, dict):
        return default_defect()
    return Defect(
        type=raw_defect.get("type"),
        severity=raw_defect.get("severity"),
        confidence=raw_defect.get("confidence"),
        notes=raw_defect.get("notes"),
    )


def reconcile_defects(parsed: Any, image_count: int) -> list[Defect]:
    """Align parsed classifier entries 1:1 with the submitted images."""
    entries = parsed.get("items") if isinstance(parsed, dict) else None
    if not isinstance(entries, list):
        logger.warning("Classifier output has no items list, synthesizing defaults")
        return [default_defect() for _ in range(image_count)]

    if len(entries) > image_count:
        logger.info(f"Dropping {len(entries) - image_count} surplus classifier item(s)")

    defects = [_defect_from_entry(entry) for entry in entries[:image_count]]

    missing = image_count - len(defects)
    if missing > 0:
        logger.warning(f"Classifier returned {len(defects)} item(s) for {image_count} image(s), padding")
        defects.extend(default_defect(MISSING_NOTE) for _ in range(missing))
    return defects


def reconcile(raw: Any, image_count: int, environment, area) -> list[Item]:
    """Turn raw classifier output into exactly `image_count` recommended items."""
    image_count = max(0, int(image_count))
    parsed = parse_classifier_output(raw)
    return [
        Item(defect=defect, recommendation=select_cycle(area, defect.type, environment))
        for defect in reconcile_defects(parsed, image_count)
    ]

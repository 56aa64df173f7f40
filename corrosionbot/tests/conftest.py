"""Shared fixtures for the CorrosionBot test suite.

Loads the REAL bundled config (corrosionbot/config.yaml) and pins actual config values.
The classifier collaborator is always faked: no test reaches a real LLM.
"""

import sys
import json
from pathlib import Path

import pytest

# Ensure the package is importable when running from a source checkout
PACKAGE_DIR = Path(__file__).resolve().parent.parent
PROJECT_ROOT = PACKAGE_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from corrosionbot.config_loader import load_engine_config
from corrosionbot.logic.engine import CorrosionEngine, DefectClassifier
from corrosionbot.logic.errors import UpstreamUnavailable


# =============================================================================
# CONFIG FIXTURES
# =============================================================================

@pytest.fixture
def config():
    """Load real EngineConfig from the bundled YAML (not mocked)."""
    return load_engine_config()


# =============================================================================
# CLASSIFIER FAKES
# =============================================================================

class FakeClassifier(DefectClassifier):
    """Returns a canned response and records every call."""

    def __init__(self, response: str = "{}"):
        self.response = response
        self.calls = []

    def classify(self, images, user_prompt, system_prompt):
        self.calls.append({"images": list(images), "user_prompt": user_prompt, "system_prompt": system_prompt})
        return self.response


class FailingClassifier(DefectClassifier):
    def __init__(self):
        self.calls = 0

    def classify(self, images, user_prompt, system_prompt):
        self.calls += 1
        raise UpstreamUnavailable("Classifier call failed: connection refused")


def classifier_json(*defects) -> str:
    """Build the classifier's JSON text from (type, severity, confidence) tuples."""
    items = [
        {"defect": {"type": t, "severity": s, "confidence": conf, "notes": f"{t} seen"}}
        for t, s, conf in defects
    ]
    return json.dumps({"items": items})


@pytest.fixture
def fake_classifier():
    return FakeClassifier(classifier_json(("pitting", "severe", 0.9)))


@pytest.fixture
def engine(config, fake_classifier):
    return CorrosionEngine(classifier=fake_classifier, config=config)


# =============================================================================
# REQUEST FIXTURES
# =============================================================================

@pytest.fixture
def images():
    """Three tiny data-URL images."""
    return [
        "data:image/jpeg;base64,/9j/4AAQSkZJRg==",
        "data:image/png;base64,iVBORw0KGgo=",
        "data:image/webp;base64,UklGRgAAAABXRUJQ",
    ]


@pytest.fixture
def meta():
    return {
        "area": "Hull/Topside",
        "environment": "Auto",
        "substrate": "Steel",
        "existingSystem": "Epoxy/PU",
        "location": "Porto di Napoli",
        "coords": None,
    }

"""
Engine Facade - orchestrates one inspection request.

Pipeline:
1. Estimate the corrosivity category from the location text
2. Resolve the effective category (explicit override wins over the estimate)
3. Call the external defect classifier once with all images
4. Reconcile its output into one item per image, with recommendations
5. Assemble the report with both environments and the disclaimer
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import ValidationError

from corrosionbot.config_loader import EngineConfig, get_config
from corrosionbot.llm_router import llm_vision_call
from corrosionbot.logic.environment import estimate_environment
from corrosionbot.logic.errors import InvalidInput, UpstreamUnavailable
from corrosionbot.logic.reconciler import reconcile
from corrosionbot.models import (
    AUTO_ENVIRONMENT,
    DefectType,
    EnvironmentCategory,
    InspectionMeta,
    InspectionReport,
    Severity,
)
from corrosionbot.prompts import CLASSIFIER_SYSTEM_PROMPT, CLASSIFIER_USER_PROMPT

logger = logging.getLogger(__name__)


# =============================================================================
# CLASSIFIER COLLABORATOR
# =============================================================================

class DefectClassifier(ABC):
    """External visual classifier. Returns free text expected to hold JSON."""

    @abstractmethod
    def classify(self, images: list[str], user_prompt: str, system_prompt: str) -> str:
        """Raises UpstreamUnavailable when the call itself fails."""
        ...


class LLMVisionClassifier(DefectClassifier):
    """Classifier backed by a vision-capable LLM through the router."""

    def __init__(self, model: Optional[str] = None, temperature: Optional[float] = None,
                 max_tokens: Optional[int] = None, config: Optional[EngineConfig] = None):
        settings = (config or get_config()).llm
        self.model = model or settings.classifier_model
        self.temperature = settings.classifier_temperature if temperature is None else temperature
        self.max_tokens = max_tokens or settings.classifier_max_tokens

    def classify(self, images: list[str], user_prompt: str, system_prompt: str) -> str:
        result = llm_vision_call(
            model=self.model,
            user_prompt=user_prompt,
            images=images,
            system_prompt=system_prompt,
            json_mode=True,
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
        )
        if result.error:
            raise UpstreamUnavailable(f"Classifier call failed: {result.error}")
        return (result.text or "").strip() or "{}"


# =============================================================================
# HELPERS
# =============================================================================

def _parse_meta(meta: Any) -> InspectionMeta:
    if meta is None:
        return InspectionMeta()
    if isinstance(meta, InspectionMeta):
        return meta
    if not isinstance(meta, dict):
        raise InvalidInput("Metadata must be an object")
    try:
        return InspectionMeta.model_validate(meta)
    except ValidationError as e:
        raise InvalidInput(f"Invalid metadata: {e.errors()[0].get('msg', e)}") from e


def is_override(environment: Optional[str]) -> bool:
    """True when the inspector picked a category instead of "Auto"."""
    if environment is None:
        return False
    value = str(environment).strip()
    return bool(value) and value.lower() != AUTO_ENVIRONMENT.lower()


def resolve_environment(meta: InspectionMeta) -> tuple[EnvironmentCategory, str]:
    """(estimated, effective). The override is kept verbatim, never replaced."""
    estimated = estimate_environment(meta.location)
    if is_override(meta.environment):
        return estimated, str(meta.environment).strip()
    return estimated, estimated.value


def build_classifier_prompts(meta: InspectionMeta, effective_env: str, image_count: int) -> tuple[str, str]:
    """(system_prompt, user_prompt) for the classifier call."""
    system_prompt = CLASSIFIER_SYSTEM_PROMPT.format(
        defect_types=", ".join(t.value for t in DefectType),
        severities=", ".join(s.value for s in Severity),
    )
    user_prompt = CLASSIFIER_USER_PROMPT.format(
        area=meta.area,
        environment=effective_env,
        substrate=meta.substrate,
        existing_system=meta.existing_system,
        image_count=image_count,
    )
    return system_prompt, user_prompt


# =============================================================================
# FACADE
# =============================================================================

class CorrosionEngine:
    """
    Stateless facade over environment estimation, classification and
    cycle selection. Safe to share between concurrent requests.
    """

    def __init__(self, classifier: Optional[DefectClassifier] = None, config: Optional[EngineConfig] = None):
        self.config = config or get_config()
        self.classifier = classifier or LLMVisionClassifier(config=self.config)

    def run(self, images: Any, meta: Any = None) -> InspectionReport:
        """Classify every image and attach a repair cycle to each.

        Raises:
            InvalidInput: Empty or non-list images, or malformed metadata.
            UpstreamUnavailable: The classifier call failed.
        """
        if not isinstance(images, (list, tuple)) or len(images) == 0:
            raise InvalidInput("No images")
        images = list(images)
        parsed_meta = _parse_meta(meta)

        estimated_env, effective_env = resolve_environment(parsed_meta)
        logger.info(
            f"Inspection: {len(images)} image(s), area={parsed_meta.area!r}, "
            f"estimated={estimated_env.value}, effective={effective_env}"
        )

        system_prompt, user_prompt = build_classifier_prompts(parsed_meta, effective_env, len(images))
        raw = self.classifier.classify(images, user_prompt, system_prompt)

        items = reconcile(raw, len(images), effective_env, parsed_meta.area)

        echoed = dict(meta) if isinstance(meta, dict) else parsed_meta.model_dump(by_alias=True)
        echoed["estimatedEnv"] = estimated_env.value
        echoed["effectiveEnv"] = effective_env

        return InspectionReport(meta=echoed, items=items, disclaimer=self.config.disclaimer)

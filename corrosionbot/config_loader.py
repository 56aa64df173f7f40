"""Configuration Loader for the coating inspection engine.

Runtime settings (LLM models, disclaimer text, environment keyword rules and
UI option lists) live in a YAML file validated by pydantic models. The product
catalog and decision table are code constants and are not configurable.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# =============================================================================
# PYDANTIC MODELS FOR CONFIGURATION VALIDATION
# =============================================================================

class AppInfo(BaseModel):
    """Application metadata."""
    name: str = "CorrosionBot"
    version: str = "1.0"
    description: str = ""


class LLMSettings(BaseModel):
    """Model selection and sampling for the two LLM collaborators."""
    classifier_model: str = "gpt-4o-mini"
    classifier_temperature: float = 0.0
    classifier_max_tokens: int = 700
    chat_model: str = "gpt-4o-mini"
    chat_temperature: float = 0.2
    chat_max_tokens: Optional[int] = None


class EnvironmentRules(BaseModel):
    """Keyword heuristics for corrosivity estimation from a location string."""
    baseline: str = "C4"
    port_keywords: list[str] = Field(default_factory=list)
    industrial_keywords: list[str] = Field(default_factory=list)
    offshore_keywords: list[str] = Field(default_factory=list)


class UIOptions(BaseModel):
    """Option lists offered to the inspection form."""
    areas: list[str] = Field(default_factory=list)
    environments: list[str] = Field(default_factory=list)
    substrates: list[str] = Field(default_factory=list)
    existing_systems: list[str] = Field(default_factory=list)
    max_images: int = 5


# =============================================================================
# MAIN CONFIGURATION CONTAINER
# =============================================================================

@dataclass
class EngineConfig:
    """Complete engine configuration container."""

    app: AppInfo = field(default_factory=AppInfo)
    llm: LLMSettings = field(default_factory=LLMSettings)
    disclaimer: str = (
        "Non-binding AI output; always verify product data sheets (TDS/SDS) "
        "and actual site conditions."
    )
    environment: EnvironmentRules = field(default_factory=EnvironmentRules)
    ui: UIOptions = field(default_factory=UIOptions)
    source_path: Optional[str] = None

    def summary(self) -> dict:
        """Non-secret view of the configuration for diagnostics."""
        return {
            "app": self.app.model_dump(),
            "llm": self.llm.model_dump(),
            "environment_baseline": self.environment.baseline,
            "source": self.source_path,
        }


# =============================================================================
# CONFIGURATION LOADER
# =============================================================================

_PACKAGE_DIR = Path(__file__).parent
DEFAULT_CONFIG_PATH = _PACKAGE_DIR / "config.yaml"


def _resolve_config_path(config_path: Optional[str] = None) -> Path:
    """Explicit path, then $CORROSIONBOT_CONFIG, then the bundled config.yaml."""
    if config_path:
        return Path(config_path)
    env_path = os.environ.get("CORROSIONBOT_CONFIG")
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def load_engine_config(config_path: Optional[str] = None) -> EngineConfig:
    """Load and validate engine configuration from a YAML file.

    Args:
        config_path: Path to config file. If None, uses $CORROSIONBOT_CONFIG
            or the bundled default.

    Returns:
        Validated EngineConfig object

    Raises:
        FileNotFoundError: If the resolved path does not exist.
        pydantic.ValidationError: If a section has the wrong shape.
    """
    path = _resolve_config_path(config_path)

    with open(path, 'r', encoding='utf-8') as f:
        raw = yaml.safe_load(f) or {}

    config = EngineConfig(source_path=str(path))
    config.app = AppInfo(**raw.get("app", {}))
    config.llm = LLMSettings(**raw.get("llm", {}))
    if raw.get("disclaimer"):
        config.disclaimer = str(raw["disclaimer"]).strip()
    config.environment = EnvironmentRules(**raw.get("environment", {}))
    config.ui = UIOptions(**raw.get("ui", {}))

    logger.info(f"Loaded engine config from {path}")
    return config


# =============================================================================
# GLOBAL CONFIG SINGLETON
# =============================================================================

_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Get the loaded engine configuration, loading it on first use."""
    global _config

    if _config is None:
        _config = load_engine_config()

    return _config


def reload_config(config_path: Optional[str] = None) -> EngineConfig:
    """Force reload of configuration.

    Args:
        config_path: Optional specific path to load from.
    """
    global _config

    _config = load_engine_config(config_path)
    return _config

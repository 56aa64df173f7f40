"""
Provider credentials for the classifier and assistant models.

Keys come only from the environment (optionally seeded from a `.env` file next
to the package). The health endpoint sees masked keys, never full ones.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), "..", ".env"))


PROVIDER_ENV_VARS = {
    "openai": "OPENAI_API_KEY",
    "gemini": "GEMINI_API_KEY",
}


class ProviderStatus(BaseModel):
    provider: str
    configured: bool
    masked_key: Optional[str] = None


def provider_for_model(model: str) -> str:
    """gpt-* and o-series models go to OpenAI, everything else to Gemini."""
    name = (model or "").lower()
    if name.startswith("gpt-") or name.startswith("o"):
        return "openai"
    return "gemini"


def mask_key(key: Optional[str]) -> Optional[str]:
    if not key:
        return None
    if len(key) > 8:
        return f"{key[:4]}...{key[-4:]}"
    return "***"


class ApiKeysManager:

    def get_key(self, provider: str) -> Optional[str]:
        """Key for `provider`, None when unset, empty or unknown."""
        env_var = PROVIDER_ENV_VARS.get(provider)
        return (os.getenv(env_var) or None) if env_var else None

    def get_status(self) -> list[ProviderStatus]:
        return [
            ProviderStatus(provider=p, configured=self.get_key(p) is not None, masked_key=mask_key(self.get_key(p)))
            for p in PROVIDER_ENV_VARS
        ]

    def get_configured_providers(self) -> list[str]:
        return [s.provider for s in self.get_status() if s.configured]

    def is_model_ready(self, model: str) -> bool:
        """True when the provider serving `model` has a key."""
        return self.get_key(provider_for_model(model)) is not None


api_keys_manager = ApiKeysManager()

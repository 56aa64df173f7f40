import json
import logging
import time
from typing import Optional

from corrosionbot.config_loader import EngineConfig, get_config
from corrosionbot.llm_router import llm_call
from corrosionbot.logic.errors import InvalidInput, UpstreamUnavailable
from corrosionbot.prompts import CHAT_SYSTEM_PROMPT, CHAT_USER_PROMPT

logger = logging.getLogger(__name__)


def _render_history(history: Optional[list]) -> str:
    """Prior turns as a plain transcript, oldest first."""
    lines = []
    for turn in history or []:
        role = turn.get("role") if isinstance(turn, dict) else getattr(turn, "role", "user")
        content = turn.get("content") if isinstance(turn, dict) else getattr(turn, "content", "")
        speaker = "User" if role == "user" else "Assistant"
        lines.append(f"{speaker}: {content}")
    if not lines:
        return ""
    return "Conversation so far:\n" + "\n".join(lines) + "\n\n"


class CoatingsAssistant:
    """Follow-up Q&A over the last inspection result.

    The inspection result is passed through verbatim as JSON context; nothing
    in the answer is parsed or acted upon.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        settings = (config or get_config()).llm
        self.model_name = settings.chat_model
        self.temperature = settings.chat_temperature
        self.max_tokens = settings.chat_max_tokens

    def build_prompt(self, question: str, meta: Optional[dict], last_result: Optional[dict],
                     history: Optional[list] = None) -> str:
        context = json.dumps({"meta": meta, "lastResult": last_result}, ensure_ascii=False)
        return CHAT_USER_PROMPT.format(
            context=context,
            history=_render_history(history),
            question=question,
        )

    def ask(self, question: Optional[str], meta: Optional[dict] = None,
            last_result: Optional[dict] = None, history: Optional[list] = None) -> str:
        """Answer one question. Raises InvalidInput / UpstreamUnavailable."""
        if not question or not str(question).strip():
            raise InvalidInput("Missing question")

        logger.info(f"💬 New question: {str(question)[:80]}...")
        t0 = time.time()

        result = llm_call(
            model=self.model_name,
            user_prompt=self.build_prompt(str(question).strip(), meta, last_result, history),
            system_prompt=CHAT_SYSTEM_PROMPT,
            json_mode=False,
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
        )
        if result.error:
            logger.error(f"Assistant call failed: {result.error}")
            raise UpstreamUnavailable(f"Assistant call failed: {result.error}")

        logger.info(f"⏱️ TIMING chat ({self.model_name}): {time.time() - t0:.2f}s")
        return (result.text or "").strip()

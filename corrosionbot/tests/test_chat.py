"""Q&A assistant: prompt assembly and error mapping with a mocked LLM."""

import json

import pytest
from unittest.mock import patch

from corrosionbot.chat import CoatingsAssistant, _render_history
from corrosionbot.llm_router import LLMResult
from corrosionbot.logic.errors import InvalidInput, UpstreamUnavailable
from corrosionbot.prompts import CHAT_SYSTEM_PROMPT


@pytest.fixture
def assistant(config):
    return CoatingsAssistant(config=config)


class TestBuildPrompt:
    def test_context_is_passed_verbatim(self, assistant):
        last_result = {"items": [{"defect": {"type": "pitting"}}]}
        prompt = assistant.build_prompt("Which stripe coat?", {"area": "Deck"}, last_result)
        context_line = prompt.splitlines()[0]
        context = json.loads(context_line.split(": ", 1)[1])
        assert context == {"meta": {"area": "Deck"}, "lastResult": last_result}
        assert prompt.endswith("User question: Which stripe coat?")

    def test_missing_context_is_null(self, assistant):
        prompt = assistant.build_prompt("Hi", None, None)
        assert '"lastResult": null' in prompt

    def test_history_rendered_in_order(self):
        text = _render_history([
            {"role": "user", "content": "Which primer?"},
            {"role": "assistant", "content": "Sigmacover 280."},
        ])
        assert text.index("User: Which primer?") < text.index("Assistant: Sigmacover 280.")

    def test_empty_history_renders_nothing(self):
        assert _render_history(None) == ""
        assert _render_history([]) == ""


class TestAsk:
    @patch("corrosionbot.chat.llm_call")
    def test_returns_stripped_answer(self, mock_call, assistant):
        mock_call.return_value = LLMResult(text="  Use Sigmadur 550.  ")
        assert assistant.ask("Topcoat?") == "Use Sigmadur 550."

    @patch("corrosionbot.chat.llm_call")
    def test_uses_free_text_mode_and_system_prompt(self, mock_call, assistant):
        mock_call.return_value = LLMResult(text="ok")
        assistant.ask("Topcoat?", meta={"area": "Deck"})
        kwargs = mock_call.call_args.kwargs
        assert kwargs["json_mode"] is False
        assert kwargs["system_prompt"] == CHAT_SYSTEM_PROMPT
        assert kwargs["model"] == assistant.model_name
        assert kwargs["temperature"] == 0.2

    @pytest.mark.parametrize("question", [None, "", "  \n "])
    @patch("corrosionbot.chat.llm_call")
    def test_missing_question(self, mock_call, assistant, question):
        with pytest.raises(InvalidInput, match="Missing question"):
            assistant.ask(question)
        mock_call.assert_not_called()

    @patch("corrosionbot.chat.llm_call")
    def test_upstream_error(self, mock_call, assistant):
        mock_call.return_value = LLMResult(text="", error="timeout")
        with pytest.raises(UpstreamUnavailable, match="timeout"):
            assistant.ask("Topcoat?")

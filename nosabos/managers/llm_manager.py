# nosabos/managers/llm_manager.py - Gemini streaming and the Responses proxy

import asyncio
import logging
import re
from typing import Any, AsyncIterator, Dict, Optional

import requests
from google import genai

from nosabos.config import settings
from nosabos.exercises.prompts import build_explain_prompt, build_note_prompt
from nosabos.utils.ndjson import iter_ndjson
from nosabos.utils.text import parse_yes_no, safe_parse_json

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_response_text(payload: Any) -> str:
    """Pull the reply text out of whichever response shape the upstream returned"""
    if isinstance(payload, str):
        return payload
    if not isinstance(payload, dict):
        return ""

    if isinstance(payload.get("output_text"), str) and payload["output_text"]:
        return payload["output_text"]

    output = payload.get("output")
    if isinstance(output, list):
        joined = " ".join(
            "".join((segment or {}).get("text") or "" for segment in (item or {}).get("content") or [])
            for item in output
        ).strip()
        if joined:
            return joined

    content = payload.get("content")
    if isinstance(content, list) and content and isinstance(content[0], dict) and content[0].get("text"):
        return str(content[0]["text"])

    choices = payload.get("choices")
    if isinstance(choices, list) and choices:
        message = (choices[0] or {}).get("message") or {}
        return str(message.get("content") or "")

    return ""


class LLMManager:
    """Generation goes through Gemini streams; judging, explanations and notes go through the Responses proxy"""

    def __init__(self, api_key: str = None, model: str = None, responses_url: str = None,
                 responses_model: str = None, timeout: int = None):
        self.model = model or settings.gemini_model
        self.responses_url = (responses_url or settings.responses_url).rstrip("/")
        self.responses_model = responses_model or settings.responses_model
        self.timeout = timeout or settings.responses_timeout

        api_key = api_key or settings.gemini_api_key
        self.client = genai.Client(api_key=api_key) if api_key else None
        if self.client:
            logger.info(f"✅ Gemini client ready ({self.model})")
        else:
            logger.warning("Gemini API key missing; generation will use the Responses fallback")

    @property
    def gemini_available(self) -> bool:
        return self.client is not None

    # ==================== GEMINI ====================

    async def stream_text(self, prompt: str) -> AsyncIterator[str]:
        if not self.client:
            raise RuntimeError("Gemini is not configured")

        stream = await self.client.aio.models.generate_content_stream(model=self.model, contents=prompt)
        async for chunk in stream:
            text = chunk.text
            if text:
                yield text

    async def stream_objects(self, prompt: str) -> AsyncIterator[Dict[str, Any]]:
        """NDJSON objects parsed from the streamed reply"""
        async for obj in iter_ndjson(self.stream_text(prompt)):
            yield obj

    # ==================== RESPONSES PROXY ====================

    def _post_responses(self, payload: Dict[str, Any]) -> Any:
        response = requests.post(
            f"{self.responses_url}/proxyResponses",
            json=payload,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            timeout=self.timeout,
        )
        if "application/json" in response.headers.get("content-type", ""):
            return response.json()
        return response.text

    async def call_responses(self, input: Any, model: str = None) -> str:
        """Plain-text completion; any failure yields an empty string"""
        payload = {
            "model": model or self.responses_model,
            "text": {"format": {"type": "text"}},
            "input": input,
        }
        try:
            data = await asyncio.to_thread(self._post_responses, payload)
            return str(extract_response_text(data) or "")
        except Exception as e:
            logger.error(f"Responses call failed: {e}")
            return ""

    async def judge(self, prompt: str) -> bool:
        verdict = await self.call_responses(prompt)
        logger.debug(f"Judge verdict: {verdict[:20]!r}")
        return parse_yes_no(verdict)

    async def explain_answer(self, question: str, user_answer: str, correct_answer: str,
                             target_lang: str = "Spanish", support_lang: str = "English",
                             question_type: str = "fill", user_language: str = "en") -> str:
        prompt = build_explain_prompt(
            question, user_answer, correct_answer, target_lang, support_lang, question_type, user_language
        )
        return await self.call_responses(prompt)

    async def generate_note_content(self, concept: str, user_answer: Optional[str] = None, was_correct: bool = False,
                                    target_lang: str = "es", support_lang: str = "en", cefr_level: str = "A1",
                                    module_type: str = "vocabulary") -> Dict[str, str]:
        """Example sentence and summary for a study note, with fixed text when the model misbehaves"""
        prompt = build_note_prompt(concept, user_answer, was_correct, target_lang, support_lang,
                                   cefr_level, module_type)
        try:
            reply = (await self.call_responses(prompt)).strip()
            match = _JSON_OBJECT.search(reply)
            if match:
                parsed = safe_parse_json(match.group(0))
                if parsed is None:
                    raise ValueError("Note reply is not valid JSON")
                return {
                    "example": parsed.get("example") or f'Example for "{concept}"',
                    "summary": parsed.get("summary") or f'Study note for "{concept}"',
                }
            return {
                "example": f"Example: {concept}",
                "summary": f"Practice this {cefr_level} {module_type} concept regularly.",
            }
        except Exception as e:
            logger.error(f"Error generating note content: {e}")
            return {
                "example": f"{concept}",
                "summary": f"Keep practicing this {cefr_level} level concept.",
            }

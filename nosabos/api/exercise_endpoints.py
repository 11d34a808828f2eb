# nosabos/api/exercise_endpoints.py - Exercise generation, grading and the Responses proxy

import asyncio
import json
import logging
from typing import Any, Dict

import requests
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from nosabos.api.endpoints import get_managers
from nosabos.config import settings
from nosabos.exercises.generator import HIDDEN_FIELDS, public_event, public_view
from nosabos.exercises.grading import grade
from nosabos.models.schemas import ExerciseRequest, ExplainRequest, SubmitRequest

logger = logging.getLogger(__name__)

exercise_router = APIRouter(prefix="/api/exercises", tags=["exercises"])
proxy_router = APIRouter(tags=["proxy"])


async def submit_answer(managers: Dict[str, Any], exercise_id: str, answer: Dict[str, Any],
                        npub: str = None, final_quiz: bool = False) -> Dict[str, Any]:
    """Grade against the cached answer key and credit XP; shared with the WebSocket handler.

    An exercise is graded once: the answer key is dropped from the cache as
    soon as a verdict exists, since the response reveals it.
    """
    exercise = await managers['cache'].get_exercise(exercise_id)
    if exercise is None:
        raise LookupError(f"Exercise {exercise_id} not found or expired")

    result = await grade(exercise, answer, managers['llm'], final_quiz=final_quiz)
    await managers['cache'].delete_exercise(exercise_id)
    result["solution"] = {key: exercise[key] for key in HIDDEN_FIELDS if key in exercise}

    if npub and result["xp"] > 0:
        result["xpUpdate"] = await managers['progress'].award_xp(npub, result["xp"], exercise.get("targetLang"))
    return result


# ============================================================================
# EXERCISES
# ============================================================================

@exercise_router.post("/generate")
async def generate_exercise(body: ExerciseRequest, stream: bool = True, managers: Dict = Depends(get_managers)):
    """NDJSON stream of phase lines, one exercise line and a closing done line"""
    generator = managers['generator']

    if not stream:
        try:
            exercise = await generator.generate(body.kind, **body.options())
            return public_view(exercise)
        except Exception as e:
            logger.error(f"Error generating {body.kind} exercise: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    async def lines():
        try:
            async for event in generator.stream(body.kind, **body.options()):
                yield json.dumps(public_event(event), ensure_ascii=False) + "\n"
        except Exception as e:
            logger.error(f"Error streaming {body.kind} exercise: {e}")
            yield json.dumps({"type": "error", "message": str(e)}) + "\n"
        yield json.dumps({"type": "done"}) + "\n"

    return StreamingResponse(lines(), media_type="application/x-ndjson")


@exercise_router.get("/{exercise_id}")
async def get_exercise(exercise_id: str, managers: Dict = Depends(get_managers)):
    exercise = await managers['cache'].get_exercise(exercise_id)
    if exercise is None:
        raise HTTPException(status_code=404, detail="Exercise not found or expired")
    return public_view(exercise)


@exercise_router.post("/{exercise_id}/submit")
async def submit_exercise(exercise_id: str, body: SubmitRequest, managers: Dict = Depends(get_managers)):
    try:
        return await submit_answer(managers, exercise_id, body.answer, body.npub, body.final_quiz)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error grading exercise {exercise_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@exercise_router.post("/explain")
async def explain_answer(body: ExplainRequest, managers: Dict = Depends(get_managers)):
    """Why an answer was wrong, in the learner's interface language"""
    explanation = await managers['llm'].explain_answer(
        body.question,
        body.user_answer,
        body.correct_answer,
        target_lang=body.target_lang,
        support_lang=body.support_lang,
        question_type=body.question_type,
        user_language=body.user_language,
    )
    return {"explanation": explanation.strip()}


# ============================================================================
# RESPONSES PROXY
# ============================================================================

def _forward_responses(body: Dict[str, Any]) -> requests.Response:
    if not settings.openai_api_key:
        raise RuntimeError("OPENAI_API_KEY is not configured")
    return requests.post(
        settings.openai_responses_endpoint,
        json=body,
        headers={
            "Authorization": f"Bearer {settings.openai_api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        },
        timeout=settings.responses_timeout,
    )


@proxy_router.post("/proxyResponses")
async def proxy_responses(request: Request):
    """Forward a Responses API call for an allow-listed model, passing status and content type through"""
    try:
        body = await request.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    model = body.get("model")
    if not model:
        return JSONResponse(status_code=400, content={"error": "Missing 'model' in request body."})

    allowed = settings.allowed_response_models
    if model not in allowed:
        return JSONResponse(
            status_code=400,
            content={"error": f"Model '{model}' not allowed. Allowed: {', '.join(allowed)}"},
        )

    try:
        upstream = await asyncio.to_thread(_forward_responses, body)
    except Exception as e:
        logger.error(f"Responses upstream error: {e}")
        return JSONResponse(status_code=500, content={"error": "Responses upstream error."})

    return Response(
        content=upstream.text,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type") or "application/json",
    )

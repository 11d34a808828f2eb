# nosabos/api/endpoints.py - Users, progress, skill tree, notes and learning tools

import base64
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from nosabos.content.cefr import (
    CEFR_LEVELS,
    get_all_lesson_progress,
    get_cefr_description,
    get_cefr_prompt_hint,
)
from nosabos.content.skill_tree import (
    calculate_level_completion,
    find_next_lesson,
    get_language_xp,
    get_lesson_status,
    get_unit_progress,
    get_unit_total_xp,
)
from nosabos.managers.nostr_manager import NostrError, feed_hashtag, generate_keys
from nosabos.models.schemas import (
    AudioPayload,
    DirectMessage,
    FinancialInput,
    KeyPress,
    LessonComplete,
    LessonStart,
    MilestoneBonus,
    NoteCreate,
    NoteGenerate,
    UserCreate,
    XpAward,
)
from nosabos.utils.financial import build_chart_bars, parse_financial_input
from nosabos.utils.keyboard import KeyboardState, is_supported

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


# Dependency injection - overridden in main.py
async def get_managers() -> Dict[str, Any]:
    """Get managers - will be overridden with actual implementation"""
    raise HTTPException(status_code=500, detail="Managers not initialized")


async def _user_progress(managers: Dict[str, Any], npub: str) -> Optional[Dict[str, Any]]:
    """Progress block merged with the per-language lesson documents"""
    user = await managers['firestore'].get_user(npub)
    if user is None:
        return None
    progress = dict(user.get("progress") or {})
    progress["languageLessons"] = await managers['firestore'].get_language_lessons(npub)
    return progress


def _check_level(level: str) -> str:
    level = level.upper()
    if level not in CEFR_LEVELS:
        raise HTTPException(status_code=404, detail=f"Unknown CEFR level: {level}")
    return level


# ============================================================================
# USER ENDPOINTS
# ============================================================================

@router.get("/users/{npub}")
async def get_user(npub: str, managers: Dict = Depends(get_managers)):
    try:
        user = await managers['firestore'].get_user(npub)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        return user
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting user {npub}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/users/{npub}")
async def ensure_user(npub: str, body: UserCreate, managers: Dict = Depends(get_managers)):
    """Create the user document on first sign-in"""
    try:
        return await managers['firestore'].ensure_user(npub, body.profile)
    except Exception as e:
        logger.error(f"Error creating user {npub}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/users/{npub}/exists")
async def user_exists(npub: str, managers: Dict = Depends(get_managers)):
    try:
        return {"npub": npub, "exists": await managers['teams'].check_user_exists(npub)}
    except Exception as e:
        logger.error(f"Error checking user {npub}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/users/{npub}/progress")
async def get_user_progress(npub: str, target_lang: str = Query("es"), managers: Dict = Depends(get_managers)):
    try:
        progress = await _user_progress(managers, npub)
        if progress is None:
            raise HTTPException(status_code=404, detail="User not found")

        return {
            "npub": npub,
            "targetLang": target_lang,
            "languageXp": get_language_xp(progress, target_lang),
            "levels": get_all_lesson_progress(progress, target_lang),
            "progress": progress,
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting progress for {npub}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/users/{npub}/xp")
async def award_xp(npub: str, body: XpAward, managers: Dict = Depends(get_managers)):
    try:
        update = await managers['progress'].award_xp(npub, body.amount, body.target_lang)
        if update is None:
            raise HTTPException(status_code=400, detail="A non-zero XP amount is required")
        return update
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error awarding XP to {npub}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/users/{npub}/lessons/{lesson_id}/start")
async def start_lesson(npub: str, lesson_id: str, body: LessonStart, managers: Dict = Depends(get_managers)):
    try:
        progress = await _user_progress(managers, npub)
        if progress is None:
            raise HTTPException(status_code=404, detail="User not found")

        await managers['progress'].start_lesson(
            npub, lesson_id, body.target_lang,
            user_progress=progress,
            current_xp=get_language_xp(progress, body.target_lang),
        )
        return {"success": True, "lessonId": lesson_id}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error starting lesson {lesson_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/users/{npub}/lessons/{lesson_id}/complete")
async def complete_lesson(npub: str, lesson_id: str, body: LessonComplete, managers: Dict = Depends(get_managers)):
    try:
        success = await managers['progress'].complete_lesson(npub, lesson_id, body.xp_reward, body.target_lang)
        return {"success": success, "lessonId": lesson_id}
    except Exception as e:
        logger.error(f"Error completing lesson {lesson_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/users/{npub}/lessons/{lesson_id}/attempt")
async def track_lesson_attempt(npub: str, lesson_id: str, body: LessonStart, managers: Dict = Depends(get_managers)):
    success = await managers['progress'].track_lesson_attempt(npub, lesson_id, body.target_lang)
    return {"success": success, "lessonId": lesson_id}


@router.post("/users/{npub}/lessons/{lesson_id}/abandon")
async def abandon_lesson(npub: str, lesson_id: str, body: LessonStart, managers: Dict = Depends(get_managers)):
    success = await managers['progress'].abandon_lesson(npub, lesson_id, body.target_lang)
    return {"success": success, "lessonId": lesson_id}


@router.post("/users/{npub}/milestones")
async def award_milestone(npub: str, body: MilestoneBonus, managers: Dict = Depends(get_managers)):
    try:
        success = await managers['progress'].award_milestone_bonus(npub, body.milestone_type, body.bonus_xp)
        return {"success": success, "milestone": body.milestone_type}
    except Exception as e:
        logger.error(f"Error awarding milestone to {npub}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


# ============================================================================
# SKILL TREE ENDPOINTS
# ============================================================================

@router.get("/skill-tree")
async def get_skill_tree(managers: Dict = Depends(get_managers)):
    """Every level, loaded (and cached) on demand"""
    loader = managers['skill_tree']
    units = await loader.load_all()
    return {"units": units, "cache": loader.cache_stats()}


@router.get("/skill-tree/{level}")
async def get_skill_tree_level(level: str, managers: Dict = Depends(get_managers)):
    level = _check_level(level)
    units = await managers['skill_tree'].load_level(level)
    return {
        "level": level,
        "units": [{**unit, "totalXp": get_unit_total_xp(unit)} for unit in units],
    }


@router.get("/users/{npub}/skill-tree")
async def get_user_skill_tree(npub: str, target_lang: str = Query("es"), level: Optional[str] = None,
                              managers: Dict = Depends(get_managers)):
    """Units with per-lesson status for the learner, plus the lesson to resume"""
    try:
        progress = await _user_progress(managers, npub)
        if progress is None:
            raise HTTPException(status_code=404, detail="User not found")

        loader = managers['skill_tree']
        if level:
            units = await loader.load_level(_check_level(level))
        else:
            units = await loader.load_relevant(progress, target_lang)

        annotated = []
        for unit in units:
            lessons = [
                {**lesson, "status": get_lesson_status(progress, lesson, target_lang).value}
                for lesson in unit.get("lessons") or []
            ]
            annotated.append({**unit, "lessons": lessons, "progress": get_unit_progress(unit, progress, target_lang)})

        next_lesson = find_next_lesson(units, progress, target_lang)
        return {
            "npub": npub,
            "targetLang": target_lang,
            "languageXp": get_language_xp(progress, target_lang),
            "completion": calculate_level_completion(units, progress, target_lang),
            "units": annotated,
            "nextLesson": next_lesson,
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error building skill tree for {npub}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/cefr/{level}")
async def get_cefr_level(level: str):
    level = _check_level(level)
    return {"level": level, "description": get_cefr_description(level), "promptHint": get_cefr_prompt_hint(level)}


# ============================================================================
# NOTES ENDPOINTS
# ============================================================================

@router.get("/users/{npub}/notes")
async def list_notes(npub: str, target_lang: Optional[str] = None, managers: Dict = Depends(get_managers)):
    notes = await managers['notes'].list_notes(npub, target_lang)
    return {"notes": notes, "count": len(notes)}


@router.post("/users/{npub}/notes")
async def add_note(npub: str, body: NoteCreate, managers: Dict = Depends(get_managers)):
    try:
        return await managers['notes'].add_note(npub, body.to_note())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error adding note for {npub}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/users/{npub}/notes/generate")
async def generate_note(npub: str, body: NoteGenerate, managers: Dict = Depends(get_managers)):
    """Write an example and summary for a practiced concept and keep it"""
    try:
        return await managers['notes'].create_note_for_answer(
            npub,
            body.concept,
            lesson_title=body.lesson_title,
            user_answer=body.user_answer,
            was_correct=body.was_correct,
            target_lang=body.target_lang,
            support_lang=body.support_lang,
            cefr_level=body.cefr_level,
            module_type=body.module_type,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error generating note for {npub}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/users/{npub}/notes/{note_id}")
async def remove_note(npub: str, note_id: str, managers: Dict = Depends(get_managers)):
    if not await managers['notes'].remove_note(npub, note_id):
        raise HTTPException(status_code=404, detail="Note not found")
    return {"success": True, "id": note_id}


@router.delete("/users/{npub}/notes")
async def clear_notes(npub: str, managers: Dict = Depends(get_managers)):
    removed = await managers['notes'].clear_notes(npub)
    return {"success": True, "removed": removed}


# ============================================================================
# TOOLS
# ============================================================================

@router.get("/keyboards/{lang}")
async def get_keyboard(lang: str, mode: str = "hiragana", upper: bool = False):
    if not is_supported(lang):
        raise HTTPException(status_code=404, detail=f"No virtual keyboard for {lang}")
    state = KeyboardState(lang, upper_case=upper)
    try:
        state.set_japanese_mode(mode)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return state.to_dict()


@router.post("/keyboards/{lang}/press")
async def press_key(lang: str, body: KeyPress):
    if not is_supported(lang):
        raise HTTPException(status_code=404, detail=f"No virtual keyboard for {lang}")
    return {"text": KeyboardState(lang).press(body.key, body.text)}


@router.post("/financial/parse")
async def parse_financial(body: FinancialInput):
    data = parse_financial_input(body.text)
    return {**data, "chart": build_chart_bars(data)}


def _prepare_pcm(processor, body: AudioPayload):
    try:
        pcm = processor.decode_base64_pcm(body.pcm_base64)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    rate = body.sample_rate
    if body.target_sample_rate and body.target_sample_rate != rate:
        pcm = processor.convert_sample_rate(pcm, rate, body.target_sample_rate)
        rate = body.target_sample_rate
    if body.normalize:
        pcm = processor.normalize_audio(pcm)
    return pcm, rate


@router.post("/audio/wav")
async def pcm_to_wav(body: AudioPayload, managers: Dict = Depends(get_managers)):
    """Wrap base64 PCM16 speech in a WAV container"""
    processor = managers['audio']
    pcm, rate = _prepare_pcm(processor, body)
    wav = processor.pcm16_to_wav(pcm, rate, body.channels)
    return Response(content=wav, media_type="audio/wav")


@router.post("/audio/wav/base64")
async def pcm_to_wav_base64(body: AudioPayload, managers: Dict = Depends(get_managers)):
    processor = managers['audio']
    pcm, rate = _prepare_pcm(processor, body)
    wav = processor.pcm16_to_wav(pcm, rate, body.channels)
    return {
        "wav": base64.b64encode(wav).decode("ascii"),
        "sampleRate": rate,
        "duration": processor.get_audio_duration(pcm, rate, body.channels),
    }


# ============================================================================
# NOSTR ENDPOINTS
# ============================================================================

@router.get("/nostr/feed")
async def get_feed(ui_lang: str = "en", limit: int = Query(50, ge=1, le=200),
                   managers: Dict = Depends(get_managers)):
    tag = feed_hashtag(ui_lang)
    try:
        notes = await managers['nostr'].fetch_hashtag_notes(tag, limit)
        return {"hashtag": tag, "notes": notes}
    except Exception as e:
        logger.error(f"Error fetching #{tag} feed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/nostr/dm")
async def send_dm(body: DirectMessage, managers: Dict = Depends(get_managers)):
    try:
        result = await managers['nostr'].send_direct_message(body.target_npub, body.message, body.nsec)
        if result is None:
            raise HTTPException(status_code=400, detail="Target npub and message are required")
        return {"success": bool(result["relays"]), "eventId": result["event"]["id"], "relays": result["relays"]}
    except HTTPException:
        raise
    except NostrError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error sending DM: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/nostr/keys")
async def create_keys():
    """Fresh identity for a new learner"""
    keys = generate_keys()
    logger.info(f"Generated identity {keys['npub'][:16]}...")
    return keys

# nosabos/managers/progress_manager.py - Lesson progress documents and XP awards
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from firebase_admin import firestore

from nosabos.content.skill_tree import SkillStatus
from nosabos.managers.firestore_manager import FirestoreManager
from nosabos.utils.text import round_half_up

logger = logging.getLogger(__name__)

DAILY_WINDOW = timedelta(hours=24)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def compute_xp_update(data: Dict[str, Any], amount: float, now: datetime,
                      target_lang: Optional[str] = None) -> Dict[str, Any]:
    """Fields to merge into a user document when awarding ``amount`` XP at ``now``.

    The daily counter restarts when the stored reset time is missing or has passed,
    and the goal celebration fires at most once per daily window.
    """
    data = data or {}
    now = now if now.tzinfo else now.replace(tzinfo=timezone.utc)
    delta = max(1, round_half_up(amount))

    reset_at = _parse_timestamp(data.get("dailyResetAt"))
    needs_reset = reset_at is None or now >= reset_at

    update: Dict[str, Any] = {}
    if needs_reset:
        update.update({
            "dailyXp": 0,
            "dailyHasCelebrated": False,
            "dailyResetAt": _iso(now + DAILY_WINDOW),
            "dailyStartedAt": _iso(now),
        })

    next_daily = (0 if needs_reset else data.get("dailyXp") or 0) + delta
    next_total = (data.get("xp") or 0) + delta
    goal = data.get("dailyGoalXp") or 0
    celebrated = False if needs_reset else bool(data.get("dailyHasCelebrated"))
    reached = goal > 0 and next_daily >= goal and not celebrated

    update.update({
        "xp": next_total,
        "dailyXp": next_daily,
        "updatedAt": _iso(now),
    })
    if reached:
        update["dailyHasCelebrated"] = True
        update["lastDailyGoalHitAt"] = firestore.SERVER_TIMESTAMP

    if target_lang:
        progress = data.get("progress") or {}
        language_xp = dict(progress.get("languageXp") or {})
        language_xp[target_lang] = (language_xp.get(target_lang) or 0) + delta
        update["progress"] = {
            "languageXp": language_xp,
            "totalXp": (progress.get("totalXp") or 0) + delta,
        }

    return update


class ProgressManager:
    def __init__(self, firestore_manager: FirestoreManager):
        self.firestore = firestore_manager

    def _lesson_ref(self, npub: str, lesson_id: str, language_key: str):
        return (
            self.firestore.user_ref(npub)
            .collection("languageLessons")
            .document(f"{language_key}_{lesson_id}")
        )

    async def award_xp(self, npub: str, amount: float, target_lang: str = None) -> Optional[Dict[str, Any]]:
        """Add XP inside a Firestore transaction and return the merged fields.

        The returned copy is JSON-safe: server timestamps are reported as the
        award time.
        """
        if not npub or not amount:
            return None

        db = self.firestore.require_db()
        ref = self.firestore.user_ref(npub)
        now = datetime.now(timezone.utc)

        @firestore.transactional
        def apply(transaction):
            snap = ref.get(transaction=transaction)
            data = snap.to_dict() if snap.exists else {}
            update = compute_xp_update(data, amount, now, target_lang)
            transaction.set(ref, update, merge=True)
            return update

        update = apply(db.transaction())
        logger.info(f"⭐ Awarded {max(1, round_half_up(amount))} XP to {npub} (daily {update['dailyXp']})")
        return {
            key: _iso(now) if value is firestore.SERVER_TIMESTAMP else value
            for key, value in update.items()
        }

    async def start_lesson(self, npub: str, lesson_id: str, target_lang: str = "es",
                           user_progress: Dict[str, Any] = None, current_xp: int = 0):
        """Mark a lesson in progress, keeping completed lessons and an existing start baseline intact"""
        if not npub or not lesson_id:
            return

        language_key = (target_lang or "es").lower()
        existing = (
            (((user_progress or {}).get("languageLessons") or {}).get(language_key) or {}).get(lesson_id)
            or ((user_progress or {}).get("lessons") or {}).get(lesson_id)
            or {}
        )
        status = existing.get("status")
        lesson_ref = self._lesson_ref(npub, lesson_id, language_key)

        try:
            self.firestore.user_ref(npub).update({
                "progress.currentLesson": lesson_id,
                "progress.lastActiveAt": firestore.SERVER_TIMESTAMP,
            })

            # Completed lessons stay completed when reopened
            if status == SkillStatus.IN_PROGRESS.value:
                lesson_ref.set({"updatedAt": firestore.SERVER_TIMESTAMP}, merge=True)
            elif status != SkillStatus.COMPLETED.value:
                lesson_ref.set({
                    "targetLang": language_key,
                    "lessonId": lesson_id,
                    "status": SkillStatus.IN_PROGRESS.value,
                    "lessonStartXp": current_xp,
                    "startedAt": firestore.SERVER_TIMESTAMP,
                    "updatedAt": firestore.SERVER_TIMESTAMP,
                }, merge=True)
        except Exception as e:
            logger.error(f"Error starting lesson {lesson_id} for {npub}: {e}")
            raise

    async def complete_lesson(self, npub: str, lesson_id: str, xp_reward: int, target_lang: str = "es") -> bool:
        """Mark a lesson completed; XP is awarded separately through award_xp"""
        if not npub or not lesson_id or not xp_reward:
            return False

        language_key = (target_lang or "es").lower()
        try:
            self.firestore.user_ref(npub).update({
                "progress.currentLesson": None,
                "progress.lastActiveAt": firestore.SERVER_TIMESTAMP,
            })
            self._lesson_ref(npub, lesson_id, language_key).set({
                "targetLang": language_key,
                "lessonId": lesson_id,
                "status": SkillStatus.COMPLETED.value,
                "completedAt": firestore.SERVER_TIMESTAMP,
                "xpEarned": xp_reward,
                "lessonStartXp": firestore.DELETE_FIELD,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            }, merge=True)
            logger.info(f"✅ Lesson {lesson_id} completed by {npub} ({language_key})")
            return True
        except Exception as e:
            logger.error(f"Error completing lesson {lesson_id} for {npub}: {e}")
            raise

    async def track_lesson_attempt(self, npub: str, lesson_id: str, target_lang: str = "es") -> bool:
        if not npub or not lesson_id:
            return False

        language_key = (target_lang or "es").lower()
        try:
            self.firestore.user_ref(npub).update({"progress.lastActiveAt": firestore.SERVER_TIMESTAMP})
            self._lesson_ref(npub, lesson_id, language_key).set({
                "targetLang": language_key,
                "lessonId": lesson_id,
                "attempts": firestore.Increment(1),
                "lastAttemptAt": firestore.SERVER_TIMESTAMP,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            }, merge=True)
            return True
        except Exception as e:
            logger.error(f"Error tracking lesson attempt {lesson_id} for {npub}: {e}")
            return False

    async def abandon_lesson(self, npub: str, lesson_id: str, target_lang: str = "es") -> bool:
        if not npub or not lesson_id:
            return False

        language_key = (target_lang or "es").lower()
        try:
            self.firestore.user_ref(npub).update({
                "progress.currentLesson": None,
                "progress.lastActiveAt": firestore.SERVER_TIMESTAMP,
            })
            self._lesson_ref(npub, lesson_id, language_key).set({
                "targetLang": language_key,
                "lessonId": lesson_id,
                "status": SkillStatus.AVAILABLE.value,
                "lessonStartXp": firestore.DELETE_FIELD,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            }, merge=True)
            return True
        except Exception as e:
            logger.error(f"Error abandoning lesson {lesson_id} for {npub}: {e}")
            return False

    async def award_milestone_bonus(self, npub: str, milestone_type: str, bonus_xp: int) -> bool:
        if not npub or not bonus_xp:
            return False

        try:
            self.firestore.user_ref(npub).update({
                "progress.totalXp": firestore.Increment(bonus_xp),
                "xp": firestore.Increment(bonus_xp),
                "dailyXp": firestore.Increment(bonus_xp),
                f"progress.milestones.{milestone_type}": firestore.SERVER_TIMESTAMP,
            })
            logger.info(f"🏆 Milestone {milestone_type} (+{bonus_xp} XP) for {npub}")
            return True
        except Exception as e:
            logger.error(f"Error awarding milestone bonus to {npub}: {e}")
            raise

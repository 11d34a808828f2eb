# nosabos/managers/firestore_manager.py
import firebase_admin
from firebase_admin import credentials, firestore
from typing import Dict, Any, Optional
import logging

from nosabos.content.skill_tree import initialize_progress

logger = logging.getLogger(__name__)


class FirestoreManager:
    """Owns the Firestore client shared by the team, progress and user endpoints"""

    def __init__(self, credentials_path: str = None, db=None):
        if db is not None:
            self.db = db
            return

        try:
            if not firebase_admin._apps:
                cred = credentials.Certificate(credentials_path)
                firebase_admin.initialize_app(cred)
            self.db = firestore.client()
            logger.info("Firebase initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize Firebase: {e}")
            self.db = None

    @property
    def connected(self) -> bool:
        return self.db is not None

    def require_db(self):
        if self.db is None:
            raise RuntimeError("Firestore is not configured")
        return self.db

    def user_ref(self, npub: str):
        return self.require_db().collection("users").document(npub)

    async def get_user(self, npub: str) -> Optional[Dict[str, Any]]:
        """User document with its id, or None"""
        if not npub:
            return None
        snap = self.user_ref(npub).get()
        if not snap.exists:
            return None
        data = snap.to_dict() or {}
        data["id"] = snap.id
        return data

    async def ensure_user(self, npub: str, profile: Dict[str, Any] = None) -> Dict[str, Any]:
        """Create the user document on first sign-in; existing users are returned untouched"""
        existing = await self.get_user(npub)
        if existing:
            return existing

        data = {
            "npub": npub,
            "profile": profile or {},
            "progress": initialize_progress(),
            "xp": 0,
            "dailyXp": 0,
            "dailyGoalXp": 0,
            "dailyHasCelebrated": False,
            "createdAt": firestore.SERVER_TIMESTAMP,
        }
        self.user_ref(npub).set(data)
        logger.info(f"✅ Created user document for {npub}")
        return await self.get_user(npub)

    async def get_language_lessons(self, npub: str, target_lang: str = None) -> Dict[str, Dict[str, Any]]:
        """Lesson progress documents grouped as {lang: {lessonId: data}}"""
        grouped: Dict[str, Dict[str, Any]] = {}
        docs = self.user_ref(npub).collection("languageLessons").stream()
        for snap in docs:
            data = snap.to_dict() or {}
            lang = data.get("targetLang") or snap.id.split("_", 1)[0]
            if target_lang and lang != target_lang:
                continue
            lesson_id = data.get("lessonId") or snap.id.split("_", 1)[-1]
            grouped.setdefault(lang, {})[lesson_id] = data
        return grouped

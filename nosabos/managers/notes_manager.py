# nosabos/managers/notes_manager.py - Per-user study notes kept in the local database

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy import select, delete, func
from typing import Optional, List, Dict, Any
import uuid
import logging

from nosabos.models.database import Note, init_db

logger = logging.getLogger(__name__)


def build_note_object(lesson_title: str, cefr_level: str, example: str, summary: str, target_lang: str,
                      support_lang: str, module_type: str, was_correct: bool) -> Dict[str, Any]:
    return {
        "lessonTitle": lesson_title,
        "cefrLevel": cefr_level,
        "example": example,
        "summary": summary,
        "targetLang": target_lang,
        "supportLang": support_lang,
        "moduleType": module_type,
        "wasCorrect": was_correct,
    }


class NotesManager:
    def __init__(self, database_url: str, llm_manager=None):
        self.database_url = database_url
        self.llm = llm_manager
        self.engine = None
        self.async_session = None

    async def initialize(self):
        self.engine = await init_db(self.database_url)
        self.async_session = sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)
        logger.info("✅ Notes store ready")

    async def close(self):
        if self.engine:
            await self.engine.dispose()

    async def add_note(self, npub: str, note: Dict[str, Any]) -> Dict[str, Any]:
        """Append a note to the end of the user's notebook"""
        if not npub:
            raise ValueError("npub is required")

        async with self.async_session() as session:
            result = await session.execute(select(func.max(Note.position)).where(Note.npub == npub))
            last = result.scalar()

            row = Note(
                id=note.get("id") or str(uuid.uuid4()),
                npub=npub,
                lesson_title=note.get("lessonTitle") or "",
                cefr_level=note.get("cefrLevel") or "A1",
                module_type=note.get("moduleType") or "vocabulary",
                target_lang=note.get("targetLang") or "es",
                support_lang=note.get("supportLang") or "en",
                example=note.get("example") or "",
                summary=note.get("summary") or "",
                was_correct=bool(note.get("wasCorrect")),
                position=(last if last is not None else -1) + 1,
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            logger.info(f"📚 Note {row.id} added for {npub}")
            return row.to_dict()

    async def list_notes(self, npub: str, target_lang: Optional[str] = None) -> List[Dict[str, Any]]:
        """Newest first, as the notes drawer shows them"""
        async with self.async_session() as session:
            query = select(Note).where(Note.npub == npub)
            if target_lang:
                query = query.where(Note.target_lang == target_lang)
            result = await session.execute(query.order_by(Note.position.desc()))
            return [row.to_dict() for row in result.scalars().all()]

    async def remove_note(self, npub: str, note_id: str) -> bool:
        async with self.async_session() as session:
            result = await session.execute(delete(Note).where(Note.npub == npub, Note.id == note_id))
            await session.commit()
            return result.rowcount > 0

    async def clear_notes(self, npub: str) -> int:
        async with self.async_session() as session:
            result = await session.execute(delete(Note).where(Note.npub == npub))
            await session.commit()
            logger.info(f"🗑️ Cleared {result.rowcount} notes for {npub}")
            return result.rowcount

    async def create_note_for_answer(self, npub: str, concept: str, lesson_title: str = "",
                                     user_answer: Optional[str] = None, was_correct: bool = False,
                                     target_lang: str = "es", support_lang: str = "en", cefr_level: str = "A1",
                                     module_type: str = "vocabulary") -> Dict[str, Any]:
        """Generate example and summary text for a practiced concept and save it"""
        if self.llm is None:
            content = {"example": f"{concept}", "summary": f"Keep practicing this {cefr_level} level concept."}
        else:
            content = await self.llm.generate_note_content(
                concept, user_answer, was_correct, target_lang, support_lang, cefr_level, module_type
            )

        note = build_note_object(
            lesson_title or concept,
            cefr_level,
            content["example"],
            content["summary"],
            target_lang,
            support_lang,
            module_type,
            was_correct,
        )
        return await self.add_note(npub, note)

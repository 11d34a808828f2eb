from pydantic import BaseModel, field_validator
from typing import Optional, Dict, List, Any, Literal


class UserCreate(BaseModel):
    profile: Dict[str, Any] = {}


class XpAward(BaseModel):
    amount: float
    target_lang: Optional[str] = None


class LessonStart(BaseModel):
    target_lang: str = "es"


class LessonComplete(BaseModel):
    xp_reward: int
    target_lang: str = "es"


class MilestoneBonus(BaseModel):
    milestone_type: str
    bonus_xp: int


# ==================== TEAMS ====================

TEAM_INVITE_DM = (
    'Hi! You\'ve been invited to join "{team}" on Robots Building Education. '
    "Create an account to track progress with your team."
)


class TeamCreate(BaseModel):
    creator_npub: str
    team_name: str
    creator_name: str = ""
    invitees: List[str] = []
    # Signs the courtesy note sent to invitees without an account
    nsec: Optional[str] = None
    dm_template: str = TEAM_INVITE_DM

    @field_validator("team_name")
    def team_name_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Team name is required")
        return v.strip()


class TeamInvite(BaseModel):
    creator_npub: str
    team_name: str
    invitee_npub: str
    creator_name: str = ""
    nsec: Optional[str] = None


class InviteAction(BaseModel):
    user_npub: str


class TeamLeave(BaseModel):
    user_npub: str


# ==================== EXERCISES ====================

ExerciseKind = Literal["fill", "mc", "ma", "speak", "match", "translate", "repeat"]


class ExerciseRequest(BaseModel):
    kind: ExerciseKind
    cefr_level: str = "A1"
    target_lang: str = "es"
    support_lang: str = "en"
    ui_lang: str = "en"
    show_translations: bool = True
    recent_good: List[Any] = []
    lesson_content: Optional[Dict[str, Any]] = None
    direction: Optional[Literal["target-to-support", "support-to-target"]] = None

    @field_validator("cefr_level")
    def upper_level(cls, v):
        return (v or "A1").upper()

    def options(self) -> Dict[str, Any]:
        return {
            "cefr_level": self.cefr_level,
            "target_lang": self.target_lang,
            "support_lang": self.support_lang,
            "ui_lang": self.ui_lang,
            "show_translations": self.show_translations,
            "recent_good": self.recent_good,
            "lesson_content": self.lesson_content,
            "direction": self.direction,
        }


class SubmitRequest(BaseModel):
    npub: Optional[str] = None
    answer: Dict[str, Any]
    final_quiz: bool = False


class ExplainRequest(BaseModel):
    question: str
    user_answer: str
    correct_answer: str
    target_lang: str = "Spanish"
    support_lang: str = "English"
    question_type: Literal["fill", "mc", "ma"] = "fill"
    user_language: str = "en"


# ==================== NOTES ====================

class NoteCreate(BaseModel):
    lesson_title: str = ""
    cefr_level: str = "A1"
    example: str = ""
    summary: str = ""
    target_lang: str = "es"
    support_lang: str = "en"
    module_type: str = "vocabulary"
    was_correct: bool = False

    def to_note(self) -> Dict[str, Any]:
        return {
            "lessonTitle": self.lesson_title,
            "cefrLevel": self.cefr_level,
            "example": self.example,
            "summary": self.summary,
            "targetLang": self.target_lang,
            "supportLang": self.support_lang,
            "moduleType": self.module_type,
            "wasCorrect": self.was_correct,
        }


class NoteGenerate(BaseModel):
    concept: str
    lesson_title: str = ""
    user_answer: Optional[str] = None
    was_correct: bool = False
    target_lang: str = "es"
    support_lang: str = "en"
    cefr_level: str = "A1"
    module_type: str = "vocabulary"


# ==================== TOOLS ====================

class KeyPress(BaseModel):
    key: str
    text: str = ""


class FinancialInput(BaseModel):
    text: str


class AudioPayload(BaseModel):
    pcm_base64: str
    sample_rate: int = 24000
    channels: int = 1
    target_sample_rate: Optional[int] = None
    normalize: bool = False


class DirectMessage(BaseModel):
    target_npub: str
    message: str
    nsec: str


class WebSocketMessage(BaseModel):
    type: Literal["generate", "submit", "ping", "watch_invites", "unwatch_invites"]
    kind: Optional[ExerciseKind] = None
    options: Dict[str, Any] = {}
    exercise_id: Optional[str] = None
    answer: Optional[Dict[str, Any]] = None
    final_quiz: bool = False

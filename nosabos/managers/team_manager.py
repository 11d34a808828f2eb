# nosabos/managers/team_manager.py - Teams and invites stored under each user's document
import logging
import math
import random
import string
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from google.cloud.firestore_v1 import FieldFilter

from nosabos.managers.firestore_manager import FirestoreManager
from nosabos.utils.text import round_half_up

logger = logging.getLogger(__name__)

MEMBER_PENDING = "pending"
MEMBER_ACCEPTED = "accepted"
INVITE_REJECTED = "rejected"


class TeamError(ValueError):
    """Bad team input or a missing team/invite document"""


def _random_suffix(length: int = 8) -> str:
    return "".join(random.choice(string.ascii_lowercase + string.digits) for _ in range(length))


def _generate_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{_random_suffix()}"


def _now_iso() -> str:
    return datetime.utcnow().isoformat() + "Z"


def _first_present(*values):
    for value in values:
        if value is not None:
            return value
    return None


def _to_number(value: Any) -> float:
    """Numeric coercion that maps missing or unparsable values to 0"""
    if isinstance(value, bool):
        return int(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number):
        return 0
    return int(number) if number.is_integer() else number


class TeamManager:
    def __init__(self, firestore_manager: FirestoreManager):
        self.firestore = firestore_manager

    def _team_ref(self, creator_npub: str, team_id: str):
        return self.firestore.user_ref(creator_npub).collection("teams").document(team_id)

    def _invites_ref(self, npub: str):
        return self.firestore.user_ref(npub).collection("teamInvites")

    def _delete_team_invites(self, npub: str, team_id: str) -> int:
        query = self._invites_ref(npub).where(filter=FieldFilter("teamId", "==", team_id))
        deleted = 0
        for snap in query.stream():
            snap.reference.delete()
            deleted += 1
        return deleted

    # ==================== USERS ====================

    async def get_user_data(self, npub: str) -> Optional[Dict[str, Any]]:
        return await self.firestore.get_user(npub)

    async def check_user_exists(self, npub: str) -> bool:
        if not npub:
            return False
        return self.firestore.user_ref(npub).get().exists

    # ==================== TEAMS ====================

    async def create_team(self, creator_npub: str, team_name: str, creator_name: str = "") -> str:
        if not creator_npub or not team_name:
            raise TeamError("Creator npub and team name are required")

        team_id = _generate_id("team")
        self._team_ref(creator_npub, team_id).set({
            "teamName": team_name,
            "creatorName": creator_name,
            "createdBy": creator_npub,
            "createdAt": _now_iso(),
            "members": [],
        })
        logger.info(f"✅ Team {team_id} created by {creator_npub}")
        return team_id

    async def invite_user_to_team(self, creator_npub: str, team_id: str, team_name: str,
                                  invitee_npub: str, creator_name: str = "") -> str:
        if not creator_npub or not team_id or not invitee_npub:
            raise TeamError("Creator npub, team ID, and invitee npub are required")

        team_ref = self._team_ref(creator_npub, team_id)
        snap = team_ref.get()
        if not snap.exists:
            raise TeamError("Team does not exist")

        members = (snap.to_dict() or {}).get("members") or []
        if any(member.get("npub") == invitee_npub for member in members):
            raise TeamError("User already invited")

        team_ref.update({
            "members": members + [{
                "npub": invitee_npub,
                "status": MEMBER_PENDING,
                "addedAt": _now_iso(),
                "name": "",
            }],
        })

        invite_id = _generate_id("invite")
        self._invites_ref(invitee_npub).document(invite_id).set({
            "teamId": team_id,
            "teamName": team_name,
            "creatorNpub": creator_npub,
            "invitedBy": creator_npub,
            "invitedByName": creator_name,
            "status": MEMBER_PENDING,
            "createdAt": _now_iso(),
        })
        logger.info(f"📨 Invite {invite_id} sent to {invitee_npub} for team {team_id}")
        return invite_id

    async def _resolve_invite(self, user_npub: str, invite_id: str, new_status: str):
        if not user_npub or not invite_id:
            raise TeamError("User npub and invite ID are required")

        invite_ref = self._invites_ref(user_npub).document(invite_id)
        invite_snap = invite_ref.get()
        if not invite_snap.exists:
            raise TeamError("Invite does not exist")

        invite = invite_snap.to_dict() or {}
        team_ref = self._team_ref(invite.get("creatorNpub"), invite.get("teamId"))
        team_snap = team_ref.get()
        if team_snap.exists:
            members = (team_snap.to_dict() or {}).get("members") or []
            if new_status == MEMBER_ACCEPTED:
                members = [
                    {**member, "status": MEMBER_ACCEPTED} if member.get("npub") == user_npub else member
                    for member in members
                ]
            else:
                members = [member for member in members if member.get("npub") != user_npub]
            team_ref.update({"members": members})

        invite_ref.update({"status": new_status})
        logger.info(f"Invite {invite_id} for {user_npub} -> {new_status}")

    async def accept_team_invite(self, user_npub: str, invite_id: str):
        await self._resolve_invite(user_npub, invite_id, MEMBER_ACCEPTED)

    async def reject_team_invite(self, user_npub: str, invite_id: str):
        await self._resolve_invite(user_npub, invite_id, INVITE_REJECTED)

    async def get_user_teams(self, user_npub: str) -> List[Dict[str, Any]]:
        """Teams the user created plus teams joined through accepted invites"""
        if not user_npub:
            raise TeamError("User npub is required")

        teams = []
        for snap in self.firestore.user_ref(user_npub).collection("teams").stream():
            teams.append({"id": snap.id, **(snap.to_dict() or {}), "isCreator": True, "createdBy": user_npub})

        for invite_snap in self._invites_ref(user_npub).stream():
            invite = invite_snap.to_dict() or {}
            if invite.get("status") != MEMBER_ACCEPTED or not invite.get("creatorNpub"):
                continue
            team_snap = self._team_ref(invite["creatorNpub"], invite.get("teamId")).get()
            if not team_snap.exists:
                continue
            teams.append({
                "id": team_snap.id,
                **(team_snap.to_dict() or {}),
                "isCreator": False,
                "createdBy": invite["creatorNpub"],
            })

        deduped = []
        seen = set()
        for team in teams:
            key = (team["id"], team["createdBy"])
            if key not in seen:
                seen.add(key)
                deduped.append(team)
        return deduped

    async def get_user_team_invites(self, user_npub: str) -> List[Dict[str, Any]]:
        if not user_npub:
            raise TeamError("User npub is required")
        return [{"id": snap.id, **(snap.to_dict() or {})} for snap in self._invites_ref(user_npub).stream()]

    async def get_team_member_progress(self, creator_npub: str, team_id: str) -> List[Dict[str, Any]]:
        """Leaderboard rows for the creator and every accepted member"""
        if not creator_npub or not team_id:
            raise TeamError("Creator npub and team ID are required")

        snap = self._team_ref(creator_npub, team_id).get()
        if not snap.exists:
            raise TeamError("Team does not exist")

        members = [m for m in (snap.to_dict() or {}).get("members") or [] if m.get("status") == MEMBER_ACCEPTED]
        entries = [{"npub": creator_npub, "name": None, "isCreator": True}]
        entries += [{"npub": m.get("npub"), "name": m.get("name"), "isCreator": False} for m in members]

        rows = []
        for entry in entries:
            user = await self.get_user_data(entry["npub"]) or {}
            rows.append(self._member_row(entry, user))
        return rows

    @staticmethod
    def _member_row(entry: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        progress = user.get("progress") or {}
        stats = user.get("stats") or {}

        total_xp = _to_number(_first_present(user.get("xp"), progress.get("xp"), stats.get("xp"), 0))
        daily_goal_xp = _to_number(_first_present(
            user.get("dailyGoalXp"), progress.get("dailyGoalXp"), stats.get("dailyGoalXp"), 0))
        daily_xp = _to_number(_first_present(user.get("dailyXp"), progress.get("dailyXp"), stats.get("dailyXp"), 0))
        streak = _to_number(_first_present(progress.get("streak"), progress.get("dailyStreak"), stats.get("streak"), 0))
        answered = _to_number(_first_present(stats.get("answeredStepsCount"), progress.get("answeredStepsCount"), 0))
        daily_progress = _to_number(_first_present(progress.get("dailyProgress"), stats.get("dailyProgress"), 0))

        goal_percent = min(100, round_half_up(daily_xp / daily_goal_xp * 100)) if daily_goal_xp > 0 else None
        percent_source = _first_present(
            goal_percent,
            progress.get("dailyGoalPercent"),
            progress.get("dailyGoalPercentage"),
            progress.get("dailyGoalProgress"),
            daily_progress,
        )

        return {
            "npub": entry["npub"],
            "name": (user.get("profile") or {}).get("displayName") or user.get("name") or entry.get("name") or "Learner",
            "level": progress.get("level") or "-",
            "streak": streak,
            "answeredStepsCount": answered,
            "dailyProgress": daily_progress,
            "progressPercent": max(0, min(100, _to_number(percent_source))),
            "totalXp": total_xp,
            "dailyGoalXp": daily_goal_xp,
            "dailyXp": daily_xp,
            "isCreator": entry["isCreator"],
        }

    async def delete_team(self, creator_npub: str, team_id: str):
        if not creator_npub or not team_id:
            raise TeamError("Creator npub and team ID are required")

        team_ref = self._team_ref(creator_npub, team_id)
        snap = team_ref.get()
        if not snap.exists:
            raise TeamError("Team does not exist")

        for member in (snap.to_dict() or {}).get("members") or []:
            if member.get("npub"):
                self._delete_team_invites(member["npub"], team_id)
        team_ref.delete()
        logger.info(f"🗑️ Team {team_id} deleted by {creator_npub}")

    async def leave_team(self, user_npub: str, creator_npub: str, team_id: str):
        if not user_npub or not creator_npub or not team_id:
            raise TeamError("User npub, creator npub, and team ID are required")

        team_ref = self._team_ref(creator_npub, team_id)
        snap = team_ref.get()
        if snap.exists:
            members = [m for m in (snap.to_dict() or {}).get("members") or [] if m.get("npub") != user_npub]
            team_ref.update({"members": members})

        self._delete_team_invites(user_npub, team_id)
        logger.info(f"{user_npub} left team {team_id}")

    # ==================== LIVE UPDATES ====================

    def subscribe_to_team_updates(self, creator_npub: str, team_id: str,
                                  callback: Callable[[Optional[Dict[str, Any]]], None]) -> Callable[[], None]:
        """Watch one team document; the callback gets None once it is deleted"""
        if not creator_npub or not team_id:
            return lambda: None

        def on_snapshot(doc_snapshots, changes, read_time):
            # A deleted document arrives as an empty list or a non-existent snapshot
            snap = doc_snapshots[0] if doc_snapshots else None
            if snap is None or not snap.exists:
                callback(None)
            else:
                callback({"id": snap.id, **(snap.to_dict() or {})})

        watch = self._team_ref(creator_npub, team_id).on_snapshot(on_snapshot)
        return watch.unsubscribe

    def subscribe_to_team_invites(self, user_npub: str,
                                  callback: Callable[[List[Dict[str, Any]]], None]) -> Callable[[], None]:
        if not user_npub:
            return lambda: None

        def on_snapshot(collection_snapshot, changes, read_time):
            callback([{"id": snap.id, **(snap.to_dict() or {})} for snap in collection_snapshot])

        watch = self._invites_ref(user_npub).on_snapshot(on_snapshot)
        return watch.unsubscribe

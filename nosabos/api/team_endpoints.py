# nosabos/api/team_endpoints.py - Team creation, invites and leaderboards

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from nosabos.api.endpoints import get_managers
from nosabos.managers.team_manager import TeamError
from nosabos.models.schemas import TEAM_INVITE_DM, InviteAction, TeamCreate, TeamInvite, TeamLeave

logger = logging.getLogger(__name__)

team_router = APIRouter(prefix="/api/teams", tags=["teams"])


def _team_http_error(e: TeamError) -> HTTPException:
    status = 404 if "does not exist" in str(e) else 400
    return HTTPException(status_code=status, detail=str(e))


async def _invite_one(managers: Dict[str, Any], creator_npub: str, team_id: str, team_name: str,
                      invitee_npub: str, creator_name: str, nsec: Optional[str],
                      dm_template: str = TEAM_INVITE_DM) -> Dict[str, Any]:
    """Invite a learner; those without an account also get a courtesy note on Nostr"""
    teams = managers['teams']
    exists = await teams.check_user_exists(invitee_npub)
    try:
        invite_id = await teams.invite_user_to_team(creator_npub, team_id, team_name, invitee_npub, creator_name)
    except TeamError as e:
        return {"npub": invitee_npub, "success": False, "error": str(e)}

    result = {"npub": invitee_npub, "success": True, "inviteId": invite_id, "userExists": exists}
    if not exists and nsec:
        try:
            sent = await managers['nostr'].send_direct_message(
                invitee_npub, dm_template.format(team=team_name), nsec)
            result["dmSent"] = bool(sent and sent["relays"])
        except Exception as e:
            logger.error(f"Error sending team invite note to {invitee_npub}: {e}")
            result["dmSent"] = False
    return result


@team_router.post("")
async def create_team(body: TeamCreate, managers: Dict = Depends(get_managers)):
    try:
        team_id = await managers['teams'].create_team(body.creator_npub, body.team_name, body.creator_name)

        invites = []
        for invitee in dict.fromkeys(n.strip() for n in body.invitees if n and n.strip()):
            if invitee == body.creator_npub:
                continue
            invites.append(await _invite_one(
                managers, body.creator_npub, team_id, body.team_name, invitee,
                body.creator_name, body.nsec, body.dm_template))

        return {"teamId": team_id, "teamName": body.team_name, "invites": invites}
    except TeamError as e:
        raise _team_http_error(e)
    except Exception as e:
        logger.error(f"Error creating team: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@team_router.post("/{team_id}/invites")
async def invite_to_team(team_id: str, body: TeamInvite, managers: Dict = Depends(get_managers)):
    try:
        result = await _invite_one(
            managers, body.creator_npub, team_id, body.team_name, body.invitee_npub, body.creator_name, body.nsec)
        if not result["success"]:
            status = 404 if "does not exist" in result["error"] else 400
            raise HTTPException(status_code=status, detail=result["error"])
        return result
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error inviting {body.invitee_npub} to {team_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@team_router.post("/invites/{invite_id}/accept")
async def accept_invite(invite_id: str, body: InviteAction, managers: Dict = Depends(get_managers)):
    try:
        await managers['teams'].accept_team_invite(body.user_npub, invite_id)
        return {"success": True, "inviteId": invite_id, "status": "accepted"}
    except TeamError as e:
        raise _team_http_error(e)
    except Exception as e:
        logger.error(f"Error accepting invite {invite_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@team_router.post("/invites/{invite_id}/reject")
async def reject_invite(invite_id: str, body: InviteAction, managers: Dict = Depends(get_managers)):
    try:
        await managers['teams'].reject_team_invite(body.user_npub, invite_id)
        return {"success": True, "inviteId": invite_id, "status": "rejected"}
    except TeamError as e:
        raise _team_http_error(e)
    except Exception as e:
        logger.error(f"Error rejecting invite {invite_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@team_router.get("/{npub}")
async def get_user_teams(npub: str, managers: Dict = Depends(get_managers)):
    try:
        teams = await managers['teams'].get_user_teams(npub)
        return {"teams": teams, "count": len(teams)}
    except TeamError as e:
        raise _team_http_error(e)
    except Exception as e:
        logger.error(f"Error getting teams for {npub}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@team_router.get("/{npub}/invites")
async def get_user_invites(npub: str, status: Optional[str] = None, managers: Dict = Depends(get_managers)):
    try:
        invites = await managers['teams'].get_user_team_invites(npub)
        if status:
            invites = [invite for invite in invites if invite.get("status") == status]
        return {"invites": invites, "count": len(invites)}
    except TeamError as e:
        raise _team_http_error(e)
    except Exception as e:
        logger.error(f"Error getting invites for {npub}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@team_router.get("/{creator_npub}/{team_id}/members")
async def get_team_members(creator_npub: str, team_id: str, managers: Dict = Depends(get_managers)):
    """Leaderboard rows, highest total XP first"""
    try:
        rows = await managers['teams'].get_team_member_progress(creator_npub, team_id)
        rows.sort(key=lambda row: row["totalXp"], reverse=True)
        return {"teamId": team_id, "members": rows}
    except TeamError as e:
        raise _team_http_error(e)
    except Exception as e:
        logger.error(f"Error getting members of {team_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@team_router.delete("/{creator_npub}/{team_id}")
async def delete_team(creator_npub: str, team_id: str, managers: Dict = Depends(get_managers)):
    try:
        await managers['teams'].delete_team(creator_npub, team_id)
        return {"success": True, "teamId": team_id}
    except TeamError as e:
        raise _team_http_error(e)
    except Exception as e:
        logger.error(f"Error deleting team {team_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@team_router.post("/{creator_npub}/{team_id}/leave")
async def leave_team(creator_npub: str, team_id: str, body: TeamLeave, managers: Dict = Depends(get_managers)):
    try:
        await managers['teams'].leave_team(body.user_npub, creator_npub, team_id)
        return {"success": True, "teamId": team_id}
    except TeamError as e:
        raise _team_http_error(e)
    except Exception as e:
        logger.error(f"Error leaving team {team_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

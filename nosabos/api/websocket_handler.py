# nosabos/api/websocket_handler.py - Live exercise sessions over WebSocket

import asyncio
import json
import logging
from typing import Any, Callable, Dict, Optional

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from nosabos.api.exercise_endpoints import submit_answer
from nosabos.exercises.generator import public_event
from nosabos.models.schemas import ExerciseRequest, WebSocketMessage

logger = logging.getLogger(__name__)

IDLE_TIMEOUT = 300.0


class WebSocketHandler:
    """One socket per learner: streams exercise phases as they are generated and grades submissions"""

    def __init__(self, managers: Dict[str, Any]):
        self.managers = managers
        self.active_connections: Dict[str, WebSocket] = {}
        self.invite_watches: Dict[str, Callable[[], None]] = {}
        logger.info("WebSocketHandler initialized")

    async def connect(self, npub: str, websocket: WebSocket):
        await websocket.accept()
        self.active_connections[npub] = websocket
        logger.info(f"Learner {npub} connected")

    async def disconnect(self, npub: str):
        if npub in self.active_connections:
            del self.active_connections[npub]
            logger.info(f"Learner {npub} disconnected")

    async def send_message(self, npub: str, data: dict) -> bool:
        if npub not in self.active_connections:
            logger.warning(f"No active connection for {npub}")
            return False

        try:
            await self.active_connections[npub].send_text(json.dumps(data, ensure_ascii=False))
            logger.debug(f"Sent to {npub}: {data.get('type', 'unknown')}")
            return True
        except Exception as e:
            logger.error(f"Error sending to {npub}: {e}")
            await self._cleanup_connection(npub)
            return False

    async def handle_connection(self, websocket: WebSocket, npub: str):
        await self.connect(npub, websocket)

        try:
            while True:
                try:
                    text = await asyncio.wait_for(websocket.receive_text(), timeout=IDLE_TIMEOUT)
                except asyncio.TimeoutError:
                    logger.info(f"Closing idle session for {npub}")
                    break

                try:
                    data = json.loads(text)
                except json.JSONDecodeError as e:
                    logger.error(f"Invalid JSON from {npub}: {e}")
                    await self.send_message(npub, {"type": "error", "message": "Invalid JSON"})
                    continue

                await self.process_message(npub, data)

        except WebSocketDisconnect:
            logger.info(f"Learner {npub} disconnected")
        except Exception as e:
            logger.error(f"Error handling connection for {npub}: {e}")
        finally:
            await self._cleanup_connection(npub)

    async def process_message(self, npub: str, data: Dict[str, Any]):
        try:
            message = WebSocketMessage.model_validate(data)
        except ValidationError as e:
            await self.send_message(npub, {"type": "error", "message": f"Invalid message: {e.errors()[0]['msg']}"})
            return

        if message.type == "generate":
            await self.handle_generate(npub, message)
        elif message.type == "submit":
            await self.handle_submit(npub, message)
        elif message.type == "ping":
            await self.send_message(npub, {"type": "pong"})
        elif message.type == "watch_invites":
            self.watch_invites(npub)
        elif message.type == "unwatch_invites":
            self.unwatch_invites(npub)

    async def handle_generate(self, npub: str, message: WebSocketMessage):
        try:
            request = ExerciseRequest(**{**message.options, "kind": message.kind})
        except ValidationError as e:
            await self.send_message(npub, {"type": "error", "message": f"Invalid exercise request: {e.errors()[0]['msg']}"})
            return

        try:
            async for event in self.managers['generator'].stream(request.kind, **request.options()):
                if not await self.send_message(npub, public_event(event)):
                    return
        except Exception as e:
            logger.error(f"Error generating {request.kind} for {npub}: {e}")
            await self.send_message(npub, {"type": "error", "message": str(e)})

    async def handle_submit(self, npub: str, message: WebSocketMessage):
        if not message.exercise_id or message.answer is None:
            await self.send_message(npub, {"type": "error", "message": "exercise_id and answer are required"})
            return

        try:
            result = await submit_answer(
                self.managers, message.exercise_id, message.answer, npub, message.final_quiz)
        except (LookupError, ValueError) as e:
            await self.send_message(npub, {"type": "error", "message": str(e)})
            return
        except Exception as e:
            logger.error(f"Error grading {message.exercise_id} for {npub}: {e}")
            await self.send_message(npub, {"type": "error", "message": str(e)})
            return

        await self.send_message(npub, {"type": "graded", **result})

    # ==================== TEAM INVITES ====================

    def watch_invites(self, npub: str):
        """Push the learner's invite list whenever Firestore reports a change"""
        if npub in self.invite_watches:
            return
        loop = asyncio.get_running_loop()

        def on_invites(invites):
            # Firestore calls back on its own thread
            asyncio.run_coroutine_threadsafe(
                self.send_message(npub, {"type": "team_invites", "invites": invites}), loop)

        self.invite_watches[npub] = self.managers['teams'].subscribe_to_team_invites(npub, on_invites)
        logger.info(f"Watching team invites for {npub}")

    def unwatch_invites(self, npub: str):
        unsubscribe: Optional[Callable[[], None]] = self.invite_watches.pop(npub, None)
        if unsubscribe:
            unsubscribe()

    async def _cleanup_connection(self, npub: str):
        try:
            self.unwatch_invites(npub)
        except Exception as e:
            logger.error(f"Error stopping invite watch for {npub}: {e}")
        await self.disconnect(npub)

    def get_connection_stats(self) -> dict:
        return {
            "total_active_connections": len(self.active_connections),
            "invite_watches": len(self.invite_watches),
            "learners": list(self.active_connections.keys()),
        }

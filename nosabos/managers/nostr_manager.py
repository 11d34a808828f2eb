# nosabos/managers/nostr_manager.py - Nostr identity keys, signed notes and relay I/O

import asyncio
import hashlib
import json
import logging
import os
import time
import uuid
from typing import Any, Dict, List, Optional, Tuple

import websockets
from bech32 import bech32_decode, bech32_encode, convertbits
from coincurve import PrivateKey, PublicKeyXOnly

from nosabos.config import settings

logger = logging.getLogger(__name__)

KIND_METADATA = 0
KIND_TEXT_NOTE = 1


class NostrError(ValueError):
    """Malformed keys or events"""


def feed_hashtag(ui_lang: str) -> str:
    return "AprendeConNostr" if ui_lang == "es" else "LearnWithNostr"


# ==================== KEYS ====================

def decode_bech32(value: str, expected_prefix: str) -> bytes:
    hrp, data = bech32_decode((value or "").strip())
    if hrp != expected_prefix or data is None:
        raise NostrError(f"Invalid {expected_prefix}")
    decoded = convertbits(data, 5, 8, False)
    if decoded is None or len(decoded) != 32:
        raise NostrError(f"Invalid {expected_prefix} payload")
    return bytes(decoded)


def encode_bech32(prefix: str, raw: bytes) -> str:
    return bech32_encode(prefix, convertbits(raw, 8, 5))


def npub_to_hex(npub: str) -> str:
    return decode_bech32(npub, "npub").hex()


def hex_to_npub(pubkey_hex: str) -> str:
    return encode_bech32("npub", bytes.fromhex(pubkey_hex))


def nsec_to_private_key(nsec: str) -> PrivateKey:
    return PrivateKey(decode_bech32(nsec, "nsec"))


def generate_keys() -> Dict[str, str]:
    """A fresh identity as {npub, nsec, pubkey}"""
    key = PrivateKey()
    pubkey = key.public_key_xonly.format()
    return {
        "npub": encode_bech32("npub", pubkey),
        "nsec": encode_bech32("nsec", key.secret),
        "pubkey": pubkey.hex(),
    }


# ==================== EVENTS ====================

def compute_event_id(pubkey: str, created_at: int, kind: int, tags: List[List[str]], content: str) -> str:
    """sha256 over the canonical [0, pubkey, created_at, kind, tags, content] serialization"""
    serialized = json.dumps(
        [0, pubkey, created_at, kind, tags, content],
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


def build_event(private_key: PrivateKey, content: str, kind: int = KIND_TEXT_NOTE,
                tags: Optional[List[List[str]]] = None, created_at: Optional[int] = None) -> Dict[str, Any]:
    pubkey = private_key.public_key_xonly.format().hex()
    tags = tags or []
    created_at = created_at or int(time.time())
    event_id = compute_event_id(pubkey, created_at, kind, tags, content)
    signature = private_key.sign_schnorr(bytes.fromhex(event_id), os.urandom(32))
    return {
        "id": event_id,
        "pubkey": pubkey,
        "created_at": created_at,
        "kind": kind,
        "tags": tags,
        "content": content,
        "sig": signature.hex(),
    }


def verify_event(event: Dict[str, Any]) -> bool:
    try:
        expected = compute_event_id(
            event["pubkey"], event["created_at"], event["kind"], event["tags"], event["content"]
        )
        if expected != event["id"]:
            return False
        key = PublicKeyXOnly(bytes.fromhex(event["pubkey"]))
        return key.verify(bytes.fromhex(event["sig"]), bytes.fromhex(event["id"]))
    except (KeyError, ValueError, TypeError):
        return False


class NostrManager:
    """Publishes and queries events over a fixed set of relays"""

    def __init__(self, relays: List[str] = None, timeout: float = None):
        self.relays = list(relays or settings.nostr_relays)
        self.timeout = timeout or settings.nostr_timeout

    async def _publish_to(self, relay: str, event: Dict[str, Any]) -> bool:
        try:
            async with websockets.connect(relay, open_timeout=self.timeout, close_timeout=2) as ws:
                await ws.send(json.dumps(["EVENT", event]))
                while True:
                    reply = json.loads(await asyncio.wait_for(ws.recv(), timeout=self.timeout))
                    if reply and reply[0] == "OK" and reply[1] == event["id"]:
                        return bool(reply[2])
        except Exception as e:
            logger.warning(f"Relay {relay} rejected or unreachable: {e}")
            return False

    async def publish(self, event: Dict[str, Any]) -> List[str]:
        """Relays that acknowledged the event"""
        results = await asyncio.gather(*(self._publish_to(relay, event) for relay in self.relays))
        accepted = [relay for relay, ok in zip(self.relays, results) if ok]
        logger.info(f"📨 Event {event['id'][:12]} accepted by {len(accepted)}/{len(self.relays)} relays")
        return accepted

    async def send_direct_message(self, target_npub: str, message: str, nsec: str) -> Optional[Dict[str, Any]]:
        """Text note p-tagged to the target; silently skipped without a target or message"""
        if not target_npub or not message:
            return None

        event = build_event(
            nsec_to_private_key(nsec),
            message,
            kind=KIND_TEXT_NOTE,
            tags=[["p", npub_to_hex(target_npub)]],
        )
        accepted = await self.publish(event)
        return {"event": event, "relays": accepted}

    async def _query(self, relay: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        subscription = uuid.uuid4().hex[:16]
        events = []
        try:
            async with websockets.connect(relay, open_timeout=self.timeout, close_timeout=2) as ws:
                await ws.send(json.dumps(["REQ", subscription, filters]))
                while True:
                    message = json.loads(await asyncio.wait_for(ws.recv(), timeout=self.timeout))
                    if message[0] == "EVENT" and message[1] == subscription:
                        events.append(message[2])
                    elif message[0] in ("EOSE", "CLOSED"):
                        break
                await ws.send(json.dumps(["CLOSE", subscription]))
        except Exception as e:
            logger.warning(f"Query against {relay} failed: {e}")
        return events

    async def query(self, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Events from every relay, de-duplicated by id, verified, newest first"""
        batches = await asyncio.gather(*(self._query(relay, filters) for relay in self.relays))
        unique: Dict[str, Dict[str, Any]] = {}
        for batch in batches:
            for event in batch:
                if event.get("id") not in unique and verify_event(event):
                    unique[event["id"]] = event
        return sorted(unique.values(), key=lambda e: e.get("created_at", 0), reverse=True)

    async def fetch_profiles(self, pubkeys: List[str]) -> Dict[str, Dict[str, Any]]:
        if not pubkeys:
            return {}
        profiles: Dict[str, Tuple[int, Dict[str, Any]]] = {}
        for event in await self.query({"kinds": [KIND_METADATA], "authors": pubkeys}):
            try:
                metadata = json.loads(event.get("content") or "{}")
            except ValueError:
                continue
            current = profiles.get(event["pubkey"])
            if current is None or event["created_at"] > current[0]:
                profiles[event["pubkey"]] = (event["created_at"], metadata)
        return {pubkey: data for pubkey, (_, data) in profiles.items()}

    async def fetch_hashtag_notes(self, tag: str, limit: int = 50) -> List[Dict[str, Any]]:
        """Text notes carrying #tag, each with its author's npub and profile metadata"""
        notes = await self.query({"kinds": [KIND_TEXT_NOTE], "#t": [tag.lower()], "limit": limit})
        notes = notes[:limit]
        profiles = await self.fetch_profiles(sorted({note["pubkey"] for note in notes}))
        return [
            {
                **note,
                "npub": hex_to_npub(note["pubkey"]),
                "profile": profiles.get(note["pubkey"], {}),
            }
            for note in notes
        ]

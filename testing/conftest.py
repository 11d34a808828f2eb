import copy
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from firebase_admin import firestore
from google.api_core.exceptions import NotFound

from nosabos.managers.cache_manager import CacheManager
from nosabos.managers.firestore_manager import FirestoreManager


# ============================================================================
# IN-MEMORY FIRESTORE
# ============================================================================

def _resolve(value: Any, current: Any) -> Any:
    if value is firestore.SERVER_TIMESTAMP:
        return datetime.now(timezone.utc)
    if isinstance(value, firestore.Increment):
        return (current or 0) + value.value
    return copy.deepcopy(value)


def _merge(target: Dict[str, Any], data: Dict[str, Any]):
    for key, value in data.items():
        if value is firestore.DELETE_FIELD:
            target.pop(key, None)
        elif isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        elif isinstance(value, dict):
            target[key] = {}
            _merge(target[key], value)
        else:
            target[key] = _resolve(value, target.get(key))


class FakeSnapshot:
    def __init__(self, reference, data: Optional[Dict[str, Any]]):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeWatch:
    def __init__(self, store, key, callback):
        self.store = store
        self.key = key
        self.callback = callback

    def unsubscribe(self):
        self.store.watches = [w for w in self.store.watches if w is not self]


class FakeDocument:
    def __init__(self, store, path):
        self.store = store
        self.path = tuple(path)
        self.id = self.path[-1]

    def collection(self, name):
        return FakeCollection(self.store, self.path + (name,))

    def get(self, transaction=None):
        return FakeSnapshot(self, copy.deepcopy(self.store.docs.get(self.path)))

    def set(self, data, merge=False):
        current = self.store.docs.get(self.path) if merge else None
        target = copy.deepcopy(current) if current is not None else {}
        _merge(target, data)
        self.store.docs[self.path] = target
        self.store.notify(self.path)

    def update(self, fields):
        if self.path not in self.store.docs:
            raise NotFound(f"No document to update: {'/'.join(self.path)}")
        target = self.store.docs[self.path]
        for dotted, value in fields.items():
            parts = dotted.split(".")
            node = target
            for part in parts[:-1]:
                if not isinstance(node.get(part), dict):
                    node[part] = {}
                node = node[part]
            if value is firestore.DELETE_FIELD:
                node.pop(parts[-1], None)
            else:
                node[parts[-1]] = _resolve(value, node.get(parts[-1]))
        self.store.notify(self.path)

    def delete(self):
        self.store.docs.pop(self.path, None)
        self.store.notify(self.path)

    def on_snapshot(self, callback):
        watch = FakeWatch(self.store, self.path, lambda: callback([self.get()], [], None))
        self.store.watches.append(watch)
        watch.callback()
        return watch


class FakeQuery:
    def __init__(self, collection, filters):
        self.collection = collection
        self.filters = list(filters)

    def where(self, filter=None):
        return FakeQuery(self.collection, self.filters + [filter])

    def _matches(self, data):
        for f in self.filters:
            if f.op_string != "==":
                raise NotImplementedError(f.op_string)
            if data.get(f.field_path) != f.value:
                return False
        return True

    def stream(self):
        return [snap for snap in self.collection.stream() if self._matches(snap.to_dict())]


class FakeCollection:
    def __init__(self, store, path):
        self.store = store
        self.path = tuple(path)

    def document(self, doc_id=None):
        return FakeDocument(self.store, self.path + (doc_id or self.store.next_id(),))

    def where(self, filter=None):
        return FakeQuery(self, [filter])

    def stream(self):
        depth = len(self.path) + 1
        return [
            FakeDocument(self.store, path).get()
            for path in sorted(self.store.docs)
            if len(path) == depth and path[:-1] == self.path
        ]

    def on_snapshot(self, callback):
        watch = FakeWatch(self.store, self.path, lambda: callback(self.stream(), [], None))
        self.store.watches.append(watch)
        watch.callback()
        return watch


class FakeTransaction:
    def set(self, ref, data, merge=False):
        ref.set(data, merge=merge)


class FakeFirestore:
    """Just enough of the Firestore client for the managers: documents keyed by their path"""

    def __init__(self):
        self.docs: Dict[tuple, Dict[str, Any]] = {}
        self.watches: List[FakeWatch] = []
        self._ids = 0

    def next_id(self) -> str:
        self._ids += 1
        return f"auto{self._ids}"

    def collection(self, name):
        return FakeCollection(self, (name,))

    def transaction(self):
        return FakeTransaction()

    def notify(self, path):
        for watch in list(self.watches):
            if path[:len(watch.key)] == watch.key:
                watch.callback()


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def fake_db(monkeypatch):
    monkeypatch.setattr(firestore, "transactional", lambda fn: fn)
    return FakeFirestore()


@pytest.fixture
def firestore_manager(fake_db):
    return FirestoreManager(db=fake_db)


@pytest.fixture
def cache_manager():
    cache = CacheManager()
    cache.using_fallback = True
    cache.connection_tested = True
    return cache


class FakeLLM:
    """Scripted stand-in for LLMManager"""

    def __init__(self, objects=None, responses=None, verdict=False, gemini=True):
        self.objects = list(objects or [])
        self.responses = list(responses or [])
        self.verdict = verdict
        self.gemini_available = gemini
        self.prompts: List[str] = []
        self.judged: List[str] = []

    async def stream_objects(self, prompt):
        self.prompts.append(prompt)
        for obj in self.objects:
            yield obj

    async def call_responses(self, input, model=None):
        self.prompts.append(input)
        return self.responses.pop(0) if self.responses else ""

    async def judge(self, prompt):
        self.judged.append(prompt)
        return self.verdict

    async def explain_answer(self, question, user_answer, correct_answer, **kwargs):
        return f" Because {correct_answer} fits. "

    async def generate_note_content(self, concept, *args, **kwargs):
        return {"example": f"Example with {concept}", "summary": f"About {concept}"}


@pytest.fixture
def fake_llm():
    return FakeLLM()

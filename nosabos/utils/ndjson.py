# nosabos/utils/ndjson.py - Incremental NDJSON parsing for streamed LLM output

import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, Dict, List, Optional

logger = logging.getLogger(__name__)


def parse_line(line: str) -> Optional[Dict[str, Any]]:
    """Parse the {...} slice of a single line; noise around the object is ignored"""
    start = line.find("{")
    end = line.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    try:
        obj = json.loads(line[start:end + 1])
    except ValueError:
        logger.debug(f"Dropping malformed NDJSON line: {line[:80]}")
        return None
    return obj if isinstance(obj, dict) else None


class NDJSONParser:
    """Buffers text chunks and emits one object per complete line"""

    def __init__(self):
        self.buffer = ""
        self.objects_parsed = 0

    def feed(self, chunk: str) -> List[Dict[str, Any]]:
        if not chunk:
            return []
        self.buffer += chunk
        *lines, self.buffer = self.buffer.split("\n")
        return self._consume(lines)

    def flush(self) -> List[Dict[str, Any]]:
        """Consume the trailing partial line at end of stream"""
        remaining, self.buffer = self.buffer, ""
        return self._consume([remaining]) if remaining.strip() else []

    def _consume(self, lines: List[str]) -> List[Dict[str, Any]]:
        objects = []
        for line in lines:
            if not line.strip():
                continue
            obj = parse_line(line)
            if obj is not None:
                objects.append(obj)
        self.objects_parsed += len(objects)
        return objects


async def iter_ndjson(chunks: AsyncIterable[str]) -> AsyncIterator[Dict[str, Any]]:
    """Turn an async stream of text chunks into an async stream of objects"""
    parser = NDJSONParser()
    async for chunk in chunks:
        for obj in parser.feed(chunk):
            yield obj
    for obj in parser.flush():
        yield obj

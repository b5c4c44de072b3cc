"""
Helpers shared by the server upload route and the client upload store.
"""
import base64
import random
import string
import time
from typing import Optional

MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024

_BASE36 = string.digits + string.ascii_lowercase


def now_ms() -> int:
    return int(time.time() * 1000)


def generate_file_id(index: int, rng: Optional[random.Random] = None) -> str:
    """file_<epoch ms>_<index>_<9 random base36 chars>"""
    rng = rng or random.Random()
    suffix = "".join(rng.choice(_BASE36) for _ in range(9))
    return f"file_{now_ms()}_{index}_{suffix}"


def to_data_url(content: bytes, content_type: Optional[str]) -> str:
    encoded = base64.b64encode(content).decode("utf-8")
    return f"data:{content_type or 'application/octet-stream'};base64,{encoded}"


def from_data_url(data_url: str) -> bytes:
    """Decode a data URL (or bare base64) back to bytes."""
    _, _, payload = data_url.rpartition(",")
    return base64.b64decode(payload)

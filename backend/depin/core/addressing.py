"""
Deterministic record keys

Keys are pure functions of their inputs, so two concurrent attempts to
create the same record derive the same primary key and the store lets only
one of them commit.
"""
import hashlib
from typing import Union

NETWORK_STATE_TAG = b"program_state"
DEVICE_TAG = b"device"
SUBMISSION_TAG = b"data"


def _digest(tag: bytes, *parts: bytes) -> str:
    hasher = hashlib.sha256()
    hasher.update(tag)
    for part in parts:
        # Length prefix keeps ("ab", "c") and ("a", "bc") apart
        hasher.update(len(part).to_bytes(4, "big"))
        hasher.update(part)
    return hasher.hexdigest()


def _to_bytes(value: Union[str, bytes]) -> bytes:
    return value if isinstance(value, bytes) else value.encode("utf-8")


NETWORK_STATE_KEY = _digest(NETWORK_STATE_TAG)


def derive_device_key(owner: str, device_id: str) -> str:
    """Key of the device registered by ``owner`` under ``device_id``"""
    return _digest(DEVICE_TAG, _to_bytes(owner), _to_bytes(device_id))


def derive_submission_key(device_key: str, timestamp: int) -> str:
    """Key of the submission made by a device at a unix ``timestamp`` (seconds)"""
    return _digest(
        SUBMISSION_TAG,
        _to_bytes(device_key),
        int(timestamp).to_bytes(8, "little", signed=True),
    )

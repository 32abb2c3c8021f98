from __future__ import annotations

import hashlib
import json
import random
from typing import Any, Mapping


def _canonical(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key): _canonical(val) for key, val in sorted(value.items(), key=lambda item: str(item[0]))}
    if isinstance(value, (list, tuple)):
        return [_canonical(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted((_canonical(item) for item in value), key=lambda item: json.dumps(item, sort_keys=True, default=str))
    return value


def derive_seed(namespace: str, context: Mapping[str, Any]) -> int:
    """Stable 32-bit seed for a named random stream.

    The same namespace and context always map to the same seed, so a session
    seed fans out into independent spawn and loot streams.
    """
    payload = {"namespace": namespace, "context": _canonical(context)}
    serialized = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256(serialized.encode("utf-8")).hexdigest()
    return int(digest, 16) % (2**32)


def derive_rng(namespace: str, session_seed: int | None) -> random.Random:
    if session_seed is None:
        return random.Random()
    return random.Random(derive_seed(namespace, {"session_seed": int(session_seed)}))

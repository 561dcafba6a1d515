"""Prefixed random identifiers for stored rows."""

import secrets

# no 0/O/I/l to keep ids readable when copied out of logs
ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

ID_PREFIXES = {
    "task": "ta",
    "idea_folder": "if",
    "idea": "id",
    "inference_record": "im",
}


def compose_id(kind: str, size: int = 16) -> str:
    """Compose a unique id from the kind's prefix and a random suffix.

    Raises:
        KeyError: If ``kind`` has no registered prefix.
    """
    suffix = "".join(secrets.choice(ALPHABET) for _ in range(size))
    return f"{ID_PREFIXES[kind]}_{suffix}"

from __future__ import annotations

import base64
import hashlib
import json
from functools import lru_cache
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

from resume_enricher.core.config import settings


class DecryptionError(ValueError):
    pass


@lru_cache(maxsize=1)
def _fernet() -> Fernet:
    digest = hashlib.sha256(settings.jwt_secret.encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def encrypt_data(value: Any) -> str:
    if not isinstance(value, str):
        value = json.dumps(value, ensure_ascii=False)
    return _fernet().encrypt(value.encode("utf-8")).decode("ascii")


def decrypt_data(ciphertext: str) -> Any:
    """Decrypt a token; JSON payloads come back parsed, anything else as text."""
    try:
        plain = _fernet().decrypt(ciphertext.encode("ascii")).decode("utf-8")
    except (InvalidToken, UnicodeError) as exc:
        raise DecryptionError("Unable to decrypt value") from exc

    try:
        return json.loads(plain)
    except ValueError:
        return plain

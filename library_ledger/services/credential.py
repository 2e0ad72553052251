"""
Password Credentials

Salted one-way hashing for stored passwords.

hash = SHA-256(salt || utf8(password)), rendered as 64 lowercase hex chars.

DESIGN DECISION: Every credential gets its own 16 bytes from the
``secrets`` CSPRNG, so the same password never produces the same hash
twice.
"""

import hashlib
import hmac
import secrets

from library_ledger.models.user import Credential


SALT_BYTES = 16
DIGEST_ALGORITHM = "sha256"


def generate_salt() -> bytes:
    """Fresh cryptographically random salt."""
    return secrets.token_bytes(SALT_BYTES)


def hash_password(password: str, salt: bytes) -> str:
    """Lowercase hex digest of salt followed by the UTF-8 password."""
    digest = hashlib.new(DIGEST_ALGORITHM)
    digest.update(salt)
    digest.update(password.encode("utf-8"))
    return digest.hexdigest()


def derive(password: str) -> Credential:
    """Create a new credential for ``password`` with a fresh salt."""
    salt = generate_salt()
    return Credential(password_hash=hash_password(password, salt), salt=salt)


def verify(password: str, credential: Credential) -> bool:
    """Recompute the hash with the stored salt and compare."""
    candidate = hash_password(password, credential.salt)
    return hmac.compare_digest(candidate, credential.password_hash)

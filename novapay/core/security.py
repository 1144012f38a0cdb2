"""
Core security module — JWT verification and field encryption.

Access tokens are issued by the identity provider; this module only
verifies them (RS256 with HS256 fallback when the public key file is
missing). Sensitive recipient fields are encrypted at rest with Fernet.
"""

import logging
from pathlib import Path

import jwt
from cryptography.fernet import Fernet, InvalidToken
from fastapi import HTTPException, status

from novapay.config import settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Key loading
# ---------------------------------------------------------------------------

_public_key: str | bytes | None = None
_algorithm: str = settings.JWT_ALGORITHM


def _load_keys() -> None:
    """Load the RSA public key from disk. Falls back to HS256 with SECRET_KEY."""
    global _public_key, _algorithm

    public_path = Path(settings.JWT_PUBLIC_KEY_PATH)

    if public_path.exists():
        _public_key = public_path.read_bytes()
        _algorithm = "RS256"
        logger.info("Loaded RSA public key for JWT verification (RS256).")
    else:
        _public_key = settings.SECRET_KEY
        _algorithm = "HS256"
        logger.warning("RSA public key not found. Falling back to HS256.")


_load_keys()


def configure_keys(*, public_key: str | bytes, algorithm: str = "RS256") -> None:
    """Override the verification key at runtime (used in tests)."""
    global _public_key, _algorithm
    _public_key = public_key
    _algorithm = algorithm


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


def decode_token(token: str) -> dict:
    """
    Decode and return the JWT payload.

    Raises HTTP 401 on expiry or any other invalid-token error.
    """
    try:
        return jwt.decode(token, _public_key, algorithms=[_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )


def verify_token(token: str, expected_type: str = "access") -> dict:
    """Decode a JWT and validate its ``type`` claim."""
    payload = decode_token(token)
    if payload.get("type") != expected_type:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Expected {expected_type} token",
        )
    return payload


# ---------------------------------------------------------------------------
# Fernet cipher, lazily initialised from settings
# ---------------------------------------------------------------------------

_fernet: Fernet | None = None


def _get_fernet() -> Fernet:
    global _fernet
    if _fernet is None:
        _fernet = Fernet(settings.FERNET_KEY.encode())
    return _fernet


def configure_fernet(key: str | bytes) -> None:
    """Override the Fernet key at runtime (used in tests)."""
    global _fernet
    if isinstance(key, str):
        key = key.encode()
    _fernet = Fernet(key)


def encrypt_value(plaintext: str) -> str:
    """Encrypt a string with Fernet and return the token as str."""
    return _get_fernet().encrypt(plaintext.encode()).decode()


def decrypt_value(token: str) -> str:
    """Decrypt a Fernet token back to plaintext."""
    try:
        return _get_fernet().decrypt(token.encode()).decode()
    except InvalidToken:
        raise ValueError("Unable to decrypt value — invalid key or corrupted data")

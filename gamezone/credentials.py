"""Salted one-way hashing for account secrets.

Stored format::

    pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>
"""
import hashlib
import hmac
import secrets

ALGORITHM = 'pbkdf2_sha256'
DEFAULT_ITERATIONS = 120_000
SALT_BYTES = 16


def hash_secret(secret: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    """Return the encoded salted hash of *secret*."""
    salt = secrets.token_hex(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac(
        'sha256', secret.encode('utf-8'), salt.encode('ascii'), iterations,
    ).hex()
    return f"{ALGORITHM}${iterations}${salt}${digest}"


def verify_secret(secret: str, encoded: str) -> bool:
    """Return ``True`` if *secret* matches the *encoded* credential.

    Malformed or foreign-format credentials never match.
    """
    try:
        algorithm, iterations, salt, digest = encoded.split('$')
        rounds = int(iterations)
    except (AttributeError, ValueError):
        return False
    if algorithm != ALGORITHM:
        return False
    candidate = hashlib.pbkdf2_hmac(
        'sha256', secret.encode('utf-8'), salt.encode('ascii'), rounds,
    ).hex()
    return hmac.compare_digest(candidate, digest)

import hashlib
import hmac


def hash_secret(secret: str) -> str:
    """Return the hex SHA-256 digest of ``secret``. Used only for comparison."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def secrets_match(stored_digest: str, secret: str) -> bool:
    return hmac.compare_digest(stored_digest, hash_secret(secret))

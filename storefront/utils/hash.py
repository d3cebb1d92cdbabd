import base64
import hashlib
import hmac


# Single-round SHA-512: stands in for a real password hash (bcrypt/argon2).
def hash_password(password: str) -> str:
    digest = hashlib.sha512(password.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_password(password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    return hmac.compare_digest(hash_password(password), hashed_password)

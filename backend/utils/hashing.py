# backend/utils/hashing.py
import bcrypt

from config import settings

# bcrypt only looks at the first 72 bytes; cut explicitly so hashing and checking agree
def _to_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:72]

def get_password_hash(password: str, rounds: int = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_to_bytes(password), salt).decode("utf-8")

def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_to_bytes(plain_password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False

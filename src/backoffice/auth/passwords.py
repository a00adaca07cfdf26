"""One-way password hashing."""
from passlib.context import CryptContext
from backoffice.config import settings

pwd_context = CryptContext(schemes=settings.password_schemes, deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(password, hashed)

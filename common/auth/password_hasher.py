"""
bcrypt password hashing.

Passwords are pre-hashed with SHA-256 before bcrypt. This handles
bcrypt's 72-byte limit so long passwords are never silently truncated.

Example:
    hasher = PasswordHasher(rounds=10)

    digest = await hasher.hash("correct horse battery staple")
    assert await hasher.verify("correct horse battery staple", digest)
"""

import asyncio
import base64
import hashlib
import logging

import bcrypt as bcrypt_lib

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 10


class PasswordHasher:
    """
    One-way salted password hashing with a fixed work factor.

    Hashing and verification run in a worker thread so a slow
    bcrypt round does not stall the event loop.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self.rounds = rounds

    @staticmethod
    def _prehash_password(password: str) -> bytes:
        sha256_hash = hashlib.sha256(password.encode("utf-8")).digest()
        return base64.b64encode(sha256_hash)

    def hash_sync(self, password: str) -> str:
        """Hash a password using bcrypt with SHA-256 pre-hashing."""
        salt = bcrypt_lib.gensalt(rounds=self.rounds)
        return bcrypt_lib.hashpw(self._prehash_password(password), salt).decode("utf-8")

    def verify_sync(self, password: str, hashed: str) -> bool:
        """
        Verify a password against its hash.

        A missing or malformed hash never matches.
        """
        if not hashed:
            return False
        try:
            return bcrypt_lib.checkpw(
                self._prehash_password(password),
                hashed.encode("utf-8"),
            )
        except ValueError:
            logger.warning("Password verification against a malformed hash")
            return False

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self.hash_sync, password)

    async def verify(self, password: str, hashed: str) -> bool:
        return await asyncio.to_thread(self.verify_sync, password, hashed)

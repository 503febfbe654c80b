"""
Password hashing for stored credentials.

Hashes are Argon2id strings produced by argon2-cffi. Every call to
`PasswordManager.hash()` draws a fresh random salt, so hashing the same
password twice yields two different strings that both verify.
"""

from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError, VerifyMismatchError
from argon2.profiles import RFC_9106_LOW_MEMORY


class PasswordHashingError(Exception):
    """Raised when a password cannot be hashed or a stored hash cannot be checked."""


class PasswordManager:
    """
    Hash and verify passwords with a fixed, configurable cost.

    Args:
        time_cost (int): Number of Argon2 iterations.
        memory_cost (int): Memory usage in KiB.
        parallelism (int): Number of parallel lanes.
    """

    def __init__(
        self,
        time_cost: int = RFC_9106_LOW_MEMORY.time_cost,
        memory_cost: int = RFC_9106_LOW_MEMORY.memory_cost,
        parallelism: int = RFC_9106_LOW_MEMORY.parallelism,
    ) -> None:
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    def hash(self, password: str) -> str:
        """
        Return a salted one-way hash of `password`.

        Raises:
            PasswordHashingError: If argon2 fails to produce a hash.
        """
        try:
            return self._hasher.hash(password)
        except HashingError as e:
            raise PasswordHashingError("Password hashing failed") from e

    def verify(self, stored_hash: str, password: str) -> bool:
        """
        Compare a plaintext password with a stored hash.

        Returns:
            bool: True on match, False on mismatch.

        Raises:
            PasswordHashingError: If the stored value is not a usable hash.
        """
        try:
            return self._hasher.verify(stored_hash, password)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError) as e:
            raise PasswordHashingError("Password comparison failed") from e


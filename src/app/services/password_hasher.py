from abc import ABC, abstractmethod


class IPasswordHasher(ABC):
    """Password hashing collaborator - application layer"""

    @abstractmethod
    def hash(self, plain: str) -> str:
        """Return a hash of the plaintext password"""
        pass

    @abstractmethod
    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if the plaintext matches the hash"""
        pass

    @abstractmethod
    def burn(self) -> None:
        """Spend the same time as verify() when there is nothing to verify"""
        pass

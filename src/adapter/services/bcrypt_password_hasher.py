import bcrypt

from src.app.services.password_hasher import IPasswordHasher


class BcryptPasswordHasher(IPasswordHasher):
    """bcrypt implementation of the password collaborator"""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, plain: str) -> str:
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # Stored hash is not a bcrypt hash
            return False

    def burn(self) -> None:
        bcrypt.checkpw(b"dummy_password", bcrypt.gensalt(self.rounds))

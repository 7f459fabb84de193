from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from cryptography.exceptions import InvalidKey
import secrets

SALT_BYTES = 16
KEY_LENGTH = 64


class PasswordHashingStrategy:
    """
    Strategy class for password hashing using scrypt.
    Stored format is "<hex key>.<hex salt>"; the hex salt string itself is
    the KDF salt, which keeps hashes produced by the seeding script valid.
    """
    def __init__(self, n: int = 2 ** 14, r: int = 8, p: int = 1):
        self._n = n
        self._r = r
        self._p = p

    def _kdf(self, salt: str) -> Scrypt:
        return Scrypt(salt=salt.encode("utf-8"), length=KEY_LENGTH, n=self._n, r=self._r, p=self._p)

    def hash(self, password: str) -> str:
        salt = secrets.token_hex(SALT_BYTES)
        key = self._kdf(salt).derive(password.encode("utf-8"))
        return f"{key.hex()}.{salt}"

    def verify(self, password: str, stored: str) -> bool:
        if not stored or "." not in stored:
            return False
        hashed, salt = stored.rsplit(".", 1)
        try:
            expected = bytes.fromhex(hashed)
        except ValueError:
            return False
        try:
            self._kdf(salt).verify(password.encode("utf-8"), expected)
        except InvalidKey:
            return False
        return True

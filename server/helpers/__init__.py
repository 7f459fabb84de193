from .PasswordHashingStrategy import PasswordHashingStrategy

__all__ = [
    'PasswordHashingStrategy'
]

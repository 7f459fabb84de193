from .RulesEngine import RulesEngine
from .exceptions import (
    DomainError, NotFound, Forbidden, ValidationError,
    Conflict, InvalidState, CapacityExceeded,
)

__all__ = [
    'RulesEngine',
    'DomainError',
    'NotFound',
    'Forbidden',
    'ValidationError',
    'Conflict',
    'InvalidState',
    'CapacityExceeded',
]

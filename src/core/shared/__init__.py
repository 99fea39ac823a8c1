"""
Shared Domain Components.

Contém componentes compartilhados entre todos os domínios:
- Exceções de domínio
- Interfaces (Ports)
- Base classes para Domain Events
"""

from .exceptions import (
    DomainException,
    ValidationError,
    ValidationFailedError,
    InvalidSeverityError,
    UnknownTransitionError,
    EntityNotFoundError,
    TicketNotFoundError,
    BusinessRuleViolationError,
    TicketAlreadyClosedError,
    PersistenceError,
    ConcurrencyError,
    ConversationNotFoundError,
    OperationCancelledError,
)
from .events import DomainEvent, utcnow
from .interfaces import UnitOfWork, EventPublisher, CancellationToken
from .values import Identity

__all__ = [
    "DomainException",
    "ValidationError",
    "ValidationFailedError",
    "InvalidSeverityError",
    "UnknownTransitionError",
    "EntityNotFoundError",
    "TicketNotFoundError",
    "BusinessRuleViolationError",
    "TicketAlreadyClosedError",
    "PersistenceError",
    "ConcurrencyError",
    "ConversationNotFoundError",
    "OperationCancelledError",
    "DomainEvent",
    "utcnow",
    "UnitOfWork",
    "EventPublisher",
    "CancellationToken",
    "Identity",
]

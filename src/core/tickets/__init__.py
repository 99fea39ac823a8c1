"""
Domínio de Tickets - Ciclo de vida do pedido de suporte.

Este módulo contém toda a lógica de negócio relacionada a tickets
de suporte remoto, incluindo:
- Entidades (TicketEntity, TicketStatus, TicketSeverity)
- Máquina de estados (TicketLifecycleEngine, TransitionKind)
- Abertura via cartão (IntakeValidator, FieldSpec, CardConfiguration)
- Use Cases (CreateTicket, ApplyTransition, EditTicket, LinkSmeCard, GetTicket)
- Domain Events (TicketCreated, TicketTransitioned, TicketEdited)
- Ports (TicketRepository, TicketIdGenerator, TemplateProvider)

Características do Domínio:
- Transições fechadas em enum, sem fallback por string
- Engine pura: nunca altera o ticket de entrada
- Concorrência otimista via versão do registro
"""

from .entities import TicketEntity, TicketStatus, TicketSeverity
from .intake import CardConfiguration, FieldSpec, InputKind, IntakeValidator
from .lifecycle import (
    RequesterNotification,
    SmeNotification,
    TicketLifecycleEngine,
    TransitionKind,
    TransitionResult,
)
from .events import TicketCreatedEvent, TicketEditedEvent, TicketTransitionedEvent
from .dtos import (
    ApplyTransitionInputDTO,
    CreateTicketInputDTO,
    EditTicketInputDTO,
    LinkSmeCardInputDTO,
    TicketOutputDTO,
    TransitionOutputDTO,
)
from .ports import TemplateProvider, TicketIdGenerator, TicketRepository
from .use_cases import (
    ApplyTransitionService,
    CreateTicketService,
    EditTicketService,
    GetTicketService,
    LinkSmeCardService,
)

__all__ = [
    # Entities
    "TicketEntity",
    "TicketStatus",
    "TicketSeverity",
    # Intake
    "CardConfiguration",
    "FieldSpec",
    "InputKind",
    "IntakeValidator",
    # Lifecycle
    "RequesterNotification",
    "SmeNotification",
    "TicketLifecycleEngine",
    "TransitionKind",
    "TransitionResult",
    # Events
    "TicketCreatedEvent",
    "TicketEditedEvent",
    "TicketTransitionedEvent",
    # DTOs
    "ApplyTransitionInputDTO",
    "CreateTicketInputDTO",
    "EditTicketInputDTO",
    "LinkSmeCardInputDTO",
    "TicketOutputDTO",
    "TransitionOutputDTO",
    # Ports
    "TemplateProvider",
    "TicketIdGenerator",
    "TicketRepository",
    # Use Cases
    "ApplyTransitionService",
    "CreateTicketService",
    "EditTicketService",
    "GetTicketService",
    "LinkSmeCardService",
]

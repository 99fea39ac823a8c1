"""
Domain Events do Domínio de Tickets.

Eventos:
- TicketCreatedEvent: Ticket aberto via cartão
- TicketTransitionedEvent: Transição aplicada (Reopen, Close, ...)
- TicketEditedEvent: Formulário alterado pelo solicitante

Uso:
    Eventos são criados nos use cases e publicados através do
    UnitOfWork após commit bem-sucedido. Servem apenas para
    telemetria; não formam trilha de auditoria.

    with uow:
        repo.upsert(ticket)
        uow.publish_event(TicketCreatedEvent(aggregate_id=ticket.ticket_id, ...))
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from src.core.shared.events import DomainEvent


@dataclass
class TicketCreatedEvent(DomainEvent):
    """
    Evento: Ticket foi aberto.

    Attributes:
        requester_object_id: Quem abriu
        title: Título do ticket
        request_type: Severidade inicial
        card_id: Template usado
    """

    requester_object_id: Optional[str] = None
    title: str = ""
    request_type: str = ""
    card_id: Optional[str] = None

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "requester_object_id": self.requester_object_id,
            "title": self.title,
            "request_type": self.request_type,
            "card_id": self.card_id,
        }


@dataclass
class TicketTransitionedEvent(DomainEvent):
    """
    Evento: Transição aplicada ao ticket.

    Attributes:
        transition: Nome da transição (TransitionKind.value)
        previous_status / new_status: Status antes e depois
        actor_object_id: Quem executou
    """

    transition: str = ""
    previous_status: str = ""
    new_status: str = ""
    actor_object_id: Optional[str] = None

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "transition": self.transition,
            "previous_status": self.previous_status,
            "new_status": self.new_status,
            "actor_object_id": self.actor_object_id,
        }


@dataclass
class TicketEditedEvent(DomainEvent):
    """
    Evento: Solicitante editou o formulário do ticket.

    Attributes:
        actor_object_id: Quem editou
        title: Novo título
        request_type: Severidade após a edição
    """

    actor_object_id: Optional[str] = None
    title: str = ""
    request_type: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "actor_object_id": self.actor_object_id,
            "title": self.title,
            "request_type": self.request_type,
        }

"""
Data Transfer Objects (DTOs) do Domínio de Tickets.

DTOs são estruturas simples para transportar dados entre camadas,
evitando vazamento de entidades para handlers e views.

Tipos de DTOs:
- Input DTOs: Dados já extraídos da atividade recebida
- Output DTOs: Formatam dados para resposta (cartões e API)
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional

from src.core.shared.values import Identity

from .entities import TicketEntity
from .lifecycle import RequesterNotification, SmeNotification, TransitionKind, TransitionResult


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class CreateTicketInputDTO:
    """
    DTO de entrada para abrir ticket.

    Imutável (frozen=True) para garantir que dados recebidos
    não sejam alterados acidentalmente.

    Attributes:
        card_value: Valor submetido pelo cartão de abertura
        requester: Quem está abrindo
        requester_conversation_id: Conversa pessoal do solicitante
        utc_offset: Deslocamento UTC local do solicitante
    """

    card_value: Mapping[str, Any]
    requester: Identity
    requester_conversation_id: Optional[str] = None
    utc_offset: timedelta = timedelta(0)

    def to_dict(self) -> dict:
        return {
            "card_value": dict(self.card_value),
            "requester": self.requester.to_dict(),
            "requester_conversation_id": self.requester_conversation_id,
            "utc_offset_minutes": int(self.utc_offset.total_seconds() // 60),
        }


@dataclass(frozen=True)
class ApplyTransitionInputDTO:
    """
    DTO de entrada para aplicar transição.

    Attributes:
        ticket_id: ID do ticket
        kind: Transição
        actor: Quem executa
        payload: Dados extras do cartão (ex: RequestType)
    """

    ticket_id: str
    kind: TransitionKind
    actor: Identity
    payload: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "kind": self.kind.value,
            "actor": self.actor.to_dict(),
            "payload": dict(self.payload),
        }


@dataclass(frozen=True)
class EditTicketInputDTO:
    """
    DTO de entrada para editar o formulário de um ticket.

    Attributes:
        ticket_id: ID do ticket
        card_value: Valor submetido pelo cartão de edição
        actor: Quem está editando
        utc_offset: Deslocamento UTC local do ator
    """

    ticket_id: str
    card_value: Mapping[str, Any]
    actor: Identity
    utc_offset: timedelta = timedelta(0)


@dataclass(frozen=True)
class LinkSmeCardInputDTO:
    """DTO de entrada para vincular o cartão postado no canal SME."""

    ticket_id: str
    conversation_id: str
    activity_id: str


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class TicketOutputDTO:
    """
    DTO de saída completo com dados do ticket.

    Usado como `data` dos cartões e na resposta da API.
    """

    ticket_id: str
    title: str
    description: str
    status: str
    request_type: str
    requester_name: str
    requester_object_id: Optional[str]
    requester_conversation_id: Optional[str]
    assigned_to_name: Optional[str]
    assigned_to_object_id: Optional[str]
    closed_by_name: Optional[str]
    created_on: datetime
    closed_on: Optional[datetime]
    last_modified_by_name: Optional[str]
    last_modified_by_object_id: Optional[str]
    last_modified_on: Optional[datetime]
    sme_conversation_id: Optional[str]
    sme_ticket_activity_id: Optional[str]
    card_id: Optional[str]
    additional_properties: Dict[str, Any] = field(default_factory=dict)
    version: int = 0

    @classmethod
    def from_entity(cls, entity: TicketEntity) -> "TicketOutputDTO":
        """
        Factory method para converter entidade em DTO.

        Args:
            entity: Entidade TicketEntity

        Returns:
            DTO com dados da entidade
        """
        return cls(
            ticket_id=entity.ticket_id,
            title=entity.title,
            description=entity.description,
            status=entity.status.value,
            request_type=entity.request_type.value,
            requester_name=entity.requester_name,
            requester_object_id=entity.requester_object_id,
            requester_conversation_id=entity.requester_conversation_id,
            assigned_to_name=entity.assigned_to_name,
            assigned_to_object_id=entity.assigned_to_object_id,
            closed_by_name=entity.closed_by_name,
            created_on=entity.created_on,
            closed_on=entity.closed_on,
            last_modified_by_name=entity.last_modified_by_name,
            last_modified_by_object_id=entity.last_modified_by_object_id,
            last_modified_on=entity.last_modified_on,
            sme_conversation_id=entity.sme_conversation_id,
            sme_ticket_activity_id=entity.sme_ticket_activity_id,
            card_id=entity.card_id,
            additional_properties=dict(entity.additional_properties),
            version=entity.version,
        )

    def to_dict(self) -> dict:
        """Converte para dicionário (serialização JSON)."""
        return {
            "ticket_id": self.ticket_id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "request_type": self.request_type,
            "requester_name": self.requester_name,
            "requester_object_id": self.requester_object_id,
            "requester_conversation_id": self.requester_conversation_id,
            "assigned_to_name": self.assigned_to_name,
            "assigned_to_object_id": self.assigned_to_object_id,
            "closed_by_name": self.closed_by_name,
            "created_on": self.created_on.isoformat(),
            "closed_on": self.closed_on.isoformat() if self.closed_on else None,
            "last_modified_by_name": self.last_modified_by_name,
            "last_modified_by_object_id": self.last_modified_by_object_id,
            "last_modified_on": (
                self.last_modified_on.isoformat() if self.last_modified_on else None
            ),
            "sme_conversation_id": self.sme_conversation_id,
            "sme_ticket_activity_id": self.sme_ticket_activity_id,
            "card_id": self.card_id,
            "additional_properties": self.additional_properties,
            "version": self.version,
        }


@dataclass
class TransitionOutputDTO:
    """Resultado de uma transição já persistida."""

    ticket: TicketOutputDTO
    kind: str
    sme_notification: Optional[SmeNotification]
    requester_notification: Optional[RequesterNotification]

    @classmethod
    def from_result(cls, result: TransitionResult) -> "TransitionOutputDTO":
        return cls(
            ticket=TicketOutputDTO.from_entity(result.ticket),
            kind=result.kind.value,
            sme_notification=result.sme_notification,
            requester_notification=result.requester_notification,
        )

"""
Entidades do Domínio de Tickets.

Este módulo define as entidades de domínio que encapsulam
regras de negócio relacionadas a tickets de suporte remoto.

Entidades:
- TicketEntity: Agregado principal do domínio (TicketRecord)
- TicketStatus: Estados possíveis de um ticket
- TicketSeverity: Rótulos de severidade (request type)

Regras de Negócio Encapsuladas:
- Título e descrição obrigatórios na abertura
- Exatamente um status por vez
- Responsável preenchido se e somente se status = Assigned
- closed_on preenchido se e somente se status = Closed
- Toda mutação atualiza a tripla last_modified_*
- Ticket fechado não pode ser retirado nem editado pelo solicitante
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from src.core.shared.events import utcnow
from src.core.shared.exceptions import (
    InvalidSeverityError,
    TicketAlreadyClosedError,
    ValidationFailedError,
)
from src.core.shared.values import Identity


class TicketStatus(Enum):
    """
    Estados possíveis de um ticket.

    Fluxo de Estados:
        Unassigned ⇄ Assigned
             ↓          ↓
          Closed     Withdrawn
             └── Reopen ──┘ → Unassigned

    Closed e Withdrawn são terminais; só saem via Reopen.
    """

    UNASSIGNED = "Unassigned"
    ASSIGNED = "Assigned"
    CLOSED = "Closed"
    WITHDRAWN = "Withdrawn"

    @classmethod
    def from_string(cls, value: str) -> "TicketStatus":
        """
        Converte string para enum (nome ou valor).

        Raises:
            ValueError: Se valor inválido
        """
        try:
            return cls[value.upper()]
        except KeyError:
            pass

        for status in cls:
            if status.value.lower() == value.lower():
                return status

        raise ValueError(f"Status inválido: {value}")


class TicketSeverity(Enum):
    """
    Rótulos de severidade aceitos no campo RequestType do cartão.
    """

    NORMAL = "Normal"
    URGENT = "Urgent"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "TicketSeverity":
        """
        Converte rótulo para enum, sem diferenciar maiúsculas.

        Raises:
            InvalidSeverityError: Se o rótulo não pertence ao enum
        """
        if value:
            for severity in cls:
                if severity.value.lower() == value.strip().lower():
                    return severity

        raise InvalidSeverityError(value or "")


@dataclass
class TicketEntity:
    """
    Entidade de Domínio: Ticket.

    Agregado principal do domínio de suporte. Os métodos de mutação
    validam a pré-condição antes de alterar qualquer campo, então uma
    transição recusada não deixa rastro no objeto.

    Attributes:
        ticket_id: Identificador sequencial (string), nunca reutilizado
        status: Estado atual
        title / description / request_type: Conteúdo do formulário
        additional_properties: Campos extras definidos pelo template do cartão
        requester_*: Quem abriu o ticket e onde responder
        assigned_to_*: Especialista responsável (somente em Assigned)
        closed_by_name / closed_on: Fechamento
        last_modified_*: Auditoria da última mutação
        sme_conversation_id / sme_ticket_activity_id: Mensagem do canal SME
        card_id: Template que gerou o ticket
        version: Token de concorrência otimista mantido pelo store

    Example:
        ticket = TicketEntity.create(
            ticket_id="42",
            title="VPN caiu",
            description="Não consigo conectar desde as 9h",
            requester=Identity("Ana", "aad-ana"),
            requester_conversation_id="conv-ana",
        )
        ticket.assign_to(Identity("Bruno", "aad-bruno"))
        ticket.close(Identity("Bruno", "aad-bruno"))
    """

    ticket_id: str
    title: str = ""
    description: str = ""
    request_type: TicketSeverity = TicketSeverity.NORMAL
    status: TicketStatus = TicketStatus.UNASSIGNED
    additional_properties: Dict[str, Any] = field(default_factory=dict)

    # Solicitante
    requester_name: str = ""
    requester_object_id: Optional[str] = None
    requester_conversation_id: Optional[str] = None

    # Atribuição
    assigned_to_name: Optional[str] = None
    assigned_to_object_id: Optional[str] = None

    # Fechamento
    closed_by_name: Optional[str] = None
    closed_on: Optional[datetime] = None

    # Auditoria
    created_on: datetime = field(default_factory=utcnow)
    last_modified_by_name: Optional[str] = None
    last_modified_by_object_id: Optional[str] = None
    last_modified_on: Optional[datetime] = None

    # Vínculo com o canal SME e com o template
    sme_conversation_id: Optional[str] = None
    sme_ticket_activity_id: Optional[str] = None
    card_id: Optional[str] = None

    version: int = 0

    REQUIRED_FIELDS = ("title", "description")

    @classmethod
    def create(
        cls,
        ticket_id: str,
        title: str,
        description: str,
        requester: Identity,
        requester_conversation_id: Optional[str],
        request_type: TicketSeverity = TicketSeverity.NORMAL,
        card_id: Optional[str] = None,
        additional_properties: Optional[Dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> "TicketEntity":
        """
        Factory method para abrir ticket com validações.

        Raises:
            ValidationFailedError: Se título ou descrição vazios
        """
        missing = cls.missing_required_fields(title, description)
        if missing:
            raise ValidationFailedError(missing)

        now = now or utcnow()
        ticket = cls(
            ticket_id=str(ticket_id),
            title=title.strip(),
            description=description.strip(),
            request_type=request_type,
            status=TicketStatus.UNASSIGNED,
            additional_properties=dict(additional_properties or {}),
            requester_name=requester.name,
            requester_object_id=requester.object_id,
            requester_conversation_id=requester_conversation_id,
            card_id=card_id,
            created_on=now,
        )
        ticket._touch(requester, now)
        return ticket

    @classmethod
    def missing_required_fields(cls, title: Optional[str], description: Optional[str]) -> List[str]:
        """Lista os campos obrigatórios vazios, na ordem do formulário."""
        values = {"title": title, "description": description}
        return [name for name in cls.REQUIRED_FIELDS if not (values[name] or "").strip()]

    # -------------------------------------------------------------------------
    # Transições
    # -------------------------------------------------------------------------

    def reopen(self, actor: Identity, now: Optional[datetime] = None) -> None:
        """Volta para Unassigned a partir de qualquer estado."""
        self.status = TicketStatus.UNASSIGNED
        self._clear_assignee()
        self.closed_on = None
        self._touch(actor, now)

    def close(self, actor: Identity, now: Optional[datetime] = None) -> None:
        """Fecha o ticket registrando quem fechou."""
        now = now or utcnow()
        self.status = TicketStatus.CLOSED
        self._clear_assignee()
        self.closed_by_name = actor.name
        self.closed_on = now
        self._touch(actor, now)

    def assign_to(self, actor: Identity, now: Optional[datetime] = None) -> None:
        """Atribui o ticket ao próprio especialista que clicou."""
        self.status = TicketStatus.ASSIGNED
        self.assigned_to_name = actor.name
        self.assigned_to_object_id = actor.object_id
        self.closed_on = None
        self._touch(actor, now)

    def set_request_type(
        self,
        request_type: str,
        actor: Identity,
        now: Optional[datetime] = None,
    ) -> None:
        """
        Altera a severidade sem mudar o status.

        Raises:
            InvalidSeverityError: Se rótulo desconhecido (nada é alterado)
        """
        severity = TicketSeverity.from_string(request_type)
        self.request_type = severity
        self._touch(actor, now)

    def withdraw(self, actor: Identity, now: Optional[datetime] = None) -> None:
        """
        Solicitante retira o ticket.

        Raises:
            TicketAlreadyClosedError: Se ticket fechado (nada é alterado)
        """
        if self.status == TicketStatus.CLOSED:
            raise TicketAlreadyClosedError(self.ticket_id)

        self.status = TicketStatus.WITHDRAWN
        self._clear_assignee()
        self.closed_on = None
        self._touch(actor, now)

    def edit(
        self,
        title: str,
        description: str,
        request_type: TicketSeverity,
        additional_properties: Dict[str, Any],
        actor: Identity,
        now: Optional[datetime] = None,
    ) -> None:
        """
        Solicitante altera o conteúdo do formulário; o status não muda.

        Raises:
            TicketAlreadyClosedError: Se ticket fechado (nada é alterado)
            ValidationFailedError: Se título ou descrição vazios
        """
        self.ensure_editable()
        missing = self.missing_required_fields(title, description)
        if missing:
            raise ValidationFailedError(missing)

        self.title = title.strip()
        self.description = description.strip()
        self.request_type = request_type
        self.additional_properties = dict(additional_properties)
        self._touch(actor, now)

    def ensure_editable(self) -> None:
        """
        Raises:
            TicketAlreadyClosedError: Se ticket fechado
        """
        if self.status == TicketStatus.CLOSED:
            raise TicketAlreadyClosedError(self.ticket_id, rule="ticket_fechado_nao_pode_ser_editado")

    def link_sme_card(self, conversation_id: str, activity_id: str) -> None:
        """Registra a mensagem do canal SME que exibe este ticket."""
        self.sme_conversation_id = conversation_id
        self.sme_ticket_activity_id = activity_id

    def _clear_assignee(self) -> None:
        self.assigned_to_name = None
        self.assigned_to_object_id = None

    def _touch(self, actor: Identity, now: Optional[datetime] = None) -> None:
        """Atualiza a tripla de auditoria."""
        self.last_modified_by_name = actor.name
        self.last_modified_by_object_id = actor.object_id
        self.last_modified_on = now or utcnow()

    # -------------------------------------------------------------------------
    # Consultas
    # -------------------------------------------------------------------------

    def invariant_violations(self) -> List[str]:
        """
        Verifica as invariantes de estado.

        Returns:
            Lista de descrições das invariantes violadas (vazia se ok)
        """
        violations = []
        if (self.assigned_to_object_id is not None) != (self.status == TicketStatus.ASSIGNED):
            violations.append("assigned_to_object_id deve existir somente em Assigned")
        if (self.closed_on is not None) != (self.status == TicketStatus.CLOSED):
            violations.append("closed_on deve existir somente em Closed")
        return violations

    @property
    def is_assigned(self) -> bool:
        return self.status == TicketStatus.ASSIGNED

    @property
    def is_closed(self) -> bool:
        return self.status == TicketStatus.CLOSED

    def to_dict(self) -> Dict[str, Any]:
        """Serializa para JSON (cartões e API)."""
        return {
            "ticket_id": self.ticket_id,
            "title": self.title,
            "description": self.description,
            "request_type": self.request_type.value,
            "status": self.status.value,
            "additional_properties": dict(self.additional_properties),
            "requester_name": self.requester_name,
            "requester_object_id": self.requester_object_id,
            "requester_conversation_id": self.requester_conversation_id,
            "assigned_to_name": self.assigned_to_name,
            "assigned_to_object_id": self.assigned_to_object_id,
            "closed_by_name": self.closed_by_name,
            "closed_on": self.closed_on.isoformat() if self.closed_on else None,
            "created_on": self.created_on.isoformat(),
            "last_modified_by_name": self.last_modified_by_name,
            "last_modified_by_object_id": self.last_modified_by_object_id,
            "last_modified_on": (
                self.last_modified_on.isoformat() if self.last_modified_on else None
            ),
            "sme_conversation_id": self.sme_conversation_id,
            "sme_ticket_activity_id": self.sme_ticket_activity_id,
            "card_id": self.card_id,
        }

    def __repr__(self) -> str:
        return (
            f"TicketEntity("
            f"ticket_id={self.ticket_id}, "
            f"title='{self.title[:20]}...', "
            f"status={self.status.value}, "
            f"request_type={self.request_type.value}"
            f")"
        )

"""
Máquina de Estados do Ticket.

Este módulo concentra as transições do ciclo de vida e os textos de
notificação derivados de cada uma. A engine é pura: não persiste nem
envia mensagens; recebe um ticket e devolve um novo ticket mais as
notificações que o chamador deve despachar.

Transições:
- REOPEN: qualquer estado → Unassigned
- CLOSE: qualquer estado → Closed
- ASSIGN_TO_SELF: qualquer estado → Assigned (ao ator)
- SET_REQUEST_TYPE: altera severidade, mantém status
- WITHDRAW: qualquer estado exceto Closed → Withdrawn

Edição do formulário (edit_ticket) não é transição: mantém o status
e também recusa ticket fechado.
"""

import copy
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from src.core.shared.events import utcnow
from src.core.shared.exceptions import UnknownTransitionError
from src.core.shared.values import Identity

from . import messages
from .entities import TicketEntity
from .intake import IntakeForm


class TransitionKind(Enum):
    """
    Conjunto fechado de transições.

    O valor é o comando que o cartão envia no campo "command".
    """

    REOPEN = "Reopen"
    CLOSE = "Close"
    ASSIGN_TO_SELF = "AssignToSelf"
    SET_REQUEST_TYPE = "RequestType"
    WITHDRAW = "Withdraw"

    @classmethod
    def from_card_value(cls, value: Mapping[str, Any]) -> "TransitionKind":
        """
        Lê a transição do valor submetido pelo cartão do canal SME.

        A presença de RequestType tem precedência sobre o comando.

        Raises:
            UnknownTransitionError: Se o comando não é reconhecido
        """
        if value.get("RequestType") is not None:
            return cls.SET_REQUEST_TYPE

        command = str(value.get("command") or "")
        normalized = command.replace(" ", "").lower()
        for kind in cls:
            if kind.value.lower() == normalized or kind.name.replace("_", "").lower() == normalized:
                return kind

        raise UnknownTransitionError(command)


@dataclass(frozen=True)
class SmeNotification:
    """
    Notificação para o canal SME.

    Attributes:
        conversation_id: Conversa do canal onde está o cartão do ticket
        activity_id: Mensagem do cartão a ser atualizada
        text: Texto postado na thread
    """

    conversation_id: Optional[str]
    activity_id: Optional[str]
    text: str


@dataclass(frozen=True)
class RequesterNotification:
    """
    Notificação para o solicitante.

    Exatamente um entre text e card_template é preenchido.
    """

    conversation_id: Optional[str]
    text: Optional[str] = None
    card_template: Optional[str] = None


@dataclass(frozen=True)
class TransitionResult:
    """Ticket atualizado e notificações derivadas."""

    ticket: TicketEntity
    kind: TransitionKind
    previous_status: str
    sme_notification: Optional[SmeNotification]
    requester_notification: Optional[RequesterNotification]


# Templates de cartão conhecidos pelo renderer externo
WITHDRAWN_CONFIRMATION_CARD = "withdrawn_ticket"
SME_TICKET_CARD = "sme_ticket"
REQUESTER_TICKET_CARD = "requester_ticket"


class TicketLifecycleEngine:
    """
    Aplica transições ao ticket e deriva notificações.

    A tabela de handlers cobre todos os membros de TransitionKind;
    o ticket de entrada nunca é alterado, então uma transição que
    falha deixa o chamador com o registro original intacto.

    Example:
        engine = TicketLifecycleEngine()
        result = engine.apply_transition(ticket, TransitionKind.CLOSE, actor)
        repo.upsert(result.ticket)
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._clock = clock
        self._handlers: Dict[TransitionKind, Callable[..., TransitionResult]] = {
            TransitionKind.REOPEN: self._reopen,
            TransitionKind.CLOSE: self._close,
            TransitionKind.ASSIGN_TO_SELF: self._assign_to_self,
            TransitionKind.SET_REQUEST_TYPE: self._set_request_type,
            TransitionKind.WITHDRAW: self._withdraw,
        }

    def apply_transition(
        self,
        ticket: TicketEntity,
        kind: TransitionKind,
        actor: Identity,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> TransitionResult:
        """
        Aplica uma transição.

        Args:
            ticket: Ticket atual (não é alterado)
            kind: Transição
            actor: Quem executa
            payload: Dados extras (RequestType para SET_REQUEST_TYPE)

        Returns:
            TransitionResult com o novo ticket

        Raises:
            InvalidSeverityError: SET_REQUEST_TYPE com rótulo desconhecido
            TicketAlreadyClosedError: WITHDRAW de ticket fechado
        """
        updated = copy.deepcopy(ticket)
        handler = self._handlers[kind]
        return handler(updated, actor, payload or {}, ticket.status.value)

    def create_ticket(
        self,
        ticket_id: int,
        form: IntakeForm,
        requester: Identity,
        requester_conversation_id: Optional[str],
    ) -> TicketEntity:
        """Monta um ticket novo (Unassigned) a partir do formulário validado."""
        return TicketEntity.create(
            ticket_id=str(ticket_id),
            title=form.title,
            description=form.description,
            requester=requester,
            requester_conversation_id=requester_conversation_id,
            request_type=form.request_type,
            card_id=form.card_id,
            additional_properties=form.additional_properties,
            now=self._clock(),
        )

    def edit_ticket(self, ticket: TicketEntity, form: IntakeForm, actor: Identity) -> TicketEntity:
        """
        Aplica o formulário de edição a uma cópia do ticket.

        Raises:
            TicketAlreadyClosedError: Se ticket fechado
        """
        updated = copy.deepcopy(ticket)
        updated.edit(
            title=form.title,
            description=form.description,
            request_type=form.request_type,
            additional_properties=form.additional_properties,
            actor=actor,
            now=self._clock(),
        )
        return updated

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _reopen(self, ticket, actor, payload, previous) -> TransitionResult:
        ticket.reopen(actor, self._clock())
        return self._result(
            ticket,
            TransitionKind.REOPEN,
            previous,
            messages.SME_UNASSIGNED.format(ticket_id=ticket.ticket_id, actor=actor.name),
            messages.REQUESTER_REOPENED.format(ticket_id=ticket.ticket_id),
        )

    def _close(self, ticket, actor, payload, previous) -> TransitionResult:
        ticket.close(actor, self._clock())
        return self._result(
            ticket,
            TransitionKind.CLOSE,
            previous,
            messages.SME_CLOSED.format(ticket_id=ticket.ticket_id, actor=actor.name),
            messages.REQUESTER_CLOSED.format(ticket_id=ticket.ticket_id),
        )

    def _assign_to_self(self, ticket, actor, payload, previous) -> TransitionResult:
        ticket.assign_to(actor, self._clock())
        return self._result(
            ticket,
            TransitionKind.ASSIGN_TO_SELF,
            previous,
            messages.SME_ASSIGNED.format(ticket_id=ticket.ticket_id, actor=actor.name),
            messages.REQUESTER_ASSIGNED.format(ticket_id=ticket.ticket_id),
        )

    def _set_request_type(self, ticket, actor, payload, previous) -> TransitionResult:
        ticket.set_request_type(payload.get("RequestType"), actor, self._clock())
        return self._result(
            ticket,
            TransitionKind.SET_REQUEST_TYPE,
            previous,
            messages.SME_SEVERITY_SET.format(
                ticket_id=ticket.ticket_id,
                request_type=ticket.request_type.value,
                actor=actor.name,
            ),
            messages.REQUESTER_UPDATED.format(ticket_id=ticket.ticket_id),
        )

    def _withdraw(self, ticket, actor, payload, previous) -> TransitionResult:
        ticket.withdraw(actor, self._clock())
        return TransitionResult(
            ticket=ticket,
            kind=TransitionKind.WITHDRAW,
            previous_status=previous,
            sme_notification=self._sme(
                ticket, messages.SME_WITHDRAWN.format(ticket_id=ticket.ticket_id)
            ),
            requester_notification=RequesterNotification(
                conversation_id=ticket.requester_conversation_id,
                card_template=WITHDRAWN_CONFIRMATION_CARD,
            ),
        )

    def _result(self, ticket, kind, previous, sme_text, requester_text) -> TransitionResult:
        return TransitionResult(
            ticket=ticket,
            kind=kind,
            previous_status=previous,
            sme_notification=self._sme(ticket, sme_text),
            requester_notification=RequesterNotification(
                conversation_id=ticket.requester_conversation_id,
                text=requester_text,
            ),
        )

    @staticmethod
    def _sme(ticket: TicketEntity, text: str) -> SmeNotification:
        return SmeNotification(
            conversation_id=ticket.sme_conversation_id,
            activity_id=ticket.sme_ticket_activity_id,
            text=text,
        )

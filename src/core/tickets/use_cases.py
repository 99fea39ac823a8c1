"""
Use Cases (Application Services) do Domínio de Tickets.

Este módulo contém os casos de uso da aplicação, que orquestram
a engine de ciclo de vida, o repositório e os eventos.

Use Cases implementados:
- CreateTicketService: Abre ticket a partir do cartão de abertura
- ApplyTransitionService: Aplica transição (SME ou solicitante)
- EditTicketService: Edita o formulário de um ticket aberto
- LinkSmeCardService: Registra a mensagem do canal SME do ticket
- GetTicketService: Obtém ticket específico

Responsabilidades dos Use Cases:
- Validar entrada antes de consumir recursos (ID, store)
- Gerenciar transações (via UoW)
- Disparar eventos de domínio
- Retornar DTOs de saída

O envio de mensagens fica com o chamador: os use cases devolvem
as notificações e nunca falam com o chat.
"""

import logging
from typing import Optional

from src.core.shared.exceptions import PersistenceError, TicketNotFoundError
from src.core.shared.interfaces import CancellationToken, UnitOfWork

from .dtos import (
    ApplyTransitionInputDTO,
    CreateTicketInputDTO,
    EditTicketInputDTO,
    LinkSmeCardInputDTO,
    TicketOutputDTO,
    TransitionOutputDTO,
)
from .events import TicketCreatedEvent, TicketEditedEvent, TicketTransitionedEvent
from .intake import IntakeValidator
from .lifecycle import TicketLifecycleEngine
from .ports import TemplateProvider, TicketIdGenerator, TicketRepository

logger = logging.getLogger(__name__)


def _check_cancelled(cancellation: Optional[CancellationToken]) -> None:
    if cancellation is not None:
        cancellation.raise_if_cancelled()


class CreateTicketService:
    """
    Use Case: Abrir um novo ticket.

    Fluxo:
    1. Buscar template de campos do cardId submetido
    2. Validar formulário (nenhum ID é consumido se inválido)
    3. Obter ID sequencial e montar entidade
    4. Persistir via repositório
    5. Disparar evento TicketCreated
    6. Retornar DTO de saída

    Example:
        service = CreateTicketService(repo, id_generator, templates, uow)
        output = service.execute(CreateTicketInputDTO(
            card_value={"Title": "VPN", "Description": "Caiu"},
            requester=Identity("Ana", "aad-ana"),
            requester_conversation_id="conv-ana",
        ))
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        id_generator: TicketIdGenerator,
        template_provider: TemplateProvider,
        uow: UnitOfWork,
        engine: Optional[TicketLifecycleEngine] = None,
        validator: Optional[IntakeValidator] = None,
    ):
        """
        Inicializa service com dependências injetadas.

        Args:
            ticket_repo: Repositório para persistência
            id_generator: Contador de IDs
            template_provider: Templates de campos adicionais
            uow: Unit of Work para transação atômica
        """
        self.ticket_repo = ticket_repo
        self.id_generator = id_generator
        self.template_provider = template_provider
        self.uow = uow
        self.engine = engine or TicketLifecycleEngine()
        self.validator = validator or IntakeValidator()

    def execute(
        self,
        input_dto: CreateTicketInputDTO,
        cancellation: Optional[CancellationToken] = None,
    ) -> TicketOutputDTO:
        """
        Executa abertura de ticket em transação atômica.

        Returns:
            DTO com dados do ticket criado

        Raises:
            ValidationFailedError: Se campos obrigatórios ausentes/inválidos
            InvalidSeverityError: Se RequestType desconhecido
            PersistenceError: Se o store recusou a gravação
            OperationCancelledError: Se cancelado antes de gravar
        """
        card_id = input_dto.card_value.get("cardId")
        template = self.template_provider.get_field_template(card_id) if card_id else []
        form = self.validator.validate(input_dto.card_value, template, input_dto.utc_offset)

        _check_cancelled(cancellation)

        with self.uow:
            ticket = self.engine.create_ticket(
                ticket_id=self.id_generator.next_id(),
                form=form,
                requester=input_dto.requester,
                requester_conversation_id=input_dto.requester_conversation_id,
            )

            if not self.ticket_repo.upsert(ticket):
                raise PersistenceError(f"Falha ao gravar ticket {ticket.ticket_id}")

            self.uow.publish_event(
                TicketCreatedEvent(
                    aggregate_id=ticket.ticket_id,
                    requester_object_id=ticket.requester_object_id,
                    title=ticket.title,
                    request_type=ticket.request_type.value,
                    card_id=ticket.card_id,
                )
            )

        logger.info("Ticket %s criado por %s", ticket.ticket_id, ticket.requester_name)
        return TicketOutputDTO.from_entity(ticket)


class ApplyTransitionService:
    """
    Use Case: Aplicar transição de ciclo de vida.

    Fluxo:
    1. Buscar ticket (TicketNotFoundError se ausente)
    2. Aplicar transição na engine (entrada não é alterada)
    3. Persistir (PersistenceError aborta antes de qualquer notificação)
    4. Disparar evento TicketTransitioned
    5. Retornar ticket + notificações para o chamador despachar
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        uow: UnitOfWork,
        engine: Optional[TicketLifecycleEngine] = None,
    ):
        self.ticket_repo = ticket_repo
        self.uow = uow
        self.engine = engine or TicketLifecycleEngine()

    def execute(
        self,
        input_dto: ApplyTransitionInputDTO,
        cancellation: Optional[CancellationToken] = None,
    ) -> TransitionOutputDTO:
        """
        Raises:
            TicketNotFoundError: Se ticket não existe
            InvalidSeverityError: Rótulo de severidade desconhecido
            TicketAlreadyClosedError: Withdraw de ticket fechado
            ConcurrencyError: Ticket alterado por outra requisição
            PersistenceError: Store recusou a gravação
            OperationCancelledError: Se cancelado antes de gravar
        """
        with self.uow:
            ticket = self.ticket_repo.get_by_id(input_dto.ticket_id)
            if not ticket:
                raise TicketNotFoundError(input_dto.ticket_id)

            result = self.engine.apply_transition(
                ticket,
                input_dto.kind,
                input_dto.actor,
                input_dto.payload,
            )

            _check_cancelled(cancellation)

            if not self.ticket_repo.upsert(result.ticket):
                raise PersistenceError(f"Falha ao gravar ticket {ticket.ticket_id}")

            self.uow.publish_event(
                TicketTransitionedEvent(
                    aggregate_id=result.ticket.ticket_id,
                    transition=result.kind.value,
                    previous_status=result.previous_status,
                    new_status=result.ticket.status.value,
                    actor_object_id=input_dto.actor.object_id,
                )
            )

        logger.info(
            "Ticket %s: %s (%s -> %s) por %s",
            result.ticket.ticket_id,
            result.kind.value,
            result.previous_status,
            result.ticket.status.value,
            input_dto.actor.name,
        )
        return TransitionOutputDTO.from_result(result)


class EditTicketService:
    """
    Use Case: Editar o formulário de um ticket aberto.

    Fluxo:
    1. Buscar ticket (TicketNotFoundError se ausente)
    2. Recusar ticket fechado antes de validar
    3. Validar com o template do cardId (ou do próprio ticket)
    4. Aplicar edição na engine e persistir
    5. Disparar evento TicketEdited
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        template_provider: TemplateProvider,
        uow: UnitOfWork,
        engine: Optional[TicketLifecycleEngine] = None,
        validator: Optional[IntakeValidator] = None,
    ):
        self.ticket_repo = ticket_repo
        self.template_provider = template_provider
        self.uow = uow
        self.engine = engine or TicketLifecycleEngine()
        self.validator = validator or IntakeValidator()

    def execute(
        self,
        input_dto: EditTicketInputDTO,
        cancellation: Optional[CancellationToken] = None,
    ) -> TicketOutputDTO:
        """
        Raises:
            TicketNotFoundError: Se ticket não existe
            TicketAlreadyClosedError: Se ticket fechado
            ValidationFailedError: Se campos obrigatórios ausentes/inválidos
            InvalidSeverityError: Se RequestType desconhecido
            ConcurrencyError: Ticket alterado por outra requisição
            PersistenceError: Store recusou a gravação
            OperationCancelledError: Se cancelado antes de gravar
        """
        with self.uow:
            ticket = self.ticket_repo.get_by_id(input_dto.ticket_id)
            if not ticket:
                raise TicketNotFoundError(input_dto.ticket_id)

            ticket.ensure_editable()

            card_id = input_dto.card_value.get("cardId") or ticket.card_id
            template = self.template_provider.get_field_template(card_id) if card_id else []
            form = self.validator.validate(input_dto.card_value, template, input_dto.utc_offset)

            updated = self.engine.edit_ticket(ticket, form, input_dto.actor)

            _check_cancelled(cancellation)

            if not self.ticket_repo.upsert(updated):
                raise PersistenceError(f"Falha ao gravar ticket {ticket.ticket_id}")

            self.uow.publish_event(
                TicketEditedEvent(
                    aggregate_id=updated.ticket_id,
                    actor_object_id=input_dto.actor.object_id,
                    title=updated.title,
                    request_type=updated.request_type.value,
                )
            )

        logger.info("Ticket %s editado por %s", updated.ticket_id, input_dto.actor.name)
        return TicketOutputDTO.from_entity(updated)


class LinkSmeCardService:
    """
    Use Case: Vincular o cartão do canal SME ao ticket.

    Chamado depois que o cartão do ticket é postado no canal.
    O retorno indica se a gravação foi aceita; o chamador apenas
    registra a falha em log.
    """

    def __init__(self, ticket_repo: TicketRepository, uow: UnitOfWork):
        self.ticket_repo = ticket_repo
        self.uow = uow

    def execute(self, input_dto: LinkSmeCardInputDTO) -> bool:
        """
        Raises:
            TicketNotFoundError: Se ticket não existe
            ConcurrencyError: Ticket alterado entre a abertura e o vínculo
        """
        with self.uow:
            ticket = self.ticket_repo.get_by_id(input_dto.ticket_id)
            if not ticket:
                raise TicketNotFoundError(input_dto.ticket_id)

            ticket.link_sme_card(input_dto.conversation_id, input_dto.activity_id)
            return self.ticket_repo.upsert(ticket)


class GetTicketService:
    """
    Use Case: Obter ticket específico.

    Example:
        output = GetTicketService(repo).execute("42")
    """

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def execute(self, ticket_id: str) -> TicketOutputDTO:
        """
        Raises:
            TicketNotFoundError: Se ticket não existe
        """
        ticket = self.ticket_repo.get_by_id(ticket_id)
        if not ticket:
            raise TicketNotFoundError(ticket_id)
        return TicketOutputDTO.from_entity(ticket)

"""
Roteador de Atividades.

Recebe a atividade normalizada da plataforma de chat e decide qual
caso de uso executar, depois despacha as notificações resultantes.

Rotas:
    canal / mensagem   cartão submetido       → transição do SME
    canal / mensagem   "MANAGE EXPERTS"       → cartão da lista de plantão
    canal / mensagem   outro texto            → boas-vindas do time
    canal / invoke     "UPDATE EXPERTS"       → atualiza plantão + menções
    pessoal / mensagem cartão "SEND REQUEST"  → abertura de ticket
    pessoal / mensagem cartão "WITHDRAW REQUEST" → retirada
    pessoal / mensagem cartão "EDIT REQUEST"  → cartão de edição
    pessoal / mensagem cartão "UPDATE REQUEST" → grava edição
    pessoal / mensagem "NEW REQUEST"          → cartão de abertura
    pessoal / mensagem outro texto            → boas-vindas pessoal

Nenhuma exceção sai do roteador: todo caminho registra em log e retorna.
Falha de entrega (ConversationNotFound) não desfaz a gravação; é
registrada em ERROR com o ticket para reconciliação manual.
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence

from src.core.shared.exceptions import (
    ConcurrencyError,
    ConversationNotFoundError,
    DomainException,
    InvalidSeverityError,
    OperationCancelledError,
    PersistenceError,
    TicketAlreadyClosedError,
    TicketNotFoundError,
    UnknownTransitionError,
    ValidationFailedError,
)
from src.core.shared.interfaces import CancellationToken
from src.core.roster.dtos import LinkRosterCardInputDTO, UpdateRosterInputDTO
from src.core.roster.use_cases import (
    GetRosterSnapshotService,
    LinkRosterCardService,
    UpdateRosterService,
)
from src.core.tickets import messages
from src.core.tickets.dtos import (
    ApplyTransitionInputDTO,
    CreateTicketInputDTO,
    EditTicketInputDTO,
    LinkSmeCardInputDTO,
    TicketOutputDTO,
    TransitionOutputDTO,
)
from src.core.tickets.entities import TicketStatus
from src.core.tickets.intake import CardConfiguration
from src.core.tickets.lifecycle import TransitionKind
from src.core.tickets.ports import TemplateProvider
from src.core.tickets.use_cases import (
    ApplyTransitionService,
    CreateTicketService,
    EditTicketService,
    GetTicketService,
    LinkSmeCardService,
)

from . import cards
from .dtos import (
    ActivityScope,
    ActivityType,
    CardPayload,
    ConversationRef,
    InboundActivity,
    MessageRef,
)
from .ports import Dispatcher, MessageContent

logger = logging.getLogger(__name__)


# Comandos reconhecidos (comparados em maiúsculas)
MANAGE_EXPERTS = "MANAGE EXPERTS"
UPDATE_EXPERTS = "UPDATE EXPERTS"
SEND_REQUEST = "SEND REQUEST"
WITHDRAW_REQUEST = "WITHDRAW REQUEST"
NEW_REQUEST = "NEW REQUEST"
EDIT_REQUEST = "EDIT REQUEST"
UPDATE_REQUEST = "UPDATE REQUEST"

# Transições aceitas no canal SME; Withdraw é exclusivo do solicitante
SME_TRANSITIONS = frozenset({
    TransitionKind.REOPEN,
    TransitionKind.CLOSE,
    TransitionKind.ASSIGN_TO_SELF,
    TransitionKind.SET_REQUEST_TYPE,
})


class ActivityHandler:
    """
    Ponto de entrada do bot.

    Example:
        handler = container.activity_handler()
        handler.on_activity(InboundActivity.from_dict(payload))
    """

    def __init__(
        self,
        create_ticket: CreateTicketService,
        apply_transition: ApplyTransitionService,
        link_sme_card: LinkSmeCardService,
        edit_ticket: EditTicketService,
        get_ticket: GetTicketService,
        update_roster: UpdateRosterService,
        get_roster_snapshot: GetRosterSnapshotService,
        link_roster_card: LinkRosterCardService,
        template_provider: TemplateProvider,
        dispatcher: Dispatcher,
        sme_conversation_id: str,
    ):
        self.create_ticket = create_ticket
        self.apply_transition = apply_transition
        self.link_sme_card = link_sme_card
        self.edit_ticket = edit_ticket
        self.get_ticket = get_ticket
        self.update_roster = update_roster
        self.get_roster_snapshot = get_roster_snapshot
        self.link_roster_card = link_roster_card
        self.template_provider = template_provider
        self.dispatcher = dispatcher
        self.sme_conversation_id = sme_conversation_id

    def on_activity(
        self,
        activity: InboundActivity,
        cancellation: Optional[CancellationToken] = None,
    ) -> None:
        """Roteia a atividade; nunca propaga exceção para o transporte."""
        cancellation = cancellation or CancellationToken()
        try:
            if activity.scope == ActivityScope.CHANNEL:
                self._on_channel(activity, cancellation)
            else:
                self._on_personal(activity, cancellation)
        except OperationCancelledError:
            logger.info("Atividade cancelada: conversation=%s", activity.conversation_id)
        except DomainException as e:
            logger.warning("Atividade recusada: %s", e)
        except Exception:
            logger.exception(
                "Erro inesperado ao processar atividade: conversation=%s",
                activity.conversation_id,
            )

    # -------------------------------------------------------------------------
    # Canal do time (SME)
    # -------------------------------------------------------------------------

    def _on_channel(self, activity: InboundActivity, cancellation: CancellationToken) -> None:
        if activity.type == ActivityType.INVOKE:
            if str(activity.value.get("command", "")).strip().upper() == UPDATE_EXPERTS:
                self._update_experts(activity, cancellation)
            else:
                logger.info("Invoke ignorado: %s", activity.value.get("command"))
            return

        if activity.reply_to_id and activity.is_card_submit:
            self._sme_transition(activity, cancellation)
        elif activity.command == MANAGE_EXPERTS:
            self._manage_experts(activity, cancellation)
        else:
            self._send(
                ConversationRef(activity.conversation_id),
                cards.team_welcome_card(),
                cancellation,
            )

    def _sme_transition(self, activity: InboundActivity, cancellation: CancellationToken) -> None:
        try:
            kind = TransitionKind.from_card_value(activity.value)
        except UnknownTransitionError as e:
            logger.warning("Comando de transição ignorado: %s", e.command)
            return

        if kind not in SME_TRANSITIONS:
            logger.warning("Comando de transição ignorado: %s", kind.value)
            return

        ticket_id = str(activity.value.get("ticketId") or "")
        reply = ConversationRef(activity.conversation_id, activity.reply_to_id)
        logger.info("Submit recebido: action=%s ticketId=%s", kind.value, ticket_id)

        output = self._run_transition(
            ApplyTransitionInputDTO(
                ticket_id=ticket_id,
                kind=kind,
                actor=activity.sender,
                payload=activity.value,
            ),
            reply,
            cancellation,
        )
        if output is not None:
            self._dispatch_transition(output, cancellation)

    def _manage_experts(self, activity: InboundActivity, cancellation: CancellationToken) -> None:
        snapshot = self.get_roster_snapshot.execute(activity.team_id or "")
        message = self._send(
            ConversationRef(activity.conversation_id),
            cards.roster_card(snapshot),
            cancellation,
        )
        if message is None or not activity.team_id:
            return

        linked = self.link_roster_card.execute(
            LinkRosterCardInputDTO(
                team_id=activity.team_id,
                conversation_id=message.conversation_id,
                activity_id=message.activity_id,
            )
        )
        if not linked:
            logger.info("Cartão de plantão %s não vinculado", message.activity_id)

    def _update_experts(self, activity: InboundActivity, cancellation: CancellationToken) -> None:
        team_id = activity.team_id or str(activity.value.get("teamId") or "")
        expert_ids = _parse_expert_ids(activity.value.get("experts"))

        try:
            output = self.update_roster.execute(
                UpdateRosterInputDTO(
                    team_id=team_id,
                    expert_ids=tuple(expert_ids),
                    actor=activity.sender,
                ),
                cancellation,
            )
        except PersistenceError:
            logger.error("Falha ao gravar lista de plantão do time %s", team_id)
            self._send(ConversationRef(activity.conversation_id), messages.ERROR_STORAGE, cancellation)
            return

        card_activity_id = output.record.card_activity_id or activity.reply_to_id
        if card_activity_id:
            self._update(
                MessageRef(output.record.conversation_id or activity.conversation_id, card_activity_id),
                cards.roster_card(output.snapshot),
                cancellation,
                context=f"roster={output.record.on_call_support_id}",
            )

        self._send(
            ConversationRef(activity.conversation_id),
            output.mentions.text,
            cancellation,
            entities=[mention.to_dict() for mention in output.mentions.entities],
        )

    # -------------------------------------------------------------------------
    # Conversa pessoal (solicitante)
    # -------------------------------------------------------------------------

    def _on_personal(self, activity: InboundActivity, cancellation: CancellationToken) -> None:
        here = ConversationRef(activity.conversation_id)

        if activity.is_card_submit:
            if activity.command == SEND_REQUEST:
                self._create_ticket(activity, cancellation)
            elif activity.command == WITHDRAW_REQUEST:
                self._withdraw(activity, cancellation)
            elif activity.command == EDIT_REQUEST:
                self._show_edit_card(activity, cancellation)
            elif activity.command == UPDATE_REQUEST:
                self._edit_ticket(activity, cancellation)
            else:
                logger.info("Submit pessoal ignorado: %s", activity.command)
            return

        if activity.command == NEW_REQUEST:
            configuration = self.template_provider.get_latest_configuration()
            self._send(here, cards.new_ticket_card(configuration), cancellation)
        elif not activity.has_attachments:
            self._send(here, cards.personal_welcome_card(), cancellation)

    def _create_ticket(self, activity: InboundActivity, cancellation: CancellationToken) -> None:
        here = ConversationRef(activity.conversation_id, activity.reply_to_id)
        try:
            ticket = self.create_ticket.execute(
                CreateTicketInputDTO(
                    card_value=activity.value,
                    requester=activity.sender,
                    requester_conversation_id=activity.conversation_id,
                    utc_offset=activity.utc_offset,
                ),
                cancellation,
            )
        except ValidationFailedError as e:
            card_id = activity.value.get("cardId")
            configuration = self._configuration_for(card_id)
            self._send(here, cards.new_ticket_card(configuration, activity.value, e.fields), cancellation)
            return
        except InvalidSeverityError as e:
            self._send(here, messages.ERROR_INVALID_SEVERITY.format(label=e.label), cancellation)
            return
        except ConcurrencyError as e:
            logger.warning("Conflito ao gravar novo ticket de %s: %s", activity.sender.name, e)
            self._send(here, messages.ERROR_CONCURRENCY, cancellation)
            return
        except PersistenceError:
            logger.error("Falha ao gravar novo ticket de %s", activity.sender.name)
            self._send(here, messages.ERROR_STORAGE, cancellation)
            return

        context = f"ticket={ticket.ticket_id}"
        self._send(
            ConversationRef(activity.conversation_id),
            cards.requester_ticket_card(ticket),
            cancellation,
            context=context,
        )
        self._post_sme_card(ticket, cancellation)
        self._send(
            ConversationRef(activity.conversation_id),
            messages.REQUESTER_CREATED.format(ticket_id=ticket.ticket_id),
            cancellation,
            context=context,
        )

    def _post_sme_card(self, ticket: TicketOutputDTO, cancellation: CancellationToken) -> None:
        """Posta o cartão no canal SME e grava o vínculo; falhas ficam só no log."""
        sme_message = self._send(
            ConversationRef(self.sme_conversation_id),
            cards.sme_ticket_card(ticket),
            cancellation,
            context=f"ticket={ticket.ticket_id}",
        )
        if sme_message is None:
            return

        try:
            linked = self.link_sme_card.execute(
                LinkSmeCardInputDTO(
                    ticket_id=ticket.ticket_id,
                    conversation_id=sme_message.conversation_id,
                    activity_id=sme_message.activity_id,
                )
            )
        except DomainException as e:
            logger.error("Falha ao vincular cartão SME do ticket %s: %s", ticket.ticket_id, e)
            return
        if not linked:
            logger.error("Falha ao vincular cartão SME do ticket %s", ticket.ticket_id)

    def _withdraw(self, activity: InboundActivity, cancellation: CancellationToken) -> None:
        ticket_id = str(activity.value.get("ticketId") or "")
        here = ConversationRef(activity.conversation_id, activity.reply_to_id)

        output = self._run_transition(
            ApplyTransitionInputDTO(
                ticket_id=ticket_id,
                kind=TransitionKind.WITHDRAW,
                actor=activity.sender,
                payload=activity.value,
            ),
            here,
            cancellation,
        )
        if output is None:
            return

        self._dispatch_transition(output, cancellation)

        # Substitui o cartão do solicitante pela confirmação
        if activity.reply_to_id:
            self._update(
                MessageRef(activity.conversation_id, activity.reply_to_id),
                cards.withdrawn_card(output.ticket),
                cancellation,
                context=f"ticket={output.ticket.ticket_id}",
            )

    def _show_edit_card(self, activity: InboundActivity, cancellation: CancellationToken) -> None:
        ticket_id = str(activity.value.get("ticketId") or "")
        here = ConversationRef(activity.conversation_id, activity.reply_to_id)
        try:
            ticket = self.get_ticket.execute(ticket_id)
        except TicketNotFoundError:
            self._send(here, messages.ERROR_TICKET_NOT_FOUND.format(ticket_id=ticket_id), cancellation)
            return

        if ticket.status == TicketStatus.CLOSED.value:
            self._send(here, cards.closed_error_card(ticket_id), cancellation)
            return

        configuration = self._configuration_for(ticket.card_id)
        self._send(here, cards.edit_ticket_card(ticket, configuration), cancellation)

    def _edit_ticket(self, activity: InboundActivity, cancellation: CancellationToken) -> None:
        ticket_id = str(activity.value.get("ticketId") or "")
        here = ConversationRef(activity.conversation_id, activity.reply_to_id)
        try:
            ticket = self.edit_ticket.execute(
                EditTicketInputDTO(
                    ticket_id=ticket_id,
                    card_value=activity.value,
                    actor=activity.sender,
                    utc_offset=activity.utc_offset,
                ),
                cancellation,
            )
        except TicketNotFoundError:
            self._send(here, messages.ERROR_TICKET_NOT_FOUND.format(ticket_id=ticket_id), cancellation)
            return
        except TicketAlreadyClosedError:
            self._send(here, cards.closed_error_card(ticket_id), cancellation)
            return
        except ValidationFailedError as e:
            current = self.get_ticket.execute(ticket_id)
            configuration = self._configuration_for(activity.value.get("cardId") or current.card_id)
            self._send(
                here,
                cards.edit_ticket_card(current, configuration, activity.value, e.fields),
                cancellation,
            )
            return
        except InvalidSeverityError as e:
            self._send(here, messages.ERROR_INVALID_SEVERITY.format(label=e.label), cancellation)
            return
        except ConcurrencyError as e:
            logger.warning("Conflito ao editar ticket %s: %s", ticket_id, e)
            self._send(here, messages.ERROR_CONCURRENCY, cancellation)
            return
        except PersistenceError:
            logger.error("Falha ao gravar edição do ticket %s", ticket_id)
            self._send(here, messages.ERROR_STORAGE, cancellation)
            return

        context = f"ticket={ticket.ticket_id}"
        if activity.reply_to_id:
            self._update(
                MessageRef(activity.conversation_id, activity.reply_to_id),
                cards.requester_ticket_card(ticket),
                cancellation,
                context=context,
            )

        if ticket.sme_conversation_id and ticket.sme_ticket_activity_id:
            self._update(
                MessageRef(ticket.sme_conversation_id, ticket.sme_ticket_activity_id),
                cards.sme_ticket_card(ticket),
                cancellation,
                context=context,
            )
            self._send(
                ConversationRef(ticket.sme_conversation_id, ticket.sme_ticket_activity_id),
                messages.SME_EDITED.format(ticket_id=ticket.ticket_id, actor=activity.sender.name),
                cancellation,
                context=context,
            )

        self._send(
            ConversationRef(activity.conversation_id),
            messages.REQUESTER_UPDATED.format(ticket_id=ticket.ticket_id),
            cancellation,
            context=context,
        )

    # -------------------------------------------------------------------------
    # Transições e entrega
    # -------------------------------------------------------------------------

    def _run_transition(
        self,
        input_dto: ApplyTransitionInputDTO,
        reply: ConversationRef,
        cancellation: CancellationToken,
    ) -> Optional[TransitionOutputDTO]:
        """Executa a transição; erros viram mensagem ao ator e retornam None."""
        try:
            return self.apply_transition.execute(input_dto, cancellation)
        except TicketNotFoundError:
            logger.info("Ticket %s não encontrado no store", input_dto.ticket_id)
            text = messages.ERROR_TICKET_NOT_FOUND.format(ticket_id=input_dto.ticket_id)
        except InvalidSeverityError as e:
            text = messages.ERROR_INVALID_SEVERITY.format(label=e.label)
        except TicketAlreadyClosedError:
            text = messages.ERROR_ALREADY_CLOSED.format(ticket_id=input_dto.ticket_id)
        except ConcurrencyError as e:
            logger.warning("Conflito de versão: %s", e)
            text = messages.ERROR_CONCURRENCY
        except PersistenceError:
            logger.error("Falha ao gravar ticket %s", input_dto.ticket_id)
            text = messages.ERROR_STORAGE

        self._send(reply, text, cancellation)
        return None

    def _dispatch_transition(self, output: TransitionOutputDTO, cancellation: CancellationToken) -> None:
        ticket = output.ticket
        context = f"ticket={ticket.ticket_id}"
        sme = output.sme_notification

        if sme is not None and sme.conversation_id:
            if sme.activity_id:
                self._update(
                    MessageRef(sme.conversation_id, sme.activity_id),
                    cards.sme_ticket_card(ticket),
                    cancellation,
                    context=context,
                )
            self._send(
                ConversationRef(sme.conversation_id, sme.activity_id),
                sme.text,
                cancellation,
                context=context,
            )

        requester = output.requester_notification
        if requester is not None and requester.conversation_id and requester.text:
            self._send(
                ConversationRef(requester.conversation_id),
                requester.text,
                cancellation,
                context=context,
            )

    def _send(
        self,
        conversation: ConversationRef,
        content: MessageContent,
        cancellation: CancellationToken,
        entities: Optional[Sequence[Any]] = None,
        context: str = "",
    ) -> Optional[MessageRef]:
        cancellation.raise_if_cancelled()
        try:
            return self.dispatcher.send_message(conversation, content, entities)
        except ConversationNotFoundError:
            logger.error(
                "Conversa %s não encontrada ao enviar mensagem (%s)",
                conversation.conversation_id,
                context or "sem ticket",
            )
            return None

    def _update(
        self,
        message: MessageRef,
        card: CardPayload,
        cancellation: CancellationToken,
        context: str = "",
    ) -> Optional[MessageRef]:
        cancellation.raise_if_cancelled()
        try:
            return self.dispatcher.update_message(message, card)
        except ConversationNotFoundError:
            logger.error(
                "Conversa %s não encontrada ao atualizar mensagem %s (%s)",
                message.conversation_id,
                message.activity_id,
                context or "sem ticket",
            )
            return None

    def _configuration_for(self, card_id: Optional[str]) -> Optional[CardConfiguration]:
        latest = self.template_provider.get_latest_configuration()
        if card_id and (latest is None or latest.card_id != card_id):
            fields = self.template_provider.get_field_template(card_id)
            if fields:
                return CardConfiguration(card_id=card_id, fields=fields)
        return latest


def _parse_expert_ids(raw: Any) -> List[str]:
    """Aceita lista de IDs, lista de objetos ou string separada por vírgula."""
    if not raw:
        return []
    if isinstance(raw, str):
        return [item.strip() for item in raw.split(",") if item.strip()]

    ids = []
    for item in raw:
        if isinstance(item, Mapping):
            item = item.get("objectId") or item.get("id")
        if item:
            ids.append(str(item))
    return ids

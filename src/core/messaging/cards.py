"""
Montagem dos cartões enviados pelo bot.

Cada função devolve um CardPayload com o nome do template e os dados;
a conversão para o formato da plataforma fica com o renderer externo.
"""

from typing import Any, Dict, Iterable, Mapping, Optional

from src.core.roster.dtos import RosterSnapshotDTO
from src.core.tickets import messages
from src.core.tickets.dtos import TicketOutputDTO
from src.core.tickets.intake import CardConfiguration, render_field_errors
from src.core.tickets.lifecycle import (
    REQUESTER_TICKET_CARD,
    SME_TICKET_CARD,
    WITHDRAWN_CONFIRMATION_CARD,
)

from .dtos import CardPayload

NEW_TICKET_CARD = "new_ticket"
EDIT_TICKET_CARD = "edit_ticket"
CLOSED_ERROR_CARD = "closed_error"
ROSTER_CARD = "on_call_roster"
TEAM_WELCOME_CARD = "team_welcome"
PERSONAL_WELCOME_CARD = "personal_welcome"


def sme_ticket_card(ticket: TicketOutputDTO) -> CardPayload:
    return CardPayload(SME_TICKET_CARD, ticket.to_dict())


def requester_ticket_card(ticket: TicketOutputDTO) -> CardPayload:
    return CardPayload(REQUESTER_TICKET_CARD, ticket.to_dict())


def withdrawn_card(ticket: TicketOutputDTO) -> CardPayload:
    return CardPayload(WITHDRAWN_CONFIRMATION_CARD, ticket.to_dict())


def new_ticket_card(
    configuration: Optional[CardConfiguration],
    values: Optional[Mapping[str, Any]] = None,
    missing: Iterable[str] = (),
) -> CardPayload:
    """
    Cartão de abertura, opcionalmente reexibido com erros por campo.

    Args:
        configuration: Template mais recente (None usa só título/descrição)
        values: Valores já digitados, preservados na reexibição
        missing: IDs de campos com erro
    """
    fields = list(configuration.fields) if configuration else []
    data: Dict[str, Any] = {
        "card_id": configuration.card_id if configuration else None,
        "fields": [spec.to_dict() for spec in fields],
        "values": dict(values or {}),
        "errors": render_field_errors(fields, list(missing)),
    }
    return CardPayload(NEW_TICKET_CARD, data)


def edit_ticket_card(
    ticket: TicketOutputDTO,
    configuration: Optional[CardConfiguration],
    values: Optional[Mapping[str, Any]] = None,
    missing: Iterable[str] = (),
) -> CardPayload:
    """
    Cartão de edição preenchido com o formulário atual do ticket.

    Na reexibição após erro, values traz o que foi submetido.
    """
    fields = list(configuration.fields) if configuration else []
    if values is None:
        values = {
            "Title": ticket.title,
            "Description": ticket.description,
            "RequestType": ticket.request_type,
            **ticket.additional_properties,
        }
    data: Dict[str, Any] = {
        "ticket_id": ticket.ticket_id,
        "card_id": ticket.card_id or (configuration.card_id if configuration else None),
        "fields": [spec.to_dict() for spec in fields],
        "values": dict(values),
        "errors": render_field_errors(fields, list(missing)),
    }
    return CardPayload(EDIT_TICKET_CARD, data)


def closed_error_card(ticket_id: str) -> CardPayload:
    return CardPayload(
        CLOSED_ERROR_CARD,
        {"ticket_id": ticket_id, "text": messages.ERROR_EDIT_CLOSED.format(ticket_id=ticket_id)},
    )


def roster_card(snapshot: RosterSnapshotDTO) -> CardPayload:
    return CardPayload(ROSTER_CARD, snapshot.to_dict())


def team_welcome_card() -> CardPayload:
    return CardPayload(TEAM_WELCOME_CARD)


def personal_welcome_card() -> CardPayload:
    return CardPayload(PERSONAL_WELCOME_CARD)

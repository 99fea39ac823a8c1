"""
Repositórios Django do Help-Desk.

Implementam as interfaces (Ports) definidas no Core.
São DRIVEN ADAPTERS - acionados pelo Core em resposta a operações.

Repositórios:
- DjangoTicketRepository: get_by_id / upsert com versão otimista
- DjangoTicketIdGenerator: contador com lock de linha
- DjangoRosterRepository: snapshots append-only da lista de plantão
- DjangoTemplateProvider: templates do cartão de abertura

Princípios:
- Repository não contém lógica de negócio
- Usa Mapper para conversões
- Falhas do banco viram retorno False; conflito de versão vira ConcurrencyError
"""

from typing import List, Optional
import logging

from django.db import DatabaseError, transaction
from django.db.models import F

from src.core.roster.entities import OnCallRosterRecord
from src.core.shared.exceptions import ConcurrencyError
from src.core.tickets.entities import TicketEntity
from src.core.tickets.intake import CardConfiguration, FieldSpec

from .mappers import CardConfigurationMapper, RosterMapper, TicketMapper
from .models import (
    CardConfigurationModel,
    OnCallSupportModel,
    TicketDetailModel,
    TicketIdCounterModel,
)

logger = logging.getLogger(__name__)


class DjangoTicketRepository:
    """
    Implementação Django do TicketRepository.

    O upsert grava o registro inteiro somente se a versão no banco
    for igual à versão da entidade (UPDATE ... WHERE version = n).

    Example:
        repo = DjangoTicketRepository()
        repo.upsert(ticket)          # version 0 → 1
        ticket = repo.get_by_id("1")
    """

    def __init__(self):
        self._mapper = TicketMapper()

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        """
        Busca ticket por ID.

        Returns:
            Entidade encontrada ou None
        """
        try:
            model = TicketDetailModel.objects.get(ticket_id=str(ticket_id))
            return self._mapper.to_entity(model)
        except TicketDetailModel.DoesNotExist:
            logger.debug("Ticket not found: %s", ticket_id)
            return None

    def upsert(self, ticket: TicketEntity) -> bool:
        """
        Persiste ticket (create ou update) com verificação de versão.

        Returns:
            True se gravou, False se o banco recusou

        Raises:
            ConcurrencyError: Se a versão armazenada difere
        """
        fields = self._mapper.to_fields(ticket)
        try:
            with transaction.atomic():
                if ticket.version == 0:
                    self._insert(ticket, fields)
                else:
                    self._update(ticket, fields)
        except DatabaseError:
            logger.error("Falha ao gravar ticket %s", ticket.ticket_id, exc_info=True)
            return False

        ticket.version += 1
        logger.debug("Ticket saved: %s (version %d)", ticket.ticket_id, ticket.version)
        return True

    def _insert(self, ticket: TicketEntity, fields: dict) -> None:
        if TicketDetailModel.objects.filter(ticket_id=ticket.ticket_id).exists():
            raise ConcurrencyError(f"Ticket {ticket.ticket_id} já existe")
        TicketDetailModel.objects.create(ticket_id=ticket.ticket_id, version=1, **fields)

    def _update(self, ticket: TicketEntity, fields: dict) -> None:
        updated = TicketDetailModel.objects.filter(
            ticket_id=ticket.ticket_id,
            version=ticket.version,
        ).update(version=F('version') + 1, **fields)
        if updated == 0:
            raise ConcurrencyError(
                f"Ticket {ticket.ticket_id} foi alterado desde a versão {ticket.version}"
            )


class DjangoTicketIdGenerator:
    """
    Contador sequencial persistido.

    O incremento acontece sob select_for_update dentro de uma
    transação, então dois requests nunca recebem o mesmo valor.
    """

    SEQUENCE = 'ticket'

    def next_id(self) -> int:
        with transaction.atomic():
            counter, _ = (
                TicketIdCounterModel.objects
                .select_for_update()
                .get_or_create(name=self.SEQUENCE, defaults={'value': 0})
            )
            TicketIdCounterModel.objects.filter(pk=counter.pk).update(value=F('value') + 1)
            counter.refresh_from_db()
        return counter.value


class DjangoRosterRepository:
    """
    Snapshots da lista de plantão.

    Linhas nunca são alteradas, exceto o vínculo do cartão no
    snapshot vigente.
    """

    def get_current(self, team_id: str) -> Optional[OnCallRosterRecord]:
        model = OnCallSupportModel.objects.filter(team_id=team_id).order_by('-id').first()
        return RosterMapper.to_entity(model) if model else None

    def append(self, record: OnCallRosterRecord) -> bool:
        try:
            with transaction.atomic():
                RosterMapper.to_model(record).save()
        except DatabaseError:
            logger.error("Falha ao gravar lista de plantão do time %s", record.team_id, exc_info=True)
            return False
        return True

    def list_history(self, team_id: str, limit: int) -> List[OnCallRosterRecord]:
        """Snapshots anteriores ao vigente, mais recente primeiro."""
        models = OnCallSupportModel.objects.filter(team_id=team_id).order_by('-id')[1:limit + 1]
        return RosterMapper.to_entity_list(list(models))

    def save_card_reference(self, record: OnCallRosterRecord) -> bool:
        current = OnCallSupportModel.objects.filter(team_id=record.team_id).order_by('-id').first()
        if current is None:
            return False
        try:
            with transaction.atomic():
                OnCallSupportModel.objects.filter(pk=current.pk).update(
                    conversation_id=record.conversation_id,
                    card_activity_id=record.card_activity_id,
                )
        except DatabaseError:
            logger.error("Falha ao vincular cartão de plantão do time %s", record.team_id, exc_info=True)
            return False
        return True


class DjangoTemplateProvider:
    """Templates de campos do cartão de abertura."""

    def get_field_template(self, card_id: str) -> List[FieldSpec]:
        model = CardConfigurationModel.objects.filter(card_id=card_id).first()
        if model is None:
            return []
        return CardConfigurationMapper.to_entity(model).fields

    def get_latest_configuration(self) -> Optional[CardConfiguration]:
        model = CardConfigurationModel.objects.order_by('-created_on').first()
        return CardConfigurationMapper.to_entity(model) if model else None

    def save(self, configuration: CardConfiguration) -> None:
        """Grava (ou substitui) um template."""
        CardConfigurationMapper.to_model(configuration).save()

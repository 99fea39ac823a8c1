"""
Unit of Work - Implementação Django.

Envolve cada operação dos use cases em um bloco transaction.atomic
e publica os eventos de domínio somente depois do commit.

Responsabilidades:
- Iniciar/finalizar transações
- Commit/Rollback coordenado
- Publicar eventos após commit bem-sucedido

A mesma instância pode ser reutilizada em execuções sucessivas:
o estado é reiniciado a cada entrada no contexto. Dentro de uma
transação externa (ex: testes com pytest-django) o bloco vira
um savepoint.
"""

from typing import List, Optional
import logging

from django.db import transaction

from src.core.shared.interfaces import EventPublisher, UnitOfWork
from src.core.shared.events import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    """
    Implementação Django do Unit of Work.

    Example:
        with DjangoUnitOfWork(event_publisher) as uow:
            repo.upsert(ticket)
            uow.publish_event(TicketCreatedEvent(...))
        # Commit automático + eventos publicados

    Example com rollback:
        with DjangoUnitOfWork() as uow:
            repo.upsert(ticket)
            raise PersistenceError()
        # Rollback automático, eventos descartados
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None, using: Optional[str] = None):
        """
        Inicializa Unit of Work.

        Args:
            event_publisher: Publicador de eventos
            using: Alias do banco (padrão: default)
        """
        super().__init__()
        self._event_publisher = event_publisher
        self._using = using
        self._atomic = None
        self._committed = False
        self._rolled_back = False

    def _begin_transaction(self) -> None:
        """Abre o bloco atomic (transação ou savepoint)."""
        self._committed = False
        self._rolled_back = False
        self.clear_events()
        self._atomic = transaction.atomic(using=self._using)
        self._atomic.__enter__()
        logger.debug("Transaction started")

    def commit(self) -> None:
        """
        Fecha o bloco atomic e publica eventos.

        Raises:
            Exception: Se o commit falhar (eventos descartados)
        """
        if self._committed or self._rolled_back:
            logger.warning("Transaction already finalized")
            return

        try:
            self._close_atomic()
            logger.debug("Transaction committed")
        except Exception:
            logger.error("Commit failed", exc_info=True)
            self._rolled_back = True
            self.clear_events()
            raise

        self._committed = True
        self._publish_events()

    def rollback(self) -> None:
        """
        Desfaz todas as mudanças e descarta eventos.

        Chamado automaticamente se exceção ocorrer dentro do contexto.
        """
        if self._committed or self._rolled_back:
            return

        try:
            if self._atomic is not None:
                transaction.set_rollback(True, using=self._using)
                self._close_atomic()
                logger.debug("Transaction rolled back")
        finally:
            self._rolled_back = True
            self.clear_events()

    def _close_atomic(self) -> None:
        atomic, self._atomic = self._atomic, None
        if atomic is not None:
            atomic.__exit__(None, None, None)

    def _publish_events(self) -> None:
        """
        Publica eventos após o commit.

        Falha do publisher é registrada e não desfaz a gravação.
        """
        events = self.collect_events()
        self.clear_events()
        for event in events:
            logger.debug("Publishing event: %s for aggregate %s", event.event_type, event.aggregate_id)
            if self._event_publisher:
                try:
                    self._event_publisher.publish(event)
                except Exception:
                    logger.error("Failed to publish event %s", event.event_type, exc_info=True)

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work em memória para testes.

    Não persiste nada - apenas simula comportamento
    para testes unitários sem banco de dados.

    Example:
        uow = InMemoryUnitOfWork()
        with uow:
            uow.publish_event(event)

        assert uow.committed
        assert len(uow.published_events) == 1
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None):
        super().__init__()
        self._event_publisher = event_publisher
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        self._committed = False
        self._rolled_back = False

    def commit(self) -> None:
        """Simula commit e entrega eventos ao publisher."""
        self._committed = True
        self._published_events.extend(self._events)
        if self._event_publisher:
            self._event_publisher.publish_batch(list(self._events))
        self.clear_events()

    def rollback(self) -> None:
        """Simula rollback."""
        self._rolled_back = True
        self.clear_events()

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def rolled_back(self) -> bool:
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        """Retorna eventos que foram 'publicados'."""
        return self._published_events

    def reset(self) -> None:
        """Reset para próximo teste."""
        self._committed = False
        self._rolled_back = False
        self._published_events.clear()
        self.clear_events()

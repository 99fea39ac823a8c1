"""
Interfaces (Ports) - Contratos entre Core e Adapters.

Este módulo define as interfaces que os Adapters devem implementar.
São os "Ports" da Arquitetura Hexagonal.

Tipos de Ports:
- Driven Ports (lado direito): UnitOfWork, EventPublisher
- Driving Ports (lado esquerdo): Definidos nos Use Cases

Princípio: Core define interfaces; Adapters implementam.
O fluxo de dependência sempre aponta para o Core.
"""

from abc import ABC, abstractmethod
from typing import List
import threading

from .events import DomainEvent
from .exceptions import OperationCancelledError


class UnitOfWork(ABC):
    """
    Unit of Work - Coordena transações atômicas.

    Garante que a gravação de um ticket (ou roster) e a publicação
    dos eventos correspondentes aconteçam como uma unidade: eventos
    só saem depois de um commit bem-sucedido.

    Pattern: Context Manager
        with uow:
            repo.upsert(ticket)
            uow.publish_event(event)
        # Commit automático ao sair sem erro
        # Rollback automático se exceção
    """

    def __init__(self):
        self._events: List[DomainEvent] = []

    def __enter__(self) -> "UnitOfWork":
        self._begin_transaction()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()
        return False  # Não suprime exceções

    @abstractmethod
    def _begin_transaction(self) -> None:
        """Inicia uma nova transação."""
        raise NotImplementedError

    @abstractmethod
    def commit(self) -> None:
        """
        Persiste todas as mudanças e publica eventos.

        Note:
            Eventos só são publicados após commit bem-sucedido.
            Se commit falhar, eventos são descartados.
        """
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """Desfaz todas as mudanças e descarta eventos."""
        raise NotImplementedError

    def publish_event(self, event: DomainEvent) -> None:
        """
        Enfileira evento para publicação após commit.

        Args:
            event: Evento de domínio a ser publicado
        """
        self._events.append(event)

    def collect_events(self) -> List[DomainEvent]:
        """Retorna eventos enfileirados (para testing/debugging)."""
        return list(self._events)

    def clear_events(self) -> None:
        """Limpa fila de eventos."""
        self._events.clear()


class EventPublisher(ABC):
    """
    Interface para publicação de eventos.

    Example:
        class LoggingEventPublisher(EventPublisher):
            def publish(self, event):
                logger.info(event.to_dict())
    """

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """Publica evento para consumidores."""
        raise NotImplementedError

    def publish_batch(self, events: List[DomainEvent]) -> None:
        """Publica múltiplos eventos em sequência."""
        for event in events:
            self.publish(event)


class CancellationToken:
    """
    Sinal de cancelamento vindo do transporte.

    O Core consulta o token antes de gravar no store e antes de cada
    chamada ao dispatcher. Como a gravação é um único upsert dentro do
    UnitOfWork, cancelar nunca deixa o registro parcialmente gravado.

    Example:
        token = CancellationToken()
        handler.on_activity(activity, cancellation=token)
        token.cancel()  # de outra thread
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Sinaliza cancelamento."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """
        Raises:
            OperationCancelledError: Se o token foi cancelado
        """
        if self._event.is_set():
            raise OperationCancelledError()

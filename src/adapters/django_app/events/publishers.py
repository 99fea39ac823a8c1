"""
Event Publishers - Publicadores de Eventos de Domínio.

Implementações:
- LoggingEventPublisher: Registra eventos em log estruturado (aplicação)
- InMemoryEventPublisher: Para testes

Eventos são telemetria: não existe Event Store.
"""

from typing import Callable, Dict, List
import json
import logging

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher

logger = logging.getLogger(__name__)


class LoggingEventPublisher(EventPublisher):
    """
    Publisher que registra eventos em log.

    Handlers síncronos podem ser registrados por tipo de evento;
    falha em handler é registrada e não interrompe os demais.
    """

    def __init__(self, log_level: int = logging.INFO):
        self._log_level = log_level
        self._handlers: Dict[str, List[Callable[[DomainEvent], None]]] = {}

    def publish(self, event: DomainEvent) -> None:
        logger.log(
            self._log_level,
            "[EVENT] %s | aggregate=%s | data=%s",
            event.event_type,
            event.aggregate_id,
            json.dumps(event.to_dict(), default=str),
        )
        self._dispatch_to_handlers(event)

    def register_handler(self, event_type: str, handler: Callable[[DomainEvent], None]) -> None:
        """Registra handler para tipo de evento."""
        self._handlers.setdefault(event_type, []).append(handler)

    def _dispatch_to_handlers(self, event: DomainEvent) -> None:
        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception:
                logger.error("Erro em handler para %s", event.event_type, exc_info=True)


class InMemoryEventPublisher(EventPublisher):
    """
    Publisher em memória para testes.

    Armazena eventos publicados para verificação em testes.
    """

    def __init__(self):
        self._published_events: List[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self._published_events.append(event)

    @property
    def published_events(self) -> List[DomainEvent]:
        return self._published_events.copy()

    def clear(self) -> None:
        self._published_events.clear()

    def get_events_by_type(self, event_type: str) -> List[DomainEvent]:
        """Filtra eventos por tipo."""
        return [e for e in self._published_events if e.event_type == event_type]


def get_event_publisher() -> EventPublisher:
    """Factory usada pelo container."""
    return LoggingEventPublisher()

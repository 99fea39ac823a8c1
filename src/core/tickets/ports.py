"""
Ports (Interfaces) do Domínio de Tickets.

Define os contratos que os Adapters de infraestrutura devem implementar
para persistência de tickets e geração de IDs.

Tipos de Ports:
- TicketRepository: get_by_id / upsert com verificação de versão
- TicketIdGenerator: contador monotônico, nunca reutiliza valores
- TemplateProvider: templates de campos dos cartões

Princípio:
    Core define interfaces → Adapters implementam
    Dependências sempre apontam para o Core

Example:
    # No Adapter (Django)
    class DjangoTicketRepository(TicketRepository):
        def upsert(self, ticket: TicketEntity) -> bool:
            ...
"""

import copy
import itertools
import threading
from typing import Dict, List, Optional, Protocol, runtime_checkable

from src.core.shared.exceptions import ConcurrencyError

from .entities import TicketEntity
from .intake import CardConfiguration, FieldSpec


@runtime_checkable
class TicketRepository(Protocol):
    """
    Interface para persistência de Tickets.

    Implementações:
    - DjangoTicketRepository (ORM)
    - InMemoryTicketRepository (para testes)
    """

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        """
        Busca ticket por ID.

        Returns:
            Entidade encontrada ou None se não existir
        """
        ...

    def upsert(self, ticket: TicketEntity) -> bool:
        """
        Grava o ticket inteiro (create ou update).

        A gravação só acontece se a versão armazenada for igual a
        ticket.version; em caso de sucesso ticket.version é incrementado.

        Returns:
            True se gravou, False se o armazenamento falhou

        Raises:
            ConcurrencyError: Se outra gravação aconteceu antes
        """
        ...


@runtime_checkable
class TicketIdGenerator(Protocol):
    """Fonte de IDs sequenciais de ticket."""

    def next_id(self) -> int:
        """Retorna o próximo ID (estritamente crescente)."""
        ...


# =============================================================================
# Implementação In-Memory (para testes)
# =============================================================================

class InMemoryTicketRepository:
    """
    Implementação em memória do TicketRepository.

    Útil para:
    - Testes unitários
    - Desenvolvimento local

    Não usar em produção!

    Example:
        repo = InMemoryTicketRepository()
        repo.upsert(ticket)
        found = repo.get_by_id(ticket.ticket_id)
    """

    def __init__(self):
        self._tickets: Dict[str, TicketEntity] = {}
        self.fail_writes = False

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        """Busca ticket por ID (cópia, como um store real)."""
        stored = self._tickets.get(str(ticket_id))
        return copy.deepcopy(stored) if stored else None

    def upsert(self, ticket: TicketEntity) -> bool:
        """Grava ticket em memória com verificação de versão."""
        if self.fail_writes:
            return False

        stored = self._tickets.get(ticket.ticket_id)
        stored_version = stored.version if stored else 0
        if stored_version != ticket.version:
            raise ConcurrencyError(
                f"Ticket {ticket.ticket_id} na versão {stored_version}, "
                f"gravação baseada na versão {ticket.version}"
            )

        ticket.version += 1
        self._tickets[ticket.ticket_id] = copy.deepcopy(ticket)
        return True

    def count(self) -> int:
        return len(self._tickets)

    def clear(self) -> None:
        """Limpa todos os dados (útil para testes)."""
        self._tickets.clear()


class InMemoryTicketIdGenerator:
    """Contador em memória, thread-safe."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            return next(self._counter)


@runtime_checkable
class TemplateProvider(Protocol):
    """
    Templates de campos adicionais dos cartões.

    Usado apenas para decidir quais campos validar/normalizar e para
    montar o cartão de novo ticket; a renderização é externa.
    """

    def get_field_template(self, card_id: str) -> List[FieldSpec]:
        """Campos do template; lista vazia se card_id desconhecido."""
        ...

    def get_latest_configuration(self) -> Optional[CardConfiguration]:
        """Configuração mais recente (cartão de novo ticket)."""
        ...


class InMemoryTemplateProvider:
    """Templates em memória, em ordem de criação."""

    def __init__(self, configurations: Optional[List[CardConfiguration]] = None):
        self._configurations: List[CardConfiguration] = list(configurations or [])

    def add(self, configuration: CardConfiguration) -> None:
        self._configurations.append(configuration)

    def get_field_template(self, card_id: str) -> List[FieldSpec]:
        for configuration in self._configurations:
            if configuration.card_id == card_id:
                return list(configuration.fields)
        return []

    def get_latest_configuration(self) -> Optional[CardConfiguration]:
        if not self._configurations:
            return None
        return max(self._configurations, key=lambda c: c.created_on)

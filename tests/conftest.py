"""
Configurações globais do Pytest para o bot de suporte remoto.

Este arquivo é carregado automaticamente pelo pytest e
fornece fixtures e configurações compartilhadas.

Django é configurado pelo pytest-django (DJANGO_SETTINGS_MODULE
em pyproject.toml); os testes do Core não tocam no banco.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
from src.core.shared.values import Identity
from src.core.tickets.intake import CardConfiguration, FieldSpec, InputKind
from src.core.tickets.lifecycle import TicketLifecycleEngine
from src.core.tickets.ports import (
    InMemoryTemplateProvider,
    InMemoryTicketIdGenerator,
    InMemoryTicketRepository,
)


class FakeClock:
    """Relógio controlável: cada chamada devolve o instante atual."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(scope="session")
def project_root():
    """Retorna o caminho raiz do projeto."""
    return Path(__file__).parent.parent


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def requester():
    return Identity(name="Ana", object_id="aad-ana")


@pytest.fixture
def expert():
    return Identity(name="Bruno", object_id="aad-bruno")


@pytest.fixture
def engine(clock):
    return TicketLifecycleEngine(clock=clock)


@pytest.fixture
def ticket_repo():
    """Repositório em memória para testes unitários."""
    return InMemoryTicketRepository()


@pytest.fixture
def id_generator():
    return InMemoryTicketIdGenerator()


@pytest.fixture
def card_configuration():
    """Template com um campo de texto e um de data."""
    return CardConfiguration(
        card_id="card-1",
        team_id="team-1",
        fields=[
            FieldSpec(id="Location", label="Location", input_kind=InputKind.TEXT_INPUT),
            FieldSpec(id="DueDate", label="Due date", input_kind=InputKind.DATE_INPUT),
        ],
        created_on=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def template_provider(card_configuration):
    return InMemoryTemplateProvider([card_configuration])


@pytest.fixture
def uow():
    """Unit of Work em memória para testes unitários."""
    return InMemoryUnitOfWork()

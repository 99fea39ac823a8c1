"""
Configuração pytest para testes com Django.

Django é configurado pelo pytest-django a partir de src.config.settings;
testes com banco usam o marker django_db (SQLite em memória).

Este arquivo fornece:
- Fixtures de entidades
- Container de testes com implementações em memória
"""

import pytest

from src.config.container import create_testing_container, reset_container
from src.core.shared.values import Identity
from src.core.tickets.entities import TicketEntity


@pytest.fixture(autouse=True)
def reset_di_container():
    """Reset container entre testes."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def sample_ticket_entity():
    """Cria entidade de ticket para testes."""
    return TicketEntity.create(
        ticket_id="1",
        title="VPN caiu",
        description="Não consigo conectar desde as 9h",
        requester=Identity("Ana", "aad-ana"),
        requester_conversation_id="conv-ana",
        card_id="card-1",
        additional_properties={"Location": "Sala 3"},
    )


@pytest.fixture
def testing_container():
    """Container com persistência, cache e dispatcher em memória."""
    return create_testing_container({"sme_conversation_id": "sme-channel"})

"""
Testes Unitários para Entidades do Domínio de Tickets.

Coverage:
- TicketEntity.create(): campos obrigatórios
- Transições diretas da entidade (reopen, close, assign_to, withdraw)
- Edição do formulário (edit)
- Invariantes de responsável e fechamento
- TicketStatus / TicketSeverity.from_string
"""

from datetime import datetime, timezone

import pytest

from src.core.shared.exceptions import (
    InvalidSeverityError,
    TicketAlreadyClosedError,
    ValidationFailedError,
)
from src.core.shared.values import Identity
from src.core.tickets.entities import TicketEntity, TicketSeverity, TicketStatus


NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_ticket(**kwargs) -> TicketEntity:
    defaults = dict(
        ticket_id="1",
        title="VPN caiu",
        description="Não consigo conectar desde as 9h",
        requester=Identity("Ana", "aad-ana"),
        requester_conversation_id="conv-ana",
        now=NOW,
    )
    defaults.update(kwargs)
    return TicketEntity.create(**defaults)


class TestTicketEntityCreate:
    """Testes para abertura de tickets."""

    def test_create_ticket_valido(self):
        """Deve abrir ticket Unassigned com auditoria do solicitante."""
        ticket = make_ticket()

        assert ticket.ticket_id == "1"
        assert ticket.status == TicketStatus.UNASSIGNED
        assert ticket.request_type == TicketSeverity.NORMAL
        assert ticket.requester_name == "Ana"
        assert ticket.created_on == NOW
        assert ticket.last_modified_by_object_id == "aad-ana"
        assert ticket.last_modified_on == NOW
        assert ticket.version == 0
        assert ticket.invariant_violations() == []

    def test_create_remove_espacos(self):
        ticket = make_ticket(title="  VPN  ", description=" caiu ")

        assert ticket.title == "VPN"
        assert ticket.description == "caiu"

    def test_create_titulo_vazio_erro(self):
        """Título vazio reporta apenas 'title'."""
        with pytest.raises(ValidationFailedError) as exc_info:
            make_ticket(title="")

        assert exc_info.value.fields == ["title"]

    def test_create_titulo_e_descricao_em_branco(self):
        with pytest.raises(ValidationFailedError) as exc_info:
            make_ticket(title="   ", description="")

        assert exc_info.value.fields == ["title", "description"]
        assert exc_info.value.code == "VALIDATION_FAILED"


class TestTicketEntityTransitions:
    """Testes para transições aplicadas diretamente na entidade."""

    def test_assign_to(self):
        ticket = make_ticket()
        ticket.assign_to(Identity("Bruno", "aad-bruno"), NOW)

        assert ticket.status == TicketStatus.ASSIGNED
        assert ticket.assigned_to_name == "Bruno"
        assert ticket.assigned_to_object_id == "aad-bruno"
        assert ticket.is_assigned
        assert ticket.invariant_violations() == []

    def test_close_limpa_responsavel(self):
        ticket = make_ticket()
        ticket.assign_to(Identity("Bruno", "aad-bruno"), NOW)
        ticket.close(Identity("Carla", "aad-carla"), NOW)

        assert ticket.status == TicketStatus.CLOSED
        assert ticket.closed_by_name == "Carla"
        assert ticket.closed_on == NOW
        assert ticket.assigned_to_object_id is None
        assert ticket.is_closed
        assert ticket.invariant_violations() == []

    def test_reopen_limpa_fechamento(self):
        ticket = make_ticket()
        ticket.close(Identity("Bruno", "aad-bruno"), NOW)
        ticket.reopen(Identity("Bruno", "aad-bruno"), NOW)

        assert ticket.status == TicketStatus.UNASSIGNED
        assert ticket.closed_on is None
        assert ticket.assigned_to_object_id is None
        assert ticket.invariant_violations() == []

    def test_withdraw_ticket_fechado_erro(self):
        """Ticket fechado não pode ser retirado e nada muda."""
        ticket = make_ticket()
        ticket.close(Identity("Bruno", "aad-bruno"), NOW)
        before = ticket.to_dict()

        with pytest.raises(TicketAlreadyClosedError) as exc_info:
            ticket.withdraw(Identity("Ana", "aad-ana"))

        assert exc_info.value.ticket_id == "1"
        assert ticket.to_dict() == before

    def test_withdraw_ticket_atribuido(self):
        ticket = make_ticket()
        ticket.assign_to(Identity("Bruno", "aad-bruno"), NOW)
        ticket.withdraw(Identity("Ana", "aad-ana"), NOW)

        assert ticket.status == TicketStatus.WITHDRAWN
        assert ticket.assigned_to_object_id is None
        assert ticket.invariant_violations() == []

    def test_set_request_type_invalido_nao_altera(self):
        ticket = make_ticket()
        before = ticket.to_dict()

        with pytest.raises(InvalidSeverityError):
            ticket.set_request_type("Critical", Identity("Bruno", "aad-bruno"))

        assert ticket.to_dict() == before

    def test_set_request_type_mantem_status(self):
        ticket = make_ticket()
        ticket.assign_to(Identity("Bruno", "aad-bruno"), NOW)
        ticket.set_request_type("urgent", Identity("Bruno", "aad-bruno"), NOW)

        assert ticket.request_type == TicketSeverity.URGENT
        assert ticket.status == TicketStatus.ASSIGNED

    def test_link_sme_card(self):
        ticket = make_ticket()
        ticket.link_sme_card("sme-channel", "activity-9")

        assert ticket.sme_conversation_id == "sme-channel"
        assert ticket.sme_ticket_activity_id == "activity-9"


class TestTicketEntityEdit:

    def test_edit_altera_formulario(self):
        ticket = make_ticket()
        ticket.assign_to(Identity("Bruno", "aad-bruno"), NOW)
        later = datetime(2024, 3, 2, 9, 0, tzinfo=timezone.utc)

        ticket.edit(
            " Impressora ", "Sem toner", TicketSeverity.URGENT, {"Location": "Sala 3"},
            Identity("Ana", "aad-ana"), later,
        )

        assert ticket.title == "Impressora"
        assert ticket.request_type == TicketSeverity.URGENT
        assert ticket.additional_properties == {"Location": "Sala 3"}
        assert ticket.status == TicketStatus.ASSIGNED
        assert ticket.assigned_to_name == "Bruno"
        assert ticket.last_modified_by_name == "Ana"
        assert ticket.last_modified_on == later

    def test_edit_sem_descricao(self):
        ticket = make_ticket()
        before = ticket.to_dict()

        with pytest.raises(ValidationFailedError) as exc_info:
            ticket.edit("VPN", " ", TicketSeverity.NORMAL, {}, Identity("Ana", "aad-ana"))

        assert exc_info.value.fields == ["description"]
        assert ticket.to_dict() == before

    def test_edit_ticket_fechado(self):
        ticket = make_ticket()
        ticket.close(Identity("Bruno", "aad-bruno"), NOW)
        before = ticket.to_dict()

        with pytest.raises(TicketAlreadyClosedError) as exc_info:
            ticket.edit("VPN", "Caiu", TicketSeverity.NORMAL, {}, Identity("Ana", "aad-ana"))

        assert exc_info.value.code == "TICKET_ALREADY_CLOSED"
        assert ticket.to_dict() == before


class TestTicketInvariants:
    """Detecção de registros inconsistentes."""

    def test_responsavel_fora_de_assigned(self):
        ticket = make_ticket()
        ticket.assigned_to_object_id = "aad-bruno"

        assert len(ticket.invariant_violations()) == 1

    def test_fechamento_fora_de_closed(self):
        ticket = make_ticket()
        ticket.closed_on = NOW

        assert len(ticket.invariant_violations()) == 1


class TestEnums:

    @pytest.mark.parametrize("value,expected", [
        ("Unassigned", TicketStatus.UNASSIGNED),
        ("ASSIGNED", TicketStatus.ASSIGNED),
        ("closed", TicketStatus.CLOSED),
        ("Withdrawn", TicketStatus.WITHDRAWN),
    ])
    def test_status_from_string(self, value, expected):
        assert TicketStatus.from_string(value) == expected

    def test_status_invalido(self):
        with pytest.raises(ValueError):
            TicketStatus.from_string("Open")

    def test_severity_from_string(self):
        assert TicketSeverity.from_string(" Urgent ") == TicketSeverity.URGENT
        assert TicketSeverity.from_string("normal") == TicketSeverity.NORMAL

    @pytest.mark.parametrize("label", ["", None, "High"])
    def test_severity_invalida(self, label):
        with pytest.raises(InvalidSeverityError):
            TicketSeverity.from_string(label)

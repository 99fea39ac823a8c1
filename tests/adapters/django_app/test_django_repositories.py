"""
Testes de integração dos repositórios Django (SQLite em memória).

Coverage:
- DjangoTicketRepository: round trip, versão otimista, falha de banco
- DjangoTicketIdGenerator: sequência crescente
- DjangoRosterRepository: snapshots, histórico, vínculo do cartão
- DjangoTemplateProvider: template por cardId e mais recente
- Mappers
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from django.db import DatabaseError

from src.adapters.django_app.helpdesk.mappers import RosterMapper, TicketMapper
from src.adapters.django_app.helpdesk.models import OnCallSupportModel, TicketDetailModel
from src.adapters.django_app.helpdesk.repositories import (
    DjangoRosterRepository,
    DjangoTemplateProvider,
    DjangoTicketIdGenerator,
    DjangoTicketRepository,
)
from src.core.roster.engine import update_roster
from src.core.roster.entities import ExpertRef, OnCallRosterRecord
from src.core.shared.exceptions import ConcurrencyError
from src.core.shared.values import Identity
from src.core.tickets.entities import TicketSeverity, TicketStatus
from src.core.tickets.intake import CardConfiguration, FieldSpec, InputKind


pytestmark = pytest.mark.django_db


class TestDjangoTicketRepository:

    def test_insert_e_leitura(self, sample_ticket_entity):
        repo = DjangoTicketRepository()

        assert repo.upsert(sample_ticket_entity)
        assert sample_ticket_entity.version == 1

        found = repo.get_by_id("1")
        assert found.title == "VPN caiu"
        assert found.status == TicketStatus.UNASSIGNED
        assert found.request_type == TicketSeverity.NORMAL
        assert found.additional_properties == {"Location": "Sala 3"}
        assert found.requester_conversation_id == "conv-ana"
        assert found.version == 1
        assert found.created_on == sample_ticket_entity.created_on

    def test_inexistente(self):
        assert DjangoTicketRepository().get_by_id("404") is None

    def test_update_incrementa_versao(self, sample_ticket_entity):
        repo = DjangoTicketRepository()
        repo.upsert(sample_ticket_entity)

        ticket = repo.get_by_id("1")
        ticket.assign_to(Identity("Bruno", "aad-bruno"))
        assert repo.upsert(ticket)

        stored = repo.get_by_id("1")
        assert stored.version == 2
        assert stored.status == TicketStatus.ASSIGNED
        assert stored.assigned_to_object_id == "aad-bruno"

    def test_versao_desatualizada(self, sample_ticket_entity):
        repo = DjangoTicketRepository()
        repo.upsert(sample_ticket_entity)
        first = repo.get_by_id("1")
        second = repo.get_by_id("1")

        first.close(Identity("Bruno", "aad-bruno"))
        repo.upsert(first)

        second.assign_to(Identity("Carla", "aad-carla"))
        with pytest.raises(ConcurrencyError):
            repo.upsert(second)

        assert repo.get_by_id("1").status == TicketStatus.CLOSED

    def test_insert_duplicado(self, sample_ticket_entity):
        repo = DjangoTicketRepository()
        repo.upsert(sample_ticket_entity)
        sample_ticket_entity.version = 0

        with pytest.raises(ConcurrencyError):
            repo.upsert(sample_ticket_entity)

    def test_falha_de_banco_retorna_false(self, sample_ticket_entity):
        repo = DjangoTicketRepository()

        with patch.object(TicketDetailModel.objects, "create", side_effect=DatabaseError("down")):
            assert repo.upsert(sample_ticket_entity) is False

        assert sample_ticket_entity.version == 0
        assert repo.get_by_id("1") is None


class TestDjangoTicketIdGenerator:

    def test_sequencia_crescente(self):
        generator = DjangoTicketIdGenerator()

        ids = [generator.next_id() for _ in range(3)]

        assert ids == [1, 2, 3]

    def test_instancias_compartilham_contador(self):
        assert DjangoTicketIdGenerator().next_id() == 1
        assert DjangoTicketIdGenerator().next_id() == 2


class TestDjangoRosterRepository:

    def append(self, repo, current, *experts):
        record = update_roster(current, list(experts), Identity("Carla", "aad-carla"))
        assert repo.append(record)
        return record

    def test_vigente_e_historico(self):
        repo = DjangoRosterRepository()
        ana = ExpertRef("aad-1", "Ana", "ana@example.com")
        bruno = ExpertRef("aad-2", "Bruno")

        first = self.append(repo, OnCallRosterRecord.new_for_team("team-1"), ana)
        self.append(repo, repo.get_current("team-1"), ana, bruno)
        self.append(repo, repo.get_current("team-1"), bruno)

        current = repo.get_current("team-1")
        assert current.experts == [bruno]
        assert current.on_call_support_id == first.on_call_support_id

        history = repo.list_history("team-1", limit=9)
        assert [h.expert_ids for h in history] == [["aad-1", "aad-2"], ["aad-1"]]
        assert history[1].experts[0].email == "ana@example.com"

        assert len(repo.list_history("team-1", limit=1)) == 1
        assert OnCallSupportModel.objects.filter(team_id="team-1").count() == 3

    def test_times_isolados(self):
        repo = DjangoRosterRepository()
        self.append(repo, OnCallRosterRecord.new_for_team("team-1"), ExpertRef("aad-1", "Ana"))

        assert repo.get_current("team-2") is None
        assert repo.list_history("team-2", limit=9) == []

    def test_save_card_reference(self):
        repo = DjangoRosterRepository()
        record = self.append(repo, OnCallRosterRecord.new_for_team("team-1"))
        record.bind_card("channel-1", "activity-7")

        assert repo.save_card_reference(record)

        current = repo.get_current("team-1")
        assert current.card_activity_id == "activity-7"
        assert current.conversation_id == "channel-1"

    def test_save_card_reference_sem_lista(self):
        record = OnCallRosterRecord.new_for_team("team-x")
        record.bind_card("channel-1", "activity-7")

        assert DjangoRosterRepository().save_card_reference(record) is False


class TestDjangoTemplateProvider:

    def test_template_por_card_id_e_mais_recente(self):
        provider = DjangoTemplateProvider()
        old = datetime(2024, 1, 1, tzinfo=timezone.utc)
        provider.save(CardConfiguration(
            card_id="card-old",
            fields=[FieldSpec("Location", "Location")],
            created_on=old,
        ))
        provider.save(CardConfiguration(
            card_id="card-new",
            team_id="team-1",
            fields=[FieldSpec("DueDate", "Due", InputKind.DATE_INPUT)],
            created_on=old + timedelta(days=1),
        ))

        fields = provider.get_field_template("card-old")
        assert [f.id for f in fields] == ["Location"]

        latest = provider.get_latest_configuration()
        assert latest.card_id == "card-new"
        assert latest.fields[0].input_kind == InputKind.DATE_INPUT

    def test_card_id_desconhecido(self):
        provider = DjangoTemplateProvider()

        assert provider.get_field_template("nope") == []
        assert provider.get_latest_configuration() is None


class TestMappers:

    def test_ticket_to_fields_sem_pk_e_versao(self, sample_ticket_entity):
        fields = TicketMapper.to_fields(sample_ticket_entity)

        assert "ticket_id" not in fields
        assert "version" not in fields
        assert fields["status"] == "Unassigned"
        assert fields["request_type"] == "Normal"

    def test_roster_round_trip(self):
        record = OnCallRosterRecord(
            team_id="team-1",
            experts=[ExpertRef("aad-1", "Ana")],
            modified_by_name="Carla",
        )

        model = RosterMapper.to_model(record)
        entity = RosterMapper.to_entity(model)

        assert entity.on_call_support_id == record.on_call_support_id
        assert entity.experts == record.experts

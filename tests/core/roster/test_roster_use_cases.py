"""
Testes Unitários para Use Cases da Lista de Plantão.

Coverage:
- UpdateRosterService
- GetRosterSnapshotService
- LinkRosterCardService
"""

import pytest

from src.core.roster.dtos import LinkRosterCardInputDTO, UpdateRosterInputDTO
from src.core.roster.engine import LIST_UPDATED_TEXT
from src.core.roster.events import RosterUpdatedEvent
from src.core.roster.members import MemberProfile, MemberProfileResolver
from src.core.roster.ports import (
    InMemoryMemberDirectory,
    InMemoryMemberProfileCache,
    InMemoryRosterRepository,
)
from src.core.roster.use_cases import (
    GetRosterSnapshotService,
    LinkRosterCardService,
    UpdateRosterService,
)
from src.core.shared.exceptions import OperationCancelledError, PersistenceError
from src.core.shared.interfaces import CancellationToken


@pytest.fixture
def roster_repo():
    return InMemoryRosterRepository()


@pytest.fixture
def resolver():
    directory = InMemoryMemberDirectory({
        "aad-1": MemberProfile("aad-1", "Ana"),
        "aad-2": MemberProfile("aad-2", "Bruno"),
        "aad-3": MemberProfile("aad-3", "Carla"),
    })
    return MemberProfileResolver(directory, InMemoryMemberProfileCache())


@pytest.fixture
def update_service(roster_repo, resolver, uow):
    return UpdateRosterService(roster_repo, resolver, uow, history_limit=3)


def update(service, actor, *ids):
    return service.execute(UpdateRosterInputDTO("team-1", tuple(ids), actor))


class TestUpdateRosterService:

    def test_primeira_lista_do_time(self, update_service, roster_repo, uow, expert):
        output = update(update_service, expert, "aad-1", "aad-2")

        assert output.record.expert_ids == ["aad-1", "aad-2"]
        assert output.mentions.text == "<at>Ana</at>, <at>Bruno</at>"
        assert len(output.snapshot.entries) == 1
        assert roster_repo.get_current("team-1").expert_ids == ["aad-1", "aad-2"]

        event = uow.published_events[0]
        assert isinstance(event, RosterUpdatedEvent)
        assert event.expert_ids == ["aad-1", "aad-2"]

    def test_preserva_identidade_e_acumula_historico(self, update_service, expert):
        first = update(update_service, expert, "aad-1")
        second = update(update_service, expert, "aad-2")

        assert second.record.on_call_support_id == first.record.on_call_support_id
        assert [e.expert_ids for e in second.snapshot.entries] == [["aad-2"], ["aad-1"]]

    def test_historico_limitado(self, update_service, expert):
        for member in ["aad-1", "aad-2", "aad-3", "aad-1", "aad-2"]:
            output = update(update_service, expert, member)

        assert len(output.snapshot.entries) == 1 + 3

    def test_lista_vazia_usa_sentinela(self, update_service, expert):
        output = update(update_service, expert)

        assert output.mentions.text == LIST_UPDATED_TEXT
        assert output.mentions.entities == []

    def test_membro_desconhecido_ignorado(self, update_service, expert):
        output = update(update_service, expert, "aad-404", "aad-3")

        assert output.record.expert_ids == ["aad-3"]

    def test_falha_de_gravacao(self, update_service, roster_repo, uow, expert):
        roster_repo.fail_writes = True

        with pytest.raises(PersistenceError):
            update(update_service, expert, "aad-1")

        assert roster_repo.get_current("team-1") is None
        assert uow.rolled_back

    def test_cancelado(self, update_service, roster_repo, expert):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelledError):
            update_service.execute(UpdateRosterInputDTO("team-1", ("aad-1",), expert), token)

        assert roster_repo.get_current("team-1") is None


class TestGetRosterSnapshotService:

    def test_time_sem_lista(self, roster_repo):
        snapshot = GetRosterSnapshotService(roster_repo).execute("team-x")

        assert snapshot.entries == []
        assert snapshot.to_dict() == {"team_id": "team-x", "current": None, "history": []}

    def test_vigente_primeiro(self, update_service, roster_repo, expert):
        update(update_service, expert, "aad-1")
        update(update_service, expert, "aad-2")

        snapshot = GetRosterSnapshotService(roster_repo).execute("team-1")

        assert snapshot.current.expert_ids == ["aad-2"]
        assert len(snapshot.to_dict()["history"]) == 1


class TestLinkRosterCardService:

    def test_vincula_cartao(self, update_service, roster_repo, uow, expert):
        update(update_service, expert, "aad-1")

        linked = LinkRosterCardService(roster_repo, uow).execute(
            LinkRosterCardInputDTO("team-1", "channel-1", "activity-5")
        )

        assert linked
        current = roster_repo.get_current("team-1")
        assert current.card_activity_id == "activity-5"
        assert current.conversation_id == "channel-1"

    def test_time_sem_lista(self, roster_repo, uow):
        linked = LinkRosterCardService(roster_repo, uow).execute(
            LinkRosterCardInputDTO("team-x", "channel-1", "activity-5")
        )

        assert linked is False

"""
Testes do MemberProfileResolver (cache-aside de perfis).
"""

import pytest

from src.core.roster.members import MemberProfile, MemberProfileResolver
from src.core.roster.ports import InMemoryMemberDirectory, InMemoryMemberProfileCache


class TickingClock:
    def __init__(self):
        self.value = 0.0

    def __call__(self):
        return self.value


@pytest.fixture
def ticks():
    return TickingClock()


@pytest.fixture
def directory():
    return InMemoryMemberDirectory({
        "aad-1": MemberProfile("aad-1", "Ana", "ana@example.com"),
        "aad-2": MemberProfile("aad-2", "Bruno"),
    })


@pytest.fixture
def resolver(directory, ticks):
    return MemberProfileResolver(directory, InMemoryMemberProfileCache(clock=ticks), ttl_seconds=60)


class TestMemberProfileResolver:

    def test_segunda_consulta_usa_cache(self, resolver, directory):
        first = resolver.resolve("team-1", "aad-1")
        second = resolver.resolve("team-1", "aad-1")

        assert first == second == MemberProfile("aad-1", "Ana", "ana@example.com")
        assert directory.lookups == 1

    def test_cache_expira_pelo_ttl(self, resolver, directory, ticks):
        resolver.resolve("team-1", "aad-1")
        ticks.value = 61
        resolver.resolve("team-1", "aad-1")

        assert directory.lookups == 2

    def test_membro_desconhecido(self, resolver):
        assert resolver.resolve("team-1", "aad-404") is None

    def test_resolve_experts_mantem_ordem_e_descarta_desconhecidos(self, resolver, caplog):
        experts = resolver.resolve_experts("team-1", ["aad-2", "aad-404", "aad-1"])

        assert [e.object_id for e in experts] == ["aad-2", "aad-1"]
        assert experts[1].email == "ana@example.com"
        assert "aad-404" in caplog.text

    def test_forget_invalida_cache(self, resolver, directory):
        resolver.resolve("team-1", "aad-1")
        resolver.forget("team-1", "aad-1")
        resolver.resolve("team-1", "aad-1")

        assert directory.lookups == 2

    def test_chave_por_time(self):
        assert MemberProfileResolver.cache_key("team-1", "aad-1") == "member:team-1:aad-1"


class TestMemberProfile:

    def test_to_expert(self):
        expert = MemberProfile("aad-1", "Ana", "ana@example.com").to_expert()

        assert expert.object_id == "aad-1"
        assert expert.name == "Ana"

    def test_from_dict(self):
        profile = MemberProfile.from_dict({"member_id": "aad-1", "name": "Ana"})

        assert profile.email == ""

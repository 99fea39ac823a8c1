"""
Ports (Interfaces) do Domínio de Plantão.

Tipos de Ports:
- RosterRepository: snapshots da lista de plantão por time
- MemberDirectory: diretório de membros da plataforma de chat
- MemberProfileCache: cache injetável de perfis (get/set com TTL)

Princípio:
    Core define interfaces → Adapters implementam
"""

import copy
import time
from typing import Callable, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from .entities import OnCallRosterRecord
from .members import MemberProfile


@runtime_checkable
class RosterRepository(Protocol):
    """
    Interface para persistência da lista de plantão.

    Cada alteração é gravada como um novo snapshot; o snapshot mais
    recente do time é o registro vigente.
    """

    def get_current(self, team_id: str) -> Optional[OnCallRosterRecord]:
        """Registro vigente do time ou None."""
        ...

    def append(self, record: OnCallRosterRecord) -> bool:
        """Grava novo snapshot. Returns: True se gravou."""
        ...

    def list_history(self, team_id: str, limit: int) -> List[OnCallRosterRecord]:
        """Snapshots anteriores ao vigente, mais recente primeiro."""
        ...

    def save_card_reference(self, record: OnCallRosterRecord) -> bool:
        """Atualiza conversa/mensagem do cartão no registro vigente."""
        ...


@runtime_checkable
class MemberDirectory(Protocol):
    """Consulta de membros do time na plataforma de chat."""

    def get_member(self, team_id: str, member_id: str) -> Optional[MemberProfile]:
        ...


@runtime_checkable
class MemberProfileCache(Protocol):
    """
    Cache de perfis de membros.

    O TTL é informado por quem grava; não há singleton de processo.
    """

    def get(self, key: str) -> Optional[MemberProfile]:
        ...

    def set(self, key: str, profile: MemberProfile, ttl_seconds: int) -> None:
        ...

    def invalidate(self, key: str) -> None:
        ...


# =============================================================================
# Implementações In-Memory (para testes)
# =============================================================================

class InMemoryRosterRepository:
    """
    Snapshots em memória.

    Example:
        repo = InMemoryRosterRepository()
        repo.append(record)
        repo.get_current(record.team_id)
    """

    def __init__(self):
        self._snapshots: Dict[str, List[OnCallRosterRecord]] = {}
        self.fail_writes = False

    def get_current(self, team_id: str) -> Optional[OnCallRosterRecord]:
        snapshots = self._snapshots.get(team_id)
        return copy.deepcopy(snapshots[-1]) if snapshots else None

    def append(self, record: OnCallRosterRecord) -> bool:
        if self.fail_writes:
            return False
        self._snapshots.setdefault(record.team_id, []).append(copy.deepcopy(record))
        return True

    def list_history(self, team_id: str, limit: int) -> List[OnCallRosterRecord]:
        previous = self._snapshots.get(team_id, [])[:-1]
        return [copy.deepcopy(r) for r in reversed(previous)][:limit]

    def save_card_reference(self, record: OnCallRosterRecord) -> bool:
        if self.fail_writes:
            return False
        snapshots = self._snapshots.get(record.team_id)
        if not snapshots:
            return False
        snapshots[-1].bind_card(record.conversation_id, record.card_activity_id)
        return True


class InMemoryMemberDirectory:
    """Diretório fixo, registra quantas consultas recebeu."""

    def __init__(self, members: Optional[Dict[str, MemberProfile]] = None):
        self._members = dict(members or {})
        self.lookups = 0

    def add(self, profile: MemberProfile) -> None:
        self._members[profile.member_id] = profile

    def get_member(self, team_id: str, member_id: str) -> Optional[MemberProfile]:
        self.lookups += 1
        return self._members.get(member_id)


class InMemoryMemberProfileCache:
    """Cache com expiração baseada em relógio injetável."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[MemberProfile, float]] = {}

    def get(self, key: str) -> Optional[MemberProfile]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        profile, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return profile

    def set(self, key: str, profile: MemberProfile, ttl_seconds: int) -> None:
        self._entries[key] = (profile, self._clock() + ttl_seconds)

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

"""
Data Transfer Objects (DTOs) do Domínio de Plantão.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from src.core.shared.values import Identity

from .engine import MentionPayload
from .entities import OnCallRosterRecord


@dataclass(frozen=True)
class UpdateRosterInputDTO:
    """
    DTO de entrada para substituir a lista de plantão.

    Attributes:
        team_id: Time dono da lista
        expert_ids: IDs escolhidos no cartão, em ordem
        actor: Quem alterou
    """

    team_id: str
    expert_ids: Tuple[str, ...]
    actor: Identity

    def to_dict(self) -> dict:
        return {
            "team_id": self.team_id,
            "expert_ids": list(self.expert_ids),
            "actor": self.actor.to_dict(),
        }


@dataclass(frozen=True)
class LinkRosterCardInputDTO:
    """DTO de entrada para vincular o cartão da lista no canal."""

    team_id: str
    conversation_id: Optional[str]
    activity_id: str


@dataclass
class RosterSnapshotDTO:
    """Lista vigente + histórico recente, pronto para o cartão."""

    team_id: str
    entries: List[OnCallRosterRecord] = field(default_factory=list)

    @property
    def current(self) -> Optional[OnCallRosterRecord]:
        return self.entries[0] if self.entries else None

    def to_dict(self) -> dict:
        return {
            "team_id": self.team_id,
            "current": self.current.to_dict() if self.current else None,
            "history": [entry.to_dict() for entry in self.entries[1:]],
        }


@dataclass
class RosterUpdateOutputDTO:
    """Resultado da atualização: registro, snapshot e menções."""

    record: OnCallRosterRecord
    snapshot: RosterSnapshotDTO
    mentions: MentionPayload

    def to_dict(self) -> dict:
        return {
            "record": self.record.to_dict(),
            "snapshot": self.snapshot.to_dict(),
            "mentions": self.mentions.to_dict(),
        }

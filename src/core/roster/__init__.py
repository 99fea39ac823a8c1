"""
Domínio de Plantão - Especialistas de plantão do time.

Este módulo contém:
- Entidades (OnCallRosterRecord, ExpertRef)
- Engine (update_roster, build_display_snapshot, mention_payload)
- Perfis de membros com cache injetável (MemberProfileResolver)
- Use Cases (UpdateRoster, GetRosterSnapshot, LinkRosterCard)
- Ports (RosterRepository, MemberDirectory, MemberProfileCache)
"""

from .entities import ExpertRef, OnCallRosterRecord
from .engine import (
    DEFAULT_HISTORY_LIMIT,
    LIST_UPDATED_TEXT,
    Mention,
    MentionPayload,
    build_display_snapshot,
    mention_payload,
    update_roster,
)
from .members import MemberProfile, MemberProfileResolver
from .events import RosterUpdatedEvent
from .dtos import (
    LinkRosterCardInputDTO,
    RosterSnapshotDTO,
    RosterUpdateOutputDTO,
    UpdateRosterInputDTO,
)
from .ports import MemberDirectory, MemberProfileCache, RosterRepository
from .use_cases import GetRosterSnapshotService, LinkRosterCardService, UpdateRosterService

__all__ = [
    "ExpertRef",
    "OnCallRosterRecord",
    "DEFAULT_HISTORY_LIMIT",
    "LIST_UPDATED_TEXT",
    "Mention",
    "MentionPayload",
    "build_display_snapshot",
    "mention_payload",
    "update_roster",
    "MemberProfile",
    "MemberProfileResolver",
    "RosterUpdatedEvent",
    "LinkRosterCardInputDTO",
    "RosterSnapshotDTO",
    "RosterUpdateOutputDTO",
    "UpdateRosterInputDTO",
    "MemberDirectory",
    "MemberProfileCache",
    "RosterRepository",
    "GetRosterSnapshotService",
    "LinkRosterCardService",
    "UpdateRosterService",
]

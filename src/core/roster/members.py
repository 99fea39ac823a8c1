"""
Resolução de perfis de membros do time.

MemberProfileResolver combina o diretório da plataforma com um cache
injetado (cache-aside): consulta o cache, cai para o diretório e grava
o resultado com o TTL configurado.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, TYPE_CHECKING

from .entities import ExpertRef

if TYPE_CHECKING:
    from .ports import MemberDirectory, MemberProfileCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemberProfile:
    """Perfil de um membro do time na plataforma de chat."""

    member_id: str
    name: str
    email: str = ""

    def to_expert(self) -> ExpertRef:
        return ExpertRef(object_id=self.member_id, name=self.name, email=self.email)

    def to_dict(self) -> dict:
        return {"member_id": self.member_id, "name": self.name, "email": self.email}

    @classmethod
    def from_dict(cls, data: dict) -> "MemberProfile":
        return cls(member_id=data["member_id"], name=data["name"], email=data.get("email", ""))


class MemberProfileResolver:
    """
    Busca perfis de membros com cache.

    Example:
        resolver = MemberProfileResolver(directory, cache, ttl_seconds=3600)
        experts = resolver.resolve_experts("team-1", ["aad-1", "aad-2"])
    """

    def __init__(
        self,
        directory: "MemberDirectory",
        cache: "MemberProfileCache",
        ttl_seconds: int = 3600,
    ):
        self.directory = directory
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def cache_key(team_id: str, member_id: str) -> str:
        return f"member:{team_id}:{member_id}"

    def resolve(self, team_id: str, member_id: str) -> Optional[MemberProfile]:
        """Perfil do membro ou None se não pertence ao time."""
        key = self.cache_key(team_id, member_id)
        profile = self.cache.get(key)
        if profile is not None:
            return profile

        profile = self.directory.get_member(team_id, member_id)
        if profile is not None:
            self.cache.set(key, profile, self.ttl_seconds)
        return profile

    def resolve_experts(self, team_id: str, member_ids: Sequence[str]) -> List[ExpertRef]:
        """
        Converte IDs escolhidos no cartão em ExpertRef, mantendo a ordem.

        IDs que o diretório não conhece são descartados com warning.
        """
        experts = []
        for member_id in member_ids:
            profile = self.resolve(team_id, member_id)
            if profile is None:
                logger.warning("Membro %s não encontrado no time %s", member_id, team_id)
                continue
            experts.append(profile.to_expert())
        return experts

    def forget(self, team_id: str, member_id: str) -> None:
        self.cache.invalidate(self.cache_key(team_id, member_id))

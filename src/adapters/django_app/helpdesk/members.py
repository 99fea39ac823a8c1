"""
Adapters de perfis de membros.

- DjangoMemberProfileCache: MemberProfileCache sobre o cache do Django
  (Redis em produção, LocMem em desenvolvimento)
- ConfiguredMemberDirectory: diretório lido de settings.HELPDESK,
  usado enquanto a integração com a plataforma de chat é externa
"""

from typing import Dict, Mapping, Optional
import logging

from django.core.cache import caches

from src.core.roster.members import MemberProfile

logger = logging.getLogger(__name__)


class DjangoMemberProfileCache:
    """
    Cache de perfis com TTL informado por quem grava.

    Example:
        cache = DjangoMemberProfileCache()
        cache.set("member:team:aad-1", profile, ttl_seconds=3600)
    """

    def __init__(self, alias: str = 'default'):
        self._alias = alias

    @property
    def _cache(self):
        return caches[self._alias]

    def get(self, key: str) -> Optional[MemberProfile]:
        data = self._cache.get(key)
        return MemberProfile.from_dict(data) if data else None

    def set(self, key: str, profile: MemberProfile, ttl_seconds: int) -> None:
        self._cache.set(key, profile.to_dict(), timeout=ttl_seconds)

    def invalidate(self, key: str) -> None:
        self._cache.delete(key)


class ConfiguredMemberDirectory:
    """
    Diretório de membros a partir da configuração.

    Formato de HELPDESK['TEAM_MEMBERS']:
        {"aad-1": {"name": "Ana", "email": "ana@example.com"}}
    """

    def __init__(self, members: Optional[Mapping[str, Mapping[str, str]]] = None):
        self._members: Dict[str, MemberProfile] = {
            member_id: MemberProfile(
                member_id=member_id,
                name=data.get('name', member_id),
                email=data.get('email', ''),
            )
            for member_id, data in (members or {}).items()
        }

    def get_member(self, team_id: str, member_id: str) -> Optional[MemberProfile]:
        logger.debug("Consultando membro %s do time %s", member_id, team_id)
        return self._members.get(member_id)

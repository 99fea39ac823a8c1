"""
Use Cases (Application Services) do Domínio de Plantão.

Use Cases implementados:
- UpdateRosterService: Substitui a lista e gera snapshot + menções
- GetRosterSnapshotService: Vigente + histórico para o cartão
- LinkRosterCardService: Registra a mensagem que exibe a lista
"""

import logging
from typing import Optional

from src.core.shared.exceptions import PersistenceError
from src.core.shared.interfaces import CancellationToken, UnitOfWork

from .dtos import (
    LinkRosterCardInputDTO,
    RosterSnapshotDTO,
    RosterUpdateOutputDTO,
    UpdateRosterInputDTO,
)
from .engine import DEFAULT_HISTORY_LIMIT, build_display_snapshot, mention_payload, update_roster
from .entities import OnCallRosterRecord
from .events import RosterUpdatedEvent
from .members import MemberProfileResolver
from .ports import RosterRepository

logger = logging.getLogger(__name__)


class UpdateRosterService:
    """
    Use Case: Substituir a lista de plantão do time.

    Fluxo:
    1. Carregar registro vigente (ou iniciar lista nova)
    2. Resolver nomes dos especialistas via cache de perfis
    3. Aplicar update_roster e gravar novo snapshot
    4. Disparar evento RosterUpdated
    5. Retornar snapshot de exibição e menções

    Example:
        service = UpdateRosterService(roster_repo, resolver, uow)
        output = service.execute(UpdateRosterInputDTO("team-1", ("aad-1",), actor))
        output.mentions.text  # "<at>Ana</at>"
    """

    def __init__(
        self,
        roster_repo: RosterRepository,
        resolver: MemberProfileResolver,
        uow: UnitOfWork,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self.roster_repo = roster_repo
        self.resolver = resolver
        self.uow = uow
        self.history_limit = history_limit

    def execute(
        self,
        input_dto: UpdateRosterInputDTO,
        cancellation: Optional[CancellationToken] = None,
    ) -> RosterUpdateOutputDTO:
        """
        Raises:
            PersistenceError: Se o store recusou o snapshot
            OperationCancelledError: Se cancelado antes de gravar
        """
        experts = self.resolver.resolve_experts(input_dto.team_id, input_dto.expert_ids)

        with self.uow:
            current = self.roster_repo.get_current(input_dto.team_id)
            if current is None:
                current = OnCallRosterRecord.new_for_team(input_dto.team_id)

            updated = update_roster(current, experts, input_dto.actor)

            if cancellation is not None:
                cancellation.raise_if_cancelled()

            if not self.roster_repo.append(updated):
                raise PersistenceError(
                    f"Falha ao gravar lista de plantão do time {input_dto.team_id}"
                )

            history = self.roster_repo.list_history(input_dto.team_id, self.history_limit)

            self.uow.publish_event(
                RosterUpdatedEvent(
                    aggregate_id=updated.on_call_support_id,
                    team_id=updated.team_id,
                    expert_ids=updated.expert_ids,
                    modified_by_object_id=input_dto.actor.object_id,
                )
            )

        logger.info(
            "Lista de plantão do time %s atualizada por %s (%d especialistas)",
            input_dto.team_id,
            input_dto.actor.name,
            len(experts),
        )
        return RosterUpdateOutputDTO(
            record=updated,
            snapshot=RosterSnapshotDTO(
                team_id=input_dto.team_id,
                entries=build_display_snapshot(updated, history, self.history_limit),
            ),
            mentions=mention_payload(updated.experts),
        )


class GetRosterSnapshotService:
    """Use Case: Obter lista vigente + histórico recente do time."""

    def __init__(self, roster_repo: RosterRepository, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self.roster_repo = roster_repo
        self.history_limit = history_limit

    def execute(self, team_id: str) -> RosterSnapshotDTO:
        """Snapshot vazio se o time ainda não tem lista."""
        current = self.roster_repo.get_current(team_id)
        if current is None:
            return RosterSnapshotDTO(team_id=team_id)

        history = self.roster_repo.list_history(team_id, self.history_limit)
        return RosterSnapshotDTO(
            team_id=team_id,
            entries=build_display_snapshot(current, history, self.history_limit),
        )


class LinkRosterCardService:
    """
    Use Case: Vincular a mensagem do canal que exibe a lista.

    Returns False quando o time ainda não tem lista registrada.
    """

    def __init__(self, roster_repo: RosterRepository, uow: UnitOfWork):
        self.roster_repo = roster_repo
        self.uow = uow

    def execute(self, input_dto: LinkRosterCardInputDTO) -> bool:
        with self.uow:
            current = self.roster_repo.get_current(input_dto.team_id)
            if current is None:
                logger.info("Time %s sem lista de plantão para vincular cartão", input_dto.team_id)
                return False

            current.bind_card(input_dto.conversation_id, input_dto.activity_id)
            return self.roster_repo.save_card_reference(current)

"""
Domain Events do Domínio de Plantão.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.core.shared.events import DomainEvent


@dataclass
class RosterUpdatedEvent(DomainEvent):
    """
    Evento: Lista de plantão substituída.

    aggregate_id é o on_call_support_id da lista.
    """

    team_id: str = ""
    expert_ids: List[str] = field(default_factory=list)
    modified_by_object_id: Optional[str] = None

    @property
    def aggregate_type(self) -> str:
        return "OnCallRoster"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "team_id": self.team_id,
            "expert_ids": list(self.expert_ids),
            "modified_by_object_id": self.modified_by_object_id,
        }

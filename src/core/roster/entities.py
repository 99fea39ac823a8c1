"""
Entidades do Domínio de Plantão (Roster).

Entidades:
- ExpertRef: Especialista de plantão
- OnCallRosterRecord: Lista de plantão vigente de um time

Regras de Negócio Encapsuladas:
- Um registro vigente por time; o histórico é a sequência de
  snapshots anteriores, do mais recente para o mais antigo
- A ordem dos especialistas é a ordem escolhida no cartão
- on_call_support_id é preservado entre atualizações
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
import uuid

from src.core.shared.events import utcnow
from src.core.shared.values import Identity


@dataclass(frozen=True)
class ExpertRef:
    """
    Especialista de plantão.

    Attributes:
        object_id: ID do diretório
        name: Nome de exibição
        email: E-mail (pode estar vazio)
    """

    object_id: str
    name: str = ""
    email: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExpertRef":
        return cls(
            object_id=str(data.get("objectId") or data.get("id") or ""),
            name=data.get("name", ""),
            email=data.get("email", ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"objectId": self.object_id, "name": self.name, "email": self.email}


@dataclass
class OnCallRosterRecord:
    """
    Entidade de Domínio: Lista de plantão.

    Attributes:
        on_call_support_id: Identificador estável da lista do time
        team_id: Time dono da lista
        experts: Especialistas em ordem
        card_activity_id: Mensagem do canal que exibe a lista
        conversation_id: Conversa do canal
        modified_by_* / modified_on: Quem alterou por último
    """

    on_call_support_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    team_id: str = ""
    experts: List[ExpertRef] = field(default_factory=list)
    card_activity_id: Optional[str] = None
    conversation_id: Optional[str] = None
    modified_by_name: Optional[str] = None
    modified_by_object_id: Optional[str] = None
    modified_on: datetime = field(default_factory=utcnow)

    @classmethod
    def new_for_team(cls, team_id: str) -> "OnCallRosterRecord":
        """Lista vazia para um time sem plantão registrado."""
        return cls(team_id=team_id)

    def replace_experts(
        self,
        experts: List[ExpertRef],
        actor: Identity,
        now: Optional[datetime] = None,
    ) -> None:
        """Substitui a lista inteira e registra o autor."""
        self.experts = list(experts)
        self.modified_by_name = actor.name
        self.modified_by_object_id = actor.object_id
        self.modified_on = now or utcnow()

    def bind_card(self, conversation_id: Optional[str], activity_id: str) -> None:
        """Registra a mensagem do canal que exibe a lista."""
        self.conversation_id = conversation_id
        self.card_activity_id = activity_id

    @property
    def expert_ids(self) -> List[str]:
        return [expert.object_id for expert in self.experts]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "on_call_support_id": self.on_call_support_id,
            "team_id": self.team_id,
            "experts": [expert.to_dict() for expert in self.experts],
            "card_activity_id": self.card_activity_id,
            "conversation_id": self.conversation_id,
            "modified_by_name": self.modified_by_name,
            "modified_by_object_id": self.modified_by_object_id,
            "modified_on": self.modified_on.isoformat(),
        }

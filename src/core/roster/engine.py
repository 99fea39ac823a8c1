"""
Engine da Lista de Plantão.

Funções puras sobre OnCallRosterRecord:
- update_roster: substitui especialistas preservando a identidade da lista
- build_display_snapshot: vigente + histórico recente para o cartão
- mention_payload: texto e entidades de menção dos especialistas
"""

import copy
import html
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from src.core.shared.values import Identity

from .entities import ExpertRef, OnCallRosterRecord

# Quantidade de registros anteriores exibidos junto com o vigente
DEFAULT_HISTORY_LIMIT = 9

# Texto enviado quando não há ninguém para mencionar
LIST_UPDATED_TEXT = "The on-call experts list has been updated."


@dataclass(frozen=True)
class Mention:
    """Entidade de menção do chat (<at>nome</at>)."""

    object_id: str
    name: str
    text: str

    def to_dict(self) -> dict:
        return {
            "type": "mention",
            "mentioned": {"id": self.object_id, "name": self.name},
            "text": self.text,
        }


@dataclass(frozen=True)
class MentionPayload:
    """Texto de exibição e entidades, na ordem da lista."""

    text: str
    entities: List[Mention] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"text": self.text, "entities": [m.to_dict() for m in self.entities]}


def update_roster(
    current: OnCallRosterRecord,
    new_experts: Sequence[ExpertRef],
    actor: Identity,
    now: Optional[datetime] = None,
) -> OnCallRosterRecord:
    """
    Substitui a lista de especialistas.

    Returns:
        Novo registro com o mesmo on_call_support_id; current não é alterado
    """
    updated = copy.deepcopy(current)
    updated.replace_experts(list(new_experts), actor, now)
    return updated


def build_display_snapshot(
    current: OnCallRosterRecord,
    history: Sequence[OnCallRosterRecord],
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> List[OnCallRosterRecord]:
    """
    Monta a lista exibida no cartão: vigente primeiro, depois até
    `limit` registros anteriores (mais recente primeiro), sem preenchimento.
    """
    return [current] + list(history[:limit])


def mention_payload(experts: Sequence[ExpertRef]) -> MentionPayload:
    """
    Monta as menções dos especialistas.

    Lista vazia devolve o texto sentinela e nenhuma entidade.

    Example:
        payload = mention_payload([ExpertRef("1", "A"), ExpertRef("2", "B")])
        payload.text  # "<at>A</at>, <at>B</at>"
    """
    if not experts:
        return MentionPayload(text=LIST_UPDATED_TEXT, entities=[])

    mentions = [
        Mention(
            object_id=expert.object_id,
            name=expert.name,
            text=f"<at>{html.escape(expert.name)}</at>",
        )
        for expert in experts
    ]
    return MentionPayload(text=", ".join(m.text for m in mentions), entities=mentions)

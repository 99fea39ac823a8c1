"""
Value Objects compartilhados entre domínios.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Identity:
    """
    Usuário da plataforma de chat que executa uma ação.

    Attributes:
        name: Nome de exibição
        object_id: ID do diretório (AAD object id ou equivalente)
    """

    name: str
    object_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {"name": self.name, "object_id": self.object_id}

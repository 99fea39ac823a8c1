"""
DTOs de Mensageria.

Estruturas trocadas entre o adaptador da plataforma de chat,
o roteador de atividades e o dispatcher.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from src.core.shared.exceptions import ValidationError
from src.core.shared.values import Identity


class ActivityScope(Enum):
    CHANNEL = "channel"
    PERSONAL = "personal"


class ActivityType(Enum):
    MESSAGE = "message"
    INVOKE = "invoke"


@dataclass(frozen=True)
class ConversationRef:
    """Destino de uma mensagem (opcionalmente resposta em thread)."""

    conversation_id: str
    reply_to_id: Optional[str] = None


@dataclass(frozen=True)
class MessageRef:
    """Mensagem já enviada, usada para atualizações posteriores."""

    conversation_id: str
    activity_id: str


@dataclass(frozen=True)
class CardPayload:
    """
    Cartão opaco para o renderer externo.

    Attributes:
        template: Nome do template do cartão
        data: Dados para preencher o template
    """

    template: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"template": self.template, "data": self.data}


@dataclass(frozen=True)
class InboundActivity:
    """
    Atividade normalizada recebida da plataforma.

    Attributes:
        scope: Canal do time ou conversa pessoal
        type: Mensagem ou invoke
        text: Texto (ou comando do botão) da mensagem
        value: Valor submetido pelo cartão, se houver
        sender: Quem enviou
        conversation_id: Conversa de origem
        reply_to_id: Mensagem à qual esta responde (cartão clicado)
        team_id: Time (somente em canal)
        utc_offset: Deslocamento UTC local do remetente
        has_attachments: Se a mensagem trouxe anexos
    """

    scope: ActivityScope
    type: ActivityType
    sender: Identity
    conversation_id: str
    text: str = ""
    value: Mapping[str, Any] = field(default_factory=dict)
    reply_to_id: Optional[str] = None
    team_id: Optional[str] = None
    utc_offset: timedelta = timedelta(0)
    has_attachments: bool = False

    REQUIRED_KEYS = ("scope", "type", "from", "conversationId")

    @property
    def command(self) -> str:
        """Texto normalizado para comparação de comandos."""
        return (self.text or "").strip().upper()

    @property
    def is_card_submit(self) -> bool:
        return bool(self.value)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InboundActivity":
        """
        Constrói a atividade a partir do JSON do adaptador.

        Raises:
            ValidationError: Se campo obrigatório ausente ou inválido
        """
        for key in cls.REQUIRED_KEYS:
            if not data.get(key):
                raise ValidationError(f"Campo obrigatório ausente: {key}", field=key)

        sender = data["from"]
        if not isinstance(sender, Mapping) or not sender.get("name"):
            raise ValidationError("Remetente inválido", field="from")

        value = data.get("value") or {}
        if not isinstance(value, Mapping):
            raise ValidationError("value deve ser um objeto", field="value")

        try:
            scope = ActivityScope(str(data["scope"]).lower())
            activity_type = ActivityType(str(data["type"]).lower())
        except ValueError as e:
            raise ValidationError(str(e), field="scope/type") from e

        try:
            offset_minutes = int(data.get("localUtcOffsetMinutes") or 0)
        except (TypeError, ValueError) as e:
            raise ValidationError(str(e), field="localUtcOffsetMinutes") from e

        return cls(
            scope=scope,
            type=activity_type,
            sender=Identity(name=sender["name"], object_id=sender.get("objectId")),
            conversation_id=data["conversationId"],
            text=data.get("text") or "",
            value=dict(value),
            reply_to_id=data.get("replyToId"),
            team_id=data.get("teamId"),
            utc_offset=timedelta(minutes=offset_minutes),
            has_attachments=bool(data.get("attachments")),
        )

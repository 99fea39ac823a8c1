"""
Abertura de Tickets via Cartão.

Este módulo trata o formulário de abertura enviado pelo solicitante:
separa os campos reservados das propriedades adicionais, normaliza
campos de data para o fuso do solicitante e reporta os campos
obrigatórios ausentes.

Tipos:
- InputKind: Tipos de campo suportados pelo template
- FieldSpec: Definição de um campo do template
- CardConfiguration: Template de campos vinculado a um cardId
- IntakeForm: Resultado validado do formulário
- IntakeValidator: Validação e normalização
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from src.core.shared.events import utcnow
from src.core.shared.exceptions import ValidationFailedError

from .entities import TicketEntity, TicketSeverity


# Chaves do valor do cartão que não viram propriedades adicionais
RESERVED_KEYS = frozenset(
    {"command", "teamId", "ticketId", "cardId", "Title", "Description", "RequestType"}
)


class InputKind(Enum):
    """Tipos de elemento de entrada do cartão."""

    TEXT_BLOCK = "TextBlock"
    TEXT_INPUT = "TextInput"
    CHOICE_SET = "ChoiceSet"
    DATE_INPUT = "DateInput"

    @classmethod
    def from_string(cls, value: str) -> "InputKind":
        """
        Converte o tipo do elemento (ex: "Input.Date") para enum.

        Raises:
            ValueError: Se tipo desconhecido
        """
        normalized = value.replace("Input.", "").replace(".", "").lower()
        aliases = {"date": "dateinput", "text": "textinput", "choiceset": "choiceset"}
        normalized = aliases.get(normalized, normalized)
        for kind in cls:
            if kind.value.lower() == normalized:
                return kind
        raise ValueError(f"Tipo de campo inválido: {value}")


@dataclass(frozen=True)
class FieldSpec:
    """
    Campo do template do cartão.

    Attributes:
        id: Chave do campo no valor submetido
        label: Rótulo exibido
        input_kind: Tipo de elemento
    """

    id: str
    label: str = ""
    input_kind: InputKind = InputKind.TEXT_INPUT

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FieldSpec":
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            input_kind=InputKind.from_string(data.get("inputKind", InputKind.TEXT_INPUT.value)),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "label": self.label, "inputKind": self.input_kind.value}


@dataclass
class CardConfiguration:
    """
    Template de campos adicionais, identificado por card_id.

    O cartão de novo ticket usa sempre a configuração mais recente.
    """

    card_id: str
    team_id: Optional[str] = None
    fields: List[FieldSpec] = field(default_factory=list)
    created_on: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "card_id": self.card_id,
            "team_id": self.team_id,
            "fields": [spec.to_dict() for spec in self.fields],
            "created_on": self.created_on.isoformat(),
        }


@dataclass(frozen=True)
class IntakeForm:
    """Formulário de abertura já validado."""

    title: str
    description: str
    request_type: TicketSeverity
    card_id: Optional[str]
    additional_properties: Dict[str, Any]


class IntakeValidator:
    """
    Valida e normaliza o valor submetido pelo cartão de abertura.

    Example:
        validator = IntakeValidator()
        form = validator.validate(card_value, template, timedelta(hours=-3))
    """

    def split_properties(self, card_value: Mapping[str, Any]) -> Dict[str, Any]:
        """Retorna o valor do cartão sem as chaves reservadas."""
        return {
            key: value
            for key, value in card_value.items()
            if key not in RESERVED_KEYS
        }

    def normalize_date(self, raw: Any, utc_offset: timedelta) -> str:
        """
        Converte valor de DateInput para ISO-8601 no fuso do solicitante.

        Datas sem fuso são interpretadas como meia-noite local.

        Raises:
            ValueError: Se o valor não é uma data reconhecível
        """
        if not isinstance(raw, str) or not raw.strip():
            raise ValueError(f"Data inválida: {raw!r}")

        text = raw.strip().replace("Z", "+00:00")
        tz = timezone(utc_offset)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=tz)
        return parsed.astimezone(tz).isoformat()

    def validate(
        self,
        card_value: Mapping[str, Any],
        template: Sequence[FieldSpec] = (),
        utc_offset: Optional[timedelta] = None,
    ) -> IntakeForm:
        """
        Valida o formulário de abertura.

        Args:
            card_value: Valor submetido pelo cartão
            template: Campos adicionais do card_id submetido
            utc_offset: Deslocamento UTC local do solicitante

        Returns:
            Formulário normalizado

        Raises:
            ValidationFailedError: Com todos os campos ausentes ou inválidos
        """
        title = str(card_value.get("Title") or "")
        description = str(card_value.get("Description") or "")
        missing = TicketEntity.missing_required_fields(title, description)

        properties, invalid = self._normalize_properties(
            self.split_properties(card_value),
            template,
            utc_offset or timedelta(0),
        )
        missing.extend(invalid)

        if missing:
            raise ValidationFailedError(missing)

        raw_type = card_value.get("RequestType")
        request_type = (
            TicketSeverity.from_string(raw_type) if raw_type else TicketSeverity.NORMAL
        )

        return IntakeForm(
            title=title.strip(),
            description=description.strip(),
            request_type=request_type,
            card_id=card_value.get("cardId"),
            additional_properties=properties,
        )

    def _normalize_properties(
        self,
        properties: Dict[str, Any],
        template: Sequence[FieldSpec],
        utc_offset: timedelta,
    ) -> Tuple[Dict[str, Any], List[str]]:
        date_fields = {
            spec.id for spec in template if spec.input_kind == InputKind.DATE_INPUT
        }
        normalized: Dict[str, Any] = {}
        invalid: List[str] = []

        for key, value in properties.items():
            if key in date_fields and value not in (None, ""):
                try:
                    normalized[key] = self.normalize_date(value, utc_offset)
                except ValueError:
                    invalid.append(key)
            else:
                normalized[key] = value

        return normalized, invalid


def render_field_errors(template: Sequence[FieldSpec], missing: Sequence[str]) -> Dict[str, bool]:
    """
    Marca os campos com erro para o renderer reexibir o formulário.

    Returns:
        Mapa {id_do_campo: tem_erro} para título, descrição e o template
    """
    ids = ["title", "description"] + [spec.id for spec in template]
    flagged = set(missing)
    return {field_id: field_id in flagged for field_id in ids}

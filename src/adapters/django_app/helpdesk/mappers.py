"""
Mappers para conversão entre Entities (Core) e Models (Django).

Responsabilidades:
- TicketEntity ⇄ TicketDetailModel
- OnCallRosterRecord ⇄ OnCallSupportModel
- CardConfiguration ⇄ CardConfigurationModel

Princípios:
- Mappers são stateless
- Não contêm lógica de negócio
- Tratam apenas conversão de dados
"""

from typing import Any, Dict, List

from src.core.roster.entities import ExpertRef, OnCallRosterRecord
from src.core.tickets.entities import TicketEntity, TicketSeverity, TicketStatus
from src.core.tickets.intake import CardConfiguration, FieldSpec

from .models import CardConfigurationModel, OnCallSupportModel, TicketDetailModel


class TicketMapper:
    """
    Mapper para conversão entre TicketEntity e TicketDetailModel.

    - to_fields(): Entity → dict de colunas (sem PK e versão)
    - to_entity(): Model → Entity
    """

    @staticmethod
    def to_fields(entity: TicketEntity) -> Dict[str, Any]:
        """
        Converte TicketEntity para colunas do model.

        ticket_id e version ficam de fora: o repositório controla ambos.
        """
        return {
            'status': entity.status.value,
            'title': entity.title,
            'description': entity.description,
            'request_type': entity.request_type.value,
            'additional_properties': dict(entity.additional_properties),
            'requester_name': entity.requester_name,
            'requester_object_id': entity.requester_object_id,
            'requester_conversation_id': entity.requester_conversation_id,
            'assigned_to_name': entity.assigned_to_name,
            'assigned_to_object_id': entity.assigned_to_object_id,
            'closed_by_name': entity.closed_by_name,
            'closed_on': entity.closed_on,
            'created_on': entity.created_on,
            'last_modified_by_name': entity.last_modified_by_name,
            'last_modified_by_object_id': entity.last_modified_by_object_id,
            'last_modified_on': entity.last_modified_on,
            'sme_conversation_id': entity.sme_conversation_id,
            'sme_ticket_activity_id': entity.sme_ticket_activity_id,
            'card_id': entity.card_id,
        }

    @staticmethod
    def to_entity(model: TicketDetailModel) -> TicketEntity:
        """Converte TicketDetailModel para TicketEntity."""
        return TicketEntity(
            ticket_id=model.ticket_id,
            title=model.title,
            description=model.description,
            request_type=TicketSeverity.from_string(model.request_type),
            status=TicketStatus.from_string(model.status),
            additional_properties=dict(model.additional_properties or {}),
            requester_name=model.requester_name,
            requester_object_id=model.requester_object_id,
            requester_conversation_id=model.requester_conversation_id,
            assigned_to_name=model.assigned_to_name,
            assigned_to_object_id=model.assigned_to_object_id,
            closed_by_name=model.closed_by_name,
            closed_on=model.closed_on,
            created_on=model.created_on,
            last_modified_by_name=model.last_modified_by_name,
            last_modified_by_object_id=model.last_modified_by_object_id,
            last_modified_on=model.last_modified_on,
            sme_conversation_id=model.sme_conversation_id,
            sme_ticket_activity_id=model.sme_ticket_activity_id,
            card_id=model.card_id,
            version=model.version,
        )


class RosterMapper:
    """Mapper para snapshots da lista de plantão."""

    @staticmethod
    def to_model(record: OnCallRosterRecord) -> OnCallSupportModel:
        return OnCallSupportModel(
            on_call_support_id=record.on_call_support_id,
            team_id=record.team_id,
            experts=[expert.to_dict() for expert in record.experts],
            card_activity_id=record.card_activity_id,
            conversation_id=record.conversation_id,
            modified_by_name=record.modified_by_name,
            modified_by_object_id=record.modified_by_object_id,
            modified_on=record.modified_on,
        )

    @staticmethod
    def to_entity(model: OnCallSupportModel) -> OnCallRosterRecord:
        return OnCallRosterRecord(
            on_call_support_id=model.on_call_support_id,
            team_id=model.team_id,
            experts=[ExpertRef.from_dict(item) for item in model.experts or []],
            card_activity_id=model.card_activity_id,
            conversation_id=model.conversation_id,
            modified_by_name=model.modified_by_name,
            modified_by_object_id=model.modified_by_object_id,
            modified_on=model.modified_on,
        )

    @staticmethod
    def to_entity_list(models: List[OnCallSupportModel]) -> List[OnCallRosterRecord]:
        return [RosterMapper.to_entity(m) for m in models]


class CardConfigurationMapper:
    """Mapper para templates de cartão."""

    @staticmethod
    def to_entity(model: CardConfigurationModel) -> CardConfiguration:
        return CardConfiguration(
            card_id=model.card_id,
            team_id=model.team_id,
            fields=[FieldSpec.from_dict(item) for item in model.field_specs or []],
            created_on=model.created_on,
        )

    @staticmethod
    def to_model(entity: CardConfiguration) -> CardConfigurationModel:
        return CardConfigurationModel(
            card_id=entity.card_id,
            team_id=entity.team_id,
            field_specs=[spec.to_dict() for spec in entity.fields],
            created_on=entity.created_on,
        )

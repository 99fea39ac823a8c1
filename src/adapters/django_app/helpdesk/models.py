"""
Django Models do Help-Desk.

Estes models são ADAPTERS - implementam a persistência para as
entidades de domínio definidas em src/core/tickets e src/core/roster.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- Lógica de negócio fica nas Entities do Core
- Models são mapeados para/de Entities via Mappers

Tabelas:
- TicketDetailModel: Registro de cada ticket
- TicketIdCounterModel: Contador sequencial de IDs
- OnCallSupportModel: Snapshots da lista de plantão (append-only)
- CardConfigurationModel: Templates de campos do cartão de abertura
"""

from django.db import models
from django.utils import timezone


class TicketStatusChoices(models.TextChoices):
    """Choices para status de ticket (espelha TicketStatus do Core)."""
    UNASSIGNED = 'Unassigned', 'Unassigned'
    ASSIGNED = 'Assigned', 'Assigned'
    CLOSED = 'Closed', 'Closed'
    WITHDRAWN = 'Withdrawn', 'Withdrawn'


class TicketSeverityChoices(models.TextChoices):
    """Choices para severidade (espelha TicketSeverity do Core)."""
    NORMAL = 'Normal', 'Normal'
    URGENT = 'Urgent', 'Urgent'


class TicketDetailModel(models.Model):
    """
    Model Django para persistência de Tickets.

    Fields:
        ticket_id: ID sequencial (string) gerado pelo contador
        version: Token de concorrência otimista
        demais campos: espelham TicketEntity
    """

    ticket_id = models.CharField(
        max_length=20,
        primary_key=True,
        editable=False,
        help_text="ID sequencial do ticket"
    )

    status = models.CharField(
        max_length=20,
        choices=TicketStatusChoices.choices,
        default=TicketStatusChoices.UNASSIGNED,
        db_index=True,
    )

    title = models.CharField(max_length=200)
    description = models.TextField()

    request_type = models.CharField(
        max_length=20,
        choices=TicketSeverityChoices.choices,
        default=TicketSeverityChoices.NORMAL,
    )

    additional_properties = models.JSONField(
        default=dict,
        blank=True,
        help_text="Campos extras definidos pelo template do cartão"
    )

    # Solicitante
    requester_name = models.CharField(max_length=200)
    requester_object_id = models.CharField(max_length=100, null=True, blank=True, db_index=True)
    requester_conversation_id = models.CharField(max_length=200, null=True, blank=True)

    # Atribuição
    assigned_to_name = models.CharField(max_length=200, null=True, blank=True)
    assigned_to_object_id = models.CharField(max_length=100, null=True, blank=True, db_index=True)

    # Fechamento
    closed_by_name = models.CharField(max_length=200, null=True, blank=True)
    closed_on = models.DateTimeField(null=True, blank=True)

    # Auditoria
    created_on = models.DateTimeField(default=timezone.now, db_index=True)
    last_modified_by_name = models.CharField(max_length=200, null=True, blank=True)
    last_modified_by_object_id = models.CharField(max_length=100, null=True, blank=True)
    last_modified_on = models.DateTimeField(null=True, blank=True)

    # Vínculos
    sme_conversation_id = models.CharField(max_length=200, null=True, blank=True)
    sme_ticket_activity_id = models.CharField(max_length=200, null=True, blank=True)
    card_id = models.CharField(max_length=100, null=True, blank=True)

    version = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'ticket_details'
        verbose_name = 'Ticket'
        verbose_name_plural = 'Tickets'
        ordering = ['-created_on']
        indexes = [
            models.Index(fields=['status', 'created_on'], name='ticket_status_created_idx'),
        ]

    def __str__(self):
        return f"[{self.ticket_id}] {self.title}"


class TicketIdCounterModel(models.Model):
    """
    Contador de IDs de ticket.

    Uma linha por sequência; incrementada sob lock de linha.
    """

    name = models.CharField(max_length=50, primary_key=True)
    value = models.BigIntegerField(default=0)

    class Meta:
        db_table = 'ticket_id_counter'

    def __str__(self):
        return f"{self.name}={self.value}"


class OnCallSupportModel(models.Model):
    """
    Snapshot da lista de plantão.

    Cada alteração grava uma nova linha; a mais recente do time
    é a lista vigente.
    """

    id = models.BigAutoField(primary_key=True)
    on_call_support_id = models.CharField(max_length=36, db_index=True)
    team_id = models.CharField(max_length=200, db_index=True)
    experts = models.JSONField(default=list, blank=True)
    card_activity_id = models.CharField(max_length=200, null=True, blank=True)
    conversation_id = models.CharField(max_length=200, null=True, blank=True)
    modified_by_name = models.CharField(max_length=200, null=True, blank=True)
    modified_by_object_id = models.CharField(max_length=100, null=True, blank=True)
    modified_on = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'on_call_support'
        verbose_name = 'Lista de Plantão'
        verbose_name_plural = 'Listas de Plantão'
        ordering = ['-id']
        indexes = [
            models.Index(fields=['team_id', 'id'], name='oncall_team_id_idx'),
        ]

    def __str__(self):
        return f"{self.team_id} @ {self.modified_on}"


class CardConfigurationModel(models.Model):
    """Template de campos adicionais do cartão de abertura."""

    card_id = models.CharField(max_length=100, primary_key=True)
    team_id = models.CharField(max_length=200, null=True, blank=True)
    field_specs = models.JSONField(default=list, blank=True)
    created_on = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'card_configuration'
        ordering = ['-created_on']

    def __str__(self):
        return self.card_id

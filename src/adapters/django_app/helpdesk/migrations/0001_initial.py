"""
Migration inicial do Help-Desk.

Cria as tabelas:
- ticket_details: Registro de tickets
- ticket_id_counter: Contador de IDs
- on_call_support: Snapshots da lista de plantão
- card_configuration: Templates do cartão de abertura
"""

from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Tabela: ticket_details
        # =================================================================
        migrations.CreateModel(
            name='TicketDetailModel',
            fields=[
                ('ticket_id', models.CharField(
                    max_length=20,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='ID sequencial do ticket'
                )),
                ('status', models.CharField(
                    max_length=20,
                    choices=[
                        ('Unassigned', 'Unassigned'),
                        ('Assigned', 'Assigned'),
                        ('Closed', 'Closed'),
                        ('Withdrawn', 'Withdrawn'),
                    ],
                    default='Unassigned',
                    db_index=True,
                )),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('request_type', models.CharField(
                    max_length=20,
                    choices=[('Normal', 'Normal'), ('Urgent', 'Urgent')],
                    default='Normal',
                )),
                ('additional_properties', models.JSONField(
                    default=dict,
                    blank=True,
                    help_text='Campos extras definidos pelo template do cartão'
                )),
                ('requester_name', models.CharField(max_length=200)),
                ('requester_object_id', models.CharField(max_length=100, null=True, blank=True, db_index=True)),
                ('requester_conversation_id', models.CharField(max_length=200, null=True, blank=True)),
                ('assigned_to_name', models.CharField(max_length=200, null=True, blank=True)),
                ('assigned_to_object_id', models.CharField(max_length=100, null=True, blank=True, db_index=True)),
                ('closed_by_name', models.CharField(max_length=200, null=True, blank=True)),
                ('closed_on', models.DateTimeField(null=True, blank=True)),
                ('created_on', models.DateTimeField(default=django.utils.timezone.now, db_index=True)),
                ('last_modified_by_name', models.CharField(max_length=200, null=True, blank=True)),
                ('last_modified_by_object_id', models.CharField(max_length=100, null=True, blank=True)),
                ('last_modified_on', models.DateTimeField(null=True, blank=True)),
                ('sme_conversation_id', models.CharField(max_length=200, null=True, blank=True)),
                ('sme_ticket_activity_id', models.CharField(max_length=200, null=True, blank=True)),
                ('card_id', models.CharField(max_length=100, null=True, blank=True)),
                ('version', models.PositiveIntegerField(default=0)),
            ],
            options={
                'db_table': 'ticket_details',
                'verbose_name': 'Ticket',
                'verbose_name_plural': 'Tickets',
                'ordering': ['-created_on'],
            },
        ),
        migrations.AddIndex(
            model_name='ticketdetailmodel',
            index=models.Index(fields=['status', 'created_on'], name='ticket_status_created_idx'),
        ),

        # =================================================================
        # Tabela: ticket_id_counter
        # =================================================================
        migrations.CreateModel(
            name='TicketIdCounterModel',
            fields=[
                ('name', models.CharField(max_length=50, primary_key=True, serialize=False)),
                ('value', models.BigIntegerField(default=0)),
            ],
            options={
                'db_table': 'ticket_id_counter',
            },
        ),

        # =================================================================
        # Tabela: on_call_support
        # =================================================================
        migrations.CreateModel(
            name='OnCallSupportModel',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('on_call_support_id', models.CharField(max_length=36, db_index=True)),
                ('team_id', models.CharField(max_length=200, db_index=True)),
                ('experts', models.JSONField(default=list, blank=True)),
                ('card_activity_id', models.CharField(max_length=200, null=True, blank=True)),
                ('conversation_id', models.CharField(max_length=200, null=True, blank=True)),
                ('modified_by_name', models.CharField(max_length=200, null=True, blank=True)),
                ('modified_by_object_id', models.CharField(max_length=100, null=True, blank=True)),
                ('modified_on', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'db_table': 'on_call_support',
                'verbose_name': 'Lista de Plantão',
                'verbose_name_plural': 'Listas de Plantão',
                'ordering': ['-id'],
            },
        ),
        migrations.AddIndex(
            model_name='oncallsupportmodel',
            index=models.Index(fields=['team_id', 'id'], name='oncall_team_id_idx'),
        ),

        # =================================================================
        # Tabela: card_configuration
        # =================================================================
        migrations.CreateModel(
            name='CardConfigurationModel',
            fields=[
                ('card_id', models.CharField(max_length=100, primary_key=True, serialize=False)),
                ('team_id', models.CharField(max_length=200, null=True, blank=True)),
                ('field_specs', models.JSONField(default=list, blank=True)),
                ('created_on', models.DateTimeField(default=django.utils.timezone.now, db_index=True)),
            ],
            options={
                'db_table': 'card_configuration',
                'ordering': ['-created_on'],
            },
        ),
    ]

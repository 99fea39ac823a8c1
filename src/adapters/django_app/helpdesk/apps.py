"""
Configuração do Django App do Help-Desk.
"""

from django.apps import AppConfig


class HelpdeskConfig(AppConfig):
    """Configuração do app Helpdesk (tickets, plantão e templates)."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.helpdesk'
    label = 'helpdesk'
    verbose_name = 'Suporte Remoto'

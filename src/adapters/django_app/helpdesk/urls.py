"""
URL patterns do Help-Desk.

Endpoints API JSON:
- POST /api/messages/ - Atividades da plataforma de chat
- GET /api/tickets/<ticket_id>/ - Obter ticket
- GET /api/roster/<team_id>/ - Lista de plantão
"""

from django.urls import path
from . import api_views

app_name = 'helpdesk'

urlpatterns = [
    path('messages/', api_views.MessagesAPIView.as_view(), name='messages'),
    path('tickets/<str:ticket_id>/', api_views.TicketAPIDetailView.as_view(), name='ticket_detail'),
    path('roster/<str:team_id>/', api_views.RosterAPIView.as_view(), name='roster'),
]

"""
URL Configuration do bot de suporte remoto.

Estrutura:
- /api/ - Endpoints do Help-Desk
- /health/ - Health check
"""

from django.http import JsonResponse
from django.urls import path, include

urlpatterns = [
    path('api/', include('src.adapters.django_app.helpdesk.urls')),

    # Health check
    path('health/', lambda r: JsonResponse({'status': 'ok'})),
]

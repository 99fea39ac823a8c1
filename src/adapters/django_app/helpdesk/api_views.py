"""
API Views JSON do Help-Desk.

Endpoints:
- POST /api/messages/ - Recebe atividade normalizada da plataforma de chat
- GET /api/tickets/<ticket_id>/ - Obter ticket
- GET /api/roster/<team_id>/ - Lista de plantão vigente + histórico

Formato:
- Entrada: JSON
- Saída: JSON com estrutura {success, data/error, meta}
"""

import json
import logging
from typing import Any, Dict

from django.views import View
from django.http import JsonResponse, HttpRequest
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt

from src.core.messaging.dtos import InboundActivity
from src.core.shared.exceptions import (
    ValidationError,
    EntityNotFoundError,
    BusinessRuleViolationError,
    DomainException,
)
from src.config.container import get_container

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================

def json_response(success: bool, data: Any = None, error: str = None,
                  status: int = 200, meta: Dict = None) -> JsonResponse:
    """
    Cria resposta JSON padronizada.

    Args:
        success: Se operação foi bem sucedida
        data: Dados da resposta
        error: Mensagem de erro (se aplicável)
        status: HTTP status code
        meta: Metadados adicionais
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    return JsonResponse(response, status=status)


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Parseia body JSON do request.

    Raises:
        ValueError: Se JSON inválido ou não for objeto
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON inválido: {e}")

    if not isinstance(data, dict):
        raise ValueError("Corpo deve ser um objeto JSON")
    return data


# =============================================================================
# Base API View
# =============================================================================

@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    View base para APIs JSON.

    Fornece:
    - Parsing de JSON
    - Acesso ao container DI
    - Tratamento de erros padronizado
    """

    def get_container(self):
        return get_container()

    def get_service(self, service_name: str):
        """Obtém service do container."""
        return getattr(self.get_container(), service_name)()

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def handle_exception(self, e: Exception) -> JsonResponse:
        """
        Trata exceções e retorna resposta apropriada.

        ValidationError → 400, EntityNotFoundError → 404,
        BusinessRuleViolationError → 422, outras de domínio → 400,
        inesperadas → 500.
        """
        if isinstance(e, ValidationError):
            return json_response(
                success=False,
                error=str(e),
                status=400,
                meta={'field': getattr(e, 'field', None), 'code': e.code}
            )

        if isinstance(e, EntityNotFoundError):
            return json_response(
                success=False,
                error=str(e),
                status=404,
                meta={'code': e.code}
            )

        if isinstance(e, BusinessRuleViolationError):
            return json_response(
                success=False,
                error=str(e),
                status=422,
                meta={'rule': getattr(e, 'rule', None), 'code': e.code}
            )

        if isinstance(e, DomainException):
            return json_response(
                success=False,
                error=str(e),
                status=400,
                meta={'code': e.code}
            )

        if isinstance(e, ValueError):
            return json_response(
                success=False,
                error=str(e),
                status=400
            )

        logger.exception("Erro inesperado na API: %s", e)
        return json_response(
            success=False,
            error="Erro interno do servidor",
            status=500
        )


# =============================================================================
# Views
# =============================================================================

class MessagesAPIView(BaseAPIView):
    """
    POST /api/messages/

    Recebe a atividade já normalizada pelo adaptador da plataforma e
    entrega ao ActivityHandler. Uma vez roteada, a resposta é sempre 200:
    erros de negócio viram mensagens no chat, não erros HTTP.
    """

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            activity = InboundActivity.from_dict(self.parse_body(request))
        except Exception as e:
            return self.handle_exception(e)

        handler = self.get_service('activity_handler')
        handler.on_activity(activity)
        return json_response(success=True)


class TicketAPIDetailView(BaseAPIView):
    """GET /api/tickets/<ticket_id>/"""

    def get(self, request: HttpRequest, ticket_id: str) -> JsonResponse:
        try:
            output = self.get_service('get_ticket_service').execute(ticket_id)
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)


class RosterAPIView(BaseAPIView):
    """GET /api/roster/<team_id>/"""

    def get(self, request: HttpRequest, team_id: str) -> JsonResponse:
        try:
            snapshot = self.get_service('get_roster_snapshot_service').execute(team_id)
            return json_response(
                success=True,
                data=snapshot.to_dict(),
                meta={'entries': len(snapshot.entries)},
            )
        except Exception as e:
            return self.handle_exception(e)

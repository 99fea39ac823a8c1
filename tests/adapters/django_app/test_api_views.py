"""
Testes para as API Views do Help-Desk.

Testa:
- POST /api/messages/ (parsing, validação, roteamento)
- GET /api/tickets/<id>/
- GET /api/roster/<team_id>/
- Integração com Container DI (em memória e Django)
"""

import json

import pytest
from django.test import Client

from src.adapters.django_app.helpdesk import api_views
from src.adapters.django_app.helpdesk.api_views import json_response
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    TicketNotFoundError,
    ValidationError,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def client():
    """Django test client."""
    return Client()


@pytest.fixture
def container(testing_container, monkeypatch):
    """Faz as views usarem o container em memória."""
    monkeypatch.setattr(api_views, "get_container", lambda: testing_container)
    return testing_container


def post_activity(client, payload):
    return client.post(
        "/api/messages/",
        data=json.dumps(payload),
        content_type="application/json",
    )


def send_request_payload(**value):
    card_value = {"command": "SEND REQUEST", "Title": "VPN", "Description": "Caiu"}
    card_value.update(value)
    return {
        "scope": "personal",
        "type": "message",
        "from": {"name": "Ana", "objectId": "aad-ana"},
        "conversationId": "conv-ana",
        "text": "SEND REQUEST",
        "value": card_value,
    }


# =============================================================================
# Helpers
# =============================================================================

class TestJsonResponse:

    def test_estrutura(self):
        response = json_response(success=True, data={"a": 1}, meta={"b": 2})

        assert json.loads(response.content) == {"success": True, "data": {"a": 1}, "meta": {"b": 2}}

    def test_erro(self):
        response = json_response(success=False, error="x", status=400)

        assert response.status_code == 400
        assert json.loads(response.content) == {"success": False, "error": "x"}


class TestHandleException:

    @pytest.mark.parametrize("exc,status", [
        (ValidationError("inválido", field="title"), 400),
        (TicketNotFoundError("9"), 404),
        (BusinessRuleViolationError("regra"), 422),
        (ValueError("json"), 400),
        (RuntimeError("boom"), 500),
    ])
    def test_mapeamento_de_status(self, exc, status):
        response = api_views.BaseAPIView().handle_exception(exc)

        assert response.status_code == status


# =============================================================================
# POST /api/messages/
# =============================================================================

class TestMessagesAPIView:

    def test_send_request_cria_ticket(self, client, container):
        response = post_activity(client, send_request_payload())

        assert response.status_code == 200
        assert json.loads(response.content) == {"success": True}

        ticket = container.ticket_repository().get_by_id("1")
        assert ticket.title == "VPN"
        assert container.dispatcher().cards_to("sme-channel")[0].template == "sme_ticket"

    def test_erro_de_negocio_ainda_retorna_200(self, client, container):
        response = post_activity(client, send_request_payload(Title=""))

        assert response.status_code == 200
        assert container.ticket_repository().count() == 0
        assert container.dispatcher().cards_to("conv-ana")[0].template == "new_ticket"

    def test_json_invalido(self, client, container):
        response = client.post("/api/messages/", data="{nope", content_type="application/json")

        assert response.status_code == 400
        assert json.loads(response.content)["success"] is False

    def test_corpo_nao_objeto(self, client, container):
        response = client.post("/api/messages/", data="[1, 2]", content_type="application/json")

        assert response.status_code == 400

    def test_campo_obrigatorio_ausente(self, client, container):
        payload = send_request_payload()
        del payload["conversationId"]

        response = post_activity(client, payload)

        body = json.loads(response.content)
        assert response.status_code == 400
        assert body["meta"]["field"] == "conversationId"
        assert container.dispatcher().sent == []

    def test_offset_invalido(self, client, container):
        payload = send_request_payload()
        payload["localUtcOffsetMinutes"] = [1]

        response = post_activity(client, payload)

        body = json.loads(response.content)
        assert response.status_code == 400
        assert body["meta"]["field"] == "localUtcOffsetMinutes"
        assert container.ticket_repository().count() == 0

    def test_get_nao_permitido(self, client, container):
        assert client.get("/api/messages/").status_code == 405


# =============================================================================
# GET /api/tickets/<id>/ e /api/roster/<team_id>/
# =============================================================================

class TestTicketAPIDetailView:

    def test_obter_ticket(self, client, container):
        post_activity(client, send_request_payload())

        response = client.get("/api/tickets/1/")

        body = json.loads(response.content)
        assert response.status_code == 200
        assert body["data"]["ticket_id"] == "1"
        assert body["data"]["status"] == "Unassigned"
        assert body["data"]["sme_conversation_id"] == "sme-channel"

    def test_ticket_inexistente(self, client, container):
        response = client.get("/api/tickets/404/")

        body = json.loads(response.content)
        assert response.status_code == 404
        assert body["meta"]["code"] == "TICKET_NOT_FOUND"


class TestRosterAPIView:

    def test_time_sem_lista(self, client, container):
        response = client.get("/api/roster/team-1/")

        body = json.loads(response.content)
        assert response.status_code == 200
        assert body["data"]["current"] is None
        assert body["meta"]["entries"] == 0

    def test_lista_atualizada(self, client, container):
        from src.core.roster.members import MemberProfile

        container.member_directory().add(MemberProfile("aad-1", "Ana"))
        post_activity(client, {
            "scope": "channel",
            "type": "invoke",
            "from": {"name": "Bruno", "objectId": "aad-bruno"},
            "conversationId": "channel-1",
            "teamId": "team-1",
            "value": {"command": "UPDATE EXPERTS", "experts": ["aad-1"]},
        })

        response = client.get("/api/roster/team-1/")

        body = json.loads(response.content)
        assert body["data"]["current"]["experts"][0]["name"] == "Ana"
        assert body["meta"]["entries"] == 1
        assert container.dispatcher().texts_to("channel-1") == ["<at>Ana</at>"]


# =============================================================================
# Container Django real (SQLite)
# =============================================================================

@pytest.mark.django_db
class TestFullStack:

    def test_abertura_e_transicao(self, client):
        response = post_activity(client, send_request_payload(RequestType="Urgent"))
        assert response.status_code == 200

        body = json.loads(client.get("/api/tickets/1/").content)
        assert body["data"]["request_type"] == "Urgent"
        sme_activity_id = body["data"]["sme_ticket_activity_id"]
        assert sme_activity_id

        post_activity(client, {
            "scope": "channel",
            "type": "message",
            "from": {"name": "Bruno", "objectId": "aad-bruno"},
            "conversationId": body["data"]["sme_conversation_id"],
            "replyToId": sme_activity_id,
            "teamId": "team-1",
            "value": {"command": "AssignToSelf", "ticketId": "1"},
        })

        body = json.loads(client.get("/api/tickets/1/").content)
        assert body["data"]["status"] == "Assigned"
        assert body["data"]["assigned_to_name"] == "Bruno"
        assert body["data"]["assigned_to_object_id"] == "aad-bruno"
        assert body["data"]["requester_object_id"] == "aad-ana"
        assert body["data"]["version"] == 3

"""
Testes Unitários para Use Cases do Domínio de Tickets.

Estratégia de Teste:
- Usa InMemoryTicketRepository (fake) para isolamento
- Usa InMemoryUnitOfWork para verificar commit/rollback
- Verifica eventos publicados
- Testa cenários de sucesso e erro

Coverage:
- CreateTicketService
- ApplyTransitionService
- EditTicketService
- LinkSmeCardService
- GetTicketService
"""

import pytest

from src.core.shared.exceptions import (
    ConcurrencyError,
    InvalidSeverityError,
    OperationCancelledError,
    PersistenceError,
    TicketAlreadyClosedError,
    TicketNotFoundError,
    ValidationFailedError,
)
from src.core.shared.interfaces import CancellationToken
from src.core.tickets.dtos import (
    ApplyTransitionInputDTO,
    CreateTicketInputDTO,
    EditTicketInputDTO,
    LinkSmeCardInputDTO,
)
from src.core.tickets.events import TicketCreatedEvent, TicketEditedEvent, TicketTransitionedEvent
from src.core.tickets.lifecycle import TransitionKind
from src.core.tickets.use_cases import (
    ApplyTransitionService,
    CreateTicketService,
    EditTicketService,
    GetTicketService,
    LinkSmeCardService,
)


@pytest.fixture
def create_service(ticket_repo, id_generator, template_provider, uow, engine):
    return CreateTicketService(
        ticket_repo=ticket_repo,
        id_generator=id_generator,
        template_provider=template_provider,
        uow=uow,
        engine=engine,
    )


@pytest.fixture
def transition_service(ticket_repo, uow, engine):
    return ApplyTransitionService(ticket_repo=ticket_repo, uow=uow, engine=engine)


def create_input(requester, **card_value):
    value = {"command": "SEND REQUEST", "Title": "VPN", "Description": "Caiu"}
    value.update(card_value)
    return CreateTicketInputDTO(
        card_value=value,
        requester=requester,
        requester_conversation_id="conv-ana",
    )


class TestCreateTicketService:

    def test_cria_ticket(self, create_service, ticket_repo, uow, requester):
        output = create_service.execute(create_input(requester))

        assert output.ticket_id == "1"
        assert output.status == "Unassigned"
        assert output.version == 1
        assert ticket_repo.count() == 1
        assert uow.committed
        assert len(uow.published_events) == 1
        assert isinstance(uow.published_events[0], TicketCreatedEvent)

    def test_ids_crescentes(self, create_service, requester):
        first = create_service.execute(create_input(requester))
        second = create_service.execute(create_input(requester))

        assert int(second.ticket_id) > int(first.ticket_id)

    def test_titulo_vazio_nao_consome_id(self, create_service, id_generator, ticket_repo, requester):
        """Formulário inválido não grava nem consome ID; o próximo envio válido funciona."""
        with pytest.raises(ValidationFailedError) as exc_info:
            create_service.execute(create_input(requester, Title=""))

        assert exc_info.value.fields == ["title"]
        assert ticket_repo.count() == 0

        output = create_service.execute(create_input(requester))
        assert output.ticket_id == "1"
        assert output.status == "Unassigned"

    def test_usa_template_do_card_id(self, create_service, ticket_repo, requester):
        output = create_service.execute(
            create_input(requester, cardId="card-1", DueDate="2024-03-10", Location="Sala 3")
        )

        stored = ticket_repo.get_by_id(output.ticket_id)
        assert stored.card_id == "card-1"
        assert stored.additional_properties == {
            "DueDate": "2024-03-10T00:00:00+00:00",
            "Location": "Sala 3",
        }

    def test_severidade_invalida(self, create_service, ticket_repo, requester):
        with pytest.raises(InvalidSeverityError):
            create_service.execute(create_input(requester, RequestType="Blocker"))

        assert ticket_repo.count() == 0

    def test_falha_de_gravacao(self, create_service, ticket_repo, uow, requester):
        ticket_repo.fail_writes = True

        with pytest.raises(PersistenceError):
            create_service.execute(create_input(requester))

        assert uow.rolled_back
        assert uow.published_events == []

    def test_cancelado_antes_de_gravar(self, create_service, ticket_repo, requester):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelledError):
            create_service.execute(create_input(requester), token)

        assert ticket_repo.count() == 0


class TestApplyTransitionService:

    @pytest.fixture
    def ticket_id(self, create_service, requester):
        return create_service.execute(create_input(requester)).ticket_id

    def test_assign(self, transition_service, ticket_repo, uow, ticket_id, expert):
        uow.reset()
        output = transition_service.execute(
            ApplyTransitionInputDTO(ticket_id, TransitionKind.ASSIGN_TO_SELF, expert)
        )

        assert output.kind == "AssignToSelf"
        assert output.ticket.status == "Assigned"
        assert output.ticket.assigned_to_name == "Bruno"
        assert output.sme_notification.text == "Ticket 1 assigned to Bruno"
        assert ticket_repo.get_by_id(ticket_id).version == 2

        event = uow.published_events[0]
        assert isinstance(event, TicketTransitionedEvent)
        assert event.previous_status == "Unassigned"
        assert event.new_status == "Assigned"

    def test_ticket_inexistente(self, transition_service, expert):
        with pytest.raises(TicketNotFoundError):
            transition_service.execute(
                ApplyTransitionInputDTO("999", TransitionKind.CLOSE, expert)
            )

    def test_withdraw_fechado_mantem_registro(
        self, transition_service, ticket_repo, ticket_id, requester, expert
    ):
        transition_service.execute(ApplyTransitionInputDTO(ticket_id, TransitionKind.CLOSE, expert))
        before = ticket_repo.get_by_id(ticket_id)

        with pytest.raises(TicketAlreadyClosedError):
            transition_service.execute(
                ApplyTransitionInputDTO(ticket_id, TransitionKind.WITHDRAW, requester)
            )

        after = ticket_repo.get_by_id(ticket_id)
        assert after.to_dict() == before.to_dict()
        assert after.version == before.version

    def test_severidade_invalida_mantem_registro(
        self, transition_service, ticket_repo, ticket_id, expert
    ):
        before = ticket_repo.get_by_id(ticket_id)

        with pytest.raises(InvalidSeverityError):
            transition_service.execute(
                ApplyTransitionInputDTO(
                    ticket_id,
                    TransitionKind.SET_REQUEST_TYPE,
                    expert,
                    {"RequestType": "Critical"},
                )
            )

        assert ticket_repo.get_by_id(ticket_id).to_dict() == before.to_dict()

    def test_falha_de_gravacao(self, transition_service, ticket_repo, uow, ticket_id, expert):
        ticket_repo.fail_writes = True
        uow.reset()

        with pytest.raises(PersistenceError):
            transition_service.execute(
                ApplyTransitionInputDTO(ticket_id, TransitionKind.CLOSE, expert)
            )

        assert uow.rolled_back
        assert uow.published_events == []
        assert ticket_repo.get_by_id(ticket_id).status.value == "Unassigned"

    def test_cancelado_antes_de_gravar(self, transition_service, ticket_repo, ticket_id, expert):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelledError):
            transition_service.execute(
                ApplyTransitionInputDTO(ticket_id, TransitionKind.CLOSE, expert), token
            )

        assert ticket_repo.get_by_id(ticket_id).status.value == "Unassigned"


class TestEditTicketService:

    @pytest.fixture
    def edit_service(self, ticket_repo, template_provider, uow, engine):
        return EditTicketService(
            ticket_repo=ticket_repo,
            template_provider=template_provider,
            uow=uow,
            engine=engine,
        )

    @pytest.fixture
    def ticket_id(self, create_service, requester):
        return create_service.execute(create_input(requester, cardId="card-1")).ticket_id

    def edit_input(self, ticket_id, requester, **card_value):
        value = {
            "command": "UPDATE REQUEST",
            "ticketId": ticket_id,
            "Title": "VPN lenta",
            "Description": "Cai toda hora",
        }
        value.update(card_value)
        return EditTicketInputDTO(ticket_id=ticket_id, card_value=value, actor=requester)

    def test_edita_com_template_do_ticket(self, edit_service, ticket_repo, uow, ticket_id, requester):
        uow.reset()

        output = edit_service.execute(self.edit_input(ticket_id, requester, DueDate="2024-03-10"))

        assert output.title == "VPN lenta"
        assert output.status == "Unassigned"
        assert output.version == 2
        assert ticket_repo.get_by_id(ticket_id).additional_properties == {
            "DueDate": "2024-03-10T00:00:00+00:00",
        }

        event = uow.published_events[0]
        assert isinstance(event, TicketEditedEvent)
        assert event.actor_object_id == "aad-ana"
        assert event.title == "VPN lenta"

    def test_ticket_inexistente(self, edit_service, requester):
        with pytest.raises(TicketNotFoundError):
            edit_service.execute(self.edit_input("404", requester))

    def test_ticket_fechado_antes_da_validacao(
        self, edit_service, transition_service, ticket_repo, ticket_id, requester, expert
    ):
        transition_service.execute(ApplyTransitionInputDTO(ticket_id, TransitionKind.CLOSE, expert))
        before = ticket_repo.get_by_id(ticket_id)

        with pytest.raises(TicketAlreadyClosedError):
            edit_service.execute(self.edit_input(ticket_id, requester, Title=""))

        assert ticket_repo.get_by_id(ticket_id).to_dict() == before.to_dict()

    def test_validacao_nao_grava(self, edit_service, ticket_repo, uow, ticket_id, requester):
        uow.reset()

        with pytest.raises(ValidationFailedError) as exc_info:
            edit_service.execute(self.edit_input(ticket_id, requester, DueDate="ontem"))

        assert exc_info.value.fields == ["DueDate"]
        assert ticket_repo.get_by_id(ticket_id).version == 1
        assert uow.published_events == []

    def test_falha_de_gravacao(self, edit_service, ticket_repo, ticket_id, requester):
        ticket_repo.fail_writes = True

        with pytest.raises(PersistenceError):
            edit_service.execute(self.edit_input(ticket_id, requester))

        assert ticket_repo.get_by_id(ticket_id).title == "VPN"


class TestConcurrency:

    def test_gravacao_concorrente_rejeitada(self, create_service, ticket_repo, engine, requester, expert):
        """Duas leituras da mesma versão: só a primeira gravação vence."""
        ticket_id = create_service.execute(create_input(requester)).ticket_id
        first = ticket_repo.get_by_id(ticket_id)
        second = ticket_repo.get_by_id(ticket_id)

        assert ticket_repo.upsert(engine.apply_transition(first, TransitionKind.CLOSE, expert).ticket)

        with pytest.raises(ConcurrencyError):
            ticket_repo.upsert(
                engine.apply_transition(second, TransitionKind.ASSIGN_TO_SELF, expert).ticket
            )

        assert ticket_repo.get_by_id(ticket_id).status.value == "Closed"


class TestLinkSmeCardService:

    def test_vincula_cartao(self, create_service, ticket_repo, uow, requester):
        ticket_id = create_service.execute(create_input(requester)).ticket_id
        service = LinkSmeCardService(ticket_repo=ticket_repo, uow=uow)

        assert service.execute(LinkSmeCardInputDTO(ticket_id, "sme-channel", "activity-3"))

        stored = ticket_repo.get_by_id(ticket_id)
        assert stored.sme_conversation_id == "sme-channel"
        assert stored.sme_ticket_activity_id == "activity-3"

    def test_ticket_inexistente(self, ticket_repo, uow):
        service = LinkSmeCardService(ticket_repo=ticket_repo, uow=uow)

        with pytest.raises(TicketNotFoundError):
            service.execute(LinkSmeCardInputDTO("404", "sme-channel", "activity-3"))


class TestGetTicketService:

    def test_obter(self, create_service, ticket_repo, requester):
        ticket_id = create_service.execute(create_input(requester)).ticket_id

        output = GetTicketService(ticket_repo).execute(ticket_id)

        assert output.title == "VPN"
        assert output.to_dict()["status"] == "Unassigned"

    def test_inexistente(self, ticket_repo):
        with pytest.raises(TicketNotFoundError) as exc_info:
            GetTicketService(ticket_repo).execute("42")

        assert exc_info.value.code == "TICKET_NOT_FOUND"

    def test_expoe_object_ids(self, create_service, transition_service, ticket_repo, requester, expert):
        ticket_id = create_service.execute(create_input(requester)).ticket_id
        transition_service.execute(
            ApplyTransitionInputDTO(ticket_id, TransitionKind.ASSIGN_TO_SELF, expert)
        )

        data = GetTicketService(ticket_repo).execute(ticket_id).to_dict()

        assert data["requester_object_id"] == "aad-ana"
        assert data["assigned_to_object_id"] == "aad-bruno"
        assert data["last_modified_by_object_id"] == "aad-bruno"

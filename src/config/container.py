"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância para toda app (repositories, dispatcher)
- Factory: Nova instância por chamada (services, UoW)
- Configuration: valores de settings.HELPDESK

Imports dos adapters são feitos dentro dos providers para que o
container possa ser importado antes do Django terminar o setup.
"""

from dependency_injector import containers, providers
from typing import Optional


DEFAULT_CONFIG = {
    'roster_history_limit': 9,
    'member_cache_ttl_seconds': 3600,
    'sme_conversation_id': 'sme-channel',
    'team_members': {},
}


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Configuration: settings.HELPDESK
    - Infrastructure: publisher de eventos, dispatcher, cache
    - Repositories: Persistência
    - Unit of Work: Transações
    - Services: Use Cases
    - Handler: Roteador de atividades

    Example:
        container = get_container()
        handler = container.activity_handler()
        handler.on_activity(activity)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    config = providers.Configuration(default=DEFAULT_CONFIG)

    # =========================================================================
    # Infrastructure
    # =========================================================================

    event_publisher = providers.Singleton(
        lambda: __import__(
            'src.adapters.django_app.events.publishers',
            fromlist=['get_event_publisher']
        ).get_event_publisher()
    )

    dispatcher = providers.Singleton(
        lambda: __import__(
            'src.adapters.django_app.helpdesk.dispatchers',
            fromlist=['LoggingDispatcher']
        ).LoggingDispatcher()
    )

    member_profile_cache = providers.Singleton(
        lambda: __import__(
            'src.adapters.django_app.helpdesk.members',
            fromlist=['DjangoMemberProfileCache']
        ).DjangoMemberProfileCache()
    )

    member_directory = providers.Singleton(
        lambda members: __import__(
            'src.adapters.django_app.helpdesk.members',
            fromlist=['ConfiguredMemberDirectory']
        ).ConfiguredMemberDirectory(members=members),
        members=config.team_members,
    )

    # =========================================================================
    # Repositories (Singleton - uma instância por app)
    # =========================================================================

    ticket_repository = providers.Singleton(
        lambda: __import__(
            'src.adapters.django_app.helpdesk.repositories',
            fromlist=['DjangoTicketRepository']
        ).DjangoTicketRepository()
    )

    ticket_id_generator = providers.Singleton(
        lambda: __import__(
            'src.adapters.django_app.helpdesk.repositories',
            fromlist=['DjangoTicketIdGenerator']
        ).DjangoTicketIdGenerator()
    )

    template_provider = providers.Singleton(
        lambda: __import__(
            'src.adapters.django_app.helpdesk.repositories',
            fromlist=['DjangoTemplateProvider']
        ).DjangoTemplateProvider()
    )

    roster_repository = providers.Singleton(
        lambda: __import__(
            'src.adapters.django_app.helpdesk.repositories',
            fromlist=['DjangoRosterRepository']
        ).DjangoRosterRepository()
    )

    # =========================================================================
    # Unit of Work (Factory - nova instância por service)
    # =========================================================================

    unit_of_work = providers.Factory(
        lambda event_publisher: __import__(
            'src.adapters.django_app.shared.unit_of_work',
            fromlist=['DjangoUnitOfWork']
        ).DjangoUnitOfWork(event_publisher=event_publisher),
        event_publisher=event_publisher,
    )

    # =========================================================================
    # Domain
    # =========================================================================

    lifecycle_engine = providers.Singleton(
        lambda: __import__(
            'src.core.tickets.lifecycle',
            fromlist=['TicketLifecycleEngine']
        ).TicketLifecycleEngine()
    )

    member_profile_resolver = providers.Factory(
        lambda directory, cache, ttl_seconds: __import__(
            'src.core.roster.members',
            fromlist=['MemberProfileResolver']
        ).MemberProfileResolver(directory, cache, ttl_seconds=ttl_seconds),
        directory=member_directory,
        cache=member_profile_cache,
        ttl_seconds=config.member_cache_ttl_seconds,
    )

    # =========================================================================
    # Services / Use Cases (Factory - nova instância por chamada)
    # =========================================================================

    create_ticket_service = providers.Factory(
        lambda ticket_repo, id_generator, template_provider, uow, engine: __import__(
            'src.core.tickets.use_cases',
            fromlist=['CreateTicketService']
        ).CreateTicketService(
            ticket_repo=ticket_repo,
            id_generator=id_generator,
            template_provider=template_provider,
            uow=uow,
            engine=engine,
        ),
        ticket_repo=ticket_repository,
        id_generator=ticket_id_generator,
        template_provider=template_provider,
        uow=unit_of_work,
        engine=lifecycle_engine,
    )

    apply_transition_service = providers.Factory(
        lambda ticket_repo, uow, engine: __import__(
            'src.core.tickets.use_cases',
            fromlist=['ApplyTransitionService']
        ).ApplyTransitionService(ticket_repo=ticket_repo, uow=uow, engine=engine),
        ticket_repo=ticket_repository,
        uow=unit_of_work,
        engine=lifecycle_engine,
    )

    edit_ticket_service = providers.Factory(
        lambda ticket_repo, template_provider, uow, engine: __import__(
            'src.core.tickets.use_cases',
            fromlist=['EditTicketService']
        ).EditTicketService(
            ticket_repo=ticket_repo,
            template_provider=template_provider,
            uow=uow,
            engine=engine,
        ),
        ticket_repo=ticket_repository,
        template_provider=template_provider,
        uow=unit_of_work,
        engine=lifecycle_engine,
    )

    link_sme_card_service = providers.Factory(
        lambda ticket_repo, uow: __import__(
            'src.core.tickets.use_cases',
            fromlist=['LinkSmeCardService']
        ).LinkSmeCardService(ticket_repo=ticket_repo, uow=uow),
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    # Obter Ticket (sem UoW - leitura)
    get_ticket_service = providers.Factory(
        lambda ticket_repo: __import__(
            'src.core.tickets.use_cases',
            fromlist=['GetTicketService']
        ).GetTicketService(ticket_repo=ticket_repo),
        ticket_repo=ticket_repository,
    )

    update_roster_service = providers.Factory(
        lambda roster_repo, resolver, uow, history_limit: __import__(
            'src.core.roster.use_cases',
            fromlist=['UpdateRosterService']
        ).UpdateRosterService(
            roster_repo=roster_repo,
            resolver=resolver,
            uow=uow,
            history_limit=history_limit,
        ),
        roster_repo=roster_repository,
        resolver=member_profile_resolver,
        uow=unit_of_work,
        history_limit=config.roster_history_limit,
    )

    get_roster_snapshot_service = providers.Factory(
        lambda roster_repo, history_limit: __import__(
            'src.core.roster.use_cases',
            fromlist=['GetRosterSnapshotService']
        ).GetRosterSnapshotService(roster_repo=roster_repo, history_limit=history_limit),
        roster_repo=roster_repository,
        history_limit=config.roster_history_limit,
    )

    link_roster_card_service = providers.Factory(
        lambda roster_repo, uow: __import__(
            'src.core.roster.use_cases',
            fromlist=['LinkRosterCardService']
        ).LinkRosterCardService(roster_repo=roster_repo, uow=uow),
        roster_repo=roster_repository,
        uow=unit_of_work,
    )

    # =========================================================================
    # Activity Handler
    # =========================================================================

    activity_handler = providers.Factory(
        lambda **kwargs: __import__(
            'src.core.messaging.handlers',
            fromlist=['ActivityHandler']
        ).ActivityHandler(**kwargs),
        create_ticket=create_ticket_service,
        apply_transition=apply_transition_service,
        link_sme_card=link_sme_card_service,
        edit_ticket=edit_ticket_service,
        get_ticket=get_ticket_service,
        update_roster=update_roster_service,
        get_roster_snapshot=get_roster_snapshot_service,
        link_roster_card=link_roster_card_service,
        template_provider=template_provider,
        dispatcher=dispatcher,
        sme_conversation_id=config.sme_conversation_id,
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def config_from_settings() -> dict:
    """Converte settings.HELPDESK para as chaves do container."""
    from django.conf import settings

    helpdesk = getattr(settings, 'HELPDESK', {})
    return {key.lower(): value for key, value in helpdesk.items()}


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir (lazy initialization), configurado a partir
    de settings.HELPDESK.
    """
    global _container

    if _container is None:
        _container = Container()
        _container.config.from_dict({**DEFAULT_CONFIG, **config_from_settings()})

    return _container


def reset_container() -> None:
    """
    Reset do container (para testes).

    Permite criar novo container limpo.
    """
    global _container
    _container = None


# =============================================================================
# Testing Container
# =============================================================================

class TestingContainer(containers.DeclarativeContainer):
    """
    Implementações em memória para testes.

    Usado para sobrescrever (override) persistência, dispatcher e
    cache do Container; os services continuam sendo os mesmos.

    Example:
        container = create_testing_container()
        container.activity_handler().on_activity(activity)
        container.dispatcher().sent
    """

    event_publisher = providers.Singleton(
        lambda: __import__(
            'src.adapters.django_app.events.publishers',
            fromlist=['InMemoryEventPublisher']
        ).InMemoryEventPublisher()
    )

    dispatcher = providers.Singleton(
        lambda: __import__(
            'src.core.messaging.ports',
            fromlist=['InMemoryDispatcher']
        ).InMemoryDispatcher()
    )

    member_profile_cache = providers.Singleton(
        lambda: __import__(
            'src.core.roster.ports',
            fromlist=['InMemoryMemberProfileCache']
        ).InMemoryMemberProfileCache()
    )

    member_directory = providers.Singleton(
        lambda: __import__(
            'src.core.roster.ports',
            fromlist=['InMemoryMemberDirectory']
        ).InMemoryMemberDirectory()
    )

    ticket_repository = providers.Singleton(
        lambda: __import__(
            'src.core.tickets.ports',
            fromlist=['InMemoryTicketRepository']
        ).InMemoryTicketRepository()
    )

    ticket_id_generator = providers.Singleton(
        lambda: __import__(
            'src.core.tickets.ports',
            fromlist=['InMemoryTicketIdGenerator']
        ).InMemoryTicketIdGenerator()
    )

    template_provider = providers.Singleton(
        lambda: __import__(
            'src.core.tickets.ports',
            fromlist=['InMemoryTemplateProvider']
        ).InMemoryTemplateProvider()
    )

    roster_repository = providers.Singleton(
        lambda: __import__(
            'src.core.roster.ports',
            fromlist=['InMemoryRosterRepository']
        ).InMemoryRosterRepository()
    )

    unit_of_work = providers.Factory(
        lambda event_publisher: __import__(
            'src.adapters.django_app.shared.unit_of_work',
            fromlist=['InMemoryUnitOfWork']
        ).InMemoryUnitOfWork(event_publisher=event_publisher),
        event_publisher=event_publisher,
    )


def create_testing_container(config: Optional[dict] = None) -> Container:
    """
    Container principal com a infraestrutura trocada por TestingContainer.

    Args:
        config: Valores que substituem DEFAULT_CONFIG
    """
    container = Container()
    container.config.from_dict({**DEFAULT_CONFIG, **(config or {})})
    container.override(TestingContainer())
    return container

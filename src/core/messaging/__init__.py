"""
Mensageria - Roteamento de atividades e entrega de mensagens.

- ActivityHandler: roteia atividades da plataforma para os use cases
- Dispatcher: port de envio/atualização de mensagens
- Cards: montagem dos CardPayload entregues ao renderer
"""

from .dtos import (
    ActivityScope,
    ActivityType,
    CardPayload,
    ConversationRef,
    InboundActivity,
    MessageRef,
)
from .ports import Dispatcher, InMemoryDispatcher
from .handlers import ActivityHandler

__all__ = [
    "ActivityScope",
    "ActivityType",
    "CardPayload",
    "ConversationRef",
    "InboundActivity",
    "MessageRef",
    "Dispatcher",
    "InMemoryDispatcher",
    "ActivityHandler",
]

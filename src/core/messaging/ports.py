"""
Ports (Interfaces) de Mensageria.

O Core produz conteúdo e destinos; a entrega é responsabilidade
do Dispatcher implementado na camada de adapters.
"""

import itertools
from typing import Any, Iterable, List, Optional, Protocol, Sequence, Tuple, Union, runtime_checkable

from src.core.shared.exceptions import ConversationNotFoundError

from .dtos import CardPayload, ConversationRef, MessageRef

MessageContent = Union[str, CardPayload]


@runtime_checkable
class Dispatcher(Protocol):
    """
    Envio e atualização de mensagens no chat.

    Ambos os métodos lançam ConversationNotFoundError quando a
    conversa não existe mais; o chamador registra e continua.
    """

    def send_message(
        self,
        conversation: ConversationRef,
        content: MessageContent,
        entities: Optional[Sequence[Any]] = None,
    ) -> MessageRef:
        ...

    def update_message(self, message: MessageRef, card: CardPayload) -> MessageRef:
        ...


class InMemoryDispatcher:
    """
    Dispatcher para testes: registra chamadas e simula conversas removidas.

    Example:
        dispatcher = InMemoryDispatcher(missing_conversations=["conv-x"])
        dispatcher.send_message(ConversationRef("conv-x"), "oi")  # ConversationNotFoundError
    """

    def __init__(self, missing_conversations: Iterable[str] = ()):
        self.missing_conversations = set(missing_conversations)
        self.sent: List[Tuple[ConversationRef, MessageContent, List[Any]]] = []
        self.updated: List[Tuple[MessageRef, CardPayload]] = []
        self._ids = itertools.count(1)

    def send_message(self, conversation, content, entities=None) -> MessageRef:
        self._check(conversation.conversation_id)
        self.sent.append((conversation, content, list(entities or [])))
        return MessageRef(conversation.conversation_id, f"activity-{next(self._ids)}")

    def update_message(self, message, card) -> MessageRef:
        self._check(message.conversation_id)
        self.updated.append((message, card))
        return message

    def _check(self, conversation_id: str) -> None:
        if conversation_id in self.missing_conversations:
            raise ConversationNotFoundError(conversation_id)

    def texts_to(self, conversation_id: str) -> List[str]:
        return [
            content for conversation, content, _ in self.sent
            if conversation.conversation_id == conversation_id and isinstance(content, str)
        ]

    def cards_to(self, conversation_id: str) -> List[CardPayload]:
        return [
            content for conversation, content, _ in self.sent
            if conversation.conversation_id == conversation_id and isinstance(content, CardPayload)
        ]

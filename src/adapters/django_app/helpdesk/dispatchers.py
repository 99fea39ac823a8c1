"""
Dispatcher de desenvolvimento.

LoggingDispatcher registra cada envio/atualização em log e devolve
referências sintéticas, permitindo exercitar o fluxo completo sem a
plataforma de chat. A integração de produção fica fora deste repositório.
"""

from typing import Any, Optional, Sequence
import itertools
import json
import logging

from src.core.messaging.dtos import CardPayload, ConversationRef, MessageRef

logger = logging.getLogger(__name__)


class LoggingDispatcher:
    """Dispatcher que apenas loga mensagens."""

    def __init__(self, log_level: int = logging.INFO):
        self._log_level = log_level
        self._ids = itertools.count(1)

    def send_message(
        self,
        conversation: ConversationRef,
        content,
        entities: Optional[Sequence[Any]] = None,
    ) -> MessageRef:
        activity_id = f"local-{next(self._ids)}"
        logger.log(
            self._log_level,
            "[SEND] conversation=%s reply_to=%s activity=%s content=%s entities=%d",
            conversation.conversation_id,
            conversation.reply_to_id,
            activity_id,
            self._describe(content),
            len(entities or []),
        )
        return MessageRef(conversation.conversation_id, activity_id)

    def update_message(self, message: MessageRef, card: CardPayload) -> MessageRef:
        logger.log(
            self._log_level,
            "[UPDATE] conversation=%s activity=%s content=%s",
            message.conversation_id,
            message.activity_id,
            self._describe(card),
        )
        return message

    @staticmethod
    def _describe(content) -> str:
        if isinstance(content, CardPayload):
            return json.dumps(content.to_dict(), default=str)
        return str(content)

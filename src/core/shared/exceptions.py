"""
Exceções de Domínio do Remote Support.

Este módulo define exceções específicas do domínio que permitem
comunicar erros de forma clara e tipada entre as camadas.

Hierarquia:
    DomainException (base)
    ├── ValidationError (validação de entrada)
    │   ├── ValidationFailedError (campos do formulário de abertura)
    │   ├── InvalidSeverityError (rótulo de severidade desconhecido)
    │   └── UnknownTransitionError (comando de cartão desconhecido)
    ├── EntityNotFoundError (entidade não existe)
    │   └── TicketNotFoundError
    ├── BusinessRuleViolationError (regra de negócio violada)
    │   └── TicketAlreadyClosedError
    ├── PersistenceError (store recusou a gravação)
    ├── ConcurrencyError (versão do registro mudou)
    ├── ConversationNotFoundError (conversa de destino não existe)
    └── OperationCancelledError (requisição cancelada pelo transporte)
"""

from typing import Iterable, List


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Todas as exceções específicas do domínio devem herdar desta classe.
    Isso permite capturar qualquer erro de domínio de forma genérica.

    Example:
        try:
            engine.apply_transition(ticket, TransitionKind.CLOSE, actor)
        except DomainException as e:
            logger.error(f"Erro de domínio: {e}")
    """

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário (útil para APIs)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Lançada quando dados fornecidos não atendem aos requisitos
    mínimos para processamento.
    """

    def __init__(self, message: str, field: str = None, code: str = None):
        self.field = field
        if code is None:
            code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class ValidationFailedError(ValidationError):
    """
    Formulário de abertura de ticket incompleto.

    Carrega a lista de campos com problema para que o chamador
    renderize o cartão novamente com o indicador de erro em cada campo,
    em vez de abortar a conversa.

    Example:
        raise ValidationFailedError(["title", "description"])
    """

    def __init__(self, fields: Iterable[str]):
        self.fields: List[str] = list(fields)
        super().__init__(
            f"Campos obrigatórios ausentes ou inválidos: {', '.join(self.fields)}",
            code="VALIDATION_FAILED",
        )

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["fields"] = list(self.fields)
        return result


class InvalidSeverityError(ValidationError):
    """Rótulo de severidade fora do enum fixo."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(
            f"Severidade inválida: {label}",
            field="request_type",
            code="INVALID_SEVERITY",
        )


class UnknownTransitionError(ValidationError):
    """
    Comando de transição não reconhecido.

    Só é lançada na fronteira de desserialização do cartão; o roteador
    registra em log e ignora silenciosamente.
    """

    def __init__(self, command: str):
        self.command = command
        super().__init__(
            f"Comando de transição desconhecido: {command}",
            field="action",
            code="UNKNOWN_TRANSITION",
        )


class EntityNotFoundError(DomainException):
    """
    Entidade não encontrada no repositório.

    Lançada quando uma busca por ID não retorna resultado.
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class TicketNotFoundError(EntityNotFoundError):
    """Ticket referenciado pelo cartão não existe no store."""

    def __init__(self, ticket_id: str):
        super().__init__(
            f"Ticket {ticket_id} não encontrado",
            entity_type="Ticket",
            entity_id=ticket_id,
        )
        self.code = "TICKET_NOT_FOUND"


class BusinessRuleViolationError(DomainException):
    """
    Violação de regra de negócio.

    Lançada quando uma operação viola uma regra de negócio
    estabelecida no domínio.
    """

    def __init__(self, message: str, rule: str = None, code: str = None):
        self.rule = rule
        super().__init__(message, code or "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class TicketAlreadyClosedError(BusinessRuleViolationError):
    """
    Solicitante tentou alterar um ticket já fechado.

    A regra indica a operação recusada (retirada ou edição).
    """

    def __init__(self, ticket_id: str, rule: str = "ticket_fechado_nao_pode_ser_retirado"):
        self.ticket_id = ticket_id
        super().__init__(
            f"Ticket {ticket_id} já está fechado",
            rule=rule,
            code="TICKET_ALREADY_CLOSED",
        )


class PersistenceError(DomainException):
    """
    Store reportou falha ao gravar.

    A operação é tratada como não ocorrida: nenhuma notificação
    é enviada.
    """

    def __init__(self, message: str = "Falha ao gravar no armazenamento"):
        super().__init__(message, "PERSISTENCE_ERROR")


class ConcurrencyError(DomainException):
    """
    Erro de concorrência/conflito de versão.

    Lançada quando uma operação falha devido a modificação
    concorrente da entidade.

    Example:
        if stored.version != ticket.version:
            raise ConcurrencyError("Ticket foi modificado por outro processo")
    """

    def __init__(self, message: str):
        super().__init__(message, "CONCURRENCY_ERROR")


class ConversationNotFoundError(DomainException):
    """
    Conversa de destino não existe mais na plataforma.

    Durante a entrega de notificações é registrada em log e engolida;
    a mutação já persistida não é desfeita.
    """

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__(
            f"Conversa {conversation_id} não encontrada",
            "CONVERSATION_NOT_FOUND",
        )


class OperationCancelledError(DomainException):
    """Transporte cancelou a requisição antes da conclusão."""

    def __init__(self, message: str = "Operação cancelada"):
        super().__init__(message, "OPERATION_CANCELLED")

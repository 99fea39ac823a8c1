"""
Textos enviados ao chat.

Centraliza os textos de notificação do ciclo de vida para que
engine, handlers e testes usem a mesma fonte. A localização fica
a cargo do renderer externo; aqui ficam apenas os textos padrão.
"""

# Canal SME
SME_UNASSIGNED = "Ticket {ticket_id} unassigned by {actor}"
SME_CLOSED = "Ticket {ticket_id} closed by {actor}"
SME_ASSIGNED = "Ticket {ticket_id} assigned to {actor}"
SME_SEVERITY_SET = "Ticket {ticket_id} severity set to {request_type} by {actor}"
SME_WITHDRAWN = "Ticket {ticket_id} withdrawn by requester"
SME_EDITED = "Ticket {ticket_id} updated by {actor}"

# Solicitante
REQUESTER_REOPENED = "Your ticket {ticket_id} has been reopened"
REQUESTER_CLOSED = "Your ticket {ticket_id} has been closed"
REQUESTER_ASSIGNED = "Your ticket {ticket_id} has been assigned"
REQUESTER_UPDATED = "Your ticket {ticket_id} has been updated"
REQUESTER_CREATED = "Your ticket {ticket_id} has been submitted"

# Erros exibidos ao ator
ERROR_STORAGE = "We could not save your changes. Please try again later."
ERROR_CONCURRENCY = "This ticket was modified by someone else. Please try again."
ERROR_ALREADY_CLOSED = "Ticket {ticket_id} is already closed and cannot be withdrawn."
ERROR_EDIT_CLOSED = "Ticket {ticket_id} is closed and can no longer be edited."
ERROR_INVALID_SEVERITY = "'{label}' is not a valid request type."
ERROR_TICKET_NOT_FOUND = "Ticket {ticket_id} was not found."

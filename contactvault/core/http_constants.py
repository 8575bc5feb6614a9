"""Constantes HTTP du service : statuts, en-têtes de traçabilité et codes d'erreur par défaut.

Les codes par défaut servent aux `HTTPException` levées sans code métier (404 de routage,
422 de validation FastAPI) ; les erreurs métier portent leur propre code (`no_vault_access`...).
"""

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_NO_CONTENT = 204
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_METHOD_NOT_ALLOWED = 405
HTTP_CONFLICT = 409
HTTP_UNPROCESSABLE_ENTITY = 422
HTTP_INTERNAL_SERVER_ERROR = 500

# En-têtes posés par les middlewares
REQUEST_ID_HEADER = "X-Request-ID"
TRACE_ID_HEADER = "X-Trace-ID"
PROCESS_TIME_HEADER = "X-Process-Time-ms"

DEFAULT_ERROR_CODES = {
    HTTP_BAD_REQUEST: "BAD_REQUEST",
    HTTP_UNAUTHORIZED: "UNAUTHORIZED",
    HTTP_FORBIDDEN: "FORBIDDEN",
    HTTP_NOT_FOUND: "NOT_FOUND",
    HTTP_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    HTTP_CONFLICT: "CONFLICT",
    HTTP_UNPROCESSABLE_ENTITY: "VALIDATION_ERROR",
    HTTP_INTERNAL_SERVER_ERROR: "INTERNAL_ERROR",
}

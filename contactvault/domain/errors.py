"""Erreurs métier des ressources du coffre."""


class NotFoundError(Exception):
    """Ressource absente ou hors du périmètre du coffre demandé."""

    def __init__(self, entity: str, identifier: object | None = None) -> None:
        super().__init__(f"{entity} not found" if identifier is None else f"{entity} {identifier} not found")
        self.entity = entity
        self.code = f"{entity}_not_found"


class ConflictError(Exception):
    """Violation d'unicité ou d'invariant métier."""

    def __init__(self, code: str, message: str | None = None) -> None:
        super().__init__(message or code)
        self.code = code

"""
Niveaux de permission d'un utilisateur sur un coffre (vault).

Un numéro plus petit est plus privilégié : Manager (100) < Editor (200) < Viewer (300).
Une exigence R est satisfaite par un niveau effectif A si et seulement si A <= R.
"""

from __future__ import annotations

from enum import IntEnum


class VaultPermission(IntEnum):
    """Niveaux persistés dans `user_vault.permission`."""

    MANAGER = 100
    EDITOR = 200
    VIEWER = 300

    def satisfies(self, required: VaultPermission) -> bool:
        """Vrai si ce niveau suffit pour une route exigeant `required`."""
        return self <= required


class VaultAccessError(Exception):
    """Refus d'accès à un coffre ; `code` est renvoyé tel quel au client."""

    code = "vault_access_denied"
    status_code = 403

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)


class NoVaultAccess(VaultAccessError):
    """Aucune ligne de permission pour (utilisateur, coffre)."""

    code = "no_vault_access"


class InsufficientPermission(VaultAccessError):
    """Permission présente mais trop faible pour la route."""

    code = "insufficient_permissions"


class TwoFactorPending(VaultAccessError):
    """Jeton à demi authentifié (2FA non validée)."""

    code = "two_factor_required"


def check_vault_access(
    actual: int | None, required: VaultPermission, *, two_factor_pending: bool = False
) -> VaultPermission:
    """
    Applique la règle d'accès et retourne le niveau effectif.

    Raises:
        TwoFactorPending: si le jeton attend encore la validation 2FA (prioritaire).
        NoVaultAccess: si aucune permission n'est enregistrée, ou si elle ne correspond à aucun niveau
            connu.
        InsufficientPermission: si `actual > required`.
    """
    if two_factor_pending:
        raise TwoFactorPending()
    if actual is None:
        raise NoVaultAccess()
    try:
        level = VaultPermission(actual)
    except ValueError:
        raise NoVaultAccess(f"unknown permission level {actual}") from None
    if not level.satisfies(required):
        raise InsufficientPermission(
            f"permission {level.name.lower()} does not satisfy {required.name.lower()}"
        )
    return level


def strictest(*tiers: VaultPermission) -> VaultPermission:
    """Exigence effective d'une pile de gardes : la plus stricte (valeur minimale)."""
    return min(tiers)

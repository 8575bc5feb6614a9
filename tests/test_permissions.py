"""Tests des niveaux de permission des coffres et de la règle d'accès."""

import itertools

import pytest

from contactvault.domain.permissions import (
    InsufficientPermission,
    NoVaultAccess,
    TwoFactorPending,
    VaultPermission,
    check_vault_access,
    strictest,
)

TIERS = list(VaultPermission)


def test_lower_number_is_more_privileged():
    assert VaultPermission.MANAGER.satisfies(VaultPermission.VIEWER)
    assert VaultPermission.EDITOR.satisfies(VaultPermission.EDITOR)
    assert not VaultPermission.VIEWER.satisfies(VaultPermission.EDITOR)


@pytest.mark.parametrize("actual,required", list(itertools.product(TIERS, TIERS)))
def test_permission_monotonicity(actual, required):
    """Autorisé à R implique autorisé à tout R' >= R."""
    if not actual.satisfies(required):
        return
    for looser in TIERS:
        if looser >= required:
            assert check_vault_access(int(actual), looser) == actual


def test_missing_grant():
    with pytest.raises(NoVaultAccess) as exc:
        check_vault_access(None, VaultPermission.VIEWER)
    assert exc.value.code == "no_vault_access"


def test_insufficient_permission():
    with pytest.raises(InsufficientPermission) as exc:
        check_vault_access(300, VaultPermission.EDITOR)
    assert exc.value.code == "insufficient_permissions"
    assert exc.value.status_code == 403


def test_two_factor_pending_wins_over_grant():
    with pytest.raises(TwoFactorPending):
        check_vault_access(100, VaultPermission.VIEWER, two_factor_pending=True)


def test_strictest_requirement_of_a_stack():
    assert strictest(VaultPermission.VIEWER, VaultPermission.EDITOR) == VaultPermission.EDITOR
    assert strictest(VaultPermission.VIEWER) == VaultPermission.VIEWER


@pytest.mark.parametrize("stored", [0, 150, 400])
def test_unknown_stored_level_is_denied(stored):
    """Un niveau inconnu en base vaut absence d'accès, pas une erreur interne."""
    with pytest.raises(NoVaultAccess) as exc:
        check_vault_access(stored, VaultPermission.VIEWER)
    assert exc.value.code == "no_vault_access"

"""Tests for the access control evaluator."""

import pytest

from libregistry.errors import NotFound
from libregistry.registry import LibraryRegistry

OWNER = "0xowner"
LICENSED = "0xlicensed"
UNLICENSED = "0xunlicensed"


def _registry():
    registry = LibraryRegistry()
    registry.register_library("Licensed", "", [], False, "solidity", caller=OWNER)
    registry.set_library_license("Licensed", 100, True, caller=OWNER)
    registry.register_library("Private", "", [], True, "solidity", caller=OWNER)
    registry.register_library("Open", "", [], False, "any", caller=OWNER)
    registry.treasury.deposit(LICENSED, 100)
    registry.purchase_library_license("Licensed", 100, caller=LICENSED)
    return registry


def test_owner_always_has_access():
    registry = _registry()
    for name in ["Licensed", "Private", "Open"]:
        assert registry.has_access(name, OWNER) is True


def test_licensed_user_has_access_to_licensed_library():
    registry = _registry()
    assert registry.has_access("Licensed", LICENSED) is True


def test_unlicensed_user_denied_licensed_library():
    registry = _registry()
    assert registry.has_access("Licensed", UNLICENSED) is False
    assert registry.has_user_license("Licensed", UNLICENSED) is False


def test_license_for_public_library_does_not_open_private_one():
    registry = _registry()
    assert registry.has_access("Private", LICENSED) is False


def test_authorized_user_has_private_access_without_license():
    registry = _registry()
    registry.authorize_user("Private", UNLICENSED, caller=OWNER)

    assert registry.has_user_license("Private", UNLICENSED) is False
    assert registry.has_access("Private", UNLICENSED) is True


def test_open_library_grants_everyone():
    registry = _registry()
    assert registry.has_access("Open", LICENSED) is True
    assert registry.has_access("Open", UNLICENSED) is True


def test_fresh_public_library_open_before_any_version():
    registry = LibraryRegistry()
    registry.register_library("Lib", caller=OWNER)
    assert registry.get_version_numbers("Lib") == []
    assert registry.has_access("Lib", "0xanyone") is True


def test_license_made_optional_reopens_access():
    registry = _registry()
    registry.set_library_license("Licensed", 100, False, caller=OWNER)
    assert registry.has_access("Licensed", UNLICENSED) is True
    # The ledger itself is never unset.
    assert registry.has_user_license("Licensed", LICENSED) is True


def test_licensed_access_equals_ledger_for_non_owners():
    registry = _registry()
    for address in [LICENSED, UNLICENSED, "0xsomeone"]:
        assert registry.has_access("Licensed", address) == registry.has_user_license("Licensed", address)


def test_access_check_on_missing_library_fails():
    registry = _registry()
    with pytest.raises(NotFound):
        registry.has_access("Nope", OWNER)
    with pytest.raises(NotFound):
        registry.has_user_license("Nope", OWNER)

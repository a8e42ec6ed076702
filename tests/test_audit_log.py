"""Tests for the audit trail."""

import json
import tempfile
from pathlib import Path

import pytest

from libregistry.errors import NameConflict
from libregistry.registry import LibraryRegistry
from libregistry.security.audit_log import AuditLogger

OWNER = "0xowner"
BUYER = "0xbuyer"


def test_subscriber_records_committed_events():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogger(Path(tmpdir))
        registry = LibraryRegistry()
        registry.events.subscribe(audit.subscriber())

        registry.register_library("lib", "", [], False, "go", caller=OWNER)
        registry.set_library_license("lib", 5, True, caller=OWNER)
        registry.treasury.deposit(BUYER, 5)
        registry.purchase_library_license("lib", 5, caller=BUYER)

        events = audit.get_events()
        assert [e.action for e in events] == [
            "LicensePurchased",
            "LicenseConfigSet",
            "LibraryRegistered",
        ]
        purchase = events[0]
        assert purchase.actor == BUYER
        assert purchase.library == "lib"
        assert purchase.details == {"buyer": BUYER, "owner": OWNER, "fee": 5}


def test_rejected_operations_not_audited():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogger(Path(tmpdir))
        registry = LibraryRegistry()
        registry.events.subscribe(audit.subscriber())
        registry.register_library("lib", caller=OWNER)
        with pytest.raises(NameConflict):
            registry.register_library("lib", caller=BUYER)

        assert len(audit.get_events()) == 1


def test_filters_and_limit():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogger(Path(tmpdir))
        audit.log_event("alice", "LibraryRegistered", "a")
        audit.log_event("bob", "LibraryRegistered", "b")
        audit.log_event("alice", "LibraryDeleted", "a")

        assert len(audit.get_events(actor="alice")) == 2
        assert len(audit.get_events(action="LibraryRegistered")) == 2
        assert [e.actor for e in audit.get_events(library="b")] == ["bob"]
        assert len(audit.get_events(limit=1)) == 1


def test_export_formats():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogger(Path(tmpdir))
        audit.log_event("alice", "LibraryRegistered", "a")

        exported = json.loads(audit.export_events("json"))
        assert exported[0]["actor"] == "alice"

        csv = audit.export_events("csv").splitlines()
        assert csv[0] == "id,timestamp,actor,action,library"
        assert csv[1].endswith(",alice,LibraryRegistered,a")


def test_malformed_lines_skipped():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogger(Path(tmpdir))
        audit.log_event("alice", "LibraryRegistered", "a")
        (Path(tmpdir) / "1999-01-01.jsonl").write_text("{not json\n")

        assert len(audit.get_events()) == 1

"""Unit tests for QR payload parsing and scan resolution."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock
from permit_admin.errors import NotFoundError
from permit_admin.services.memory_repository import InMemoryPermitRepository
from permit_admin.services.qr_resolution import (
    ScanOutcome, build_permit_link, extract_permit_id, resolve_scan,
)


class TestExtractPermitId:
    @pytest.mark.parametrize("payload,expected", [
        ("abc-123", "abc-123"),
        ("  abc-123\n", "abc-123"),
        ("https://permits.example.com/permit/abc-123", "abc-123"),
        ("https://host/permit/abc-123/", "abc-123"),
        ("https://host/permit/abc-123?src=sticker", "abc-123"),
        ("https://host/permit/abc-123#top", "abc-123"),
        ("http://host:8080/app/permit/abc-123/details", "abc-123"),
        ("/permit/abc-123", "abc-123"),
    ])
    def test_extracts_id(self, payload, expected):
        assert extract_permit_id(payload) == expected

    def test_text_without_permit_segment_is_used_as_is(self):
        assert extract_permit_id("https://host/permits") == "https://host/permits"

    def test_empty_payload(self):
        assert extract_permit_id("") == ""
        assert extract_permit_id(None) == ""

    def test_build_link_round_trips(self):
        link = build_permit_link("abc-123", base_url="https://host/")
        assert link == "https://host/permit/abc-123"
        assert extract_permit_id(link) == "abc-123"


class TestResolveScan:
    def test_deep_link_and_bare_id_resolve_identically(self, admin, make_permit):
        permit = make_permit(lot_id="lot-a")
        repo = InMemoryPermitRepository([permit])

        via_link = resolve_scan("https://host/permit/" + permit.id, admin, repo)
        via_id = resolve_scan(permit.id, admin, repo)

        assert via_link.outcome == ScanOutcome.FOUND
        assert via_link.permit == permit
        assert via_id == via_link

    def test_stored_qr_identifier_resolves(self, admin, make_permit):
        permit = make_permit()
        result = resolve_scan(permit.qr_identifier, admin, InMemoryPermitRepository([permit]))
        assert result.found and result.permit.id == permit.id

    def test_unknown_id_is_not_found(self, admin):
        result = resolve_scan("missing", admin, InMemoryPermitRepository())
        assert result.outcome == ScanOutcome.NOT_FOUND
        assert result.permit is None
        assert result.permit_id == "missing"

    def test_permit_in_unassigned_lot_is_forbidden(self, viewer, make_permit):
        permit = make_permit(lot_id="lot-a")
        result = resolve_scan(permit.id, viewer, InMemoryPermitRepository([permit]))
        assert result.outcome == ScanOutcome.FORBIDDEN
        assert result.permit is None

    def test_assigned_viewer_can_scan(self, viewer, make_permit):
        permit = make_permit(lot_id="retail-1", permit_type="retail_tenant", occupant_status="employee")
        result = resolve_scan(permit.id, viewer, InMemoryPermitRepository([permit]))
        assert result.found

    def test_unauthenticated_scan_is_forbidden(self, make_permit):
        permit = make_permit()
        assert resolve_scan(permit.id, None, InMemoryPermitRepository([permit])).outcome == ScanOutcome.FORBIDDEN

    def test_empty_payload_skips_lookup(self, admin):
        repo = MagicMock()
        result = resolve_scan("   ", admin, repo)
        assert result.outcome == ScanOutcome.NOT_FOUND
        repo.get_by_id.assert_not_called()

    def test_repository_called_with_extracted_id(self, admin):
        repo = MagicMock()
        repo.get_by_id.side_effect = NotFoundError("Permit", "xyz")
        resolve_scan("https://host/permit/xyz?x=1", admin, repo)
        repo.get_by_id.assert_called_once_with("xyz")

"""Tests for grounding data models."""

import logging

import pytest

from keyterms.grounding.models import Claim, Document, VerifiedExtraction


# ── Document ─────────────────────────────────────────────────────────


def test_single_page_document():
    doc = Document.single_page("Net 30.")
    assert doc.page_offsets == (0, 7)
    assert doc.page_count == 1


def test_form_feed_pages():
    doc = Document.from_form_feeds("one\ftwo\fthree")
    assert doc.page_offsets == (0, 4, 8, 13)
    assert doc.page_count == 3


def test_form_feed_trailing_page_break():
    doc = Document.from_form_feeds("one\ftwo\f")
    assert doc.page_offsets == (0, 4, 8)
    assert doc.page_count == 2


def test_even_split_without_form_feeds():
    doc = Document.from_form_feeds("a" * 10, page_count=3)
    assert doc.page_offsets == (0, 4, 8, 10)


def test_no_page_information_is_single_page():
    doc = Document.from_form_feeds("plain text")
    assert doc.page_offsets == (0, 10)


def test_unsorted_offsets_sanitized(caplog):
    with caplog.at_level(logging.WARNING, logger="keyterms.grounding.models"):
        doc = Document(text="abcdefghij", page_offsets=[5, 0, 42])
    assert doc.page_offsets == (0, 5, 10)
    assert "violate" in caplog.text


def test_missing_bounds_added():
    doc = Document(text="abcdefghij", page_offsets=[3, 7])
    assert doc.page_offsets == (0, 3, 7, 10)
    assert doc.page_count == 3


def test_negative_offsets_clamped():
    doc = Document(text="abcdefghij", page_offsets=[-4, 6, 10])
    assert doc.page_offsets == (0, 6, 10)


def test_no_offsets_means_one_page():
    doc = Document(text="abc")
    assert doc.page_offsets == (0, 3)


def test_empty_document():
    doc = Document(text="")
    assert doc.page_offsets == (0, 0)
    assert doc.page_count == 1


def test_document_is_immutable():
    doc = Document.single_page("abc")
    with pytest.raises(Exception):
        doc.text = "changed"


def test_page_offsets_cannot_be_mutated():
    doc = Document.single_page("abc")
    assert isinstance(doc.page_offsets, tuple)
    with pytest.raises(AttributeError):
        doc.page_offsets.append(10)
    with pytest.raises(TypeError):
        doc.page_offsets[0] = 1


# ── Claim ────────────────────────────────────────────────────────────


def test_claim_defaults():
    claim = Claim(field="Payment", status="found", quote="Net 30.")
    assert claim.page is None
    assert claim.start is None
    assert claim.reasoning is None
    assert claim.confidence == 0.0


def test_claim_rejects_invalid_confidence():
    with pytest.raises(Exception):
        Claim(field="x", status="found", quote="y", confidence=1.5)


def test_claim_rejects_unknown_status():
    with pytest.raises(Exception):
        Claim(field="x", status="maybe", quote="y")


def test_not_found_extraction():
    ext = VerifiedExtraction.not_found("Tax", reasoning="absent")
    assert ext.status == "not_found"
    assert ext.quote == ""
    assert (ext.start, ext.end, ext.page) == (None, None, None)
    assert ext.confidence == 0.0
    assert ext.reasoning == "absent"

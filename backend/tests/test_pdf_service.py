"""Tests for the certificate PDF service."""

import sys
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import MagicMock, patch
from uuid import uuid4

from lms.domain.certificate import CertificateGrade, CertificateRecord, CertificateTemplate
from lms.services.pdf_service import PdfService, _format_date, _text


def _make_certificate(**overrides):  # type: ignore[no-untyped-def]
    defaults = {
        "certificate_id": "CERT-LZ3K9Q1A-7XQ2P",
        "student_id": uuid4(),
        "instructor_id": uuid4(),
        "course_id": uuid4(),
        "course_title": "Python Fundamentals",
        "completed_at": datetime(2025, 3, 14, 9, 0, tzinfo=UTC),
        "issued_at": datetime(2025, 3, 15, 10, 30, tzinfo=UTC),
        "duration": "600 minutes",
        "student_name": "Ada Lovelace",
        "instructor_name": "Grace Hopper",
        "verification_url": "https://lms.example.com/verify-certificate/CERT-LZ3K9Q1A-7XQ2P",
    }
    defaults.update(overrides)
    return CertificateRecord(**defaults)


def _patch_weasyprint():  # type: ignore[no-untyped-def]
    """Create a mock weasyprint module and patch it into sys.modules."""
    mock_weasyprint = MagicMock()
    mock_doc = MagicMock()
    mock_doc.write_pdf.return_value = b"%PDF-1.4 fake"
    mock_weasyprint.HTML.return_value = mock_doc
    return patch.dict(sys.modules, {"weasyprint": mock_weasyprint}), mock_weasyprint, mock_doc


class TestHelpers:
    def test_format_date_none(self) -> None:
        assert _format_date(None) == ""

    def test_format_date(self) -> None:
        assert _format_date(datetime(2025, 3, 15, 10, 30, tzinfo=UTC)) == "2025-03-15"

    def test_text_escapes_html(self) -> None:
        assert _text("<b>Ada & Co</b>") == "&lt;b&gt;Ada &amp; Co&lt;/b&gt;"
        assert _text(None) == ""


class TestRenderHtml:
    def test_contains_certificate_details(self) -> None:
        html = PdfService().render_certificate_html(
            _make_certificate(grade=CertificateGrade.A, score=Decimal("92.5"))
        )
        assert "Ada Lovelace" in html
        assert "Python Fundamentals" in html
        assert "Grace Hopper" in html
        assert "CERT-LZ3K9Q1A-7XQ2P" in html
        assert "92.5" in html
        assert "2025-03-14" in html
        assert "2025-03-15" in html
        assert "Verify at https://lms.example.com/verify-certificate/" in html

    def test_missing_score_and_url(self) -> None:
        html = PdfService().render_certificate_html(
            _make_certificate(verification_url=None, instructor_name=None)
        )
        assert "<strong>Score:</strong> -" in html
        assert "Verify at" not in html

    def test_template_changes_styling(self) -> None:
        service = PdfService()
        modern = service.render_certificate_html(_make_certificate())
        classic = service.render_certificate_html(
            _make_certificate(template=CertificateTemplate.CLASSIC)
        )
        assert "#1a73e8" in modern
        assert "double" in classic
        assert modern != classic

    def test_names_are_escaped(self) -> None:
        html = PdfService().render_certificate_html(
            _make_certificate(student_name="<script>alert(1)</script>")
        )
        assert "<script>" not in html


class TestGeneratePdf:
    def test_returns_pdf_bytes(self) -> None:
        patcher, mock_weasyprint, mock_doc = _patch_weasyprint()
        with patcher:
            result = PdfService().generate_certificate_pdf(_make_certificate())

        assert result == b"%PDF-1.4 fake"
        html = mock_weasyprint.HTML.call_args.kwargs["string"]
        assert "Ada Lovelace" in html
        mock_doc.write_pdf.assert_called_once()

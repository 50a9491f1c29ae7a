"""PDF generation service for certificates."""

from __future__ import annotations

from html import escape
from string import Template
from typing import TYPE_CHECKING

from lms.domain.certificate import CertificateTemplate

if TYPE_CHECKING:
    from lms.domain.certificate import CertificateRecord

_CERTIFICATE_TEMPLATE = Template("""\
<!DOCTYPE html>
<html>
<head>
<style>
  @page { size: A4 landscape; margin: 0; }
  body { font-family: ${font_family}; color: #222; margin: 0; }
  .frame { margin: 30px; padding: 50px 60px; border: 8px ${border_style} ${accent};
           height: 440px; text-align: center; }
  h1 { font-size: 40px; letter-spacing: 4px; text-transform: uppercase; color: ${accent};
       margin: 0 0 10px 0; }
  .subtitle { font-size: 14px; text-transform: uppercase; letter-spacing: 2px; color: #666; }
  .student { font-size: 32px; font-weight: bold; margin: 30px 0 10px 0; }
  .course { font-size: 22px; font-style: italic; margin: 10px 0 30px 0; }
  .details td { padding: 2px 12px; font-size: 12px; }
  .details { margin: 0 auto 30px auto; }
  .footer { display: flex; justify-content: space-between; font-size: 12px; margin-top: 40px; }
  .footer div { width: 45%; border-top: 1px solid #999; padding-top: 6px; }
  .verify { font-size: 10px; color: #888; margin-top: 20px; }
</style>
</head>
<body>
<div class="frame">
  <h1>Certificate</h1>
  <div class="subtitle">of completion</div>
  <div class="student">${student_name}</div>
  <div>has successfully completed</div>
  <div class="course">${course_title}</div>
  <table class="details">
    <tr><td><strong>Grade:</strong> ${grade}</td><td><strong>Score:</strong> ${score}</td>
        <td><strong>Duration:</strong> ${duration}</td></tr>
    <tr><td><strong>Completed:</strong> ${completed_at}</td>
        <td><strong>Issued:</strong> ${issued_at}</td><td></td></tr>
  </table>
  <div class="footer">
    <div>${instructor_name}<br>Instructor</div>
    <div>${certificate_id}<br>Certificate ID</div>
  </div>
  <div class="verify">${verification}</div>
</div>
</body>
</html>
""")

# accent colour, border style, font family
_TEMPLATE_STYLES = {
    CertificateTemplate.MODERN: ("#1a73e8", "solid", "Helvetica, Arial, sans-serif"),
    CertificateTemplate.CLASSIC: ("#8b6d1f", "double", "Georgia, 'Times New Roman', serif"),
    CertificateTemplate.MINIMAL: ("#333333", "solid", "Helvetica, Arial, sans-serif"),
    CertificateTemplate.PROFESSIONAL: ("#0b3d2e", "groove", "Garamond, Georgia, serif"),
}


def _format_date(dt: object) -> str:
    """Format a datetime to YYYY-MM-DD, or return empty string if None."""
    if dt is None:
        return ""
    return str(dt)[:10]


def _text(value: object) -> str:
    return escape(str(value)) if value is not None else ""


class PdfService:
    """Service for generating PDF documents."""

    def render_certificate_html(self, certificate: CertificateRecord) -> str:
        accent, border_style, font_family = _TEMPLATE_STYLES[certificate.template]
        verification = (
            f"Verify at {_text(certificate.verification_url)}"
            if certificate.verification_url
            else ""
        )
        return _CERTIFICATE_TEMPLATE.substitute(
            accent=accent,
            border_style=border_style,
            font_family=font_family,
            student_name=_text(certificate.student_name),
            course_title=_text(certificate.course_title),
            instructor_name=_text(certificate.instructor_name),
            grade=_text(certificate.grade.value),
            score=_text(certificate.score) or "-",
            duration=_text(certificate.duration),
            completed_at=_format_date(certificate.completed_at),
            issued_at=_format_date(certificate.issued_at),
            certificate_id=_text(certificate.certificate_id),
            verification=verification,
        )

    def generate_certificate_pdf(self, certificate: CertificateRecord) -> bytes:
        """Generate a PDF for a certificate.

        Args:
            certificate: The certificate to render, in the layout named by its template.

        Returns:
            Raw PDF bytes.
        """
        html = self.render_certificate_html(certificate)

        import weasyprint

        pdf_bytes: bytes = weasyprint.HTML(string=html).write_pdf()
        return pdf_bytes

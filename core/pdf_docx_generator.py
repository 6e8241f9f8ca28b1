import logging
import os
import tempfile
from typing import Any, List, Optional

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Pt, RGBColor
from docx2pdf import convert
from pydantic import ValidationError as PydanticValidationError

from .errors import RenderError, ValidationError
from .models import ResumeEntry, ResumeFormState

SUPPORTED_FORMATS = ("pdf", "docx")

ACCENT = RGBColor(0x25, 0x63, 0xEB)
HEADING = RGBColor(0x1E, 0x29, 0x3B)
MUTED = RGBColor(0x64, 0x74, 0x8B)
BODY = RGBColor(0x47, 0x55, 0x69)


class PdfDocxGenerator:
    """
    Lays out the structured resume form as a styled DOCX and converts that DOCX
    into a PDF.

    Rendering always happens inside a temporary directory; the caller only
    receives the finished bytes (or a RenderError), never a half-written file.
    """
    def __init__(self, form_state: ResumeFormState, display_name: Optional[str] = None):
        self.form = form_state
        self.display_name = (display_name or "").strip() or "Your Name"
        self.font_name = 'Helvetica'

    def _set_paragraph_border(self, paragraph, size: str = '4', color: str = 'E2E8F0'):
        p_pr = paragraph._p.get_or_add_pPr()
        p_bdr = OxmlElement('w:pBdr')
        p_pr.append(p_bdr)
        bottom_bdr = OxmlElement('w:bottom')
        bottom_bdr.set(qn('w:val'), 'single')
        bottom_bdr.set(qn('w:sz'), size)
        bottom_bdr.set(qn('w:space'), '1')
        bottom_bdr.set(qn('w:color'), color)
        p_bdr.append(bottom_bdr)

    def _contact_items(self) -> List[str]:
        contact = self.form.contact_info
        if contact is None:
            return []
        items = []
        if contact.email:
            items.append(f"📧 {contact.email}")
        if contact.mobile:
            items.append(f"📱 {contact.mobile}")
        if contact.linkedin:
            items.append("💼 LinkedIn")
        if contact.twitter:
            items.append("🐦 Twitter")
        return items

    def _add_header(self, doc):
        p = doc.add_paragraph()
        run = p.add_run(self.display_name)
        run.bold = True
        run.font.size = Pt(28)
        run.font.color.rgb = HEADING
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER
        p.paragraph_format.space_after = Pt(4)

        contacts = self._contact_items()
        p = doc.add_paragraph()
        if contacts:
            run = p.add_run("    ".join(contacts))
            run.font.size = Pt(10)
            run.font.color.rgb = MUTED
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER
        p.paragraph_format.space_after = Pt(12)
        self._set_paragraph_border(p, size='12', color='2563EB')

    def _add_section_title(self, doc, title: str):
        p = doc.add_paragraph()
        run = p.add_run(title)
        run.bold = True
        run.font.size = Pt(16)
        run.font.color.rgb = HEADING
        p.paragraph_format.space_before = Pt(10)
        p.paragraph_format.space_after = Pt(6)
        self._set_paragraph_border(p)

    def _add_paragraph_section(self, doc, title: str, text: Optional[str]):
        if not text or not text.strip():
            return
        self._add_section_title(doc, title)
        p = doc.add_paragraph(text.strip())
        p.alignment = WD_ALIGN_PARAGRAPH.JUSTIFY
        p.paragraph_format.space_after = Pt(8)

    def _add_entry(self, doc, title: str, organization: str, duration: Optional[str], description: Optional[str]):
        p = doc.add_paragraph()
        run = p.add_run(title)
        run.bold = True
        run.font.size = Pt(13)
        run.font.color.rgb = HEADING
        p.paragraph_format.space_after = Pt(0)

        if organization or duration:
            table = doc.add_table(rows=1, cols=2)
            table.autofit = False
            table.columns[0].width = Inches(5.0)
            table.columns[1].width = Inches(2.0)
            left_cell, right_cell = table.rows[0].cells

            left_p = left_cell.paragraphs[0]
            if organization:
                run = left_p.add_run(organization)
                run.italic = True
                run.font.color.rgb = ACCENT

            right_p = right_cell.paragraphs[0]
            if duration:
                run = right_p.add_run(duration)
                run.italic = True
                run.font.size = Pt(10)
                run.font.color.rgb = MUTED
            right_p.alignment = WD_ALIGN_PARAGRAPH.RIGHT

            for cell in (left_cell, right_cell):
                cell.paragraphs[0].paragraph_format.space_before = Pt(0)
                cell.paragraphs[0].paragraph_format.space_after = Pt(0)

        if description and description.strip():
            p = doc.add_paragraph()
            run = p.add_run(description.strip())
            run.font.size = Pt(10)
            run.font.color.rgb = BODY
            p.paragraph_format.space_before = Pt(4)
        doc.add_paragraph().paragraph_format.space_after = Pt(4)

    def _add_entries_section(self, doc, title: str, entries: Optional[List[ResumeEntry]], kind: str):
        if not entries:
            return
        self._add_section_title(doc, title)
        for entry in entries:
            if kind == "education":
                heading = entry.degree or entry.title or ""
                organization = entry.institution or entry.company or ""
            elif kind == "project":
                heading = entry.title or ""
                organization = ""
            else:
                heading = entry.title or "Job Title"
                organization = entry.company or "Company Name"
            self._add_entry(doc, heading, organization, entry.duration, entry.description)

    def to_docx(self, output_path: str):
        logging.info(f"Generating styled DOCX file at: {output_path}")
        doc = Document()
        for section in doc.sections:
            section.left_margin = Inches(0.55)
            section.right_margin = Inches(0.55)
            section.top_margin = Inches(0.55)
            section.bottom_margin = Inches(0.55)

        doc.styles['Normal'].font.name = self.font_name
        doc.styles['Normal'].font.size = Pt(11)

        self._add_header(doc)
        self._add_paragraph_section(doc, "Professional Summary", self.form.summary)
        self._add_paragraph_section(doc, "Skills", self.form.skills)
        self._add_entries_section(doc, "Work Experience", self.form.experience, "experience")
        self._add_entries_section(doc, "Education", self.form.education, "education")
        self._add_entries_section(doc, "Projects", self.form.projects, "project")

        doc.save(output_path)
        logging.info("Styled DOCX generation complete.")

    def to_pdf(self, output_path: str):
        """
        Creates the PDF by first generating a DOCX and then converting it.
        Conversion needs Microsoft Word (Windows/macOS) or a compatible office suite.
        """
        logging.info(f"Generating PDF at: {output_path}")

        with tempfile.TemporaryDirectory() as temp_dir:
            temp_docx_path = os.path.join(temp_dir, "temp_resume.docx")
            self.to_docx(temp_docx_path)
            convert(temp_docx_path, output_path)

        if not os.path.exists(output_path) or os.path.getsize(output_path) == 0:
            raise RenderError("PDF converter produced no output")
        logging.info("PDF generation complete.")

    def render(self, fmt: str = "pdf") -> bytes:
        """
        Renders the resume in `fmt` ("pdf" or "docx") and returns the file bytes.

        Raises:
            ValidationError: Unsupported format.
            RenderError: Layout or conversion failed; the underlying message is attached.
        """
        fmt = (fmt or "").lower()
        if fmt not in SUPPORTED_FORMATS:
            raise ValidationError(f"Unsupported export format '{fmt}'", field="format")

        with tempfile.TemporaryDirectory() as temp_dir:
            output_path = os.path.join(temp_dir, f"resume.{fmt}")
            try:
                if fmt == "pdf":
                    self.to_pdf(output_path)
                else:
                    self.to_docx(output_path)
                with open(output_path, "rb") as f:
                    return f.read()
            except RenderError:
                raise
            except Exception as e:
                logging.error(f"An error occurred during {fmt.upper()} generation: {e}")
                raise RenderError(str(e), details={"format": fmt}) from e


def render_resume(form_state: Any, display_name: Optional[str] = None, fmt: str = "pdf") -> bytes:
    """Validates raw form data and renders it. Used as the workflow's default renderer."""
    if not isinstance(form_state, ResumeFormState):
        try:
            form_state = ResumeFormState.model_validate(form_state or {})
        except PydanticValidationError as e:
            raise ValidationError(f"Malformed resume data: {e}", field="formState") from e
    return PdfDocxGenerator(form_state, display_name).render(fmt)

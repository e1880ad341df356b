"""
PDF and DOCX rendering for customized resumes and cover letters.

Both renderers consume the same section blocks (see `resume_blocks`) so the
two formats always carry identical text; only styling differs per template.
Rendered files are written to object storage and their public URLs returned.
"""
import logging
import re
import time
from io import BytesIO
from typing import List, Optional, Tuple
from xml.sax.saxutils import escape

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt, RGBColor
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import (
    BaseDocTemplate, Frame, FrameBreak, Image, NextPageTemplate, PageTemplate,
    Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
)

from resume_tailor.core.exceptions import AppException
from resume_tailor.schemas.customization import CustomizedResume, GeneratedFiles
from resume_tailor.services.storage import storage_get, storage_put
from resume_tailor.services.templates import (
    TemplateConfig, format_bullet, format_heading, get_template,
    group_skills_by_category, spacing_multiplier
)

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

PHOTO_SIZE = 100  # points
SIDEBAR_WIDTH = 5 * cm

# (kind, text) where kind is one of: text, bold, italic, bullet, gap
Block = Tuple[str, str]
Section = Tuple[str, List[Block]]


def sanitize_filename(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", name or "")[:50]


def build_file_key(kind: str, company_name: str, role_name: str, extension: str) -> str:
    """e.g. `resumes/CoverLetter_Acme_Backend_Engineer_1700000000000.pdf`."""
    timestamp = int(time.time() * 1000)
    return (
        f"resumes/{kind}_{sanitize_filename(company_name)}_"
        f"{sanitize_filename(role_name)}_{timestamp}.{extension}"
    )


def load_photo(photo_key: Optional[str]) -> Optional[bytes]:
    """Fetch the photo from storage; failures are logged and yield None."""
    if not photo_key:
        return None
    try:
        return storage_get(photo_key)
    except AppException as e:
        logger.warning(f"Failed to fetch photo {photo_key}: {e.message}")
        return None


def resume_blocks(resume: CustomizedResume, template: TemplateConfig, include_skills: bool = True) -> List[Section]:
    """Flatten a customized resume into ordered sections; empty sections are omitted."""
    sections: List[Section] = []

    if resume.summary.text:
        sections.append(("Professional Summary", [("text", resume.summary.text)]))

    if include_skills and resume.skills:
        sections.append(("Skills", [("text", " • ".join(resume.skills))]))

    if resume.experience:
        blocks: List[Block] = []
        for exp in resume.experience:
            blocks.append(("bold", exp.role))
            blocks.append(("italic", f"{exp.company} | {exp.duration}" if exp.duration else exp.company))
            blocks.extend(("bullet", format_bullet(b.text, template)) for b in exp.bullets if b.text)
            blocks.append(("gap", ""))
        sections.append(("Experience", blocks[:-1]))

    if resume.projects:
        blocks = []
        for project in resume.projects:
            blocks.append(("bold", project.name))
            if project.description:
                blocks.append(("text", project.description))
            if project.technologies:
                blocks.append(("italic", f"Technologies: {', '.join(project.technologies)}"))
            blocks.append(("gap", ""))
        sections.append(("Projects", blocks[:-1]))

    if resume.education:
        blocks = []
        for edu in resume.education:
            blocks.append(("bold", edu.degree))
            blocks.append(("text", " | ".join(p for p in (edu.institution, edu.field, edu.year) if p)))
        sections.append(("Education", blocks))

    return sections


# --- PDF ---

class PDFRenderer:
    """ReportLab renderer styled from a TemplateConfig."""

    def __init__(self, template: TemplateConfig):
        self.template = template
        serif = template.font_family == "serif"
        self.font = "Times-Roman" if serif else "Helvetica"
        self.font_bold = "Times-Bold" if serif else "Helvetica-Bold"
        self.font_italic = "Times-Italic" if serif else "Helvetica-Oblique"
        self.spacing = spacing_multiplier(template)

        styles = getSampleStyleSheet()
        text_color = colors.HexColor(template.colors.text)
        self.title = ParagraphStyle(
            name="ResumeTitle", parent=styles["Title"], fontName=self.font_bold,
            fontSize=20, textColor=colors.HexColor(template.colors.heading), spaceAfter=8,
        )
        self.heading = ParagraphStyle(
            name="SectionHeading", parent=styles["Heading2"], fontName=self.font_bold,
            fontSize=12, textColor=colors.HexColor(template.colors.heading),
            spaceBefore=10 * self.spacing, spaceAfter=4,
        )
        self.styles = {
            "text": ParagraphStyle(name="Body", parent=styles["BodyText"], fontName=self.font,
                                   fontSize=10, leading=13, textColor=text_color),
            "bold": ParagraphStyle(name="Strong", parent=styles["BodyText"], fontName=self.font_bold,
                                   fontSize=10.5, leading=13, textColor=text_color),
            "italic": ParagraphStyle(name="Meta", parent=styles["BodyText"], fontName=self.font_italic,
                                     fontSize=9.5, leading=12, textColor=text_color),
            "bullet": ParagraphStyle(name="Bullet", parent=styles["BodyText"], fontName=self.font,
                                     fontSize=10, leading=13, leftIndent=12, textColor=text_color),
        }

    def section(self, title: str, blocks: List[Block]) -> List:
        flow: List = [Paragraph(self._markup(format_heading(title, self.template)), self.heading)]
        for kind, text in blocks:
            if kind == "gap":
                flow.append(Spacer(1, 6 * self.spacing))
            else:
                flow.append(Paragraph(self._markup(text), self.styles[kind]))
        return flow

    def photo(self, photo: Optional[bytes]) -> Optional[Image]:
        if not photo:
            return None
        try:
            ImageReader(BytesIO(photo)).getSize()
        except Exception as e:
            logger.warning(f"Skipping unreadable photo: {e}")
            return None
        return Image(BytesIO(photo), width=PHOTO_SIZE, height=PHOTO_SIZE, kind="proportional")

    def render_resume(self, resume: CustomizedResume, photo: Optional[bytes] = None) -> bytes:
        if self.template.layout == "sidebar":
            return self._render_sidebar(resume, photo)

        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer, pagesize=A4,
            topMargin=1.5 * cm, bottomMargin=1.5 * cm,
            leftMargin=1.8 * cm, rightMargin=1.8 * cm,
            title="Resume",
        )
        flow: List = []
        title = Paragraph("RESUME", self.title)
        image = self.photo(photo)
        if image is not None:
            # Title left, photo top-right
            header = Table([[title, image]], colWidths=[doc.width - PHOTO_SIZE - 10, PHOTO_SIZE + 10])
            header.setStyle(TableStyle([
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("ALIGN", (1, 0), (1, 0), "RIGHT"),
            ]))
            flow.append(header)
        else:
            flow.append(title)

        for heading, blocks in resume_blocks(resume, self.template):
            flow += self.section(heading, blocks)

        doc.build(flow)
        return buffer.getvalue()

    def _render_sidebar(self, resume: CustomizedResume, photo: Optional[bytes]) -> bytes:
        buffer = BytesIO()
        doc = BaseDocTemplate(
            buffer, pagesize=A4,
            topMargin=1.5 * cm, bottomMargin=1.5 * cm,
            leftMargin=1.5 * cm, rightMargin=1.5 * cm,
            title="Resume",
        )
        gutter = 0.6 * cm
        side = Frame(doc.leftMargin, doc.bottomMargin, SIDEBAR_WIDTH, doc.height, id="sidebar")
        main = Frame(
            doc.leftMargin + SIDEBAR_WIDTH + gutter, doc.bottomMargin,
            doc.width - SIDEBAR_WIDTH - gutter, doc.height, id="main",
        )
        full = Frame(doc.leftMargin, doc.bottomMargin, doc.width, doc.height, id="full")

        def draw_sidebar(canvas, document):
            canvas.saveState()
            canvas.setFillColor(colors.HexColor(self.template.colors.accent))
            canvas.rect(document.leftMargin - 0.3 * cm, 0, SIDEBAR_WIDTH + 0.6 * cm, A4[1], stroke=0, fill=1)
            canvas.restoreState()

        doc.addPageTemplates([
            PageTemplate(id="first", frames=[side, main], onPage=draw_sidebar),
            PageTemplate(id="later", frames=[full]),
        ])

        flow: List = [NextPageTemplate("later")]
        image = self.photo(photo)
        if image is not None:
            flow += [image, Spacer(1, 12)]

        grouped = group_skills_by_category(resume.skills)
        if grouped:
            blocks: List[Block] = []
            for category, skills in grouped.items():
                blocks += [("bold", f"{category}:"), ("text", ", ".join(skills)), ("gap", "")]
            flow += self.section("Technical Skills", blocks[:-1])

        flow.append(FrameBreak())
        flow.append(Paragraph("RESUME", self.title))
        for heading, blocks in resume_blocks(resume, self.template, include_skills=False):
            flow += self.section(heading, blocks)

        doc.build(flow)
        return buffer.getvalue()

    def render_cover_letter(self, letter: str) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer, pagesize=A4,
            topMargin=2 * cm, bottomMargin=2 * cm,
            leftMargin=2 * cm, rightMargin=2 * cm,
            title="Cover Letter",
        )
        flow: List = [Paragraph("COVER LETTER", self.title), Spacer(1, 0.4 * cm)]
        for paragraph in split_paragraphs(letter):
            flow.append(Paragraph(self._markup(paragraph), self.styles["text"]))
            flow.append(Spacer(1, 0.3 * cm))
        doc.build(flow)
        return buffer.getvalue()

    @staticmethod
    def _markup(text: str) -> str:
        return escape(text).replace("\n", "<br/>")


def split_paragraphs(text: str) -> List[str]:
    """Blank-line separated paragraphs, stripped, empties dropped."""
    return [p.strip() for p in re.split(r"\n\s*\n", text or "") if p.strip()]


# --- DOCX ---

def _docx_color(hex_color: str) -> RGBColor:
    return RGBColor.from_string(hex_color.lstrip("#").upper())


def _docx_base(template: TemplateConfig):
    document = Document()
    normal = document.styles["Normal"]
    normal.font.name = "Times New Roman" if template.font_family == "serif" else "Arial"
    normal.font.size = Pt(10.5)
    return document


def _docx_title(container, text: str, template: TemplateConfig) -> None:
    run = container.add_paragraph().add_run(text)
    run.bold = True
    run.font.size = Pt(20)
    run.font.color.rgb = _docx_color(template.colors.heading)


def _docx_section(container, title: str, blocks: List[Block], template: TemplateConfig) -> None:
    heading = container.add_paragraph()
    heading.paragraph_format.space_before = Pt(10 * spacing_multiplier(template))
    run = heading.add_run(format_heading(title, template))
    run.bold = True
    run.font.size = Pt(12)
    run.font.color.rgb = _docx_color(template.colors.heading)

    for kind, text in blocks:
        paragraph = container.add_paragraph()
        if kind == "gap":
            continue
        run = paragraph.add_run(text)
        run.bold = kind == "bold"
        run.italic = kind == "italic"
        if kind == "bullet":
            paragraph.paragraph_format.left_indent = Inches(0.2)


def _docx_picture(paragraph, photo: Optional[bytes]) -> bool:
    if not photo:
        return False
    try:
        paragraph.add_run().add_picture(BytesIO(photo), width=Inches(1.3))
    except Exception as e:
        logger.warning(f"Skipping unreadable photo: {e}")
        return False
    return True


def _docx_bytes(document) -> bytes:
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def render_resume_docx(resume: CustomizedResume, template: TemplateConfig, photo: Optional[bytes] = None) -> bytes:
    document = _docx_base(template)

    if template.layout == "sidebar":
        table = document.add_table(rows=1, cols=2)
        side, main = table.rows[0].cells
        side.width, main.width = Inches(2.0), Inches(4.8)
        _docx_picture(side.paragraphs[0], photo)
        grouped = group_skills_by_category(resume.skills)
        if grouped:
            blocks: List[Block] = []
            for category, skills in grouped.items():
                blocks += [("bold", f"{category}:"), ("text", ", ".join(skills))]
            _docx_section(side, "Technical Skills", blocks, template)
        _docx_title(main, "RESUME", template)
        for heading, blocks in resume_blocks(resume, template, include_skills=False):
            _docx_section(main, heading, blocks, template)
        return _docx_bytes(document)

    photo_paragraph = document.add_paragraph()
    if _docx_picture(photo_paragraph, photo):
        photo_paragraph.alignment = WD_ALIGN_PARAGRAPH.RIGHT
    _docx_title(document, "RESUME", template)
    for heading, blocks in resume_blocks(resume, template):
        _docx_section(document, heading, blocks, template)
    return _docx_bytes(document)


def render_cover_letter_docx(letter: str, template: TemplateConfig) -> bytes:
    document = _docx_base(template)
    _docx_title(document, "COVER LETTER", template)
    for paragraph in split_paragraphs(letter):
        document.add_paragraph(paragraph)
    return _docx_bytes(document)


# --- Upload wrappers ---

def generate_resume_pdf(
    resume: CustomizedResume,
    company_name: str,
    role_name: str,
    template_id: Optional[str] = None,
    photo_key: Optional[str] = None
) -> str:
    data = PDFRenderer(get_template(template_id)).render_resume(resume, load_photo(photo_key))
    return storage_put(build_file_key("Resume", company_name, role_name, "pdf"), data, PDF_MIME)["url"]


def generate_resume_docx(
    resume: CustomizedResume,
    company_name: str,
    role_name: str,
    template_id: Optional[str] = None,
    photo_key: Optional[str] = None
) -> str:
    data = render_resume_docx(resume, get_template(template_id), load_photo(photo_key))
    return storage_put(build_file_key("Resume", company_name, role_name, "docx"), data, DOCX_MIME)["url"]


def generate_cover_letter_pdf(letter: str, company_name: str, role_name: str, template_id: Optional[str] = None) -> str:
    data = PDFRenderer(get_template(template_id)).render_cover_letter(letter)
    return storage_put(build_file_key("CoverLetter", company_name, role_name, "pdf"), data, PDF_MIME)["url"]


def generate_cover_letter_docx(letter: str, company_name: str, role_name: str, template_id: Optional[str] = None) -> str:
    data = render_cover_letter_docx(letter, get_template(template_id))
    return storage_put(build_file_key("CoverLetter", company_name, role_name, "docx"), data, DOCX_MIME)["url"]


def generate_all_files(
    resume: CustomizedResume,
    cover_letter: str,
    company_name: str,
    role_name: str,
    template_id: Optional[str] = None,
    photo_key: Optional[str] = None
) -> GeneratedFiles:
    """Render and upload all four documents for one customization."""
    logger.info(f"Generating files for {company_name} / {role_name} (template={template_id or 'classic'})")
    return GeneratedFiles(
        resume_pdf_url=generate_resume_pdf(resume, company_name, role_name, template_id, photo_key),
        resume_docx_url=generate_resume_docx(resume, company_name, role_name, template_id, photo_key),
        cover_letter_pdf_url=generate_cover_letter_pdf(cover_letter, company_name, role_name, template_id),
        cover_letter_docx_url=generate_cover_letter_docx(cover_letter, company_name, role_name, template_id),
    )

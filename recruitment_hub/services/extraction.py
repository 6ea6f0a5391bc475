import io
import re

from docx import Document
from pypdf import PdfReader

from recruitment_hub.core.enums import MediaType
from recruitment_hub.core.errors import ExtractionError, UnsupportedFormatError
from recruitment_hub.core.logging import get_logger
from recruitment_hub.core.models import UploadedDocument

logger = get_logger(__name__)

SUPPORTED_EXTENSIONS = ".txt, .pdf, or .docx"


def _base_media_type(document: UploadedDocument) -> str:
    return document.media_type.split(";", 1)[0].strip().lower()


def _is_docx(document: UploadedDocument) -> bool:
    return _base_media_type(document) == MediaType.DOCX.value or document.filename.lower().endswith(".docx")


def _extract_pdf_text(content: bytes) -> str:
    reader = PdfReader(io.BytesIO(content))
    pages = []
    for page in reader.pages:
        pages.append(page.extract_text() or "")
    return "\n\n".join(pages).strip()


def _extract_docx_text(content: bytes) -> str:
    document = Document(io.BytesIO(content))
    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append(" | ".join(cell.text for cell in row.cells))
    return "\n".join(lines).strip()


def _decode_plain_text(content: bytes) -> str:
    text = content.decode("utf-8-sig", errors="replace")
    return text.replace("\r\n", "\n").strip()


def extract_text(document: UploadedDocument) -> str:
    media_type = _base_media_type(document)
    if media_type == MediaType.PDF.value:
        try:
            text = _extract_pdf_text(document.content)
        except Exception as exc:
            # pypdf raises a mix of PdfReadError, ValueError and struct errors on damaged files.
            logger.warning(
                "PDF extraction failed",
                extra={"extra": {"filename": document.filename, "error": str(exc)}},
            )
            raise ExtractionError("Failed to parse PDF file.") from exc
    elif _is_docx(document):
        try:
            text = _extract_docx_text(document.content)
        except Exception as exc:
            logger.warning(
                "DOCX extraction failed",
                extra={"extra": {"filename": document.filename, "error": str(exc)}},
            )
            raise ExtractionError("Failed to parse DOCX file.") from exc
    elif media_type == MediaType.PLAIN_TEXT.value:
        text = _decode_plain_text(document.content)
    else:
        raise UnsupportedFormatError(
            f"Unsupported file type: {document.filename}. Please upload {SUPPORTED_EXTENSIONS} files."
        )

    if not re.search(r"\S", text):
        raise ExtractionError(f"No readable text found in {document.filename}.")
    return text

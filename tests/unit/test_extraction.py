import io

import pytest
from docx import Document
from pypdf import PdfWriter

from recruitment_hub.core.errors import ExtractionError, UnsupportedFormatError
from recruitment_hub.core.models import UploadedDocument
from recruitment_hub.services.extraction import extract_text

DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _docx_bytes(*paragraphs: str) -> bytes:
    document = Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _blank_pdf_bytes() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def test_plain_text_is_decoded_and_normalized():
    document = UploadedDocument(
        filename="jane.txt",
        content="\ufeffJane Doe\r\njane@example.com\r\n".encode("utf-8"),
        media_type="text/plain; charset=utf-8",
    )

    assert extract_text(document) == "Jane Doe\njane@example.com"


def test_docx_paragraphs_are_extracted():
    document = UploadedDocument(
        filename="jane.docx",
        content=_docx_bytes("Jane Doe", "Skills: Go, Kafka"),
        media_type=DOCX_TYPE,
    )

    text = extract_text(document)

    assert "Jane Doe" in text
    assert "Skills: Go, Kafka" in text


def test_docx_is_recognized_by_extension_when_type_is_generic():
    document = UploadedDocument(
        filename="Jane.DOCX",
        content=_docx_bytes("Jane Doe"),
        media_type="application/octet-stream",
    )

    assert extract_text(document) == "Jane Doe"


def test_unsupported_type_is_rejected_with_file_name():
    document = UploadedDocument(filename="photo.png", content=b"\x89PNG", media_type="image/png")

    with pytest.raises(UnsupportedFormatError) as exc:
        extract_text(document)

    assert str(exc.value) == "Unsupported file type: photo.png. Please upload .txt, .pdf, or .docx files."


def test_corrupt_pdf_raises_extraction_error():
    document = UploadedDocument(filename="cv.pdf", content=b"definitely not a pdf", media_type="application/pdf")

    with pytest.raises(ExtractionError) as exc:
        extract_text(document)

    assert str(exc.value) == "Failed to parse PDF file."


def test_corrupt_docx_raises_extraction_error():
    document = UploadedDocument(filename="cv.docx", content=b"not a zip", media_type=DOCX_TYPE)

    with pytest.raises(ExtractionError) as exc:
        extract_text(document)

    assert str(exc.value) == "Failed to parse DOCX file."


def test_document_without_text_raises_extraction_error():
    document = UploadedDocument(filename="scan.pdf", content=_blank_pdf_bytes(), media_type="application/pdf")

    with pytest.raises(ExtractionError) as exc:
        extract_text(document)

    assert str(exc.value) == "No readable text found in scan.pdf."

from __future__ import annotations

from io import BytesIO

import pytest

from src.loaders.pdf import clean_pdf_text
from src.loaders.resume import ResumeLoaderError, load_resume_bytes, resolve_suffix


def test_text_resume_is_decoded() -> None:
    document = load_resume_bytes(b"Alice\r\nGo developer\r\n", candidate_id="c1", filename="cv.txt")
    assert document.content == "Alice\nGo developer"
    assert document.metadata["candidate_id"] == "c1"
    assert document.metadata["source_type"] == "txt"


def test_suffix_falls_back_to_content_type() -> None:
    assert resolve_suffix(None, "application/pdf") == ".pdf"
    assert resolve_suffix("resume.DOCX", "text/plain") == ".docx"
    assert resolve_suffix("resume", "text/plain; charset=utf-8") == ".txt"


def test_unsupported_type_is_rejected() -> None:
    with pytest.raises(ResumeLoaderError):
        load_resume_bytes(b"\x00\x01", candidate_id="c1", filename="photo.png")


def test_blank_text_is_rejected() -> None:
    with pytest.raises(ResumeLoaderError):
        load_resume_bytes(b"   \n  ", candidate_id="c1", filename="cv.txt")


def test_docx_resume_reads_paragraphs_and_tables() -> None:
    docx = pytest.importorskip("docx")
    doc = docx.Document()
    doc.add_paragraph("Alice Example")
    table = doc.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Go"
    table.rows[0].cells[1].text = "5 years"
    buffer = BytesIO()
    doc.save(buffer)

    document = load_resume_bytes(buffer.getvalue(), candidate_id="c1", filename="cv.docx")
    assert document.content == "Alice Example\nGo | 5 years"
    assert document.metadata["source_type"] == "docx"


def test_corrupt_docx_is_rejected() -> None:
    pytest.importorskip("docx")
    with pytest.raises(ResumeLoaderError):
        load_resume_bytes(b"not a zip", candidate_id="c1", filename="cv.docx")


def test_pdf_resume_is_extracted() -> None:
    fitz = pytest.importorskip("fitz")
    pdf = fitz.open()
    page = pdf.new_page()
    page.insert_text((72, 72), "Alice has 5 years of Go experience.")
    data = pdf.tobytes()
    pdf.close()

    document = load_resume_bytes(data, candidate_id="c1", filename="cv.pdf")
    assert "Alice has 5 years of Go experience." in document.content
    assert document.metadata["page_count"] == 1


def test_clean_pdf_text_joins_hyphenated_breaks() -> None:
    assert clean_pdf_text("Kuber-\nnetes   and\t\tGo\n\n\n\nPython") == "Kubernetes and Go\n\nPython"

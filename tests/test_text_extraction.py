import pytest

from conftest import make_pdf_bytes
from statements import text_extraction
from statements.text_extraction import extract_text, extract_text_from_content_streams


def test_content_stream_scan_one_line_per_block():
    pdf = make_pdf_bytes("PERIODE : NOVEMBER 2025\n05/11 TRSF 0123 250,000.00 DB 750,000.00")
    text = extract_text_from_content_streams(pdf)
    assert text.split("\n") == [
        "PERIODE : NOVEMBER 2025 ",
        "05/11 TRSF 0123 250,000.00 DB 750,000.00 ",
        "",
    ]


def test_content_stream_scan_joins_operands_in_block():
    pdf = b"%PDF-1.4\nBT /F1 9 Tf [(05/11) -200 (SETORAN)] TJ (100.00) Tj ET\n%%EOF"
    assert extract_text_from_content_streams(pdf) == "05/11 SETORAN 100.00 \n"


@pytest.mark.parametrize("content", [b"", b"not a pdf at all", bytes(range(256)), b"BT ET BT"])
def test_content_stream_scan_never_raises(content):
    assert isinstance(extract_text_from_content_streams(content), str)


def test_content_stream_scan_without_text_blocks_is_empty():
    assert extract_text_from_content_streams(b"%PDF-1.7\n1 0 obj\n<< /Filter /FlateDecode >>\nstream\nx\x9c\x03\x00endstream") == ""


def test_auto_falls_back_when_pdfplumber_fails(monkeypatch):
    def boom(content, max_pages=None):
        raise ValueError("broken xref")

    monkeypatch.setattr(text_extraction, "extract_text_with_pdfplumber", boom)
    pdf = make_pdf_bytes("05/11 TRSF 100.00")
    assert extract_text(pdf, backend="auto") == "05/11 TRSF 100.00 \n"


def test_auto_falls_back_when_pdfplumber_finds_nothing(monkeypatch):
    monkeypatch.setattr(text_extraction, "extract_text_with_pdfplumber", lambda content, max_pages=None: "  \n")
    pdf = make_pdf_bytes("05/11 TRSF 100.00")
    assert extract_text(pdf, backend="auto") == "05/11 TRSF 100.00 \n"


def test_auto_prefers_pdfplumber_text(monkeypatch):
    monkeypatch.setattr(text_extraction, "extract_text_with_pdfplumber", lambda content, max_pages=None: "from plumber")
    assert extract_text(b"%PDF", backend="auto") == "from plumber"


def test_unknown_backend_rejected():
    with pytest.raises(ValueError):
        extract_text(b"%PDF", backend="ocr")

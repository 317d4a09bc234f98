import pytest

from app.config.settings import Settings
from app.ocr.exceptions import PdfExtractionError
from app.ocr.factory import PageExtractorFactory
from app.ocr.pdfplumber_adapter import PdfPlumberPageExtractor
from app.ocr.pymupdf_adapter import PyMuPdfPageExtractor

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.fixture(params=[PdfPlumberPageExtractor, PyMuPdfPageExtractor])
def extractor(request: pytest.FixtureRequest) -> PdfPlumberPageExtractor | PyMuPdfPageExtractor:
    return request.param(dpi=72)


class TestPageExtractors:
    def test_single_page_text_layer(
        self, extractor: PdfPlumberPageExtractor | PyMuPdfPageExtractor, sample_pdf_bytes: bytes
    ) -> None:
        pages = extractor.extract_pages(sample_pdf_bytes)
        assert len(pages) == 1
        assert "Hello PDF World" in pages[0].text_layer
        assert pages[0].index == 0

    def test_renders_png(
        self, extractor: PdfPlumberPageExtractor | PyMuPdfPageExtractor, sample_pdf_bytes: bytes
    ) -> None:
        page = extractor.extract_pages(sample_pdf_bytes)[0]
        assert page.image_bytes.startswith(PNG_SIGNATURE)
        assert page.width > 0
        assert page.height > 0

    def test_multi_page_in_order(
        self,
        extractor: PdfPlumberPageExtractor | PyMuPdfPageExtractor,
        multi_page_pdf_bytes: bytes,
    ) -> None:
        pages = extractor.extract_pages(multi_page_pdf_bytes)
        assert [page.index for page in pages] == [0, 1]
        assert "Page one content" in pages[0].text_layer
        assert "Page two content" in pages[1].text_layer

    def test_blank_page_has_empty_text_layer(
        self, extractor: PdfPlumberPageExtractor | PyMuPdfPageExtractor, empty_pdf_bytes: bytes
    ) -> None:
        pages = extractor.extract_pages(empty_pdf_bytes)
        assert len(pages) == 1
        assert pages[0].text_layer == ""

    def test_raises_on_invalid_bytes(
        self, extractor: PdfPlumberPageExtractor | PyMuPdfPageExtractor
    ) -> None:
        with pytest.raises(PdfExtractionError):
            extractor.extract_pages(b"not a pdf")


class TestPageExtractorFactory:
    def test_creates_pymupdf(self) -> None:
        assert isinstance(
            PageExtractorFactory.create(Settings(pdf_engine="pymupdf")), PyMuPdfPageExtractor
        )

    def test_creates_pdfplumber(self) -> None:
        assert isinstance(
            PageExtractorFactory.create(Settings(pdf_engine="PDFPlumber")), PdfPlumberPageExtractor
        )

    def test_unknown_engine_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown PDF engine"):
            PageExtractorFactory.create(Settings(pdf_engine="tesseract"))

import pymupdf

from app.ocr.base import BasePageExtractor
from app.ocr.exceptions import PdfExtractionError
from app.ocr.models import DocumentPage


class PyMuPdfPageExtractor(BasePageExtractor):
    """Renders PDF pages with PyMuPDF."""

    def __init__(self, dpi: int = 200) -> None:
        self._dpi = dpi

    def extract_pages(self, document_bytes: bytes) -> list[DocumentPage]:
        try:
            with pymupdf.open(stream=document_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return [self._render(index, page) for index, page in enumerate(doc)]
        except PdfExtractionError:
            raise
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf extraction failed: {exc}") from exc

    def _render(self, index: int, page: pymupdf.Page) -> DocumentPage:
        pixmap = page.get_pixmap(dpi=self._dpi)
        return DocumentPage(
            index=index,
            width=pixmap.width,
            height=pixmap.height,
            image_bytes=pixmap.tobytes("png"),
            text_layer=page.get_text().strip(),
        )

import io

import pdfplumber

from app.ocr.base import BasePageExtractor
from app.ocr.exceptions import PdfExtractionError
from app.ocr.models import DocumentPage


class PdfPlumberPageExtractor(BasePageExtractor):
    """Renders PDF pages with pdfplumber."""

    def __init__(self, dpi: int = 200) -> None:
        self._dpi = dpi

    def extract_pages(self, document_bytes: bytes) -> list[DocumentPage]:
        try:
            with pdfplumber.open(io.BytesIO(document_bytes)) as pdf:
                return [self._render(index, page) for index, page in enumerate(pdf.pages)]
        except PdfExtractionError:
            raise
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber extraction failed: {exc}") from exc

    def _render(self, index: int, page: "pdfplumber.page.Page") -> DocumentPage:
        image = page.to_image(resolution=self._dpi).original
        buf = io.BytesIO()
        image.save(buf, format="PNG")
        return DocumentPage(
            index=index,
            width=image.width,
            height=image.height,
            image_bytes=buf.getvalue(),
            text_layer=(page.extract_text() or "").strip(),
        )

from abc import ABC, abstractmethod

from app.ocr.models import DocumentPage, OcrResult


class BaseOcrService(ABC):
    """Contract for image -> text recognition engines."""

    @abstractmethod
    def recognize_text(self, image_bytes: bytes) -> OcrResult:
        """Recognize text in a single image.

        Raises:
            OcrError: if recognition fails.
        """


class BasePageExtractor(ABC):
    """Contract for all document -> pages adapters."""

    @abstractmethod
    def extract_pages(self, document_bytes: bytes) -> list[DocumentPage]:
        """Split a PDF into rendered pages.

        Args:
            document_bytes: Raw PDF file content.

        Returns:
            Pages in document order, each with a PNG image and its text layer.

        Raises:
            PdfExtractionError: if the document cannot be read.
        """

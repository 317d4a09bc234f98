from dataclasses import dataclass, field


@dataclass(frozen=True)
class BoundingBox:
    left: float
    top: float
    right: float
    bottom: float


@dataclass(frozen=True)
class TextBlock:
    """One recognized block of text."""

    text: str
    confidence: float
    bounding_box: BoundingBox | None = None


@dataclass(frozen=True)
class OcrResult:
    """Output of the image -> text service."""

    full_text: str
    blocks: list[TextBlock] = field(default_factory=list)
    overall_confidence: float = 0.0


@dataclass(frozen=True)
class DocumentPage:
    """A single rendered page of a document."""

    index: int
    width: int
    height: int
    image_bytes: bytes
    text_layer: str = ""  # embedded text, empty for scanned pages

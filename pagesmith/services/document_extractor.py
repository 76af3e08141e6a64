"""
Text extraction for uploaded content documents (.docx).

Extraction failures raise ExtractionError. Callers in the upload flow catch
it and carry on without the document text.
"""

import io
import logging
from typing import List, Optional

from docx import Document

logger = logging.getLogger(__name__)

DOCX_MIME_TYPES = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
DOCX_EXTENSIONS = (".docx",)


class ExtractionError(Exception):
    """The document could not be read."""
    pass


def is_supported_document(filename: Optional[str], mime_type: Optional[str] = None) -> bool:
    """True for .docx documents, judged by mime type or file extension."""
    if mime_type and mime_type in DOCX_MIME_TYPES:
        return True
    return bool(filename) and filename.lower().endswith(DOCX_EXTENSIONS)


def extract_text(data: bytes) -> str:
    """
    Extract plain text from a .docx file.

    Paragraphs come first, then table cells, one per line. Empty lines are
    dropped.

    Raises:
        ExtractionError: If the bytes are not a readable .docx
    """
    try:
        doc = Document(io.BytesIO(data))
    except Exception as e:
        raise ExtractionError(f"Could not read document: {e}") from e

    lines: List[str] = [p.text.strip() for p in doc.paragraphs if p.text.strip()]

    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                lines.append(" | ".join(cells))

    text = "\n".join(lines)
    logger.info(f"Extracted {len(text)} characters from document")
    return text

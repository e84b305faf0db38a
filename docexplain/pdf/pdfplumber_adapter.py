import io

import pdfplumber

from docexplain.pdf.base import BasePdfInspector
from docexplain.pdf.exceptions import PdfInspectionError


class PdfPlumberAdapter(BasePdfInspector):
    """Inspects PDFs using pdfplumber."""

    def _count_pages(self, pdf_bytes: bytes) -> int:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                return len(pdf.pages)
        except Exception as exc:
            raise PdfInspectionError(f"pdfplumber could not open document: {exc}") from exc

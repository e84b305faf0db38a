import pymupdf

from docexplain.pdf.base import BasePdfInspector
from docexplain.pdf.exceptions import PdfInspectionError


class PyMuPdfAdapter(BasePdfInspector):
    """Inspects PDFs using PyMuPDF."""

    def _count_pages(self, pdf_bytes: bytes) -> int:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return doc.page_count
        except Exception as exc:
            raise PdfInspectionError(f"pymupdf could not open document: {exc}") from exc

from abc import ABC, abstractmethod

from docexplain.pdf.exceptions import PdfInspectionError

PDF_HEADER = b"%PDF-"
HEADER_SEARCH_BYTES = 1024


class BasePdfInspector(ABC):
    """Checks that uploaded bytes are a PDF the engine can open.

    Some engines repair arbitrary input into a one-page document, so the
    ``%PDF-`` header is required before the engine sees the bytes.
    """

    def page_count(self, pdf_bytes: bytes) -> int:
        """Return the number of pages (at least 1).

        Raises:
            PdfInspectionError: if the header is missing, the engine cannot
                open the document, or it has no pages.
        """
        if PDF_HEADER not in pdf_bytes[:HEADER_SEARCH_BYTES]:
            raise PdfInspectionError("Document is missing the %PDF- header")
        count = self._count_pages(pdf_bytes)
        if count == 0:
            raise PdfInspectionError("PDF has no pages")
        return count

    @abstractmethod
    def _count_pages(self, pdf_bytes: bytes) -> int:
        """Open the document with the engine and count its pages.

        Raises:
            PdfInspectionError: if the engine cannot open the document.
        """

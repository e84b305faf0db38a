from docexplain.config.settings import Settings
from docexplain.logging.logger import Log
from docexplain.pdf.base import BasePdfInspector
from docexplain.pdf.pdfplumber_adapter import PdfPlumberAdapter
from docexplain.pdf.pymupdf_adapter import PyMuPdfAdapter


class PdfInspectorFactory:
    """Maps ``Settings.pdf_engine`` onto an inspector used by request validation."""

    ENGINES: dict[str, type[BasePdfInspector]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfInspector:
        engine = settings.pdf_engine.strip().lower()
        try:
            inspector_cls = cls.ENGINES[engine]
        except KeyError:
            raise ValueError(
                f"Unknown PDF engine '{settings.pdf_engine}'. "
                f"Choose from: {', '.join(sorted(cls.ENGINES))}"
            ) from None
        Log.info("PDF inspector selected", engine=engine)
        return inspector_cls()

class PdfInspectionError(Exception):
    """Raised when an uploaded file cannot be opened as a PDF."""

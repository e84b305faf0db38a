from collections.abc import Callable, Iterator
from contextlib import contextmanager

from docexplain.analysis.client_base import BaseAgentClient
from docexplain.analysis.exceptions import AgentAPIError, DocumentHandleError
from docexplain.analysis.models import DocumentHandle
from docexplain.logging.logger import Log

ReleaseFailureObserver = Callable[[str, Exception], None]


class DocumentHandleManager:
    """Uploads documents for the agent and guarantees their remote deletion.

    Release never raises: the analysis result must not depend on cleanup.
    Failures are logged and passed to ``on_release_failure`` when given.
    """

    def __init__(
        self,
        client: BaseAgentClient,
        on_release_failure: ReleaseFailureObserver | None = None,
    ) -> None:
        self._client = client
        self._on_release_failure = on_release_failure

    def acquire(self, filename: str, content: bytes) -> DocumentHandle:
        """Upload the document and fetch a signed URL for it.

        Raises:
            DocumentHandleError: if the upload or the signing call fails. An
                upload that succeeded is deleted before the error propagates.
        """
        try:
            remote_id = self._client.upload_file(filename, content)
        except AgentAPIError as exc:
            raise DocumentHandleError("upload PDF file", exc) from exc
        try:
            signed_url = self._client.get_signed_url(remote_id)
        except AgentAPIError as exc:
            self._delete(remote_id)
            raise DocumentHandleError("get signed URL", exc) from exc
        return DocumentHandle(remote_id=remote_id, signed_url=signed_url)

    def release(self, handle: DocumentHandle) -> None:
        """Delete the uploaded document. Errors are observed, never raised."""
        self._delete(handle.remote_id)

    @contextmanager
    def open(self, filename: str, content: bytes) -> Iterator[DocumentHandle]:
        """Acquire a handle and release it exactly once when the block exits."""
        handle = self.acquire(filename, content)
        try:
            yield handle
        finally:
            self.release(handle)

    def _delete(self, remote_id: str) -> None:
        Log.info("Deleting uploaded file", file_id=remote_id)
        try:
            self._client.delete_file(remote_id)
        except Exception as exc:
            Log.warning(f"Failed to delete uploaded file: {exc}", file_id=remote_id)
            if self._on_release_failure is not None:
                self._on_release_failure(remote_id, exc)

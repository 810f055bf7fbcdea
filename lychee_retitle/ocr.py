"""Google Cloud Vision text detection on the cropped caption region."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .errors import NoTextDetected, OCRClientError, OCRError

log = logging.getLogger(__name__)


def create_vision_client(credentials_file: str = "", project_id: str = "") -> Any:
    """Build an ``ImageAnnotatorClient`` from a service-account key file.

    With no *credentials_file* the client falls back to application default
    credentials. *project_id* is used as the quota project when given.

    Raises:
        OCRClientError: the key file is unreadable or the client cannot be built.
    """
    from google.api_core.exceptions import GoogleAPIError
    from google.auth.exceptions import GoogleAuthError
    from google.cloud import vision
    from google.oauth2 import service_account

    kwargs: dict[str, Any] = {}
    try:
        if credentials_file:
            kwargs["credentials"] = service_account.Credentials.from_service_account_file(
                credentials_file
            )
        if project_id:
            kwargs["client_options"] = {"quota_project_id": project_id}
        client = vision.ImageAnnotatorClient(**kwargs)
    except (OSError, ValueError, GoogleAuthError, GoogleAPIError) as exc:
        raise OCRClientError(f"error creating Vision client: {exc}") from exc

    log.debug("Vision client ready (credentials=%s)", credentials_file or "default")
    return client


class TextDetector:
    """Returns the single most likely text annotation of an image."""

    def __init__(self, client: Any):
        self._client = client

    @classmethod
    def from_credentials(cls, credentials_file: str = "", project_id: str = "") -> "TextDetector":
        return cls(create_vision_client(credentials_file, project_id))

    def detect(self, image_path: Path) -> str:
        """Run text detection and return the top annotation verbatim.

        Raises:
            NoTextDetected: the service found no text.
            OCRError: any other failure.
        """
        from google.api_core.exceptions import GoogleAPIError
        from google.cloud import vision

        try:
            content = Path(image_path).read_bytes()
        except OSError as exc:
            raise OCRError(f"error opening image: {exc}") from exc

        try:
            response = self._client.text_detection(
                image=vision.Image(content=content),
                max_results=1,
            )
        except GoogleAPIError as exc:
            raise OCRError(f"error detecting text: {exc}") from exc

        if response.error.message:
            raise OCRError(f"error detecting text: {response.error.message}")
        if not response.text_annotations:
            raise NoTextDetected("no text detected")
        return response.text_annotations[0].description

    def close(self) -> None:
        transport = getattr(self._client, "transport", None)
        if transport is not None:
            transport.close()

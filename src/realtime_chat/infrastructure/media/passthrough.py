"""Media uploader for references that are already hosted elsewhere."""
from __future__ import annotations

import logging
from urllib.parse import urlparse

from realtime_chat.application.exceptions import ValidationError
from realtime_chat.domain.value_objects.enums import MediaKind

logger = logging.getLogger(__name__)


class PassthroughUploader:
    """Implements application.ports.media.MediaUploader.

    Accepts http(s) URLs produced by the client's upload to the media host and
    returns them unchanged. Inline payloads (data URIs) are rejected: storing
    them is the media host's job.
    """

    async def upload(self, data: str, kind: MediaKind) -> str:
        parsed = urlparse(data)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            logger.debug("Rejected %s reference with scheme %r", kind, parsed.scheme)
            raise ValidationError(
                f"Unsupported {kind} reference: upload the file first and send its http(s) URL; "
                "inline data URIs are not accepted."
            )
        return data

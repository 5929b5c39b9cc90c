from __future__ import annotations

import pytest

from realtime_chat.application.exceptions import ValidationError
from realtime_chat.domain.value_objects.enums import MediaKind
from realtime_chat.infrastructure.media.passthrough import PassthroughUploader


@pytest.mark.asyncio
async def test_hosted_url_is_returned_unchanged():
    url = "https://res.example.com/img/cat.png"

    assert await PassthroughUploader().upload(url, MediaKind.IMAGE) == url


@pytest.mark.asyncio
@pytest.mark.parametrize("data", ["data:image/png;base64,AAAA", "ftp://host/cat.png", "/cat.png"])
async def test_other_references_name_the_limitation(data):
    with pytest.raises(ValidationError) as exc:
        await PassthroughUploader().upload(data, MediaKind.IMAGE)

    assert exc.value.detail.startswith("Unsupported image reference")
    assert "data URIs are not accepted" in exc.value.detail

"""Soniox backend: realtime STT only."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

import httpx
import structlog

from voiceproviders.core.config import SonioxConfig
from voiceproviders.core.types import ValidationResult
from voiceproviders.stt.soniox_provider import SonioxSTT

from .common import as_options, check_endpoint

logger = structlog.get_logger()


class SonioxProvider:
    """Client factory for the ``soniox`` provider id."""

    models_url = "https://api.soniox.com/v1/models"

    @staticmethod
    async def validate_api_key(
        api_key: Optional[str], *, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> ValidationResult:
        return await check_endpoint(
            SonioxProvider.models_url,
            api_key,
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    @staticmethod
    def create_stt(opts: Optional[Mapping[str, Any]] = None) -> SonioxSTT:
        config = SonioxConfig(**as_options(opts))
        logger.debug("Creating Soniox STT", model=config.model)
        return SonioxSTT(config)


validate_api_key = SonioxProvider.validate_api_key
create_stt = SonioxProvider.create_stt

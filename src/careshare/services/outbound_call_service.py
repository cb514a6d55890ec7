import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from careshare.config.settings import Settings
from careshare.core.errors import MissingEnvError, UpstreamError

logger = logging.getLogger(__name__)

OUTBOUND_CALL_PATH = "/convai/twilio/outbound-call"
RESPONSE_PREVIEW_LIMIT = 2000


@dataclass
class OutboundCallResult:
    ok: bool
    upstream_status: int
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def call_sid(self) -> Optional[str]:
        return self.data.get("callSid") or self.data.get("call_sid")

    def to_response(self) -> Dict[str, Any]:
        return {"success": self.ok, "upstream_status": self.upstream_status, "data": self.data}


def mask_key(api_key: str) -> str:
    return f"***{api_key[-4:]}"


class ElevenLabsOutboundService:
    """Places outbound phone calls through the ElevenLabs ConvAI Twilio integration"""

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.base_url = settings.elevenlabs_base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=settings.elevenlabs_timeout)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "xi-api-key": self.settings.elevenlabs_api_key,
            "Content-Type": "application/json"
        }

    def ensure_configured(self) -> None:
        missing = self.settings.missing_elevenlabs_settings()
        if missing:
            logger.error(f"[XI] Missing env vars: {missing}")
            raise MissingEnvError(details=missing)

    async def place_call(self, to_number: str, label: str = "outbound-call") -> OutboundCallResult:
        """Ask the voice agent to dial `to_number`; upstream failures are returned, not raised"""
        self.ensure_configured()

        url = f"{self.base_url}{OUTBOUND_CALL_PATH}"
        payload = {
            "agent_id": self.settings.elevenlabs_agent_id,
            "agent_phone_number_id": self.settings.agent_phone_number_id,
            "to_number": to_number,
        }
        logger.info(
            f"[XI] {label} -> request url={url} payload={payload} "
            f"xi-api-key={mask_key(self.settings.elevenlabs_api_key)}"
        )

        try:
            response = await self.client.post(url, headers=self._get_headers(), json=payload)
        except httpx.HTTPError as e:
            logger.error(f"[XI] {label} transport error: {str(e)}")
            raise UpstreamError(str(e))

        text = response.text
        logger.info(
            f"[XI] {label} <- response ok={response.is_success} status={response.status_code} "
            f"body={text[:RESPONSE_PREVIEW_LIMIT]}"
        )

        try:
            data = json.loads(text)
        except ValueError:
            data = {"raw": text}
        if not isinstance(data, dict):
            data = {"raw": data}

        return OutboundCallResult(ok=response.is_success, upstream_status=response.status_code, data=data)

    async def close(self):
        await self.client.aclose()

"""Optional free-text advice appended to quote validation.

Every failure path returns None; the caller never sees an error from here.
"""
import logging
import time
from typing import Optional

import httpx

from freight.core.config import settings
from freight.core.metrics import external_call_duration, external_calls

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an advisor helping shippers sanity-check freight quotes."


class AdvisoryClient:

    def __init__(
        self,
        enabled: Optional[bool] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.enabled = settings.ADVISORY_ENABLED if enabled is None else enabled
        self.api_key = settings.ADVISORY_API_KEY if api_key is None else api_key
        self.base_url = (base_url or settings.ADVISORY_BASE_URL).rstrip("/")
        self.model = model or settings.ADVISORY_MODEL
        self.timeout = timeout or settings.ADVISORY_TIMEOUT
        self._transport = transport

    async def generate_advice(self, prompt: str) -> Optional[str]:
        if not self.enabled or not self.api_key or not self.api_key.strip():
            return None

        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.2,
            "max_tokens": 200,
        }
        start_time = time.time()
        status = "error"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=body,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
            response.raise_for_status()
            content = _first_message(response.json())
            status = "success"
        except Exception as e:
            logger.warning(f"Advisory call failed: {e}")
            return None
        finally:
            external_calls.labels(service="advisory", status=status).inc()
            external_call_duration.labels(service="advisory").observe(time.time() - start_time)

        if not isinstance(content, str) or not content.strip():
            return None
        return content.strip()


def _first_message(body) -> Optional[str]:
    choices = body.get("choices") if isinstance(body, dict) else None
    if not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message") or {}
    return message.get("content")


_client: Optional[AdvisoryClient] = None


def get_advisory_client() -> AdvisoryClient:
    global _client
    if _client is None:
        _client = AdvisoryClient()
    return _client

import logging
import time
from typing import Optional

import httpx

from freight.core.config import settings
from freight.core.errors import unavailable
from freight.core.metrics import external_call_duration, external_calls

logger = logging.getLogger(__name__)

VALIDATE_PATH = "/api/nts-businessman/v1/validate"
VALID_CODE = "01"


class BusinessRegistryClient:
    """Business registration number check against the national tax registry."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.ODCLOUD_BASE_URL).rstrip("/")
        self.api_key = settings.ODCLOUD_API_KEY if api_key is None else api_key
        self.timeout = timeout or settings.REGISTRY_TIMEOUT
        self._transport = transport

    async def validate(self, business: dict) -> Optional[str]:
        """Return the registry's ``valid`` code for the first record, or None."""
        start_time = time.time()
        status = "error"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}{VALIDATE_PATH}",
                    params={"serviceKey": self.api_key, "returnType": "JSON"},
                    json={"businesses": [business]},
                )
            if not 200 <= response.status_code < 300:
                logger.warning(f"Business registry returned status {response.status_code}")
                raise unavailable("Business registry is unavailable.")
            status = "success"
            body = response.json()
            data = (body.get("data") if isinstance(body, dict) else None) or []
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Business registry call failed: {e}")
            raise unavailable("Business registry is unavailable.")
        finally:
            external_calls.labels(service="business_registry", status=status).inc()
            external_call_duration.labels(service="business_registry").observe(time.time() - start_time)

        if not data or not isinstance(data[0], dict):
            return None
        return data[0].get("valid")


_client: Optional[BusinessRegistryClient] = None


def get_registry_client() -> BusinessRegistryClient:
    global _client
    if _client is None:
        _client = BusinessRegistryClient()
    return _client

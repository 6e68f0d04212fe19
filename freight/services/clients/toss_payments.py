"""Payment processor client.

Only the confirm call goes through the server; the payment window is opened
by the frontend with the order id, amount and client key returned by
``prepare``.
"""
import base64
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import httpx

from freight.core.config import settings
from freight.core.errors import unavailable
from freight.core.metrics import external_call_duration, external_calls

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfirmResult:
    payment_key: Optional[str]
    order_id: Optional[str]
    status: Optional[str]
    total_amount: Optional[int]
    approved_at: Optional[datetime]

    @property
    def is_done(self) -> bool:
        return (self.status or "").upper() == "DONE"

    @classmethod
    def from_json(cls, body: dict) -> "ConfirmResult":
        return cls(
            payment_key=body.get("paymentKey"),
            order_id=body.get("orderId"),
            status=body.get("status"),
            total_amount=body.get("totalAmount"),
            approved_at=_parse_timestamp(body.get("approvedAt")),
        )


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


class TossPaymentsClient:

    def __init__(
        self,
        secret_key: Optional[str] = None,
        client_key: Optional[str] = None,
        confirm_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = settings.TOSS_SECRET_KEY if secret_key is None else secret_key
        self.client_key = settings.TOSS_CLIENT_KEY if client_key is None else client_key
        self.confirm_url = confirm_url or settings.TOSS_CONFIRM_URL
        self.timeout = timeout or settings.PAYMENT_TIMEOUT
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.secret_key and self.secret_key.strip())

    def _auth_header(self) -> str:
        token = base64.b64encode(f"{self.secret_key}:".encode("utf-8")).decode("ascii")
        return f"Basic {token}"

    async def confirm(self, payment_key: str, order_id: str, amount: int) -> ConfirmResult:
        if not self.is_configured:
            raise unavailable("Payment gateway is not configured.")

        start_time = time.time()
        status = "error"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.confirm_url,
                    json={"paymentKey": payment_key, "orderId": order_id, "amount": amount},
                    headers={"Authorization": self._auth_header()},
                )
            if not 200 <= response.status_code < 300:
                logger.warning(f"Payment confirm rejected with status {response.status_code} for order {order_id}")
                raise unavailable(f"Payment gateway rejected the confirmation ({response.status_code}).")
            body = response.json()
            if not isinstance(body, dict):
                raise ValueError("unexpected confirm response body")
            status = "success"
            return ConfirmResult.from_json(body)
        except httpx.TimeoutException:
            logger.warning(f"Payment confirm timeout for order {order_id}")
            raise unavailable("Payment gateway timed out.")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Payment confirm error for order {order_id}: {e}")
            raise unavailable("Payment gateway is unavailable.")
        finally:
            external_calls.labels(service="payments", status=status).inc()
            external_call_duration.labels(service="payments").observe(time.time() - start_time)


_client: Optional[TossPaymentsClient] = None


def get_payments_client() -> TossPaymentsClient:
    global _client
    if _client is None:
        _client = TossPaymentsClient()
    return _client

# FILE: imagifine/services/payment_gateway.py
"""
Razorpay boundary: order creation, payment lookup and the HMAC signing
scheme used for checkout confirmations and webhooks.

Every outbound call is bounded by a timeout. Any transport error, timeout or
non-2xx answer surfaces as GatewayUnavailable.
"""

import hashlib
import hmac
import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from imagifine.core import config
from imagifine.core.errors import GatewayUnavailable

logger = logging.getLogger("imagifine.gateway")


class PaymentGateway(Protocol):
    key_id: Optional[str]

    async def create_order(self, amount: int, currency: str, receipt: str, notes: Dict[str, Any]) -> str:
        ...

    async def fetch_payment(self, payment_id: str) -> Dict[str, Any]:
        ...


def compute_signature(secret: str, order_id: str, payment_id: str) -> str:
    body = f"{order_id}|{payment_id}"
    return hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_payment_signature(secret: str, order_id: str, payment_id: str, signature: str) -> bool:
    if not secret or not signature:
        return False
    expected = compute_signature(secret, order_id, payment_id)
    return hmac.compare_digest(expected, signature.strip())


def verify_webhook_signature(secret: str, body: bytes, signature: Optional[str]) -> bool:
    if not secret or not signature:
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature.strip())


class RazorpayGateway:
    def __init__(
        self,
        key_id: str = config.RAZORPAY_KEY_ID,
        key_secret: str = config.RAZORPAY_KEY_SECRET,
        api_base: str = config.RAZORPAY_API_BASE,
        timeout: float = config.GATEWAY_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.key_id = key_id
        self._key_secret = key_secret
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        if not self.key_id or not self._key_secret:
            raise GatewayUnavailable("Razorpay is not configured")
        return httpx.AsyncClient(
            base_url=self.api_base,
            auth=(self.key_id, self._key_secret),
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        async with self._client() as client:
            try:
                resp = await client.request(method, path, **kwargs)
                resp.raise_for_status()
                return resp.json()
            except httpx.TimeoutException as exc:
                logger.error("Razorpay %s %s timed out after %ss", method, path, self.timeout)
                raise GatewayUnavailable(f"Razorpay {method} {path} timed out") from exc
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "Razorpay %s %s returned %s: %s",
                    method, path, exc.response.status_code, exc.response.text[:500],
                )
                raise GatewayUnavailable(f"Razorpay {method} {path} returned {exc.response.status_code}") from exc
            except (httpx.HTTPError, ValueError) as exc:
                logger.error("Razorpay %s %s failed: %s", method, path, exc)
                raise GatewayUnavailable(f"Razorpay {method} {path} failed: {exc}") from exc

    async def create_order(self, amount: int, currency: str, receipt: str, notes: Dict[str, Any]) -> str:
        data = await self._request(
            "POST",
            "/orders",
            json={
                "amount": amount,
                "currency": currency,
                "receipt": receipt,
                # Razorpay notes are flat string values
                "notes": {k: str(v) for k, v in notes.items()},
            },
        )
        order_id = data.get("id")
        if not order_id:
            raise GatewayUnavailable("Razorpay order response carried no id")
        return order_id

    async def fetch_payment(self, payment_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/payments/{payment_id}")

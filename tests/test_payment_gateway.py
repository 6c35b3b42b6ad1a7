"""
Razorpay adapter over a mocked transport, and the signing helpers.
"""
import base64
import hashlib
import hmac
import json

import httpx
import pytest

from imagifine.core.errors import GatewayUnavailable
from imagifine.services.payment_gateway import (
    RazorpayGateway,
    compute_signature,
    verify_payment_signature,
    verify_webhook_signature,
)

API_BASE = "https://api.razorpay.test/v1"


def _gateway(handler, **kwargs) -> RazorpayGateway:
    return RazorpayGateway(
        key_id=kwargs.pop("key_id", "rzp_test_key"),
        key_secret=kwargs.pop("key_secret", "rzp_test_secret"),
        api_base=API_BASE,
        timeout=2,
        transport=httpx.MockTransport(handler),
    )


class TestSignatures:

    def test_signature_is_hmac_of_order_and_payment(self) -> None:
        expected = hmac.new(b"secret", b"order_abc|pay_1", hashlib.sha256).hexdigest()
        assert compute_signature("secret", "order_abc", "pay_1") == expected

    def test_verify_payment_signature(self) -> None:
        good = compute_signature("secret", "order_abc", "pay_1")
        assert verify_payment_signature("secret", "order_abc", "pay_1", good)
        assert not verify_payment_signature("secret", "order_abc", "pay_2", good)
        assert not verify_payment_signature("other", "order_abc", "pay_1", good)
        assert not verify_payment_signature("secret", "order_abc", "pay_1", "")
        # without a configured secret nothing verifies
        assert not verify_payment_signature("", "order_abc", "pay_1", good)

    def test_verify_webhook_signature(self) -> None:
        body = b'{"event":"payment.captured"}'
        good = hmac.new(b"whsec", body, hashlib.sha256).hexdigest()
        assert verify_webhook_signature("whsec", body, good)
        assert not verify_webhook_signature("whsec", body + b" ", good)
        assert not verify_webhook_signature("whsec", body, None)


class TestRazorpayGateway:

    @pytest.mark.asyncio
    async def test_create_order(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "order_abc", "amount": 200, "status": "created"})

        gateway = _gateway(handler)
        order_id = await gateway.create_order(200, "INR", "receipt_1", {"userId": "u1", "credits": 2, "planId": "basic"})

        assert order_id == "order_abc"
        assert seen["method"] == "POST"
        assert seen["url"] == f"{API_BASE}/orders"
        assert seen["auth"] == "Basic " + base64.b64encode(b"rzp_test_key:rzp_test_secret").decode()
        assert seen["body"] == {
            "amount": 200,
            "currency": "INR",
            "receipt": "receipt_1",
            "notes": {"userId": "u1", "credits": "2", "planId": "basic"},
        }

    @pytest.mark.asyncio
    async def test_fetch_payment(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path.endswith("/payments/pay_1")
            return httpx.Response(200, json={"id": "pay_1", "status": "captured", "amount": 200})

        payment = await _gateway(handler).fetch_payment("pay_1")
        assert payment["status"] == "captured"

    @pytest.mark.asyncio
    async def test_error_status_is_gateway_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, json={"error": {"description": "bad gateway"}})

        with pytest.raises(GatewayUnavailable):
            await _gateway(handler).create_order(200, "INR", "r", {})

    @pytest.mark.asyncio
    async def test_timeout_is_gateway_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(GatewayUnavailable):
            await _gateway(handler).fetch_payment("pay_1")

    @pytest.mark.asyncio
    async def test_missing_order_id_is_gateway_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "created"})

        with pytest.raises(GatewayUnavailable):
            await _gateway(handler).create_order(200, "INR", "r", {})

    @pytest.mark.asyncio
    async def test_unconfigured_gateway(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(GatewayUnavailable):
            await _gateway(handler, key_id="", key_secret="").create_order(200, "INR", "r", {})

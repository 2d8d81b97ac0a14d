"""
Cart Backend Client

HTTP client for the hosted cart backend. Acts as the cloud cart store,
the cart rule source and the coupon resolver for a storefront session.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from pricing.exceptions import CouponRejected
from pricing.models import AppliedCoupon, CartRule

from .models import Cart, Identity
from .stores import StorageUnavailable

logger = logging.getLogger(__name__)


class CartBackendClient:
    """
    Client for the cart backend API.

    Usage:
        client = CartBackendClient("http://localhost:8001")
        rules = await client.fetch_active_cart_rules()
        cart = await client.get_cart(identity)
        await client.put_cart(identity, cart)
        await client.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            base_url: Base URL of the cart backend
            timeout: Request timeout in seconds
            http_client: Preconfigured client, e.g. one bound to a test transport
        """
        self.base_url = base_url.rstrip("/")
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    def _auth_headers(self, identity: Identity) -> dict[str, str]:
        if not identity.token:
            raise StorageUnavailable(f"No access token for {identity.subject}")
        return {"Authorization": f"Bearer {identity.token}"}

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Make an HTTP request; transport errors become StorageUnavailable"""
        url = f"{self.base_url}{path}"
        request_headers = {"Accept": "application/json", **(headers or {})}

        try:
            return await self._http_client.request(
                method=method,
                url=url,
                headers=request_headers,
                json=body,
                params=params,
            )
        except httpx.RequestError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise StorageUnavailable(f"Cart backend unreachable: {e}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.status_code >= 400:
            logger.error(f"Request failed: {response.status_code} - {response.text}")
            raise StorageUnavailable(f"Cart backend returned {response.status_code}")

    # ==================== Cloud cart ====================

    async def get_cart(self, identity: Identity) -> Optional[Cart]:
        """Get the account's cloud cart, or None if it has none"""
        response = await self._request(
            "GET", "/api/users/me/cart", headers=self._auth_headers(identity)
        )
        if response.status_code == 404:
            return None
        self._raise_for_status(response)

        data = response.json()
        if data is None:
            return None
        try:
            return Cart.model_validate(data)
        except ValidationError as e:
            raise StorageUnavailable(f"Malformed cloud cart for {identity.subject}") from e

    async def put_cart(self, identity: Identity, cart: Cart) -> None:
        """Replace the account's cloud cart"""
        response = await self._request(
            "PUT",
            "/api/users/me/cart",
            body=cart.model_dump(mode="json"),
            headers=self._auth_headers(identity),
        )
        self._raise_for_status(response)

    # ==================== Rules ====================

    async def fetch_active_cart_rules(self) -> list[CartRule]:
        """Active cart rules, in no particular order"""
        response = await self._request("GET", "/api/cart-rules", params={"active_only": "true"})
        self._raise_for_status(response)
        try:
            return [CartRule.model_validate(rule) for rule in response.json()]
        except ValidationError as e:
            raise StorageUnavailable("Malformed cart rules from backend") from e

    # ==================== Coupons ====================

    async def validate_coupon(self, code: str, order_total: float) -> AppliedCoupon:
        """
        Resolve a coupon code against an order total.

        Raises:
            CouponRejected: If the backend refuses the code
            StorageUnavailable: If the backend cannot be reached
        """
        response = await self._request(
            "POST",
            "/api/coupons/validate",
            body={"code": code, "order_total": order_total},
        )
        if 400 <= response.status_code < 500:
            try:
                reason = response.json().get("detail", "Invalid coupon")
            except ValueError:
                reason = "Invalid coupon"
            raise CouponRejected(code.strip().upper(), str(reason), status_code=response.status_code)

        self._raise_for_status(response)
        return AppliedCoupon.model_validate(response.json())

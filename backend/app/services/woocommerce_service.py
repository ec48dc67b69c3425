"""
WooCommerce REST API Service

Fetches orders for a date range and turns them into daily sales figures.
Only orders whose status is in the business's valid-status whitelist count
as revenue.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Dict, Any, Optional, Iterable

import httpx

from app.config import settings
from app.models.business_settings import BusinessSettings
from app.utils.encryption import InvalidToken, decrypt_secret

logger = logging.getLogger(__name__)


class WooCommerceNotConfigured(Exception):
    """Raised when a business has no WooCommerce credentials"""


@dataclass
class OrderStats:
    revenue: float = 0.0
    shipping_cost: float = 0.0
    orders_count: int = 0
    items_count: int = 0


def to_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def filter_valid_orders(orders: Iterable[Dict[str, Any]], valid_statuses: Iterable[str]) -> List[Dict[str, Any]]:
    """Keep only orders whose status counts as realized revenue"""
    allowed = {s.strip().lower() for s in valid_statuses}
    return [o for o in orders if (o.get("status") or "").lower() in allowed]


def is_pickup_order(order: Dict[str, Any], free_shipping_methods: Iterable[str]) -> bool:
    """An order with no shipping lines, or only pickup methods, ships nothing"""
    lines = order.get("shipping_lines") or []
    if not lines:
        return True
    methods = {m.lower() for m in free_shipping_methods}
    return all((line.get("method_id") or "").lower() in methods for line in lines)


def calculate_daily_stats(
    orders: List[Dict[str, Any]],
    fixed_shipping_cost: float = 0.0,
    charge_shipping_on_free_orders: bool = True,
    free_shipping_methods: Optional[Iterable[str]] = None,
) -> OrderStats:
    """
    Aggregate revenue, shipping, order and item counts for a list of orders.

    With a fixed shipping cost each shippable order costs that amount;
    otherwise the customer-paid shipping_total of non-pickup orders is used.
    When charge_shipping_on_free_orders is off, orders with free shipping
    are not shippable for the fixed-cost calculation.
    """
    free_methods = list(free_shipping_methods or settings.DEFAULT_FREE_SHIPPING_METHODS)

    revenue = sum(to_float(o.get("total")) for o in orders)

    shipped = [o for o in orders if not is_pickup_order(o, free_methods)]
    if fixed_shipping_cost and fixed_shipping_cost > 0:
        if charge_shipping_on_free_orders:
            shippable = len(shipped)
        else:
            shippable = len([o for o in shipped if to_float(o.get("shipping_total")) > 0])
        shipping_cost = shippable * fixed_shipping_cost
    else:
        shipping_cost = sum(to_float(o.get("shipping_total")) for o in shipped)

    items_count = 0
    for order in orders:
        for item in order.get("line_items") or []:
            try:
                items_count += int(item.get("quantity")) or 1
            except (TypeError, ValueError):
                items_count += 1

    return OrderStats(
        revenue=revenue,
        shipping_cost=shipping_cost,
        orders_count=len(orders),
        items_count=items_count,
    )


def order_date(order: Dict[str, Any]) -> date:
    """Local date an order was created on"""
    created = order.get("date_created") or ""
    if created:
        if not isinstance(created, str):
            raise ValueError(f"date_created must be a string, got {created!r}")
        return datetime.fromisoformat(created.replace("Z", "+00:00")).date()
    return date.today()


class WooCommerceClient:
    """Thin client for the WooCommerce orders endpoint"""

    def __init__(
        self,
        url: str,
        consumer_key: str,
        consumer_secret: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = f"{url.strip().rstrip('/')}/wp-json/{settings.WOOCOMMERCE_API_VERSION}"
        self.auth = (consumer_key.strip(), consumer_secret.strip())
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            auth=self.auth,
            timeout=settings.WOOCOMMERCE_TIMEOUT_SECONDS,
            transport=self.transport,
        )

    async def list_orders(
        self,
        after: str,
        before: str,
        statuses: List[str],
        page: int = 1,
    ) -> List[Dict[str, Any]]:
        """
        Fetch one page of orders

        Args:
            after: Exclusive lower bound (local time, ISO8601)
            before: Upper bound (local time, ISO8601)
            statuses: Order statuses to request
            page: 1-based page number

        Returns:
            List of order objects
        """
        async with self._client() as client:
            response = await client.get(
                f"{self.base_url}/orders",
                params={
                    "after": after,
                    "before": before,
                    "per_page": settings.WOOCOMMERCE_PAGE_SIZE,
                    "page": page,
                    "status": ",".join(statuses),
                    "dates_are_gmt": "false",
                },
            )
            response.raise_for_status()
            return response.json() or []

    async def fetch_orders(
        self,
        date_from: date,
        date_to: date,
        statuses: List[str],
        max_pages: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch every order created between date_from and date_to (inclusive)"""
        max_pages = max_pages or settings.WOOCOMMERCE_MAX_PAGES_PER_RANGE
        day_before = date_from - timedelta(days=1)
        after = f"{day_before.isoformat()}T23:59:59"
        before = f"{date_to.isoformat()}T23:59:59"

        all_orders: List[Dict[str, Any]] = []
        page = 1
        while True:
            orders = await self.list_orders(after, before, statuses, page)
            all_orders.extend(orders)

            if len(orders) < settings.WOOCOMMERCE_PAGE_SIZE:
                break

            page += 1
            if page > max_pages:
                logger.warning("Reached page limit (%d pages, %d orders)", max_pages, len(all_orders))
                break

        logger.info("Fetched %d orders for %s..%s (%d page(s))", len(all_orders), date_from, date_to, page)
        return all_orders

    async def fetch_orders_by_date(self, day: date, statuses: List[str]) -> List[Dict[str, Any]]:
        return await self.fetch_orders(day, day, statuses, max_pages=settings.WOOCOMMERCE_MAX_PAGES_PER_DAY)


def client_from_settings(business_settings: Optional[BusinessSettings]) -> WooCommerceClient:
    """Build a client from a business's stored credentials"""
    if (
        business_settings is None
        or not business_settings.woo_url
        or not business_settings.consumer_key
        or not business_settings.consumer_secret_encrypted
    ):
        raise WooCommerceNotConfigured("WooCommerce credentials are not configured for this business")

    try:
        consumer_secret = decrypt_secret(business_settings.consumer_secret_encrypted)
    except InvalidToken:
        logger.error("Stored consumer secret for business %s cannot be decrypted", business_settings.business_id)
        raise WooCommerceNotConfigured("Stored WooCommerce consumer secret cannot be decrypted; save it again")

    return WooCommerceClient(
        url=business_settings.woo_url,
        consumer_key=business_settings.consumer_key,
        consumer_secret=consumer_secret,
    )

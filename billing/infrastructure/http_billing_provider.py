"""
HTTP billing provider client.

Talks to the provider's REST API with ``requests``. Every failure mode
(timeout, connection error, non-2xx) is reported as
``ProviderUnavailableError``: the charge may or may not have happened, and
only the signed notification that follows settles the ledger.
"""
import logging
import time
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests
from asgiref.sync import sync_to_async
from django.conf import settings
from django.utils.dateparse import parse_datetime

from billing.ports.billing_provider import (
    BillingProvider,
    LineItem,
    ProrationMode,
    SubscriptionResult,
)
from core.domain.exceptions import ProviderUnavailableError
from core.metrics import billing_provider_request_duration_seconds, billing_provider_requests_total

logger = logging.getLogger(__name__)


class HttpBillingProvider(BillingProvider):
    """BillingProvider backed by the provider's REST API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        price_ids: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.BILLING_PROVIDER_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.BILLING_PROVIDER_API_KEY
        self.timeout = timeout if timeout is not None else settings.BILLING_PROVIDER_TIMEOUT
        self.price_ids = price_ids if price_ids is not None else settings.BILLING_PRICE_IDS
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "User-Agent": "Seat-Licensing-Service/1.0",
        }

    def _items(self, line_items: List[LineItem]) -> List[Dict[str, Any]]:
        items = []
        for item in line_items:
            price_id = self.price_ids.get(item.license_class)
            if not price_id:
                raise ProviderUnavailableError(
                    f"No billing price configured for license class '{item.license_class}'"
                )
            items.append({"price_id": price_id, "quantity": item.quantity})
        return items

    def _request(self, operation: str, method: str, path: str, body: Dict[str, Any]) -> Dict:
        url = f"{self.base_url}{path}"
        started = time.perf_counter()
        try:
            response = self.session.request(
                method, url, json=body, headers=self._headers(), timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as exc:
            billing_provider_requests_total.labels(operation=operation, outcome="error").inc()
            logger.warning(
                "Billing provider %s failed: %s",
                operation,
                exc,
                extra={"operation": operation, "url": url},
            )
            raise ProviderUnavailableError(
                "The billing provider did not confirm the request; "
                "the charge state is unknown until its notification arrives"
            ) from exc
        finally:
            billing_provider_request_duration_seconds.labels(operation=operation).observe(
                time.perf_counter() - started
            )
        billing_provider_requests_total.labels(operation=operation, outcome="success").inc()
        return data.get("data") or {}

    def _change_subscription(
        self,
        subscription_ref: Optional[str],
        line_items: List[LineItem],
        proration_mode: ProrationMode,
        custom_data: Optional[Dict[str, Any]],
    ) -> SubscriptionResult:
        body = {"items": self._items(line_items), "custom_data": custom_data or {}}
        if subscription_ref:
            body["proration_billing_mode"] = proration_mode.value
            data = self._request(
                "modify_subscription", "PATCH", f"/subscriptions/{subscription_ref}", body
            )
            reference = data.get("id") or subscription_ref
        else:
            data = self._request("create_subscription", "POST", "/transactions", body)
            reference = data.get("subscription_id") or data.get("id")
        if not reference:
            raise ProviderUnavailableError(
                "The billing provider returned no subscription reference"
            )
        return SubscriptionResult(
            subscription_ref=reference,
            next_billing_date=_parse_datetime(data.get("next_billed_at")),
            raw=data,
        )

    async def create_or_modify_subscription(
        self,
        subscription_ref: Optional[str],
        line_items: List[LineItem],
        proration_mode: ProrationMode,
        custom_data: Optional[Dict[str, Any]] = None,
    ) -> SubscriptionResult:
        return await sync_to_async(self._change_subscription, thread_sensitive=False)(
            subscription_ref, line_items, proration_mode, custom_data
        )

    def _preview(self, line_items: List[LineItem]) -> Decimal:
        body = {"items": self._items(line_items)}
        data = self._request("preview_price", "POST", "/pricing-preview", body)
        total = ((data.get("details") or {}).get("totals") or {}).get("total", "0")
        return (Decimal(str(total)) / 100).quantize(Decimal("0.01"))

    async def preview_price(self, line_items: List[LineItem]) -> Decimal:
        return await sync_to_async(self._preview, thread_sensitive=False)(line_items)


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return parse_datetime(value) if value else None


def get_billing_provider() -> BillingProvider:
    return HttpBillingProvider()

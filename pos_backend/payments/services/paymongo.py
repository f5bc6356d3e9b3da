# payments/services/paymongo.py
"""
PAYMONGO PAYMENT LINKS

Purpose:
- Create a hosted checkout link for an online order.
- Read a link back (status / reference) by id.

Hard rules:
- Amounts go out in centavos (major * 100, half-up). Amounts coming back
  stay in centavos on PaymentLink; callers convert for display.
- Every failure (config, HTTP, network, non-JSON) surfaces as
  PaymentProviderError carrying the provider's own message when it sent one.
- Secrets never reach the logs.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.paymongo.com/v1"
DEFAULT_TIMEOUT = 25

LINK_REMARKS = "Payment via E-Commerce API"
LINK_SOURCE = "ecommerce_api"
LINK_PAYMENT_METHODS = [
    "card",
    "gcash",
    "paymaya",
    "grab_pay",
    "qrph",
    "dob",
    "billease",
    "shopee_pay",
]

CENTS = Decimal("100")
TWOPLACES = Decimal("0.01")


class PaymentProviderError(Exception):
    """PayMongo could not be reached, rejected the request, or answered garbage."""


@dataclass(frozen=True)
class PaymentLink:
    id: str
    checkout_url: str
    reference: str
    status: str
    amount_minor: int
    fee_minor: int
    currency: str

    @property
    def amount(self) -> Decimal:
        return from_minor(self.amount_minor)

    @property
    def fee(self) -> Decimal:
        return from_minor(self.fee_minor)

    @property
    def net_amount(self) -> Decimal:
        return from_minor(self.amount_minor - self.fee_minor)


# =========================================================
# AMOUNTS
# =========================================================
def to_minor(amount_major) -> int:
    try:
        major = Decimal(str(amount_major))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise PaymentProviderError("Payment amount must be a valid number") from exc
    return int((major * CENTS).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor(amount_minor) -> Decimal:
    return (Decimal(int(amount_minor or 0)) / CENTS).quantize(TWOPLACES)


# =========================================================
# RESPONSE PARSING
# =========================================================
def _first_error_detail(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    errors = payload.get("errors") or []
    if errors and isinstance(errors[0], dict):
        return errors[0].get("detail") or errors[0].get("code")
    return None


def _parse_link(payload: dict) -> PaymentLink:
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict) or not data.get("id"):
        raise PaymentProviderError("PayMongo returned an unexpected payment link payload")

    attrs = data.get("attributes") or {}
    return PaymentLink(
        id=str(data["id"]),
        checkout_url=str(attrs.get("checkout_url") or ""),
        reference=str(attrs.get("reference_number") or ""),
        status=str(attrs.get("status") or ""),
        amount_minor=int(attrs.get("amount") or 0),
        fee_minor=int(attrs.get("fee") or 0),
        currency=str(attrs.get("currency") or ""),
    )


# =========================================================
# CLIENT
# =========================================================
class PayMongoClient:
    def __init__(
        self,
        *,
        secret_key: str,
        base_url: str = DEFAULT_BASE_URL,
        currency: str = "PHP",
        timeout: int = DEFAULT_TIMEOUT,
    ):
        self.secret_key = (secret_key or "").strip()
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.currency = currency
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "PayMongoClient":
        cfg = (getattr(settings, "PAYMENTS", {}) or {}).get("PAYMONGO") or {}
        orders_cfg = getattr(settings, "ORDERS", {}) or {}
        return cls(
            secret_key=cfg.get("SECRET_KEY") or "",
            base_url=cfg.get("BASE_URL") or DEFAULT_BASE_URL,
            currency=orders_cfg.get("CURRENCY") or "PHP",
        )

    def _auth_header(self) -> str:
        if not self.secret_key:
            raise PaymentProviderError("PayMongo secret key is not configured")
        token = base64.b64encode(f"{self.secret_key}:".encode("utf-8")).decode("ascii")
        return f"Basic {token}"

    def _request_json(self, method: str, path: str, *, body: Optional[dict] = None) -> dict:
        data = None
        if body is not None:
            data = json.dumps(body, ensure_ascii=False).encode("utf-8")

        req = Request(
            f"{self.base_url}{path}",
            data=data,
            headers={
                "Authorization": self._auth_header(),
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            method=method,
        )

        try:
            with urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
        except HTTPError as e:
            try:
                payload = json.loads(e.read().decode("utf-8", errors="replace") or "{}")
            except ValueError:
                payload = None
            detail = _first_error_detail(payload)
            logger.warning(
                "paymongo rejected request",
                extra={"path": path, "status": e.code, "detail": detail},
            )
            raise PaymentProviderError(detail or f"PayMongo HTTP {e.code}") from e
        except URLError as e:
            logger.warning("paymongo unreachable", extra={"path": path, "error": str(e.reason)})
            raise PaymentProviderError(f"PayMongo unreachable: {e.reason}") from e
        except TimeoutError as e:
            raise PaymentProviderError("PayMongo request timed out") from e

        try:
            payload = json.loads(raw)
        except ValueError as e:
            raise PaymentProviderError("PayMongo returned non-JSON response") from e

        if not isinstance(payload, dict):
            raise PaymentProviderError("PayMongo returned an unexpected response")
        return payload

    # -----------------------------------------------------
    # Links
    # -----------------------------------------------------
    def create_payment_link(
        self,
        amount_major,
        description: str = "Payment",
        metadata: Optional[dict] = None,
    ) -> PaymentLink:
        body = {
            "data": {
                "attributes": {
                    "amount": to_minor(amount_major),
                    "currency": self.currency,
                    "description": description,
                    "remarks": LINK_REMARKS,
                    "payment_method_allowed": list(LINK_PAYMENT_METHODS),
                    "metadata": {**(metadata or {}), "source": LINK_SOURCE},
                }
            }
        }

        link = _parse_link(self._request_json("POST", "/links", body=body))
        logger.info(
            "payment link created",
            extra={"link_id": link.id, "reference": link.reference, "amount_minor": link.amount_minor},
        )
        return link

    def get_payment_link(self, link_id: str) -> PaymentLink:
        link_id = str(link_id or "").strip()
        if not link_id:
            raise PaymentProviderError("Payment link id is required")
        return _parse_link(self._request_json("GET", f"/links/{link_id}"))

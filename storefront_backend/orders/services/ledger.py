# orders/services/ledger.py

"""
EXTERNAL ORDER LEDGER (SIDE CHANNEL)

Purpose:
- Mirror committed orders (and later status changes) to an external ledger
  (spreadsheet bridge / webhook receiver) keyed by order id.

Hard rules:
- Runs ONLY after the checkout transaction has committed
  (registered with transaction.on_commit by the committer / status view).
- Best-effort: every failure is logged and swallowed. A ledger outage never
  rolls back an order and never changes the HTTP outcome of a checkout.
- Not configured (empty WEBHOOK_URL) -> skip silently.
- Bounded: all ledger work for one request fits in DISPATCH_BUDGET_SECONDS.

Config (settings.ORDER_LEDGER):
- WEBHOOK_URL, SECRET (HMAC-SHA256 body signature), TIMEOUT,
  MAX_ATTEMPTS, BACKOFF_SECONDS, DISPATCH_BUDGET_SECONDS
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from django.conf import settings

from orders.models import Order
from orders.services.exceptions import LedgerNotifyError

logger = logging.getLogger(__name__)

EVENT_ORDER_CREATED = "order.created"
EVENT_ORDER_STATUS_CHANGED = "order.status_changed"

DEFAULT_DISPATCH_BUDGET_SECONDS = 5.0


def _ledger_cfg() -> dict:
    cfg = getattr(settings, "ORDER_LEDGER", {}) or {}
    return cfg if isinstance(cfg, dict) else {}


def _webhook_url() -> str:
    return str(_ledger_cfg().get("WEBHOOK_URL") or "").strip()


def is_configured() -> bool:
    return bool(_webhook_url())


def _sign(raw_body: bytes) -> str:
    secret = str(_ledger_cfg().get("SECRET") or "").strip()
    if not secret:
        return ""
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def order_ledger_row(order: Order) -> dict[str, Any]:
    product = getattr(order, "product", None)
    return {
        "orderId": str(order.id),
        "groupId": str(order.group_id) if order.group_id else None,
        "customerName": order.customer_name,
        "customerEmail": order.customer_email,
        "phone": order.phone,
        "city": order.city,
        "deliveryType": order.delivery_type,
        "status": order.status,
        "productId": str(order.product_id),
        "productName": getattr(product, "name", ""),
        "quantity": int(order.quantity),
        "productPrice": str(order.product_price),
        "deliveryFee": str(order.delivery_fee),
        "total": str(order.total),
        "createdAt": order.created_at.isoformat() if order.created_at else None,
    }


def _post_once(url: str, raw_body: bytes, *, timeout: float) -> None:
    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "User-Agent": "storefront-order-ledger/1.0 Python-urllib",
    }
    signature = _sign(raw_body)
    if signature:
        headers["X-Ledger-Signature"] = signature

    req = Request(url, data=raw_body, headers=headers, method="POST")

    try:
        with urlopen(req, timeout=timeout) as resp:
            code = getattr(resp, "status", 200)
            if code >= 300:
                raise LedgerNotifyError(f"Ledger responded with HTTP {code}")
    except HTTPError as e:
        raise LedgerNotifyError(f"Ledger HTTPError: {e.code}") from e
    except URLError as e:
        raise LedgerNotifyError(f"Ledger URLError: {e.reason}") from e
    except OSError as e:
        raise LedgerNotifyError(f"Ledger request failed: {e}") from e


def _new_deadline() -> float:
    budget = float(_ledger_cfg().get("DISPATCH_BUDGET_SECONDS") or DEFAULT_DISPATCH_BUDGET_SECONDS)
    return time.monotonic() + budget


def send_ledger_event(event: str, payload: dict, *, deadline: float | None = None) -> bool:
    """
    POST one event with bounded retries.

    Every attempt (socket timeout included) and every backoff pause must fit
    before `deadline` (a time.monotonic() value). Defaults to a fresh
    DISPATCH_BUDGET_SECONDS window.

    Returns False when the ledger is not configured, True on delivery.
    Raises LedgerNotifyError once attempts or budget run out.
    """
    url = _webhook_url()
    if not url:
        logger.debug("Order ledger not configured, skipping", extra={"event": event})
        return False

    cfg = _ledger_cfg()
    timeout = float(cfg.get("TIMEOUT") or 3)
    max_attempts = max(1, int(cfg.get("MAX_ATTEMPTS") or 1))
    backoff = float(cfg.get("BACKOFF_SECONDS") or 0)
    if deadline is None:
        deadline = _new_deadline()

    raw_body = json.dumps({"event": event, "data": payload}, ensure_ascii=False).encode("utf-8")

    attempt = 0
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise LedgerNotifyError("Ledger time budget exhausted")

        attempt += 1
        try:
            _post_once(url, raw_body, timeout=min(timeout, remaining))
            return True
        except LedgerNotifyError:
            if attempt >= max_attempts:
                raise
            pause = backoff * attempt
            if deadline - time.monotonic() <= pause:
                raise
            logger.warning(
                "Ledger delivery failed, retrying",
                extra={"event": event, "attempt": attempt},
            )
            if pause:
                time.sleep(pause)


def notify_order_created(order: Order, *, deadline: float | None = None) -> bool:
    try:
        return send_ledger_event(EVENT_ORDER_CREATED, order_ledger_row(order), deadline=deadline)
    except Exception:
        logger.exception(
            "Error adding order to ledger (non-critical)",
            extra={"order_id": str(order.id)},
        )
        return False


def notify_order_status_changed(order: Order) -> bool:
    try:
        return send_ledger_event(EVENT_ORDER_STATUS_CHANGED, order_ledger_row(order))
    except Exception:
        logger.exception(
            "Error updating order in ledger (non-critical)",
            extra={"order_id": str(order.id), "status": order.status},
        )
        return False


def dispatch_orders_created(order_ids) -> int:
    """
    on_commit hook for the committer: one ledger event per created order.

    The whole dispatch shares one DISPATCH_BUDGET_SECONDS window, so a ledger
    outage delays the checkout response by at most that much. Orders left
    over when the budget runs out are logged and skipped.
    Returns how many events were delivered.
    """
    ids = [str(oid) for oid in order_ids]
    if not ids or not is_configured():
        return 0

    deadline = _new_deadline()

    try:
        by_id = {
            str(o.id): o
            for o in Order.objects.filter(id__in=ids).select_related("product")
        }
    except Exception:
        logger.exception("Could not load orders for ledger dispatch", extra={"order_ids": ids})
        return 0

    delivered = 0
    for position, oid in enumerate(ids):
        if time.monotonic() >= deadline:
            logger.warning(
                "Ledger budget exhausted, skipping remaining orders",
                extra={"skipped_order_ids": ids[position:]},
            )
            break
        order = by_id.get(oid)
        if order is None:
            continue
        if notify_order_created(order, deadline=deadline):
            delivered += 1

    logger.info(
        "Ledger dispatch finished",
        extra={"orders": len(ids), "delivered": delivered},
    )
    return delivered

# orders/services/reservation.py

"""
ORDER RESERVATION COMMITTER (TRANSACTIONAL CORE)

Purpose:
- Turn a ValidatedCart into persisted orders + stock decrements, all or nothing.

Flow (one transaction.atomic block):
1) resolve the delivery fee for the customer's city, split it across lines
2) lock the referenced product rows (pk order), create one OrderGroup
3) per line, in input order:
     create Order (authoritative price, fee share, total = price*qty + share)
     conditional stock decrement (stock >= qty checked at UPDATE time)
4) register the ledger dispatch with transaction.on_commit

Hard rules:
- A decrement that finds too little stock aborts EVERYTHING
  (ConcurrentStockExhaustionError; zero orders, zero stock change).
- Storage failures surface as PersistenceError; nothing is persisted.
- The ledger is never called inside the transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from functools import partial

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from backend.money import money
from cities.services.delivery_fee import allocate_fee, resolve_fee
from orders.models import Order, OrderGroup
from orders.services.checkout_validator import ValidatedCart
from orders.services.exceptions import (
    CheckoutError,
    ConcurrentStockExhaustionError,
    EmptyCartError,
    MissingFieldsError,
    PersistenceError,
    ProductsUnavailableError,
)
from orders.services.ledger import dispatch_orders_created
from products.services.inventory import InsufficientStockError as StockDecrementError
from products.services.inventory import decrement_stock, lock_products

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerInfo:
    customer_name: str
    customer_email: str
    phone: str
    city: str
    delivery_type: str = Order.DELIVERY_HOME

    def missing_fields(self) -> list[str]:
        return [
            name
            for name in ("customer_name", "customer_email", "phone", "city")
            if not str(getattr(self, name) or "").strip()
        ]


def _require_customer(customer: CustomerInfo) -> None:
    missing = customer.missing_fields()
    if missing:
        raise MissingFieldsError(details=[f"{name} is required" for name in missing])

    valid_types = {value for value, _ in Order.DELIVERY_TYPE_CHOICES}
    if customer.delivery_type not in valid_types:
        raise MissingFieldsError(
            details=[f"deliveryType must be one of {sorted(valid_types)}"]
        )


def _create_locked(validated_cart: ValidatedCart, customer: CustomerInfo, shares) -> list[Order]:
    product_ids = validated_cart.product_ids
    locked = lock_products(product_ids)

    gone = [pid for pid in product_ids if pid not in locked or not locked[pid].visible]
    if gone:
        raise ProductsUnavailableError(gone)

    group = OrderGroup.objects.create()

    created = []
    for position, (vline, share) in enumerate(zip(validated_cart.lines, shares)):
        product = vline.product
        qty = vline.quantity
        unit_price = vline.unit_price

        order = Order.objects.create(
            group=group,
            line_number=position,
            customer_name=customer.customer_name.strip(),
            customer_email=customer.customer_email.strip(),
            phone=customer.phone.strip(),
            city=customer.city.strip(),
            delivery_type=customer.delivery_type,
            status=Order.STATUS_PENDING,
            product=product,
            quantity=qty,
            product_price=unit_price,
            delivery_fee=share,
            total=money(unit_price * Decimal(qty) + share),
        )

        try:
            decrement_stock(product_id=product.id, quantity=qty)
        except StockDecrementError as exc:
            raise ConcurrentStockExhaustionError(
                details=[f"{product.name}: stock ran out while the order was being placed"]
            ) from exc

        created.append(order)

    transaction.on_commit(
        partial(dispatch_orders_created, [o.id for o in created]),
        robust=True,
    )
    return created


def commit_reservation(validated_cart: ValidatedCart, customer: CustomerInfo) -> list[Order]:
    if not len(validated_cart):
        raise EmptyCartError()

    _require_customer(customer)

    try:
        fee = resolve_fee(customer.city)
        shares = allocate_fee(fee, len(validated_cart))

        with transaction.atomic():
            orders = _create_locked(validated_cart, customer, shares)
    except ConcurrentStockExhaustionError:
        logger.warning(
            "Stock exhausted at commit time, reservation rolled back",
            extra={"product_ids": validated_cart.product_ids},
        )
        raise
    except CheckoutError:
        raise
    except ValidationError as exc:
        raise MissingFieldsError(details=exc.messages) from exc
    except DatabaseError as exc:
        logger.exception(
            "Order reservation failed in storage",
            extra={"product_ids": validated_cart.product_ids},
        )
        raise PersistenceError(details=["Please try again later"]) from exc

    logger.info(
        "Orders committed",
        extra={
            "group_id": str(orders[0].group_id),
            "orders": len(orders),
            "delivery_fee": str(fee),
        },
    )
    return orders

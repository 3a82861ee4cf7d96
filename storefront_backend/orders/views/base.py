# orders/views/base.py

"""
Shared response helpers for order views.

- CheckoutError -> its status_code + {error, code, details?}
- serializer errors -> MissingFieldsError / MalformedLineError payloads
"""

from __future__ import annotations

from rest_framework.response import Response

from orders.services.exceptions import CheckoutError, MalformedLineError, MissingFieldsError


def _flatten_errors(errors, prefix: str = "") -> list[str]:
    out = []
    if isinstance(errors, dict):
        for key, value in errors.items():
            label = f"{prefix}.{key}" if prefix else str(key)
            out.extend(_flatten_errors(value, label))
    elif isinstance(errors, list):
        for idx, value in enumerate(errors):
            if isinstance(value, (dict, list)):
                if value:
                    out.extend(_flatten_errors(value, f"{prefix}[{idx}]"))
            else:
                out.append(f"{prefix}: {value}" if prefix else str(value))
    else:
        out.append(f"{prefix}: {errors}" if prefix else str(errors))
    return out


def checkout_error_response(exc: CheckoutError) -> Response:
    return Response(exc.as_payload(), status=exc.status_code)


def serializer_error_response(errors, *, line_fields=()) -> Response:
    """
    Errors confined to cart-line fields are reported as MalformedLineError,
    anything else (customer fields, missing keys) as MissingFieldsError.
    """
    keys = set(errors.keys()) if isinstance(errors, dict) else set()
    if keys and keys <= set(line_fields):
        exc = MalformedLineError(details=_flatten_errors(errors))
    else:
        exc = MissingFieldsError(details=_flatten_errors(errors))
    return checkout_error_response(exc)

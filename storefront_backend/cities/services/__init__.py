from .delivery_fee import FeeQuote, allocate_fee, resolve_fee, resolve_fee_detail

__all__ = [
    "FeeQuote",
    "allocate_fee",
    "resolve_fee",
    "resolve_fee_detail",
]

from .delivery_fee import DeliveryFeeView

__all__ = [
    "DeliveryFeeView",
]

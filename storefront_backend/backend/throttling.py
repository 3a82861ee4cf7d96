# backend/throttling.py
"""
PATH: backend/throttling.py

Scoped anonymous throttles for the public storefront endpoints.
Rates live in REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'].
"""

from rest_framework.throttling import AnonRateThrottle


class PublicWriteThrottle(AnonRateThrottle):
    """Checkout writes (bulk cart, buy now): abuse target, kept tight."""

    scope = "public_write"


class PublicPollThrottle(AnonRateThrottle):
    """Cheap reads the storefront may poll (fee lookup, order confirmation)."""

    scope = "public_poll"

from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class InvalidPriceConvention(DomainError):
    """Decimals, log base or fixed-point width unresolved for a pool."""


class InvalidTickRange(DomainError):
    """Tick range is empty, inverted or outside protocol bounds."""


class InvalidPoolState(DomainError):
    """Pool snapshot is incomplete or inconsistent."""


class InvalidPositionData(DomainError):
    """Raw position record cannot be interpreted."""


class InvalidPriceSeries(DomainError):
    """Price series is not strictly timestamp-ordered or malformed."""


class PriceUnavailable(DomainError):
    """USD price missing for a token."""

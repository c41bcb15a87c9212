from collections.abc import Iterable

from ..exceptions import ProviderNotFoundError
from .base import PaymentProvider


class ProviderRegistry:
    """Maps canonical provider names to provider instances.

    Built once at startup from an explicit list. Lookup is a case-sensitive
    exact match: "Stripe" resolves, "stripe" does not.
    """

    def __init__(self, providers: Iterable[PaymentProvider]):
        self._providers: dict[str, PaymentProvider] = {}
        for provider in providers:
            if provider.name in self._providers:
                raise ValueError(f"Duplicate payment provider name: {provider.name}")
            self._providers[provider.name] = provider

    def resolve(self, name: str) -> PaymentProvider:
        try:
            return self._providers[name]
        except KeyError:
            raise ProviderNotFoundError(name) from None

    def names(self) -> list[str]:
        return sorted(self._providers)

    def __contains__(self, name: str) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)

"""Currency conversion: rate sources and the converter used by transfers."""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from myfinance.domain.errors import ConversionUnavailableError, ValidationError

logger = logging.getLogger(__name__)

SUPPORTED_CURRENCIES = ("BRL", "USD", "EUR", "GBP", "JPY", "CAD", "AUD")

EXCHANGE_API_URL = "https://v6.exchangerate-api.com/v6"


@dataclass(frozen=True)
class Conversion:
    """Result of converting an amount between currencies (major units)."""

    rate: float
    converted_amount: float


class RateSource(ABC):
    """Collaborator that resolves a conversion rate for a currency pair."""

    @abstractmethod
    def get_rate(self, from_currency: str, to_currency: str, amount: float) -> tuple[float, float]:
        """Return (conversion rate, converted amount) for the pair.

        Raises:
            ConversionUnavailableError: If the pair cannot be resolved
        """
        pass


class FixedRateSource(RateSource):
    """Deterministic rate table for environments without network access."""

    DEFAULT_RATES = {
        ("BRL", "USD"): 0.20,
        ("USD", "BRL"): 5.00,
        ("BRL", "EUR"): 0.18,
        ("EUR", "BRL"): 5.56,
        ("USD", "EUR"): 0.85,
        ("EUR", "USD"): 1.18,
    }

    def __init__(self, rates: Optional[dict[tuple[str, str], float]] = None):
        self.rates = dict(self.DEFAULT_RATES if rates is None else rates)

    def get_rate(self, from_currency: str, to_currency: str, amount: float) -> tuple[float, float]:
        if from_currency == to_currency:
            return 1.0, amount
        rate = self.rates.get((from_currency, to_currency))
        if rate is None:
            raise ConversionUnavailableError(
                f"Exchange rate not available for {from_currency} -> {to_currency}"
            )
        return rate, amount * rate


class ExchangeRateAPISource(RateSource):
    """Live rate source backed by the ExchangeRate-API pair endpoint."""

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
        base_url: str = EXCHANGE_API_URL,
    ):
        """Initialize the live rate source.

        Args:
            api_key: ExchangeRate-API key
            session: Optional requests session (tests inject a stub)
            timeout: Per-request timeout in seconds
            base_url: API base URL
        """
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    @retry(
        retry=retry_if_exception_type(requests.ConnectionError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, max=4),
        reraise=True,
    )
    def _fetch(self, url: str) -> requests.Response:
        return self.session.get(url, timeout=self.timeout)

    def get_rate(self, from_currency: str, to_currency: str, amount: float) -> tuple[float, float]:
        if from_currency == to_currency:
            return 1.0, amount

        url = f"{self.base_url}/{self.api_key}/pair/{from_currency}/{to_currency}/{amount:.2f}"
        try:
            response = self._fetch(url)
        except requests.RequestException as e:
            raise ConversionUnavailableError(
                f"Exchange rate request failed for {from_currency} -> {to_currency}: {e}"
            ) from e

        if response.status_code != 200:
            raise ConversionUnavailableError(
                f"Exchange rate API returned status {response.status_code} "
                f"for {from_currency} -> {to_currency}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ConversionUnavailableError("Exchange rate API returned invalid JSON") from e

        if body.get("result") != "success":
            raise ConversionUnavailableError(
                f"Exchange rate API error: {body.get('error-type', body.get('result'))}"
            )
        try:
            return float(body["conversion_rate"]), float(body["conversion_result"])
        except (KeyError, TypeError, ValueError) as e:
            raise ConversionUnavailableError("Exchange rate API response is incomplete") from e


def create_rate_source(api_key: Optional[str] = None) -> RateSource:
    """Create the active rate source.

    Args:
        api_key: ExchangeRate-API key. If None, checks EXCHANGE_API_KEY; with
            no key configured the fixed rate table is used.
    """
    if api_key is None:
        api_key = os.environ.get("EXCHANGE_API_KEY")
    if api_key:
        return ExchangeRateAPISource(api_key)
    logger.info("EXCHANGE_API_KEY not set; using fixed exchange rates")
    return FixedRateSource()


class CurrencyConverter:
    """Resolve conversion rates, honouring manual overrides."""

    def __init__(self, rate_source: RateSource):
        self.rate_source = rate_source

    @staticmethod
    def validate_currency(currency: str) -> str:
        """Return the normalized currency code or raise ValidationError."""
        code = (currency or "").strip().upper()
        if code not in SUPPORTED_CURRENCIES:
            raise ValidationError(f"Unsupported currency '{currency}'")
        return code

    def convert(
        self,
        from_currency: str,
        to_currency: str,
        amount: float,
        manual_rate: Optional[float] = None,
    ) -> Conversion:
        """Convert a major-unit amount between currencies.

        Args:
            from_currency: Source currency code
            to_currency: Target currency code
            amount: Amount in major units of the source currency
            manual_rate: Explicit rate overriding the rate source

        Returns:
            Conversion with the rate used and the converted amount

        Raises:
            ValidationError: If a currency is unsupported or the manual rate is not positive
            ConversionUnavailableError: If the rate source cannot resolve the pair
        """
        from_currency = self.validate_currency(from_currency)
        to_currency = self.validate_currency(to_currency)

        if from_currency == to_currency:
            return Conversion(rate=1.0, converted_amount=amount)

        if manual_rate is not None:
            if manual_rate <= 0:
                raise ValidationError("Manual exchange rate must be positive")
            return Conversion(rate=manual_rate, converted_amount=amount * manual_rate)

        rate, converted = self.rate_source.get_rate(from_currency, to_currency, amount)
        return Conversion(rate=rate, converted_amount=converted)

    def get_rate(self, from_currency: str, to_currency: str) -> float:
        """Return the rate for one unit of the source currency."""
        return self.convert(from_currency, to_currency, 1.0).rate

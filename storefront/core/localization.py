# storefront/core/localization.py

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, Optional


class Language(str, Enum):
    RU = "ru"
    EN = "en"


class Currency(str, Enum):
    RUB = "RUB"
    KZT = "KZT"
    USD = "USD"


# Catalog prices are stored in RUB
EXCHANGE_RATES: Dict[Currency, Decimal] = {
    Currency.RUB: Decimal("1"),
    Currency.KZT: Decimal("5.5"),
    Currency.USD: Decimal("0.011"),
}

CURRENCY_SYMBOLS: Dict[Currency, str] = {
    Currency.RUB: "₽",
    Currency.KZT: "₸",
    Currency.USD: "$",
}

# Thousands separator per language
GROUP_SEPARATORS: Dict[Language, str] = {
    Language.RU: " ",
    Language.EN: ",",
}

ORDER_STATUS_LABELS: Dict[Language, Dict[str, str]] = {
    Language.RU: {
        "PENDING": "В обработке",
        "PROCESSING": "Комплектуется",
        "SHIPPED": "Отправлен",
        "DELIVERED": "Доставлен",
        "CANCELLED": "Отменён",
    },
    Language.EN: {
        "PENDING": "Pending",
        "PROCESSING": "Processing",
        "SHIPPED": "Shipped",
        "DELIVERED": "Delivered",
        "CANCELLED": "Cancelled",
    },
}


@dataclass(frozen=True)
class LocalizationConfig:
    """Display settings for one request, passed explicitly to formatters."""
    language: Language = Language.RU
    currency: Currency = Currency.RUB

    @classmethod
    def from_params(cls, language: Optional[str], currency: Optional[str]) -> Optional["LocalizationConfig"]:
        if language is None and currency is None:
            return None
        return cls(
            language=Language(language) if language else Language.RU,
            currency=Currency(currency.upper()) if currency else Currency.RUB,
        )

    def convert(self, amount: Decimal) -> Decimal:
        return Decimal(amount) * EXCHANGE_RATES[self.currency]

    def format_price(self, amount: Decimal) -> str:
        """Whole units, grouped, with the currency symbol placed per language."""
        value = self.convert(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        number = f"{int(value):,}".replace(",", GROUP_SEPARATORS[self.language])
        symbol = CURRENCY_SYMBOLS[self.currency]
        if self.language == Language.RU:
            return f"{number} {symbol}"
        return f"{symbol}{number}"

    def status_label(self, status: str) -> str:
        return ORDER_STATUS_LABELS[self.language].get(status, status)

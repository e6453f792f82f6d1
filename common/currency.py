"""
Locale aware currency formatting for job output
"""

from typing import Optional

from babel import Locale, UnknownLocaleError
from babel.numbers import format_currency as babel_format_currency
from babel.numbers import get_territory_currencies, is_currency

from common.errors import ConfigError

DEFAULT_LOCALE = 'en_US'


def resolve_currency(locale: str, currency: Optional[str] = None) -> str:
    """
    Validate a locale and pick the currency used to format amounts

    Args:
        locale: Locale identifier such as 'en_US' or 'de_DE'
        currency: ISO 4217 code; derived from the locale's territory when omitted

    Returns:
        The ISO 4217 currency code

    Raises:
        ConfigError: If the locale is unknown or no currency can be determined
    """
    try:
        parsed = Locale.parse(locale)
    except (UnknownLocaleError, ValueError, TypeError) as e:
        raise ConfigError(f"Unknown locale: {locale!r}") from e

    if currency:
        code = currency.upper()
        if not is_currency(code):
            raise ConfigError(f"Unknown currency code: {currency!r}")
        return code

    if not parsed.territory:
        raise ConfigError(
            f"Locale {locale!r} has no territory; pass an explicit currency"
        )
    currencies = get_territory_currencies(parsed.territory, tender=True)
    if not currencies:
        raise ConfigError(f"No currency in use for territory {parsed.territory!r}")
    return currencies[0]


def format_currency(value: float, locale: str = DEFAULT_LOCALE, currency: str = 'USD') -> str:
    """Render an amount with the locale's grouping, fraction digits and currency sign"""
    return babel_format_currency(value, currency, locale=locale)

import logging
from config import DEFAULT_FAVORITE_CURRENCIES
from utils import ErrorNotice, format_conversion, parse_currency_list, parse_query

logger = logging.getLogger(__name__)

MISSING_API_KEY = "Currency Converter: please set your API key in plugin settings"
FETCH_FAILED = "Currency Converter: failed to fetch exchange rates. Check your API key."


def handle_query(search, api_key, favorite_currencies, currency_api):
    """Turn a raw query into conversion records.

    Returns an empty list when the text is not a currency query, a single
    ErrorNotice when the key is missing or rates are unavailable, otherwise
    one ConversionRecord per resolved target in query order.
    """
    search = (search or '').strip()
    if not search:
        return []

    parsed = parse_query(search)
    if not parsed.is_valid or parsed.base_currency is None:
        return []

    if not api_key or not api_key.strip():
        return [ErrorNotice(MISSING_API_KEY)]

    targets = list(parsed.target_currencies)
    if not targets:
        favorites = favorite_currencies
        if not favorites or not favorites.strip():
            favorites = DEFAULT_FAVORITE_CURRENCIES
        targets = parse_currency_list(favorites)

    targets = [code for code in targets if code != parsed.base_currency]
    if not targets:
        return []

    amount = parsed.amount if parsed.amount is not None else '1'

    lookup = currency_api.resolve_rates(api_key, parsed.base_currency, targets, amount)
    if not lookup.ok or not lookup.rates:
        logger.warning(f"Нет курсов для {parsed.base_currency} -> {','.join(targets)}")
        return [ErrorNotice(FETCH_FAILED)]

    results = []
    for target in targets:
        rate = lookup.rates.get(target)
        if rate is None:
            continue
        results.append(format_conversion(parsed.base_currency, target, amount, rate))
    return results

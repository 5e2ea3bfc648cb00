import requests
import logging
from dataclasses import dataclass
from typing import Dict, Optional
from config import API_BASE_URL, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLookup:
    rates: Optional[Dict[str, float]] = None

    @property
    def ok(self):
        return self.rates is not None

    @classmethod
    def success(cls, rates):
        return cls(rates=dict(rates))

    @classmethod
    def failure(cls):
        return cls(rates=None)


class CurrencyAPI:
    def __init__(self, base_url=API_BASE_URL, timeout=REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _fetch(self, url):
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()

            if data.get('result') != 'success':
                logger.error(f"API вернул ошибку: {data.get('error-type', 'unknown')}")
                return None
            return data

        except requests.exceptions.RequestException as e:
            logger.error(f"Ошибка сети при запросе к API: {e}")
            return None
        except (AttributeError, ValueError) as e:
            logger.error(f"Ошибка парсинга ответа API: {e}")
            return None

    def get_pair_rate(self, api_key, from_currency, to_currency, amount):
        url = f"{self.base_url}/{api_key}/pair/{from_currency}/{to_currency}/{amount}"
        data = self._fetch(url)
        if not data:
            return None

        try:
            rate = float(data['conversion_rate'])
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"В ответе pair нет корректного conversion_rate: {e}")
            return None
        return rate if rate > 0 else None

    def get_all_rates(self, api_key, from_currency):
        url = f"{self.base_url}/{api_key}/latest/{from_currency}"
        data = self._fetch(url)
        if not data:
            return None

        api_rates = data.get('conversion_rates')
        if not isinstance(api_rates, dict):
            logger.error("В ответе latest нет conversion_rates")
            return None
        return api_rates

    def resolve_rates(self, api_key, base_currency, targets, amount):
        """Одна валюта: запрос pair. Несколько: один запрос latest."""
        if len(targets) == 1:
            target = targets[0]
            rate = self.get_pair_rate(api_key, base_currency, target, amount)
            if rate is None:
                return RateLookup.failure()
            return RateLookup.success({target: rate})

        all_rates = self.get_all_rates(api_key, base_currency)
        if all_rates is None:
            return RateLookup.failure()

        rates = {}
        for code in targets:
            rate = all_rates.get(code)
            if isinstance(rate, (int, float)) and not isinstance(rate, bool) and rate > 0:
                rates[code] = float(rate)
            else:
                logger.info(f"Валюта {code} отсутствует в курсах {base_currency}")
        return RateLookup.success(rates)

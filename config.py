import os
from dotenv import load_dotenv

load_dotenv()

TOKEN = os.getenv('TELEGRAM_TOKEN')
EXCHANGE_API_KEY = os.getenv('EXCHANGE_API_KEY', '')

API_BASE_URL = os.getenv('API_BASE_URL', 'https://v6.exchangerate-api.com/v6')
REQUEST_TIMEOUT = float(os.getenv('REQUEST_TIMEOUT', '10'))

DEFAULT_FAVORITE_CURRENCIES = 'USD,EUR'
FAVORITE_CURRENCIES = os.getenv('FAVORITE_CURRENCIES', DEFAULT_FAVORITE_CURRENCIES)

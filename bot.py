import asyncio
import logging
from telegram import CopyTextButton, InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import Application, CommandHandler, ContextTypes, MessageHandler, filters
from telegram.helpers import escape_markdown
from config import TOKEN, EXCHANGE_API_KEY, FAVORITE_CURRENCIES
from converter import handle_query
from currency_api import CurrencyAPI
from utils import ErrorNotice, parse_currency_list


logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=logging.INFO
)
logging.getLogger('httpx').setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

API_KEY_SETTING = 'apiKey'
FAVORITES_SETTING = 'favoriteCurrencies'

DEFAULT_SETTINGS = {
    API_KEY_SETTING: EXCHANGE_API_KEY,
    FAVORITES_SETTING: FAVORITE_CURRENCIES,
}

USAGE_HINT = (
    "🔄 Примеры:\n"
    "• 100 usd to eur\n"
    "• usd to eur,gbp\n"
    "• 50 usd → в избранные валюты"
)


def get_setting(context, key):
    value = context.user_data.get(key)
    if value:
        return value
    return DEFAULT_SETTINGS.get(key, '')


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    user = update.effective_user

    welcome_text = (
        f"Привет, {user.first_name}! 👋\n\n"
        "🤖 *Я бот-конвертер валют*\n\n"
        "📊 *Доступные команды:*\n"
        "• /start - Начальное сообщение\n"
        "• /help - Помощь и инструкции\n"
        "• /apikey - Ключ exchangerate-api.com\n"
        "• /favorites - Избранные валюты\n\n"
        "💡 *Просто отправьте запрос:*\n"
        "`100 usd to eur`\n"
        "`usd to eur,gbp`"
    )

    await update.message.reply_text(welcome_text, parse_mode='Markdown')


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    favorites = get_setting(context, FAVORITES_SETTING)
    help_text = (
        "📖 *Справочная информация*\n\n"
        "🔹 *Формат запроса:*\n"
        "`[сумма] <валюта> [to <валюта>[,<валюта>...]]`\n\n"
        "🔹 *Примеры:*\n"
        "`100 usd to eur` - одна валюта\n"
        "`usd to eur,gbp` - курс к нескольким валютам\n"
        "`50 usd` - в избранные валюты\n\n"
        f"🔹 *Избранные валюты:* {escape_markdown(favorites or '-')}\n"
        "Изменить: `/favorites USD,EUR,GBP`\n\n"
        "🔹 *Ключ API:* `/apikey <ключ>`"
    )
    await update.message.reply_text(help_text, parse_mode='Markdown')


async def apikey_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    args = context.args
    if not args:
        if get_setting(context, API_KEY_SETTING):
            await update.message.reply_text("🔑 Ключ API задан. Новый: /apikey <ключ>")
        else:
            await update.message.reply_text("🔑 Ключ API не задан. Используйте: /apikey <ключ>")
        return

    context.user_data[API_KEY_SETTING] = args[0].strip()
    await update.message.reply_text("✅ Ключ API сохранён.")


async def favorites_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    args = context.args
    if not args:
        favorites = get_setting(context, FAVORITES_SETTING)
        await update.message.reply_text(f"⭐ Избранные валюты: {favorites or '-'}")
        return

    codes = parse_currency_list(','.join(args))
    if not codes:
        await update.message.reply_text("❌ Не найдено ни одного кода валюты. Пример: /favorites USD,EUR")
        return

    context.user_data[FAVORITES_SETTING] = ','.join(codes)
    await update.message.reply_text(f"✅ Избранные валюты: {','.join(codes)}")


def build_copy_keyboard(copy_text):
    button = InlineKeyboardButton("📋 Копировать", copy_text=CopyTextButton(text=copy_text))
    return InlineKeyboardMarkup([[button]])


async def send_results(update: Update, results):
    if not results:
        await update.message.reply_text(USAGE_HINT)
        return

    for result in results:
        if isinstance(result, ErrorNotice):
            await update.message.reply_text(f"⚠️ {result.title}")
            continue

        text = f"*{escape_markdown(result.title)}*\n{escape_markdown(result.subtitle)}"
        await update.message.reply_text(
            text,
            parse_mode='Markdown',
            reply_markup=build_copy_keyboard(result.copy_text)
        )


async def handle_text_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
    text = update.message.text.strip()
    if text.lower().strip(' /') == 'start':
        await start(update, context)
        return

    currency_api = context.bot_data.get('currency_api') or CurrencyAPI()
    results = await asyncio.to_thread(
        handle_query,
        text,
        get_setting(context, API_KEY_SETTING),
        get_setting(context, FAVORITES_SETTING),
        currency_api,
    )
    await send_results(update, results)


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE):
    """Обработчик ошибок"""
    logger.error(f"Ошибка: {context.error}", exc_info=context.error)

    if isinstance(update, Update) and update.effective_message:
        await update.effective_message.reply_text(
            "❌ Произошла ошибка. Попробуйте позже или используйте /help"
        )


async def post_init(application: Application):
    logger.info("CurrencyConverter initialized")


def build_application(token=TOKEN):
    application = Application.builder().token(token).post_init(post_init).build()
    application.bot_data['currency_api'] = CurrencyAPI()
    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("apikey", apikey_command))
    application.add_handler(CommandHandler("favorites", favorites_command))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text_message))
    application.add_error_handler(error_handler)
    return application


def main():
    if not TOKEN:
        logger.critical("TELEGRAM_TOKEN не найден в .env")
        return

    application = build_application()
    print("🤖 Бот запущен...")
    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == '__main__':
    main()

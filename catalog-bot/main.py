"""
AI Catalog Bot

Telegram bot that turns shared links into categorized entries of a JSON
catalog stored on GitHub.

Responsibilities:
- Receive Telegram text messages and forward them to the conversation controller
- Render category options as a one-time reply keyboard
- Serve a health check endpoint reporting uptime and enabled integrations

Does NOT:
- Retry failed extractions or catalog writes (the user re-sends)
- Persist pending selections across restarts
"""

import functions_framework
from dotenv import load_dotenv
from flask import Flask, request as flask_request
from telegram import ReplyKeyboardMarkup, Update
from telegram.ext import Application, ContextTypes, MessageHandler, filters
import os
import sys
import json
import threading
import time
from datetime import datetime, timezone

# Make ai_catalog importable when running from a checkout
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from ai_catalog.analysis_client import AnalysisClient
from ai_catalog.catalog_writer import CatalogWriter
from ai_catalog.config import Settings, load_settings
from ai_catalog.content_extractor import ContentExtractor
from ai_catalog.conversation import ConversationController, Reply

SERVICE_NAME = 'AI Catalog Bot'

_started_at = time.time()

# Which integrations initialized; reported by the health check
_service_status = {'telegram': False, 'analysis': False, 'catalog': False}


@functions_framework.http
def health_check(request):
    """
    Health check entry point.

    GET / returns process uptime and integration status. Any other method or
    path returns 404.
    """
    if request.method != 'GET' or request.path != '/':
        return ('Not Found', 404, {'Content-Type': 'text/plain'})

    body = {
        'status': 'OK',
        'service': SERVICE_NAME,
        'uptime': round(time.time() - _started_at, 3),
        'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        'services': dict(_service_status),
    }
    return (json.dumps(body), 200, {'Content-Type': 'application/json'})


def create_health_app() -> Flask:
    """Flask app serving health_check on every path."""
    app = Flask(__name__)

    def _view(path=''):
        return health_check(flask_request)

    app.add_url_rule('/', 'health', _view, methods=['GET', 'POST', 'PUT', 'DELETE'])
    app.add_url_rule('/<path:path>', 'not_found', _view, methods=['GET', 'POST', 'PUT', 'DELETE'])
    return app


def start_health_server(port: int) -> threading.Thread:
    """Serve the health check in a daemon thread."""
    app = create_health_app()
    thread = threading.Thread(
        target=app.run,
        kwargs={'host': '0.0.0.0', 'port': port, 'use_reloader': False},
        daemon=True,
    )
    thread.start()
    print(f"🌐 Health check server running on port {port}")
    return thread


def build_keyboard(options):
    """One label per row, hidden after a tap."""
    if not options:
        return None
    return ReplyKeyboardMarkup(
        [[option] for option in options],
        one_time_keyboard=True,
        resize_keyboard=True,
    )


def build_controller(settings: Settings) -> ConversationController:
    """Wire the extractor, writer and analysis client from settings."""
    analysis = AnalysisClient.from_settings(settings)
    writer = CatalogWriter.from_settings(settings)
    extractor = ContentExtractor(analysis, timeout=settings.request_timeout)

    _service_status['analysis'] = analysis.enabled
    _service_status['catalog'] = writer.enabled

    if not analysis.enabled:
        print("⚠️ GEMINI_API_KEY not set - AI analysis disabled, using fallbacks")
    if not writer.enabled:
        print("⚠️ GitHub token/owner/repo not set - catalog writes disabled")

    return ConversationController(extractor, writer, analysis=analysis)


async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Forward a text message (commands included) to the controller."""
    message = update.effective_message
    if not message or not message.text:
        return

    controller: ConversationController = context.application.bot_data['controller']

    async def send(reply: Reply) -> None:
        await message.reply_text(reply.text, reply_markup=build_keyboard(reply.options))

    await controller.handle_message(update.effective_chat.id, message.text, send)


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    print(f"❌ Telegram error: {context.error!r}")


def build_application(settings: Settings, controller: ConversationController) -> Application:
    application = (
        Application.builder()
        .token(settings.telegram_bot_token)
        .concurrent_updates(True)
        .build()
    )
    application.bot_data['controller'] = controller
    application.add_handler(MessageHandler(filters.TEXT, handle_text))
    application.add_error_handler(handle_error)
    return application


def main():
    """Process entry point."""
    load_dotenv()
    settings = load_settings()
    controller = build_controller(settings)

    if not settings.telegram_enabled:
        print("⚠️ TELEGRAM_BOT_TOKEN not set - chat disabled, serving health check only")
        create_health_app().run(host='0.0.0.0', port=settings.port, use_reloader=False)
        return

    start_health_server(settings.port)

    application = build_application(settings, controller)
    _service_status['telegram'] = True
    print("🤖 AI Catalog Bot started!")

    # run_polling stops cleanly on SIGINT/SIGTERM
    application.run_polling(allowed_updates=Update.ALL_TYPES)
    print("🛑 Bot shut down")


if __name__ == '__main__':
    main()

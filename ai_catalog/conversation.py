"""
Conversation Controller

Drives the per-conversation flow:

    Idle --URL--> extract --> AwaitingCategory --label--> write --> Idle

Each conversation has one PendingSession at most. While a session is
active every non-command message is treated as a category label.
Commands (/start, /restart, /help, /cancel, /exit, /ask) work in any state.

The controller is transport-agnostic: replies are handed to an async
``send`` callable as Reply objects.
"""

import asyncio
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Hashable, List, Optional, Tuple

from .analysis_client import AnalysisClient
from .analysis_utils import build_question_prompt
from .catalog_writer import CatalogWriter
from .categories import CATEGORY_LABELS, resolve_category
from .content_extractor import ContentExtractor
from .errors import AnalysisError, ExtractionError, InvalidCategoryError, PersistenceError
from .session_store import InMemorySessionStore, PendingSession, SessionStore
from .title_utils import truncate_title

# Keeps the category prompt well under the chat message size limit
MAX_PROMPT_TITLE_LENGTH = 200
MAX_PROMPT_DESCRIPTION_LENGTH = 1000

URL_PATTERN = re.compile(r'https?://\S+')
TRAILING_PUNCTUATION = '.,;:!?'

WELCOME_TEXT = """👋 Hi! I'm your AI Catalog Bot.

Send me any AI-related link and I'll automatically:
• Extract the content
• Categorize it (content, tools, prompts, people)
• Save it to your GitHub portfolio

Just paste a link to get started!"""

HELP_TEXT = """ℹ️ How to use the AI Catalog Bot

1. Send a message containing a link
2. Check the extracted title and description
3. Pick a category: Content, Tools, Prompts or People
4. The entry is saved to your catalog, newest first

Commands:
/start or /restart - Reset and show the welcome message
/help - This help message
/cancel or /exit - Discard the link waiting for a category
/ask <question> - Ask the AI a question"""

ANALYZING_TEXT = '🔍 Analyzing link...'
EXTRACTION_FAILED_TEXT = '❌ Failed to extract content from the URL. Please try again.'
ADDING_TEXT = '⏳ Adding to catalog...'
ADDED_TEXT = '✅ Successfully added to your AI catalog!'
SAVE_FAILED_TEXT = '❌ Failed to add to catalog. Pick a category to try again, or /cancel.'
SAVE_CONFLICT_TEXT = ('❌ The catalog was changed by someone else while saving. '
                      'Pick a category to try again, or /cancel.')
CANCELLED_TEXT = '🚫 Cancelled. Send me another link whenever you like.'
NOTHING_TO_CANCEL_TEXT = 'Nothing to cancel. Send me a link to get started!'
ASK_USAGE_TEXT = 'Usage: /ask <question>'
ASK_FAILED_TEXT = "❌ I couldn't answer that right now. Please try again."
GENERIC_ERROR_TEXT = '❌ Something went wrong. Please try again.'


@dataclass
class Reply:
    """Outbound message; options are offered as one-tap shortcuts."""
    text: str
    options: Optional[List[str]] = None


SendFunc = Callable[[Reply], Awaitable[None]]


def find_first_url(text: str) -> Optional[str]:
    """Return the first http(s) URL in text, without trailing punctuation."""
    match = URL_PATTERN.search(text or '')
    if not match:
        return None
    return match.group().rstrip(TRAILING_PUNCTUATION) or None


def parse_command(text: str) -> Tuple[Optional[str], str]:
    """
    Split "/cmd@botname args" into ("cmd", "args").

    Returns (None, text) when the message is not a command.
    """
    stripped = (text or '').strip()
    if not stripped.startswith('/'):
        return None, stripped
    head, _, rest = stripped.partition(' ')
    command = head[1:].split('@', 1)[0].lower()
    return (command or None), rest.strip()


def format_category_prompt(title: str, description: str) -> str:
    title, _ = truncate_title(title, MAX_PROMPT_TITLE_LENGTH)
    description, _ = truncate_title(description, MAX_PROMPT_DESCRIPTION_LENGTH)
    return (
        '✨ Content extracted!\n\n'
        f'Title: {title}\n'
        f'Description: {description}\n\n'
        'Which category should this go in?'
    )


def format_invalid_category(options: List[str]) -> str:
    lines = '\n'.join(f'• {label}' for label in options)
    return f'❌ Please select a valid category using the buttons:\n{lines}'


class ConversationController:
    """Orchestrates extraction, category selection and catalog writes."""

    def __init__(
        self,
        extractor: ContentExtractor,
        writer: CatalogWriter,
        sessions: Optional[SessionStore] = None,
        analysis: Optional[AnalysisClient] = None,
    ):
        self._extractor = extractor
        self._writer = writer
        self._sessions = sessions if sessions is not None else InMemorySessionStore()
        self._analysis = analysis
        # chat_id -> [lock, number of messages holding or waiting for it]
        self._locks: Dict[Hashable, List] = {}

    @property
    def sessions(self) -> SessionStore:
        return self._sessions

    @property
    def active_conversations(self) -> int:
        """Number of conversations with a message in progress."""
        return len(self._locks)

    def _acquire_slot(self, chat_id: Hashable) -> asyncio.Lock:
        slot = self._locks.get(chat_id)
        if slot is None:
            slot = self._locks[chat_id] = [asyncio.Lock(), 0]
        slot[1] += 1
        return slot[0]

    def _release_slot(self, chat_id: Hashable) -> None:
        slot = self._locks[chat_id]
        slot[1] -= 1
        if slot[1] == 0:
            del self._locks[chat_id]

    async def handle_message(self, chat_id: Hashable, text: Optional[str], send: SendFunc) -> None:
        """Handle one inbound text message; messages per chat are serialized."""
        if not text or not text.strip():
            return

        lock = self._acquire_slot(chat_id)
        try:
            async with lock:
                try:
                    await self._dispatch(chat_id, text, send)
                except Exception as e:
                    print(f"❌ Error handling message from {chat_id}: {e!r}")
                    await send(Reply(GENERIC_ERROR_TEXT))
        finally:
            self._release_slot(chat_id)

    async def _dispatch(self, chat_id: Hashable, text: str, send: SendFunc) -> None:
        command, argument = parse_command(text)

        if command in ('start', 'restart'):
            self._sessions.delete(chat_id)
            await send(Reply(WELCOME_TEXT))
            return
        if command == 'help':
            await send(Reply(HELP_TEXT))
            return
        if command in ('cancel', 'exit'):
            if self._sessions.delete(chat_id):
                await send(Reply(CANCELLED_TEXT))
            else:
                await send(Reply(NOTHING_TO_CANCEL_TEXT))
            return
        if command == 'ask':
            await self._answer_question(argument, send)
            return

        session = self._sessions.get(chat_id)
        if session is not None:
            await self._handle_category_selection(chat_id, session, text, send)
            return

        url = find_first_url(text)
        if url:
            await self._process_url(chat_id, url, send)
        else:
            await send(Reply(WELCOME_TEXT))

    async def _process_url(self, chat_id: Hashable, url: str, send: SendFunc) -> None:
        await send(Reply(ANALYZING_TEXT))

        try:
            extracted = await asyncio.to_thread(self._extractor.extract, url)
        except ExtractionError as e:
            print(f"❌ Error extracting content from {url}: {e}")
            await send(Reply(EXTRACTION_FAILED_TEXT))
            return

        # Only wait for a label once the user has actually seen the options
        await send(Reply(
            format_category_prompt(extracted.title, extracted.description),
            options=list(CATEGORY_LABELS),
        ))
        self._sessions.set(chat_id, PendingSession(extracted=extracted, url=url))

    async def _handle_category_selection(
        self,
        chat_id: Hashable,
        session: PendingSession,
        label: str,
        send: SendFunc,
    ) -> None:
        try:
            category_key = resolve_category(label)
        except InvalidCategoryError:
            await send(Reply(format_invalid_category(CATEGORY_LABELS), options=list(CATEGORY_LABELS)))
            return

        await send(Reply(ADDING_TEXT))

        try:
            await asyncio.to_thread(self._writer.add, session.extracted, category_key, session.url)
        except PersistenceError as e:
            print(f"❌ Error adding to catalog: {e}")
            text = SAVE_CONFLICT_TEXT if e.conflict else SAVE_FAILED_TEXT
            await send(Reply(text, options=list(CATEGORY_LABELS)))
            return

        self._sessions.delete(chat_id)
        await send(Reply(ADDED_TEXT))

    async def _answer_question(self, question: str, send: SendFunc) -> None:
        if not question:
            await send(Reply(ASK_USAGE_TEXT))
            return
        if self._analysis is None:
            await send(Reply(ASK_FAILED_TEXT))
            return

        try:
            answer = await asyncio.to_thread(self._analysis.generate, build_question_prompt(question))
        except AnalysisError as e:
            print(f"⚠️ Question answering failed: {e}")
            await send(Reply(ASK_FAILED_TEXT))
            return

        await send(Reply(answer or ASK_FAILED_TEXT))

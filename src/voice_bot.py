"""
Voice bot — one entry point per webhook, each running a full turn.

A turn is: load the call's session, classify the input, let the dialog
engine pick the next state and prompt, save the session, and render the
prompt for the telephony layer. Failures in the session store, booking
store or classifier are absorbed below this layer, so every entry point
returns markup.

Usage:
    bot = VoiceBot.build(session_store=RedisSessionStore.from_config(settings.redis))
    twiml = await bot.greeting("CA123")
    twiml = await bot.menu_choice("CA123", "1")
"""

from datetime import date
from typing import Callable, Optional

from src.conversation.contexts import DialogContext
from src.conversation.dialog_engine import DialogEngine, TurnResult
from src.conversation.interpreter import InputInterpreter
from src.logging_context import call_context, get_call_logger
from src.schemas.session_schema import Session, SessionPatch, apply_patch
from src.session.manager import SessionManager
from src.session.store import RedisSessionStore
from src.telephony.twiml import PromptRenderer, TwiMLRenderer
from src.tools.booking import BookingRepository, InMemoryBookingRepository
from src.tools.classifier import IntentClassifier
from src.utils import normalize_phone

logger = get_call_logger(__name__)


class VoiceBot:
    """Turn orchestration for every dialog context."""

    def __init__(
        self,
        sessions: SessionManager,
        interpreter: InputInterpreter,
        engine: DialogEngine,
        renderer: PromptRenderer,
    ) -> None:
        self.sessions = sessions
        self.interpreter = interpreter
        self.engine = engine
        self.renderer = renderer

    @classmethod
    def build(
        cls,
        session_store: Optional[RedisSessionStore] = None,
        bookings: Optional[BookingRepository] = None,
        classifier: Optional[IntentClassifier] = None,
        renderer: Optional[PromptRenderer] = None,
        today: Callable[[], date] = date.today,
    ) -> "VoiceBot":
        """Wire the default collaborators. Without a session store the bot runs in degraded mode."""
        return cls(
            sessions=SessionManager(session_store),
            interpreter=InputInterpreter(classifier),
            engine=DialogEngine(bookings or InMemoryBookingRepository(), today=today),
            renderer=renderer or TwiMLRenderer(),
        )

    async def run_turn(
        self,
        context: DialogContext,
        call_id: str,
        raw_input: Optional[str] = None,
        caller_phone: Optional[str] = None,
    ) -> TurnResult:
        """Load → classify → transition → save. Returns the engine's result with the saved session.

        ``caller_phone`` is the telephony caller ID. It is recorded on the
        booking draft the first time it is seen so bookings made on this call
        can later be found by phone number.
        """
        with call_context(call_id):
            session = _with_caller_phone(await self.sessions.load(call_id), caller_phone)
            intent = await self.interpreter.classify(raw_input, context)
            result = await self.engine.transition(context, session, raw_input, intent)
            result.session = await self.sessions.save(call_id, result.session)
            return result

    async def handle(
        self,
        context: DialogContext,
        call_id: str,
        raw_input: Optional[str] = None,
        caller_phone: Optional[str] = None,
    ) -> str:
        result = await self.run_turn(context, call_id, raw_input, caller_phone)
        return self.renderer.render(result.directive)

    async def greeting(self, call_id: str, raw_input: Optional[str] = None) -> str:
        return await self.handle(DialogContext.GREETING, call_id, raw_input)

    async def menu_choice(self, call_id: str, raw_input: Optional[str]) -> str:
        return await self.handle(DialogContext.MENU_CHOICE, call_id, raw_input)

    async def booking_date(self, call_id: str, raw_input: Optional[str]) -> str:
        return await self.handle(DialogContext.BOOKING_DATE, call_id, raw_input)

    async def booking_time(self, call_id: str, raw_input: Optional[str]) -> str:
        return await self.handle(DialogContext.BOOKING_TIME, call_id, raw_input)

    async def booking_confirmation(self, call_id: str, raw_input: Optional[str]) -> str:
        return await self.handle(DialogContext.BOOKING_CONFIRMATION, call_id, raw_input)

    async def booking_lookup(self, call_id: str, raw_input: Optional[str]) -> str:
        return await self.handle(DialogContext.BOOKING_LOOKUP, call_id, raw_input)

    async def post_booking(self, call_id: str, raw_input: Optional[str]) -> str:
        return await self.handle(DialogContext.POST_BOOKING, call_id, raw_input)

    async def post_action(self, call_id: str, raw_input: Optional[str]) -> str:
        return await self.handle(DialogContext.POST_ACTION, call_id, raw_input)

    async def support_transfer(self, call_id: str, raw_input: Optional[str]) -> str:
        return await self.handle(DialogContext.SUPPORT_TRANSFER, call_id, raw_input)

    async def main_menu(self, call_id: str, raw_input: Optional[str] = None) -> str:
        return await self.handle(DialogContext.MAIN_MENU, call_id, raw_input)

    async def end_call(self, call_id: str) -> None:
        """Drop the session once the telephony layer reports the call finished."""
        with call_context(call_id):
            await self.sessions.delete(call_id)
            logger.info("Session removed after call ended")


def _with_caller_phone(session: Session, caller_phone: Optional[str]) -> Session:
    draft = session.booking_draft
    if not caller_phone or draft.customer_phone is not None:
        return session
    phone = normalize_phone(caller_phone)
    if not phone:
        return session
    return apply_patch(session, SessionPatch(booking_draft=draft.model_copy(update={"customer_phone": phone})))

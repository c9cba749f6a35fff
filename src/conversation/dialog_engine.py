"""
Dialog engine — the IVR state machine.

Given the dialog context a turn arrived on, the caller's session, the raw
input and its interpreted intent, the engine produces the updated session
and the next prompt directive. It never touches the session store; the
caller persists ``TurnResult.session``.

Every DialogContext has exactly one handler and every menu Intent has
exactly one route. Both tables are checked when the module is imported,
so adding a context or intent without wiring it fails fast.

Usage:
    engine = DialogEngine(bookings=InMemoryBookingRepository())
    result = await engine.transition(DialogContext.GREETING, session, None, Intent.UNKNOWN)
    assert result.session.state == CallState.MAIN_MENU
"""

import uuid
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from src.config import BusinessConfig, settings
from src.conversation.contexts import DialogContext
from src.conversation.input_parsing import parse_date_input, parse_time_input
from src.conversation.intents import (
    AFFIRMATIVE_WORDS,
    GOODBYE_WORDS,
    MENU_WORDS,
    NEGATIVE_WORDS,
    SUPPORT_WORDS,
    Intent,
)
from src.logging_context import get_call_logger
from src.prompts import ivr_prompts as prompts
from src.schemas.booking_schema import Booking
from src.schemas.prompt_schema import ExpectedInput, GatherSpec, PromptDirective
from src.schemas.session_schema import (
    BookingDraft,
    CallState,
    Session,
    SessionPatch,
    apply_patch,
)
from src.tools.booking import BookingRepository
from src.utils import contains_word, normalize_phone

logger = get_call_logger(__name__)

MENU_TIMEOUT_SEC = 10
FREE_TEXT_TIMEOUT_SEC = 15
MIN_PHONE_DIGITS = 7


@dataclass
class TurnResult:
    """Outcome of one turn: the session to persist and what to say next."""
    session: Session
    directive: PromptDirective

    @property
    def state(self) -> CallState:
        return self.session.state


def _gather(
    context: DialogContext,
    timeout: int = MENU_TIMEOUT_SEC,
    expected_input: ExpectedInput = ExpectedInput.BOTH,
) -> GatherSpec:
    return GatherSpec(on_submit_path=context.path, timeout_seconds=timeout, expected_input=expected_input)


def _fresh_draft(previous: BookingDraft) -> BookingDraft:
    """Empty draft that keeps the caller's identity from ``previous``."""
    return BookingDraft(
        customer_name=previous.customer_name,
        customer_phone=previous.customer_phone,
    )


class DialogEngine:
    """Deterministic turn-by-turn IVR flow."""

    def __init__(
        self,
        bookings: BookingRepository,
        business: Optional[BusinessConfig] = None,
        retry_threshold: Optional[int] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._bookings = bookings
        self._business = business or settings.business
        self._retry_threshold = retry_threshold or settings.session.retry_escalation_threshold
        self._today = today

    async def transition(
        self,
        context: DialogContext,
        session: Session,
        raw_input: Optional[str],
        intent: Intent = Intent.UNKNOWN,
    ) -> TurnResult:
        handler = getattr(self, CONTEXT_HANDLERS[context])
        result = await handler(session, raw_input, intent)
        logger.info(
            "Turn %s: %s -> %s", context.value, session.state.value, result.state.value,
        )
        return result

    # --- Shared steps ---

    def _step(
        self,
        session: Session,
        state: CallState,
        message: str,
        gather: Optional[GatherSpec] = None,
        redirect_path: Optional[str] = None,
        **changes,
    ) -> TurnResult:
        updated = apply_patch(session, SessionPatch(state=state, **changes))
        return TurnResult(
            session=updated,
            directive=PromptDirective(message=message, gather=gather, redirect_path=redirect_path),
        )

    async def _greeting(self, session: Session, raw_input: Optional[str], intent: Intent) -> TurnResult:
        return self._step(
            session,
            CallState.MAIN_MENU,
            prompts.build_menu_prompt(self._business.name),
            _gather(DialogContext.MENU_CHOICE),
        )

    def _customer_support(self, session: Session, lead_in: Optional[str] = None) -> TurnResult:
        message = f"{lead_in} {prompts.CUSTOMER_SUPPORT}" if lead_in else prompts.CUSTOMER_SUPPORT
        return self._step(session, CallState.CUSTOMER_SUPPORT, message)

    def _goodbye(self, session: Session) -> TurnResult:
        return self._step(session, CallState.COMPLETED, prompts.GOODBYE)

    # --- Main menu ---

    async def _menu_choice(self, session: Session, raw_input: Optional[str], intent: Intent) -> TurnResult:
        if intent is Intent.UNKNOWN:
            return self._unknown_input(session)

        session = apply_patch(session, SessionPatch(retry_count=0))
        return await getattr(self, INTENT_ROUTES[intent])(session, intent)

    def _unknown_input(self, session: Session) -> TurnResult:
        retry_count = session.retry_count + 1
        if retry_count >= self._retry_threshold:
            logger.info("Unrecognized menu input %d time(s), escalating to support", retry_count)
            session = apply_patch(session, SessionPatch(retry_count=retry_count))
            return self._customer_support(session, prompts.ESCALATION_NOTICE)

        return self._step(
            session,
            CallState.MAIN_MENU,
            prompts.UNKNOWN_MENU_INPUT,
            _gather(DialogContext.MENU_CHOICE),
            retry_count=retry_count,
        )

    async def _route_book_appointment(self, session: Session, intent: Intent) -> TurnResult:
        draft = session.booking_draft
        if draft.is_persisted:
            draft = _fresh_draft(draft)
        return self._step(
            session,
            CallState.BOOKING_DATE,
            prompts.BOOK_APPOINTMENT,
            _gather(DialogContext.BOOKING_DATE, FREE_TEXT_TIMEOUT_SEC),
            booking_draft=draft,
        )

    async def _route_check_booking(self, session: Session, intent: Intent) -> TurnResult:
        return self._step(
            session,
            CallState.CHECK_BOOKING,
            prompts.CHECK_BOOKING,
            _gather(DialogContext.BOOKING_LOOKUP, FREE_TEXT_TIMEOUT_SEC, ExpectedInput.SPEECH),
        )

    async def _route_customer_support(self, session: Session, intent: Intent) -> TurnResult:
        return self._customer_support(session)

    async def _route_working_hours(self, session: Session, intent: Intent) -> TurnResult:
        return self._step(
            session,
            CallState.WORKING_HOURS,
            prompts.build_working_hours_prompt(self._business.working_hours),
            _gather(DialogContext.POST_ACTION),
        )

    async def _route_payment(self, session: Session, intent: Intent) -> TurnResult:
        return self._step(
            session,
            CallState.PAYMENT,
            prompts.PAYMENT_UNAVAILABLE,
            redirect_path=DialogContext.MAIN_MENU.path,
        )

    async def _route_reminder(self, session: Session, intent: Intent) -> TurnResult:
        return self._step(
            session,
            CallState.REMINDER,
            prompts.REMINDER_UNAVAILABLE,
            _gather(DialogContext.POST_ACTION),
        )

    async def _route_language(self, session: Session, intent: Intent) -> TurnResult:
        if session.language_selected:
            logger.info("Language already chosen (%s), ignoring %s", session.language, intent.value)
            changes = {}
        else:
            changes = {"language": intent.value, "language_selected": True}
        return self._step(
            session,
            CallState.MAIN_MENU,
            prompts.build_language_prompt(changes.get("language", session.language), bool(changes)),
            _gather(DialogContext.MENU_CHOICE),
            **changes,
        )

    # --- Booking flow ---

    async def _booking_date(self, session: Session, raw_input: Optional[str], intent: Intent) -> TurnResult:
        date_str = parse_date_input(raw_input, today=self._today())
        if date_str is None:
            return self._step(
                session,
                CallState.BOOKING_DATE,
                prompts.DATE_REPROMPT,
                _gather(DialogContext.BOOKING_DATE, FREE_TEXT_TIMEOUT_SEC),
            )

        draft = session.booking_draft
        if draft.is_persisted:
            draft = _fresh_draft(draft)
        return self._step(
            session,
            CallState.BOOKING_TIME,
            prompts.build_date_noted_prompt(date_str),
            _gather(DialogContext.BOOKING_TIME, FREE_TEXT_TIMEOUT_SEC),
            booking_draft=draft.model_copy(update={"date": date_str}),
        )

    async def _booking_time(self, session: Session, raw_input: Optional[str], intent: Intent) -> TurnResult:
        draft = session.booking_draft
        if draft.date is None or draft.is_persisted:
            return await self._route_book_appointment(session, Intent.BOOK_APPOINTMENT)

        time_str = parse_time_input(raw_input)
        if time_str is None:
            return self._step(
                session,
                CallState.BOOKING_TIME,
                prompts.TIME_REPROMPT,
                _gather(DialogContext.BOOKING_TIME, FREE_TEXT_TIMEOUT_SEC),
            )

        draft = draft.model_copy(update={"time": time_str, "id": uuid.uuid4().hex[:8]})
        try:
            await self._bookings.create(draft, session.call_id)
        except Exception:
            logger.exception("Error creating booking %s", draft.id)

        return self._step(
            session,
            CallState.BOOKING_CONFIRMATION,
            prompts.build_booking_scheduled_prompt(draft.date, time_str, draft.id),
            _gather(DialogContext.BOOKING_CONFIRMATION),
            booking_draft=draft,
        )

    async def _booking_confirmation(
        self, session: Session, raw_input: Optional[str], intent: Intent
    ) -> TurnResult:
        if contains_word(raw_input, AFFIRMATIVE_WORDS) and not contains_word(raw_input, NEGATIVE_WORDS):
            return self._step(
                session,
                CallState.COMPLETED,
                prompts.build_booking_confirmed_prompt(session.booking_draft.id or ""),
                _gather(DialogContext.POST_BOOKING),
            )

        return self._step(
            session,
            CallState.BOOKING_DATE,
            prompts.BOOKING_RESTART,
            _gather(DialogContext.BOOKING_DATE, FREE_TEXT_TIMEOUT_SEC),
            booking_draft=_fresh_draft(session.booking_draft),
        )

    # --- Booking lookup ---

    async def _booking_lookup(self, session: Session, raw_input: Optional[str], intent: Intent) -> TurnResult:
        query = (raw_input or "").strip()
        if not query:
            return self._step(
                session,
                CallState.CHECK_BOOKING,
                prompts.LOOKUP_REPROMPT,
                _gather(DialogContext.BOOKING_LOOKUP, FREE_TEXT_TIMEOUT_SEC, ExpectedInput.SPEECH),
            )

        try:
            booking = await self._find_booking(query)
        except Exception:
            logger.exception("Error looking up booking")
            booking = None

        if booking is None:
            return self._step(
                session,
                CallState.CHECK_BOOKING,
                prompts.BOOKING_NOT_FOUND,
                _gather(DialogContext.SUPPORT_TRANSFER),
            )

        return self._step(
            session,
            CallState.CHECK_BOOKING,
            prompts.build_booking_found_prompt(booking),
            _gather(DialogContext.POST_ACTION),
        )

    async def _find_booking(self, query: str) -> Optional[Booking]:
        """By ID, then customer name, then phone number. Newest match wins."""
        booking = await self._bookings.find_by_id(query)
        if booking is not None:
            return booking

        by_name = await self._bookings.find_by_name(query)
        if by_name:
            return by_name[0]

        if len(normalize_phone(query).lstrip("+")) >= MIN_PHONE_DIGITS:
            by_phone = await self._bookings.find_by_phone(query)
            if by_phone:
                return by_phone[0]
        return None

    # --- Follow-up navigation ---

    async def _post_booking(self, session: Session, raw_input: Optional[str], intent: Intent) -> TurnResult:
        if contains_word(raw_input, MENU_WORDS):
            return await self._greeting(session, raw_input, intent)
        if contains_word(raw_input, GOODBYE_WORDS):
            return self._goodbye(session)
        return await self._greeting(session, raw_input, intent)

    async def _post_action(self, session: Session, raw_input: Optional[str], intent: Intent) -> TurnResult:
        if contains_word(raw_input, ("yes",) + MENU_WORDS):
            return await self._greeting(session, raw_input, intent)
        return self._goodbye(session)

    async def _support_transfer(
        self, session: Session, raw_input: Optional[str], intent: Intent
    ) -> TurnResult:
        if contains_word(raw_input, SUPPORT_WORDS):
            return self._customer_support(session)
        return await self._greeting(session, raw_input, intent)


CONTEXT_HANDLERS: dict[DialogContext, str] = {
    DialogContext.GREETING: "_greeting",
    DialogContext.MAIN_MENU: "_greeting",
    DialogContext.MENU_CHOICE: "_menu_choice",
    DialogContext.BOOKING_DATE: "_booking_date",
    DialogContext.BOOKING_TIME: "_booking_time",
    DialogContext.BOOKING_CONFIRMATION: "_booking_confirmation",
    DialogContext.BOOKING_LOOKUP: "_booking_lookup",
    DialogContext.POST_BOOKING: "_post_booking",
    DialogContext.POST_ACTION: "_post_action",
    DialogContext.SUPPORT_TRANSFER: "_support_transfer",
}

INTENT_ROUTES: dict[Intent, str] = {
    Intent.BOOK_APPOINTMENT: "_route_book_appointment",
    Intent.CHECK_BOOKING: "_route_check_booking",
    Intent.CUSTOMER_SUPPORT: "_route_customer_support",
    Intent.WORKING_HOURS: "_route_working_hours",
    Intent.MAKE_PAYMENT: "_route_payment",
    Intent.SET_REMINDER: "_route_reminder",
    Intent.ENGLISH: "_route_language",
    Intent.SPANISH: "_route_language",
}


def _check_tables() -> None:
    missing_contexts = set(DialogContext) - set(CONTEXT_HANDLERS)
    if missing_contexts:
        raise RuntimeError(f"Dialog contexts without a handler: {sorted(c.value for c in missing_contexts)}")

    missing_intents = set(Intent) - set(INTENT_ROUTES) - {Intent.UNKNOWN}
    if missing_intents:
        raise RuntimeError(f"Menu intents without a route: {sorted(i.value for i in missing_intents)}")

    for name in list(CONTEXT_HANDLERS.values()) + list(INTENT_ROUTES.values()):
        if not callable(getattr(DialogEngine, name, None)):
            raise RuntimeError(f"DialogEngine has no handler named {name!r}")


_check_tables()

"""
Twilio voice webhook entry point.

Every route receives Twilio's form post, hands ``CallSid``, the caller's
``From`` number and ``SpeechResult`` (or ``Digits``) to the matching VoiceBot entry
point, and answers with TwiML. Redis being down at startup is not fatal:
the bot serves calls from the in-process fallback until it comes back.

Usage:
    Webhook server:  python main.py
    Console mode:    python main.py console
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Form, Response

from src.config import settings
from src.conversation.contexts import DialogContext
from src.logging_context import call_context
from src.schemas.prompt_schema import PromptDirective
from src.session.store import RedisSessionStore
from src.session.sweeper import FallbackSweeper
from src.tools.classifier import OpenAIIntentClassifier
from src.voice_bot import VoiceBot

logger = logging.getLogger(__name__)

TWIML_MEDIA_TYPE = "text/xml"
TURN_FAILED_MESSAGE = "I'm sorry, something went wrong on our side. Please call back in a few minutes."
FINISHED_CALL_STATUSES = {"completed", "busy", "failed", "no-answer", "canceled"}


def _build_bot() -> tuple[VoiceBot, RedisSessionStore]:
    store = RedisSessionStore.from_config(settings.redis)
    bot = VoiceBot.build(
        session_store=store,
        classifier=OpenAIIntentClassifier.from_config(settings.classifier),
    )
    return bot, store


def create_app(bot: Optional[VoiceBot] = None) -> FastAPI:
    """Build the webhook app. Pass ``bot`` to serve a pre-wired VoiceBot (tests)."""
    store: Optional[RedisSessionStore] = None
    if bot is None:
        bot, store = _build_bot()
    sweeper = FallbackSweeper(bot.sessions)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if store is not None and not await store.ping():
            logger.warning("Redis unreachable at startup, serving sessions from memory fallback")
        sweeper.start()
        try:
            yield
        finally:
            await sweeper.stop()
            if store is not None:
                await store.close()

    app = FastAPI(title="IVR Voice Bot", lifespan=lifespan)
    base = settings.telephony.base_path

    async def respond(
        context: DialogContext, call_id: str, raw_input: Optional[str], caller_phone: Optional[str]
    ) -> Response:
        try:
            twiml = await bot.handle(context, call_id, raw_input, caller_phone)
        except Exception:
            with call_context(call_id):
                logger.exception("Turn failed on %s", context.value)
            twiml = bot.renderer.render(PromptDirective(message=TURN_FAILED_MESSAGE))
        return Response(content=twiml, media_type=TWIML_MEDIA_TYPE)

    def add_turn_route(context: DialogContext) -> None:
        async def turn(
            CallSid: str = Form(...),
            SpeechResult: Optional[str] = Form(None),
            Digits: Optional[str] = Form(None),
            From: Optional[str] = Form(None),
        ) -> Response:
            return await respond(context, CallSid, SpeechResult or Digits, From)

        app.add_api_route(
            f"{base}/{context.value}",
            turn,
            methods=["POST"],
            name=context.name.lower(),
            response_class=Response,
        )

    for context in DialogContext:
        add_turn_route(context)

    @app.post(f"{base}/status")
    async def call_status(CallSid: str = Form(...), CallStatus: str = Form("")) -> dict:
        if CallStatus in FINISHED_CALL_STATUSES:
            await bot.end_call(CallSid)
        return {"call_sid": CallSid, "status": CallStatus}

    @app.get("/health")
    async def health() -> dict:
        redis_ok = await bot.sessions.is_primary_healthy()
        return {"status": "ok", "redis": "healthy" if redis_ok else "degraded"}

    @app.get("/sessions")
    async def sessions() -> dict:
        ids = await bot.sessions.list_active_session_ids()
        return {"count": len(ids), "call_ids": ids}

    return app


def _run_server() -> None:
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=settings.telephony.port)


def _run_console_mode() -> None:
    """Start the offline console demo (no Redis or API keys required)."""
    from console_demo import ConsoleSession

    ConsoleSession().run()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    else:
        _run_server()

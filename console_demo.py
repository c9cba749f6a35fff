"""
Offline console demo — walks the IVR flow in a terminal.

Runs the real session manager (in degraded, memory-only mode), input
interpreter, dialog engine and booking store. No Redis, no Twilio, no
OpenAI. Type what the caller would say or key in; the bot follows the
same webhook paths it would over the phone.

Usage:
    python console_demo.py
    python console_demo.py --scenario booking
    python console_demo.py --scenario lookup
"""

import argparse
import asyncio
import uuid
from typing import Optional

from src.config import settings
from src.conversation.contexts import DialogContext
from src.conversation.dialog_engine import TurnResult
from src.voice_bot import VoiceBot

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

PATH_CONTEXTS = {ctx.path: ctx for ctx in DialogContext}


class ConsoleSession:
    """Simulates one phone call against the VoiceBot."""

    # Pre-scripted caller inputs for --scenario
    SCENARIOS: dict[str, list[str]] = {
        "booking": ["1", "tomorrow", "2 PM", "yes", "goodbye"],
        "lookup": ["check my booking", "Jane Doe", "no"],
        "confused": ["uh", "what"],
        "hours": ["4", "no"],
    }

    def __init__(self) -> None:
        self.bot = VoiceBot.build()
        self.call_id = f"CA{uuid.uuid4().hex[:12]}"

    def bot_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[IVR]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _next_context(self, result: TurnResult) -> Optional[DialogContext]:
        directive = result.directive
        path = directive.gather.on_submit_path if directive.gather else directive.redirect_path
        return PATH_CONTEXTS.get(path) if path else None

    async def _turn(self, context: DialogContext, raw_input: Optional[str]) -> Optional[DialogContext]:
        result = await self.bot.run_turn(context, self.call_id, raw_input)
        self.bot_say(result.directive.message)
        draft = result.session.booking_draft
        self.system_log(
            f"state={result.state.value} retries={result.session.retry_count} "
            f"draft=({draft.date}, {draft.time}, id={draft.id})"
        )
        return self._next_context(result)

    async def _play(self, inputs: Optional[list[str]]) -> None:
        print(f"{BOLD}{BLUE}Calling {settings.business.name} ({self.call_id}){RESET}\n")
        context = await self._turn(DialogContext.GREETING, None)
        scripted = list(inputs) if inputs is not None else None

        while context is not None:
            if context is DialogContext.MAIN_MENU:
                context = await self._turn(context, None)
                continue

            if scripted is not None:
                if not scripted:
                    break
                text = scripted.pop(0)
                print(f"{YELLOW}[Caller]{RESET} {text}")
            else:
                try:
                    text = input(f"{YELLOW}[Caller]{RESET} ")
                except (EOFError, KeyboardInterrupt):
                    print()
                    break
            context = await self._turn(context, text)

        await self.bot.end_call(self.call_id)
        print(f"\n{DIM}Call ended.{RESET}")

    def run(self, inputs: Optional[list[str]] = None) -> None:
        asyncio.run(self._play(inputs))


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline IVR console demo")
    parser.add_argument("--scenario", choices=sorted(ConsoleSession.SCENARIOS), default=None)
    args = parser.parse_args()

    session = ConsoleSession()
    inputs = ConsoleSession.SCENARIOS[args.scenario] if args.scenario else None
    session.run(inputs)


if __name__ == "__main__":
    main()

from src.conversation.contexts import DialogContext
from src.conversation.dialog_engine import DialogEngine, TurnResult
from src.conversation.intents import Intent
from src.conversation.interpreter import InputInterpreter

__all__ = [
    "DialogEngine",
    "DialogContext",
    "TurnResult",
    "InputInterpreter",
    "Intent",
]

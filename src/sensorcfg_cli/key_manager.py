import json
from typing import Callable, List

from prompt_toolkit import PromptSession
from prompt_toolkit.application.current import get_app
from prompt_toolkit.document import Document
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.lexers import PygmentsLexer
from prompt_toolkit.validation import ValidationError, Validator
from pygments.lexers.data import JsonLexer


# ========== Key bindings ==========
class KeyBindingManager:
    SUBMIT_KEYS = [("c-j", "Ctrl+J"), ("escape", "Esc Enter")]

    def __init__(self, accept_callback: Callable[[], None], clear_callback: Callable[[], None]):
        self.bindings = KeyBindings()
        self.submit_labels: List[str] = [label for _, label in self.SUBMIT_KEYS]

        @self.bindings.add("c-j")
        def _submit(event):
            accept_callback()

        @self.bindings.add("escape", "enter")
        def _submit_meta(event):
            accept_callback()

        @self.bindings.add("c-c")
        def _clear(event):
            clear_callback()


class JsonValidator(Validator):
    def validate(self, document: Document):
        try:
            json.loads(document.text)
        except ValueError as e:
            pos = getattr(e, "pos", len(document.text))
            raise ValidationError(cursor_position=pos, message=f"Invalid JSON: {e}")


# ========== Session ==========
class SessionFactory:
    @staticmethod
    def build_session(bindings: KeyBindings, **kwargs) -> PromptSession:
        return PromptSession(
            multiline=True,
            lexer=PygmentsLexer(JsonLexer),
            key_bindings=bindings,
            validator=JsonValidator(),
            validate_while_typing=False,
            **kwargs,
        )

    @staticmethod
    def make_prompt_fragments():
        return [("class:prompt", "body> ")]


def edit_body(initial: str, **session_kwargs) -> str:
    """
    Let the user edit a JSON body in a multi-line prompt and return it.

    Ctrl+C and Ctrl+D propagate as KeyboardInterrupt / EOFError.
    """
    def accept():
        session.default_buffer.validate_and_handle()

    def clear():
        get_app().exit(exception=KeyboardInterrupt())

    kbm = KeyBindingManager(accept_callback=accept, clear_callback=clear)
    session = SessionFactory.build_session(kbm.bindings, **session_kwargs)
    return session.prompt(SessionFactory.make_prompt_fragments(), default=initial)

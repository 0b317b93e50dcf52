"""Body editor tests, driven through prompt_toolkit pipe input."""

import pytest
from prompt_toolkit.document import Document
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput
from prompt_toolkit.validation import ValidationError

from sensorcfg_cli.key_manager import JsonValidator, KeyBindingManager, edit_body
from sensorcfg_cli.utils import SensorConfig


def run_editor(initial: str, keys: str) -> str:
    with create_pipe_input() as inp:
        inp.send_text(keys)
        return edit_body(initial, input=inp, output=DummyOutput())


class TestJsonValidator:

    def test_accepts_json(self):
        JsonValidator().validate(Document(SensorConfig().to_json()))

    def test_rejects_broken_json(self):
        with pytest.raises(ValidationError, match="Invalid JSON"):
            JsonValidator().validate(Document('{"power": }'))


class TestKeyBindingManager:

    def test_submit_labels(self):
        kbm = KeyBindingManager(accept_callback=lambda: None, clear_callback=lambda: None)

        assert kbm.submit_labels == ["Ctrl+J", "Esc Enter"]
        assert len(kbm.bindings.bindings) == 3


class TestEditBody:

    def test_submit_unchanged(self):
        body = SensorConfig().to_json()

        assert run_editor(body, "\x1b\r") == body

    def test_typed_text(self):
        assert run_editor("", '{"power": 1}\x1b\r') == '{"power": 1}'

    def test_ctrl_c_cancels(self):
        with pytest.raises(KeyboardInterrupt):
            run_editor("{}", "\x03")

    def test_ctrl_d_on_empty(self):
        with pytest.raises(EOFError):
            run_editor("", "\x04")

"""
Tests for the interactive category menu.
"""

import pytest

from devsetup.config import Configuration
from devsetup.menu import SetupCancelled, interactive_setup, render_menu


def _answers(*values):
    it = iter(values)
    return lambda prompt: next(it)


class TestMenu:
    def test_render_shows_state_and_log(self, categories):
        config = Configuration.defaults(c.name for c in categories).with_toggled("ides")
        text = render_menu(config, categories, title="Setup", log_path="/tmp/x.log")
        assert "1) System Basics [true]" in text
        assert "2) IDEs [false]" in text
        assert "7) Start Installation" in text
        assert "8) Exit" in text
        assert "Current log file: /tmp/x.log" in text

    def test_toggle_then_start(self, categories):
        config = Configuration.defaults(c.name for c in categories)
        out = []
        result = interactive_setup(
            config, categories, title="Setup", log_path="x", input_fn=_answers("2", "4", "2", "7"), output_fn=out.append
        )
        assert result.is_enabled("ides")
        assert not result.is_enabled("cloud")

    def test_invalid_choice_reprompts(self, categories):
        config = Configuration.defaults(c.name for c in categories)
        out = []
        interactive_setup(
            config, categories, title="Setup", log_path="x", input_fn=_answers("abc", "99", "7"), output_fn=out.append
        )
        assert out.count("Invalid option. Please try again.") == 2

    def test_exit_cancels(self, categories):
        config = Configuration.defaults(c.name for c in categories)
        with pytest.raises(SetupCancelled):
            interactive_setup(
                config, categories, title="Setup", log_path="x", input_fn=_answers("8"), output_fn=lambda s: None
            )

    def test_non_decimal_digit_is_invalid(self, categories):
        config = Configuration.defaults(c.name for c in categories)
        out = []
        result = interactive_setup(
            config, categories, title="Setup", log_path="x", input_fn=_answers("²", "7"), output_fn=out.append
        )
        assert out.count("Invalid option. Please try again.") == 1
        assert result == config

    def test_end_of_input_cancels(self, categories):
        def closed(prompt):
            raise EOFError

        config = Configuration.defaults(c.name for c in categories)
        with pytest.raises(SetupCancelled):
            interactive_setup(config, categories, title="Setup", log_path="x", input_fn=closed, output_fn=lambda s: None)

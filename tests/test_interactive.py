import unittest
from unittest.mock import MagicMock, patch

from aicode.ai.assistants import interactive
from aicode.ai.prompts import Intent
from aicode.config import Configuration
from aicode.errors import HTTPError, TransportFailure


class TestSplitInput(unittest.TestCase):
    """Tests for turning a typed line into an intent and a request."""

    def test_known_intent_with_request(self):
        self.assertEqual(
            interactive.split_input("edit add error handling"),
            (Intent.EDIT, "add error handling"),
        )

    def test_single_word_is_explained(self):
        self.assertEqual(interactive.split_input("hello"), (Intent.EXPLAIN, "hello"))

    def test_lone_intent_word_is_explained(self):
        self.assertEqual(interactive.split_input("refactor"), (Intent.EXPLAIN, "refactor"))

    def test_unknown_first_word_goes_to_the_generic_assistant(self):
        """Verify a line not starting with an intent uses the generic persona."""
        intent, request = interactive.split_input("what is foo")

        self.assertIs(intent, Intent.OTHER)
        self.assertEqual(request, "what is foo")

    def test_repeated_word_is_explained(self):
        self.assertEqual(interactive.split_input("foo foo"), (Intent.EXPLAIN, "foo foo"))


class TestInteractive(unittest.TestCase):
    """Tests for the interactive loop."""

    def setUp(self):
        self.config = Configuration(
            endpoint="https://e", api_key="k", dry_run=True, backup=True, directory="/proj"
        )
        self.console = MagicMock()

    def run_lines(self, *lines):
        read_line = MagicMock(side_effect=list(lines))
        interactive.interactive(self.config, read_line=read_line, console=self.console)
        return read_line

    @patch("aicode.ai.assistants.interactive.ask")
    def test_exit_and_quit(self, mock_ask):
        for word in ("exit", "quit"):
            with self.subTest(word=word):
                read_line = self.run_lines(word, "never read")
                self.assertEqual(read_line.call_count, 1)
        mock_ask.assert_not_called()

    @patch("aicode.ai.assistants.interactive.ask")
    def test_prompt_text(self, mock_ask):
        read_line = self.run_lines("exit")
        read_line.assert_called_once_with("ai-code> ")

    @patch("aicode.ai.assistants.interactive.show_workspace")
    @patch("aicode.ai.assistants.interactive.ask")
    def test_workspace_never_reaches_the_network(self, mock_ask, mock_show_workspace):
        """Verify 'workspace' prints the context block without dispatching a request."""
        self.run_lines("workspace", "exit")

        mock_show_workspace.assert_called_once_with("/proj", self.console)
        mock_ask.assert_not_called()

    @patch("aicode.ai.assistants.interactive.ask")
    def test_reserved_words_and_blank_lines(self, mock_ask):
        self.run_lines("", "   ", "help", "clear", "exit")

        mock_ask.assert_not_called()
        self.console.clear.assert_called_once()
        printed = [str(c.args[0]) for c in self.console.print.call_args_list if c.args]
        self.assertTrue(any(p.startswith("Available commands:") for p in printed))

    @patch("aicode.ai.assistants.interactive.ask")
    def test_single_word_dispatched_as_explain(self, mock_ask):
        """Verify 'hello' becomes an explain request for 'hello'."""
        self.run_lines("hello", "exit")

        mock_ask.assert_called_once()
        config, intent, request = mock_ask.call_args.args
        self.assertIs(intent, Intent.EXPLAIN)
        self.assertEqual(request, "hello")

    @patch("aicode.ai.assistants.interactive.ask")
    def test_free_text_dispatched_as_other(self, mock_ask):
        self.run_lines("what is foo", "exit")

        config, intent, request = mock_ask.call_args.args
        self.assertIs(intent, Intent.OTHER)
        self.assertEqual(request, "what is foo")

    @patch("aicode.ai.assistants.interactive.ask")
    def test_dispatch_forces_session_flags(self, mock_ask):
        """Verify requests typed here auto-confirm and are never dry runs or backups."""
        self.run_lines("test the parser", "exit")

        config, intent, request = mock_ask.call_args.args
        self.assertIs(intent, Intent.TEST)
        self.assertEqual(request, "the parser")
        self.assertTrue(config.auto_confirm)
        self.assertFalse(config.dry_run)
        self.assertFalse(config.backup)
        self.assertEqual(config.endpoint, "https://e")

    @patch("aicode.ai.assistants.interactive.ask")
    def test_errors_do_not_end_the_loop(self, mock_ask):
        """Verify transport and HTTP failures are reported and the loop continues."""
        mock_ask.side_effect = [TransportFailure("refused"), HTTPError(500, "boom"), None]

        read_line = self.run_lines("explain a", "explain b", "explain c", "exit")

        self.assertEqual(mock_ask.call_count, 3)
        self.assertEqual(read_line.call_count, 4)

    @patch("aicode.ai.assistants.interactive.ask")
    def test_end_of_input_exits(self, mock_ask):
        read_line = MagicMock(side_effect=EOFError)
        interactive.interactive(self.config, read_line=read_line, console=self.console)
        mock_ask.assert_not_called()

    @patch("aicode.ai.assistants.interactive.ask")
    def test_ctrl_c_exits(self, mock_ask):
        read_line = MagicMock(side_effect=["hello", KeyboardInterrupt])
        interactive.interactive(self.config, read_line=read_line, console=self.console)
        self.assertEqual(mock_ask.call_count, 1)


if __name__ == "__main__":
    unittest.main()

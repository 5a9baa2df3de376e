import os
import tempfile
import unittest

from aicode.ai import prompts
from aicode.ai.prompts import Intent, build_prompt, parse_files


class TestIntent(unittest.TestCase):
    def test_parse_known_and_unknown(self):
        """Verify command words map to intents and anything else maps to OTHER."""
        self.assertIs(Intent.parse("edit"), Intent.EDIT)
        self.assertIs(Intent.parse(" Refactor "), Intent.REFACTOR)
        self.assertIs(Intent.parse("hello"), Intent.OTHER)

    def test_commands_exclude_other(self):
        self.assertEqual(
            Intent.commands(),
            ["create", "edit", "analyze", "refactor", "test", "debug", "explain"],
        )


class TestBuildPrompt(unittest.TestCase):
    """Tests for the prompt builder."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self._cwd = os.getcwd()
        os.chdir(self._tmp.name)
        self.addCleanup(os.chdir, self._cwd)

    def test_personas(self):
        """Verify each intent gets its own persona."""
        expected = {
            Intent.CREATE: "expert software developer",
            Intent.EDIT: "expert code editor",
            Intent.ANALYZE: "senior code reviewer",
            Intent.REFACTOR: "refactoring expert",
            Intent.TEST: "testing expert",
            Intent.DEBUG: "debugging expert",
            Intent.EXPLAIN: "code educator",
            Intent.OTHER: "AI coding assistant",
        }
        for intent, persona in expected.items():
            with self.subTest(intent=intent):
                self.assertIn(persona, build_prompt(intent, "x").system)

    def test_lead_in_and_request(self):
        prompt = build_prompt(Intent.DEBUG, "segfault on start")
        self.assertEqual(prompt.user, "Help debug this issue: segfault on start")

    def test_other_intent_has_no_lead_in(self):
        self.assertEqual(build_prompt(Intent.OTHER, "just this").user, "just this")

    def test_sections_in_order(self):
        """Verify request, workspace context, files and language hint appear in order."""
        with open("a.py", "w") as f:
            f.write("print('a')\n")

        user = build_prompt(
            Intent.EDIT,
            "add logging",
            files=["a.py"],
            language="python",
            workspace_context="Project Structure:\n./",
        ).user

        positions = [
            user.index("Edit the following files: add logging"),
            user.index("\n\nWorkspace Context:\nProject Structure:"),
            user.index("\n\nTarget Files:\n"),
            user.index("Contents of a.py:\nprint('a')\n"),
            user.index("\n\nProgramming language: python"),
        ]
        self.assertEqual(positions, sorted(positions))
        self.assertTrue(user.endswith("Programming language: python"))

    def test_existing_and_missing_files_keep_caller_order(self):
        """Verify every named file produces either its contents or a note, in order."""
        with open("a.py", "w") as f:
            f.write("x = 1\n")

        user = build_prompt(Intent.EDIT, "change", files=["a.py", "b.py"]).user

        contents = user.index("Contents of a.py:")
        missing = user.index("File b.py does not exist - will be created if needed.")
        self.assertLess(contents, missing)

    def test_missing_file_listed_before_existing(self):
        with open("b.py", "w") as f:
            f.write("y = 2\n")

        user = build_prompt(Intent.EDIT, "change", files=["a.py", "b.py"]).user

        self.assertLess(user.index("File a.py does not exist"), user.index("Contents of b.py:"))

    def test_file_contents_truncated_to_line_budget(self):
        with open("long.txt", "w") as f:
            f.writelines(f"line {i}\n" for i in range(100))

        user = build_prompt(Intent.ANALYZE, "review", files=["long.txt"]).user

        self.assertIn("line 49\n", user)
        self.assertNotIn("line 50\n", user)

    def test_custom_line_budget(self):
        with open("long.txt", "w") as f:
            f.writelines(f"line {i}\n" for i in range(10))

        user = build_prompt(Intent.ANALYZE, "review", files=["long.txt"], max_lines=3).user

        self.assertIn("line 2\n", user)
        self.assertNotIn("line 3", user)

    def test_directory_is_not_read_as_file(self):
        os.mkdir("pkg")
        user = build_prompt(Intent.CREATE, "module", files=["pkg"]).user
        self.assertIn("File pkg does not exist", user)

    def test_no_optional_sections(self):
        """Verify empty context, no files and no language add nothing."""
        user = build_prompt(Intent.EXPLAIN, "closures").user
        self.assertEqual(user, "Explain: closures")
        self.assertNotIn("Target Files", user)


class TestParseFiles(unittest.TestCase):
    def test_parse_files(self):
        self.assertEqual(parse_files("a.py, b.py,,c.py "), ["a.py", "b.py", "c.py"])
        self.assertEqual(parse_files(None), [])
        self.assertEqual(parse_files(""), [])

    def test_default_line_budget(self):
        self.assertEqual(prompts.DEFAULT_MAX_LINES, 50)


if __name__ == "__main__":
    unittest.main()

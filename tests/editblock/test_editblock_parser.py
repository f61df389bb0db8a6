"""Tests for edit block parser."""

import pytest

from editblock.editblock_exceptions import EditBlockParseError
from editblock.editblock_parser import EditBlockParser


@pytest.fixture
def parser():
    """Provide an edit block parser."""
    return EditBlockParser()


class TestEditBlockParserBasic:
    """Test basic block parsing."""

    def test_parse_single_block(self, parser, helpers):
        """Test parsing a single fenced block."""
        text = helpers.block("src/app.py", "x = 1\n", "x = 2\n")

        blocks = parser.parse(text)

        assert len(blocks) == 1
        assert blocks[0].path == "src/app.py"
        assert blocks[0].original == "x = 1\n"
        assert blocks[0].updated == "x = 2\n"
        assert not blocks[0].is_shell_command()

    def test_parse_multiline_sections(self, parser, helpers):
        """Test that every line of each section is kept."""
        original = "def foo():\n    return 1\n"
        updated = "def foo():\n    # changed\n    return 2\n"

        blocks = parser.parse(helpers.block("foo.py", original, updated))

        assert blocks[0].original == original
        assert blocks[0].updated == updated

    def test_parse_multiple_blocks_with_prose(self, parser, helpers):
        """Test parsing several blocks separated by prose."""
        text = (
            "First, update the model:\n\n"
            + helpers.block("models.py", "a\n", "b\n")
            + "\nThen the view:\n\n"
            + helpers.block("views.py", "c\n", "d\n")
        )

        blocks = parser.parse(text)

        assert [block.path for block in blocks] == ["models.py", "views.py"]
        assert blocks[1].original == "c\n"

    def test_parse_text_without_blocks(self, parser):
        """Test that text without blocks gives no blocks."""
        assert parser.parse("Just an explanation.\nNothing to edit here.\n") == []

    def test_parse_empty_text(self, parser):
        """Test parsing empty text."""
        assert parser.parse("") == []

    def test_parse_unfenced_block(self, parser):
        """Test that a filename directly before the head marker is found."""
        text = "foo.py\n<<<<<<< SEARCH\na\n=======\nb\n>>>>>>> REPLACE\n"

        blocks = parser.parse(text)

        assert blocks[0].path == "foo.py"
        assert blocks[0].updated == "b\n"

    def test_parse_empty_updated(self, parser, helpers):
        """Test that an empty updated section deletes lines."""
        blocks = parser.parse(helpers.block("foo.py", "remove me\n", ""))

        assert blocks[0].original == "remove me\n"
        assert blocks[0].updated == ""


class TestEditBlockParserMarkers:
    """Test marker recognition."""

    @pytest.mark.parametrize("head,divider,tail", [
        ("<<<<< SEARCH", "=====", ">>>>> REPLACE"),
        ("<<<<<<<<< SEARCH", "=========", ">>>>>>>>> REPLACE"),
        ("<<<<<<< SEARCH   ", "=======  ", ">>>>>>> REPLACE "),
        ("  <<<<<<< SEARCH", "  =======", "  >>>>>>> REPLACE"),
    ])
    def test_marker_variants(self, parser, head, divider, tail):
        """Test that marker lengths of 5 to 9 and surrounding whitespace are accepted."""
        text = f"foo.py\n{head}\na\n{divider}\nb\n{tail}\n"

        blocks = parser.parse(text)

        assert len(blocks) == 1
        assert blocks[0].original == "a\n"
        assert blocks[0].updated == "b\n"

    def test_second_divider_terminates_block(self, parser):
        """Test that a second divider is accepted in place of the tail marker."""
        text = "foo.py\n<<<<<<< SEARCH\na\n=======\nb\n=======\nafter\n"

        blocks = parser.parse(text)

        assert len(blocks) == 1
        assert blocks[0].updated == "b\n"

    def test_crlf_markers(self, parser):
        """Test that markers are recognized in CRLF text."""
        text = "foo.py\r\n<<<<<<< SEARCH\r\na\r\n=======\r\nb\r\n>>>>>>> REPLACE\r\n"

        blocks = parser.parse(text)

        assert blocks[0].path == "foo.py"
        assert blocks[0].original == "a\r\n"
        assert blocks[0].updated == "b\r\n"


class TestEditBlockParserFilenames:
    """Test filename handling during parsing."""

    def test_filename_carries_over(self, parser, helpers):
        """Test that a block without its own filename reuses the previous one."""
        text = (
            helpers.block("foo.py", "a\n", "b\n")
            + "\n"
            + "<<<<<<< SEARCH\nc\n=======\nd\n>>>>>>> REPLACE\n"
        )

        blocks = parser.parse(text)

        assert [block.path for block in blocks] == ["foo.py", "foo.py"]
        assert blocks[1].original == "c\n"

    def test_missing_filename_raises(self, parser):
        """Test that the first block must name a file."""
        text = "<<<<<<< SEARCH\na\n=======\nb\n>>>>>>> REPLACE\n"

        with pytest.raises(EditBlockParseError) as exc_info:
            parser.parse(text)

        assert "Bad/missing filename" in str(exc_info.value)
        assert exc_info.value.error_details['phase'] == 'parsing'
        assert exc_info.value.error_details['line_number'] == 1

    def test_valid_filenames_used(self, parser, helpers):
        """Test that valid filenames resolve base names."""
        blocks = parser.parse(helpers.block("foo.ts", "a\n", "b\n", "```ts"), ["src/foo.ts"])

        assert blocks[0].path == "src/foo.ts"

    def test_new_file_ignores_valid_filenames(self, parser, helpers):
        """Test that a new file block is not fuzzy-matched to an existing file."""
        blocks = parser.parse(helpers.block("src/olds.py", "", "print('hi')\n"), ["src/old.py"])

        assert blocks[0].path == "src/olds.py"
        assert blocks[0].original == ""
        assert blocks[0].updated == "print('hi')\n"

    def test_existing_file_uses_fuzzy_match(self, parser, helpers):
        """Test that an edit to an existing file is fuzzy-matched to a valid filename."""
        blocks = parser.parse(helpers.block("src/olds.py", "a\n", "b\n"), ["src/old.py"])

        assert blocks[0].path == "src/old.py"


class TestEditBlockParserErrors:
    """Test malformed block handling."""

    def test_missing_divider(self, parser):
        """Test that a block without a divider is rejected."""
        text = "foo.py\n<<<<<<< SEARCH\na\nb\n"

        with pytest.raises(EditBlockParseError) as exc_info:
            parser.parse(text)

        assert "Expected `=======`" in str(exc_info.value)
        assert exc_info.value.error_details['reason'] == "Expected `=======`"

    def test_missing_tail(self, parser):
        """Test that a block without a terminator is rejected."""
        text = "foo.py\n<<<<<<< SEARCH\na\n=======\nb\n"

        with pytest.raises(EditBlockParseError) as exc_info:
            parser.parse(text)

        assert "Expected `>>>>>>> REPLACE` or `=======`" in str(exc_info.value)

    def test_error_shows_processed_text(self, parser):
        """Test that the error message shows the text consumed so far."""
        text = "foo.py\n<<<<<<< SEARCH\na\n"

        with pytest.raises(EditBlockParseError) as exc_info:
            parser.parse(text)

        message = str(exc_info.value)
        assert message.startswith("foo.py\n<<<<<<< SEARCH\na\n")
        assert "^^^ " in message
        assert exc_info.value.error_details['processed_text'] == text


class TestEditBlockParserShellBlocks:
    """Test shell command block extraction."""

    def test_parse_shell_block(self, parser):
        """Test that a shell fence gives a shell command block."""
        text = "Now run:\n```bash\nnpm install\nnpm test\n```\n"

        blocks = parser.parse(text)

        assert len(blocks) == 1
        assert blocks[0].is_shell_command()
        assert blocks[0].original is None
        assert blocks[0].updated == "npm install\nnpm test\n"

    @pytest.mark.parametrize("language", ["sh", "shell", "powershell", "zsh", "cmd"])
    def test_shell_languages(self, parser, language):
        """Test that each shell language fence is recognized."""
        blocks = parser.parse(f"```{language}\nls\n```\n")

        assert blocks[0].is_shell_command()
        assert blocks[0].updated == "ls\n"

    def test_shell_fence_wrapping_edit_block(self, parser):
        """Test that a shell fence directly wrapping a head marker is a file edit."""
        text = "script.sh\n```bash\n<<<<<<< SEARCH\necho a\n=======\necho b\n>>>>>>> REPLACE\n```\n"

        blocks = parser.parse(text)

        assert len(blocks) == 1
        assert not blocks[0].is_shell_command()
        assert blocks[0].path == "script.sh"
        assert blocks[0].updated == "echo b\n"

    def test_unterminated_shell_block(self, parser):
        """Test that a shell block runs to the end of the text if not closed."""
        blocks = parser.parse("```bash\nmake\n")

        assert blocks[0].updated == "make\n"

    def test_non_shell_fence_ignored(self, parser):
        """Test that other fenced code is not a command."""
        assert parser.parse("```python\nprint('hi')\n```\n") == []

    def test_blocks_in_document_order(self, parser, helpers):
        """Test that shell and file blocks keep their order."""
        text = (
            helpers.block("foo.py", "a\n", "b\n")
            + "\n```bash\npytest\n```\n\n"
            + helpers.block("bar.py", "c\n", "d\n")
        )

        blocks = parser.parse(text)

        assert [block.is_shell_command() for block in blocks] == [False, True, False]
        assert blocks[1].updated == "pytest\n"

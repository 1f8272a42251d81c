"""Tests for Rich Console factory and theme."""

from io import StringIO

from solctl.output.console import SOL_THEME, create_console, get_output, style_for_key


class TestCreateConsole:
    def test_returns_console_with_stringio(self) -> None:
        console = create_console()
        assert isinstance(console.file, StringIO)

    def test_no_color_disables_ansi(self) -> None:
        console = create_console(no_color=True)
        console.print("[bold red]hello[/bold red]")
        output = get_output(console)
        assert "\x1b" not in output
        assert "hello" in output

    def test_default_width(self) -> None:
        assert create_console().width == 120

    def test_custom_width(self) -> None:
        assert create_console(width=80).width == 80


class TestTheme:
    def test_theme_styles_defined(self) -> None:
        for name in ("sol.ok", "sol.error", "sol.address", "sol.signature", "sol.amount"):
            assert name in SOL_THEME.styles

    def test_style_for_key(self) -> None:
        assert style_for_key("recipient") == "sol.address"
        assert style_for_key("signature") == "sol.signature"
        assert style_for_key("lamports") == "sol.amount"
        assert style_for_key("epoch") == ""

"""Tests for eventreg.cli module."""

from click.testing import CliRunner

from eventreg.cli import main


class TestMainGroup:
    """main()コマンドグループのテスト"""

    def test_main_is_click_group(self):
        """main()はclickグループである"""
        assert hasattr(main, "commands")

    def test_main_help(self):
        """main --helpが正常に動作する"""
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "大会エントリー請求管理CLI" in result.output

    def test_commands_registered(self):
        """すべてのコマンドが登録されている"""
        for name in ("quote", "edit-preview", "submit", "discard", "history"):
            assert name in main.commands

    def test_quote_help(self):
        runner = CliRunner()
        result = runner.invoke(main, ["quote", "--help"])
        assert result.exit_code == 0
        assert "--event" in result.output
        assert "--entries" in result.output

    def test_missing_required_option(self):
        """必須オプションがなければエラー終了する"""
        runner = CliRunner()
        result = runner.invoke(main, ["discard"])
        assert result.exit_code != 0
        assert "--registration-id" in result.output

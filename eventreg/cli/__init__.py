"""Click CLIメインモジュール"""

import logging

import click


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="詳細ログを表示する")
def main(verbose: bool):
    """大会エントリー請求管理CLI"""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# コマンドの登録
from eventreg.cli.commands.quote import quote
from eventreg.cli.commands.edit import discard, edit_preview, submit
from eventreg.cli.commands.history import history

main.add_command(quote)
main.add_command(edit_preview)
main.add_command(submit)
main.add_command(discard)
main.add_command(history)


__all__ = ["main"]

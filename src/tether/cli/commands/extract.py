"""tether extract -- show keywords and context type for free text."""

from __future__ import annotations

import click

from tether.cli.formatting import format_context, get_console


@click.command()
@click.argument("text")
@click.pass_context
def extract(ctx: click.Context, text: str) -> None:
    """Show how TEXT is normalized into a trigger context."""
    from tether.cli import _load_config
    from tether.matching.context import ContextAnalyzer
    from tether.matching.keywords import KeywordMatcher

    config = _load_config(ctx)
    analyzer = ContextAnalyzer(KeywordMatcher(config.keywords.to_tables()), config.context_rules)
    format_context(analyzer.analyze_user_input(text), get_console())

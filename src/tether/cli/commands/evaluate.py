"""tether evaluate -- rank library constraints against free text."""

from __future__ import annotations

from dataclasses import replace

import click

from tether.cli.formatting import format_activations, format_context, format_error, get_console


@click.command()
@click.argument("text")
@click.option(
    "-l", "--library", "library_path", required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON constraint library.",
)
@click.option("-f", "--file", "file_path", default=None, help="File path the interaction touches.")
@click.option("-n", "--max", "max_active", default=None, type=click.IntRange(1, 20), help="Maximum activations to show.")
@click.pass_context
def evaluate(
    ctx: click.Context,
    text: str,
    library_path: str,
    file_path: str | None,
    max_active: int | None,
) -> None:
    """Evaluate the constraint library against TEXT."""
    from tether.cli import _load_config
    from tether.library import load_library
    from tether.matching.context import ContextAnalyzer
    from tether.matching.keywords import KeywordMatcher
    from tether.triggers.engine import TriggerMatchingEngine

    console = get_console()
    config = _load_config(ctx)
    try:
        resolver = load_library(library_path)
        matching = config.matching
        if max_active is not None:
            matching = matching.model_copy(update={"max_active_constraints": max_active})
        matcher = KeywordMatcher(
            config.keywords.to_tables(),
            enable_fuzzy=matching.enable_fuzzy_matching,
            fuzzy_threshold=matching.fuzzy_similarity_threshold,
        )
        analyzer = ContextAnalyzer(matcher, config.context_rules)

        context = analyzer.analyze_user_input(text)
        if file_path:
            keywords = list(context.keywords)
            for keyword in analyzer.analyze_tool_call("", {"path": file_path}).keywords:
                if keyword not in keywords:
                    keywords.append(keyword)
            context = replace(
                context,
                keywords=tuple(keywords),
                file_path=file_path,
                context_type=analyzer.detect_context_type(keywords, file_path),
            )

        engine = TriggerMatchingEngine(resolver, matching, matcher)
        activations = engine.evaluate_constraints(context)
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    format_context(context, console)
    console.print()
    format_activations(activations, console)

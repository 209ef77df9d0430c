"""
Template Listing and Resume Rendering CLI

Commands:
    templates - List templates visible to a subscription tier
    render    - Render a JSON Resume file to PDF (or LaTeX with --tex)
    stores    - Show which template stores are active for a tier

Examples:\n

    cvrender templates --tier BASIC --limit 5                 # List templates

    cvrender render resume.json -t engineering -o out.pdf     # Render to PDF

    cvrender render resume.json -t engineering --tex -o out.tex   # LaTeX only

    cvrender stores --tier PROFESSIONAL                       # Active stores
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from cvrender.contexts.rendering.document_renderer import (
    build_document_renderer,
    build_registry,
)
from cvrender.contexts.rendering.logger import setup_rendering_logger
from cvrender.contexts.templating.document import load_document
from cvrender.contexts.templating.source_resolver import TemplateSourceResolver
from cvrender.contexts.templating.subscription import SubscriptionTier
from cvrender.utils.config import load_settings
from cvrender.utils.errors import CVRenderError
from cvrender.utils.timestamp import now

app = typer.Typer(
    help="List resume templates and render resumes to PDF",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _parse_tier(tier: str) -> SubscriptionTier:
    try:
        return SubscriptionTier.parse(tier)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--tier")


def _fail(error: CVRenderError) -> None:
    typer.secho(f"✗ {error.user_message}", fg=typer.colors.RED, bold=True, err=True)
    raise typer.Exit(code=1)


@app.command("templates")
def templates_command(
    tier: Annotated[
        str,
        typer.Option("--tier", help="Subscription tier (FREE, BASIC, PROFESSIONAL)"),
    ] = "FREE",
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-n", help="Maximum number of templates to list"),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the listing as JSON"),
    ] = False,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="YAML settings file"),
    ] = None,
):
    """
    List templates visible to a subscription tier.

    Examples:\n

        $ cvrender templates                          # FREE templates

        $ cvrender templates --tier PROFESSIONAL --json
    """
    caller_tier = _parse_tier(tier)
    renderer = build_document_renderer(load_settings(config))

    try:
        templates = renderer.list_templates(caller_tier, limit)
    except CVRenderError as e:
        _fail(e)

    if as_json:
        typer.echo(json.dumps(templates, indent=2))
        raise typer.Exit(code=0)

    typer.secho(f"\nTemplates for {caller_tier.display_name}:", fg=typer.colors.BLUE, bold=True)
    if not templates:
        typer.echo("  (none)")
    for template in templates:
        locales = ", ".join(template["supportedLocales"]) or "any"
        typer.echo(f"  {template['id']:<20} {template['name']} v{template['version']} [{locales}]")
    typer.echo("")


@app.command("render")
def render_command(
    resume_file: Annotated[
        Path,
        typer.Argument(help="JSON Resume file", exists=True, dir_okay=False),
    ],
    template_id: Annotated[
        str,
        typer.Option("--template", "-t", help="Template id"),
    ] = "engineering",
    tier: Annotated[
        str,
        typer.Option("--tier", help="Subscription tier (FREE, BASIC, PROFESSIONAL)"),
    ] = "FREE",
    locale: Annotated[
        str,
        typer.Option("--locale", "-l", help="Locale code (en, es)"),
    ] = "en",
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file (default: resume.pdf or resume.tex)"),
    ] = None,
    tex_only: Annotated[
        bool,
        typer.Option("--tex", help="Write the LaTeX markup instead of compiling it"),
    ] = False,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="YAML settings file"),
    ] = None,
):
    """
    Render a JSON Resume file with a template.

    Examples:\n

        $ cvrender render resume.json -t engineering -o out.pdf

        $ cvrender render resume.json -t executive --tier PROFESSIONAL -l es
    """
    caller_tier = _parse_tier(tier)
    settings = load_settings(config)

    if settings.logging.logs_path:
        log_dir = Path(settings.logging.logs_path) / f"render_{now()}"
        setup_rendering_logger(log_dir, compiler=settings.compiler.command)

    try:
        document = load_document(resume_file)
    except ValueError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    renderer = build_document_renderer(settings)
    typer.secho(f"\nRendering: {resume_file} with '{template_id}'", fg=typer.colors.BLUE, bold=True)

    try:
        if tex_only:
            markup = renderer.render_markup(
                document, template_id, caller_tier, locale=locale, caller_id="cli"
            )
            output = output or Path("resume.tex")
            output.write_text(markup, encoding="utf-8")
        else:
            rendered = asyncio.run(
                renderer.render(document, template_id, caller_tier, locale=locale, caller_id="cli")
            )
            output = output or Path(rendered.filename)
            output.write_bytes(rendered.content)
    except CVRenderError as e:
        _fail(e)

    typer.secho("✓ Render succeeded", fg=typer.colors.GREEN, bold=True)
    if not tex_only:
        typer.echo(f"  Pages: {rendered.page_count}")
        typer.echo(f"  Time: {rendered.elapsed_s:.2f}s")
    typer.echo(f"  Output: {output}")
    typer.echo("")


@app.command("stores")
def stores_command(
    tier: Annotated[
        str,
        typer.Option("--tier", help="Subscription tier (FREE, BASIC, PROFESSIONAL)"),
    ] = "FREE",
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="YAML settings file"),
    ] = None,
):
    """Show the template stores active for a tier, in priority order."""
    caller_tier = _parse_tier(tier)
    settings = load_settings(config)
    resolver = TemplateSourceResolver(
        build_registry(settings),
        source_types=settings.template.source.types,
        tier_source_types=settings.template.source.tier_types,
    )

    try:
        stores = resolver.active_stores(caller_tier)
    except CVRenderError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.secho(f"\nActive stores for {caller_tier.display_name}:", fg=typer.colors.BLUE, bold=True)
    for position, store in enumerate(stores, 1):
        typer.echo(f"  {position}. {store.describe()} ({len(store.find_all())} templates)")
    typer.echo("")


if __name__ == "__main__":
    app()

"""CLI entry point for the content translator."""

import logging
import os
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .config import BACKENDS, DEFAULT_SKIP_FIELDS, TranslationConfig
from .content import ContentStore, collect_text_fields
from .errors import ContentTranslatorError
from .logging_config import setup_logging
from .translation import ContentTranslator, TranslationEngine, summarize_errors


def _split(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


@click.group()
@click.version_option(version=__version__)
def cli():
    """Translate JSON site content into other languages, field by field."""
    pass


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--languages', '-l', default='fr,es,de,ru', help='Comma-separated target language codes')
@click.option('--source', 'source_language', default='en', help='Source language code')
@click.option('--out-dir', type=click.Path(file_okay=False, path_type=Path), help='Directory for <lang>.json output (default: next to FILE)')
@click.option('--bundle', type=click.Path(dir_okay=False, path_type=Path), help='Also write all languages into one JSON file')
@click.option('--skip', default='', help='Extra comma-separated keys never to translate')
@click.option('--delay', default=0.1, show_default=True, help='Seconds between translation requests')
@click.option('--timeout', default=60.0, show_default=True, help='Per-request timeout in seconds')
@click.option('--deadline', type=float, default=None, help='Stop a language after this many seconds')
@click.option('--backend', type=click.Choice(BACKENDS), default='ollama', show_default=True, help='Translation backend')
@click.option('--ollama-url', default='http://localhost:11434', help='Ollama API URL')
@click.option('--model', default=None, help='Model name for the Ollama or gateway backend')
@click.option('--gateway-url', default=None, help='Base URL of an OpenAI-compatible gateway')
@click.option('--dry-run', is_flag=True, help='Show what would be translated without making changes')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
def translate(
    file: Path,
    languages: str,
    source_language: str,
    out_dir: Optional[Path],
    bundle: Optional[Path],
    skip: str,
    delay: float,
    timeout: float,
    deadline: Optional[float],
    backend: str,
    ollama_url: str,
    model: Optional[str],
    gateway_url: Optional[str],
    dry_run: bool,
    verbose: bool
):
    """Translate a JSON content file to target languages.

    FILE is the path to the source content file (e.g., content/en.json).
    """
    setup_logging(logging.DEBUG if verbose else logging.WARNING)

    target_langs = _split(languages)
    config = TranslationConfig(
        source_language=source_language,
        target_languages=target_langs,
        request_delay=delay,
        request_timeout=timeout,
        deadline_seconds=deadline,
        backend=backend,
        ollama_url=ollama_url,
        gateway_api_key=os.environ.get("TRANSLATION_API_KEY"),
        dry_run=dry_run,
        verbose=verbose
    ).with_extra_skip_fields(_split(skip))
    if model and backend == "gateway":
        config.gateway_model = model
    elif model:
        config.ollama_model = model
    if gateway_url:
        config.gateway_url = gateway_url

    store = ContentStore()
    engine = TranslationEngine(config)
    translator = ContentTranslator(engine.translate, config=config)

    try:
        source_tree = store.load(file)
    except ContentTranslatorError as e:
        click.secho(f"Error: {e}", fg='red', err=True)
        raise SystemExit(1)

    if dry_run:
        found = collect_text_fields(source_tree, config.skip_fields)
        pending = [field for field in found if not field.is_blank]
        click.echo(
            f"{len(pending)} fields would be translated into "
            f"{', '.join(target_langs)} ({len(found) - len(pending)} blank)"
        )
        click.secho("Dry run - no files modified.", fg='cyan')
        return

    if not engine.is_available():
        click.secho(
            f"Error: translation backend '{backend}' is not available",
            fg='red', err=True
        )
        raise SystemExit(1)

    def progress_callback(language, progress):
        if verbose and progress.completed < progress.total:
            click.echo(
                f"  [{language}] [{progress.completed + 1}/{progress.total}] "
                f"{progress.current_path}"
            )

    click.echo(f"Translating {file} from {source_language}")
    click.echo(f"Target languages: {', '.join(target_langs)}")
    click.echo()

    try:
        outcomes = translator.translate_to_languages(
            source_tree,
            target_langs,
            source_language=source_language,
            on_progress=progress_callback
        )
    except KeyboardInterrupt:
        click.secho("Interrupted.", fg='yellow', err=True)
        raise SystemExit(130)
    except (TypeError, ValueError, ContentTranslatorError) as e:
        click.secho(f"Error: {e}", fg='red', err=True)
        raise SystemExit(1)

    written = []
    for language, outcome in outcomes.items():
        progress = outcome.progress
        line = (
            f"{language}: {outcome.translated_count} translated, "
            f"{outcome.failed} failed, {progress.skipped_blank} blank"
        )
        click.secho(line, fg='red' if outcome.all_failed else 'green')

        if progress.stopped_reason:
            click.secho(
                f"  Stopped early ({progress.stopped_reason}) after "
                f"{progress.completed} of {progress.total} fields",
                fg='yellow'
            )

        warning = summarize_errors(progress)
        if warning:
            click.secho(f"  Warning: {warning}", fg='yellow')
            if verbose:
                for error in progress.errors:
                    click.secho(f"    {error.path}: {error.error}", fg='red')

        target = store.target_path(file, language, out_dir)
        store.write(outcome.tree, target)
        written.append(target)

    if bundle:
        store.write_bundle(
            {language: outcome.tree for language, outcome in outcomes.items()},
            bundle
        )
        written.append(bundle)

    if written:
        click.echo("\nFiles written:")
        for path in written:
            click.secho(f"  {path}", fg='green')


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--skip', default='', help='Extra comma-separated keys never to translate')
def fields(file: Path, skip: str):
    """List the translatable fields of a JSON content file.

    FILE is the path to the content file to inspect.
    """
    store = ContentStore()
    try:
        tree = store.load(file)
        found = collect_text_fields(tree, DEFAULT_SKIP_FIELDS | frozenset(_split(skip)))
    except (ContentTranslatorError, TypeError) as e:
        click.secho(f"Error: {e}", fg='red', err=True)
        raise SystemExit(1)

    if not found:
        click.secho("No translatable fields found.", fg='yellow')
        return

    click.echo(f"Fields ({len(found)} total):\n")
    for field in found:
        if field.is_blank:
            click.secho(f"{field.path} (blank)", fg='cyan')
        else:
            click.echo(f'{field.path} = "{field.preview(60)}"')


@cli.command()
@click.option('--backend', type=click.Choice(BACKENDS), default='ollama', show_default=True, help='Translation backend')
@click.option('--ollama-url', default='http://localhost:11434', help='Ollama API URL')
def check(backend: str, ollama_url: str):
    """Check if the translation backend is available."""
    config = TranslationConfig(
        backend=backend,
        ollama_url=ollama_url,
        gateway_api_key=os.environ.get("TRANSLATION_API_KEY")
    )
    engine = TranslationEngine(config)

    if engine.is_available():
        click.secho("Translation backend is ready!", fg='green')
        click.echo(f"  Backend: {backend}")
        return

    click.secho(f"Error: translation backend '{backend}' is not available", fg='red')
    click.echo("\nTo fix this:")
    if backend == "ollama":
        click.echo("  1. Make sure Ollama is running: ollama serve")
        click.echo(f"  2. Pull the model: ollama pull {config.ollama_model}")
    elif backend == "gateway":
        click.echo("  Set TRANSLATION_API_KEY and check the gateway URL.")
    else:
        click.echo("  None of the LibreTranslate mirrors answered.")
    raise SystemExit(1)


if __name__ == '__main__':
    cli()

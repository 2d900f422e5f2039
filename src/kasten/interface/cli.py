"""kasten CLI: practice, grading and progress commands over a YAML deck file."""

import datetime
import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError

from kasten import VERSION
from kasten.application.buckets import (
    find_bucket,
    get_bucket_range,
    occupied_buckets,
    to_bucket_sets,
)
from kasten.application.config import AppConfig, resolve_config
from kasten.application.progress import compute_progress, summarize_deck
from kasten.application.scheduler import get_hint, update
from kasten.application.session import PracticeSession
from kasten.domain.constants import BUCKET_LABELS
from kasten.domain.exceptions import KastenError
from kasten.domain.models import AnswerDifficulty, Flashcard, ReviewHistoryEntry
from kasten.infrastructure.deck_file import Deck, dump_deck, load_deck

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="kasten: Leitner-box flashcard scheduler.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage kasten configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _configure_logging(verbose: int) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.getLogger().setLevel(level)


def _resolve_with_overrides(ctx: typer.Context, **overrides: Any) -> AppConfig:
    obj = ctx.ensure_object(dict)
    overrides.setdefault("deck_file", obj.get("deck_file"))
    overrides.setdefault("verbose", obj.get("verbose"))
    try:
        config = resolve_config(overrides)
    except ValidationError as e:
        typer.secho(f"Invalid configuration: {e}", fg="red", err=True)
        raise typer.Exit(1) from e

    _configure_logging(config.verbose)
    logger.debug(f"Using deck file {config.deck_file}")
    return config


def _fail(error: KastenError) -> typer.Exit:
    typer.secho(f"Error: {error}", fg="red", err=True)
    return typer.Exit(1)


def _load(config: AppConfig, missing_ok: bool = False) -> Deck:
    try:
        return load_deck(config.deck_file, missing_ok=missing_ok)
    except KastenError as e:
        raise _fail(e) from e


def _describe(card: Flashcard, bucket: int | None) -> str:
    if bucket is None:
        label = "unscheduled"
    else:
        label = BUCKET_LABELS.get(bucket, f"Bucket {bucket}")
    return f"{card.card_id}  [{label}]  {card.front}"


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    deck: Annotated[
        Path | None,
        typer.Option("--deck", "-d", help="Deck file. Defaults to 'deck_file' in config."),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for kasten."""
    ctx.ensure_object(dict)
    ctx.obj["deck_file"] = deck
    # No -v means "use the configured verbosity"
    ctx.obj["verbose"] = verbose or None


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def due(
    ctx: typer.Context,
    day: Annotated[
        int | None, typer.Option(help="Day to check. Defaults to the deck's day.")
    ] = None,
    limit: Annotated[int | None, typer.Option(help="Maximum cards to list.")] = None,
):
    """List the cards due for practice today."""
    config = _resolve_with_overrides(ctx, session_limit=limit)
    deck = _load(config)
    current_day = deck.day if day is None else day

    try:
        session = PracticeSession(deck.buckets, current_day, limit=config.session_limit)
    except KastenError as e:
        raise _fail(e) from e

    if not session.cards:
        typer.secho("No cards to practice right now!", fg="yellow")
        return

    typer.echo(f"Day {current_day}: {len(session.cards)} card(s) due")
    for card in session.cards:
        typer.echo(f"  {_describe(card, find_bucket(deck.buckets, card))}")


@app.command()
def review(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="ID of the card that was practiced.")],
    difficulty: Annotated[
        str, typer.Option("--difficulty", "-g", help="How it went: wrong, hard or easy.")
    ],
    date: Annotated[
        datetime.datetime | None,
        typer.Option(formats=["%Y-%m-%d"], help="Review date. Defaults to today."),
    ] = None,
):
    """Grade a card and move it to its new bucket."""
    config = _resolve_with_overrides(ctx)
    deck = _load(config)

    try:
        grade = AnswerDifficulty.parse(difficulty)
        card = deck.card(card_id)
        before = find_bucket(deck.buckets, card)
        deck.buckets = update(deck.buckets, card, grade)
        deck.history.append(
            ReviewHistoryEntry(
                card=card,
                difficulty=grade,
                date=date.date() if date else datetime.date.today(),
            )
        )
        dump_deck(deck, config.deck_file)
    except KastenError as e:
        raise _fail(e) from e

    after = find_bucket(deck.buckets, card)
    if before is None:
        typer.secho(f"{card_id} is not in any bucket; nothing moved.", fg="yellow")
    else:
        typer.echo(f"{card.front}: bucket {before} -> {after}")


@app.command()
def add(
    ctx: typer.Context,
    front: Annotated[str, typer.Argument(help="Prompt side of the card.")],
    back: Annotated[str, typer.Argument(help="Answer side of the card.")],
    hint: Annotated[str, typer.Option(help="Optional hint.")] = "",
    tag: Annotated[list[str] | None, typer.Option("--tag", help="Tag; repeatable.")] = None,
):
    """Add a new card to the learning bucket."""
    config = _resolve_with_overrides(ctx)
    deck = _load(config, missing_ok=True)

    try:
        card = deck.add(Flashcard(front=front, back=back, hint=hint, tags=tuple(tag or [])))
        dump_deck(deck, config.deck_file)
    except KastenError as e:
        raise _fail(e) from e

    typer.secho(f"Added {card.card_id}", fg="green")


@app.command("hint")
def hint_cmd(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="ID of the card.")],
):
    """Show the hint for a card."""
    config = _resolve_with_overrides(ctx)
    deck = _load(config)
    try:
        typer.echo(get_hint(deck.card(card_id)))
    except KastenError as e:
        raise _fail(e) from e


@app.command("range")
def range_cmd(ctx: typer.Context):
    """Show the span of occupied buckets."""
    config = _resolve_with_overrides(ctx)
    deck = _load(config)

    bucket_sets = to_bucket_sets(deck.buckets)
    span = get_bucket_range(bucket_sets)
    if span is None:
        typer.secho("No cards in any bucket.", fg="yellow")
        return
    typer.echo(
        f"Buckets {span.min_bucket}-{span.max_bucket}"
        f" ({len(occupied_buckets(bucket_sets))} occupied)"
    )


@app.command()
def progress(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show review accuracy and where the cards currently sit."""
    config = _resolve_with_overrides(ctx)
    deck = _load(config)

    try:
        stats = compute_progress(deck.buckets, deck.history)
        summary = summarize_deck(deck.buckets, deck.day)
    except KastenError as e:
        raise _fail(e) from e

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "day": deck.day,
                    "total_reviews": stats.total_reviews,
                    "correct": stats.correct_count,
                    "incorrect": stats.incorrect_count,
                    "accuracy": stats.accuracy_percent,
                    "reviews_by_bucket": stats.per_bucket_review_count,
                    "total_cards": summary.total_cards,
                    "cards_by_bucket": summary.cards_by_bucket,
                    "mastered_percent": summary.mastered_percent,
                    "due_for_review": summary.due_for_review,
                },
                indent=2,
            )
        )
        return

    typer.echo(f"Day: {deck.day}")
    typer.echo(
        f"Reviews: {stats.total_reviews}  Correct: {stats.correct_count}"
        f"  Incorrect: {stats.incorrect_count}  Accuracy: {stats.accuracy_percent}%"
    )
    typer.echo(
        f"Cards: {summary.total_cards}  Retired: {summary.mastered_percent}%"
        f"  Due today: {summary.due_for_review}"
    )
    for bucket, count in summary.cards_by_bucket.items():
        label = BUCKET_LABELS.get(bucket, f"Bucket {bucket}")
        reviews = stats.per_bucket_review_count.get(bucket, 0)
        typer.echo(f"  {bucket} {label}: {count} card(s), {reviews} review(s)")


@app.command("next-day")
def next_day(ctx: typer.Context):
    """Advance the deck's day counter by one."""
    config = _resolve_with_overrides(ctx)
    deck = _load(config)
    deck.day += 1
    try:
        dump_deck(deck, config.deck_file)
    except KastenError as e:
        raise _fail(e) from e
    typer.echo(f"Day is now {deck.day}")


@app.command()
def version():
    """Show the installed kasten version."""
    typer.echo(f"kasten {VERSION}")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve_with_overrides(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))

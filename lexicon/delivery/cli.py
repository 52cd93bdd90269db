"""
Lexicon: terminal front end for the vocabulary trainer.

A Rich terminal interface over the study and test session managers.

Commands:
- lexicon study     - Learn new words or review due ones
- lexicon test      - Take a level test
- lexicon progress  - Show level, streak and mastery statistics
- lexicon search    - Search the vocabulary
- lexicon export    - Write learner data to a JSON file
- lexicon import    - Load learner data from a JSON file
- lexicon reset     - Clear study progress
"""
from __future__ import annotations

import asyncio
import json
import sys
import time
from collections.abc import Awaitable, Callable, Coroutine
from datetime import timedelta
from pathlib import Path
from typing import Any, Optional, TypeVar

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from config import Settings, get_settings
from lexicon.adaptive.difficulty import AdaptiveDifficultyEstimator
from lexicon.content.loader import VocabularyCorpus, load_default_corpus
from lexicon.core.errors import ExhaustionError, LexiconError
from lexicon.core.models import QuestionType, TestQuestion, utcnow
from lexicon.delivery.state_store import StateStore
from lexicon.delivery.storage import export_data, import_data
from lexicon.quiz.assessment import TestSessionManager
from lexicon.study.progress import daily_progress, mastery_breakdown, test_history
from lexicon.study.study_service import StudySessionManager

T = TypeVar("T")


# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="lexicon",
    help="Lexicon: vocabulary mastery trainer",
    no_args_is_help=True,
)
console = Console()


# =============================================================================
# Styling
# =============================================================================

STYLES = {
    "correct": "bold green",
    "incorrect": "bold red",
    "info": "bold cyan",
    "warning": "bold yellow",
    "dim": "dim",
    "question_type": {
        QuestionType.MULTIPLE_CHOICE: "green",
        QuestionType.FILL_BLANK: "magenta",
        QuestionType.CONTEXT: "blue",
    },
}

OPTION_LETTERS = "ABCD"


def style_question_type(question_type: QuestionType) -> str:
    color = STYLES["question_type"].get(question_type, "white")
    label = question_type.value.replace("_", " ")
    return f"[{color}]{label}[/{color}]"


# =============================================================================
# Wiring
# =============================================================================


async def _with_store(settings: Settings, work: Callable[[StateStore], Awaitable[T]]) -> T:
    """Run work against the learner database, closing it afterwards."""
    store = StateStore(settings.state_db_path)
    try:
        return await work(store)
    finally:
        store.close()


def _study_manager(
    settings: Settings, store: StateStore, corpus: VocabularyCorpus
) -> StudySessionManager:
    return StudySessionManager(
        store,
        corpus,
        learner_id=settings.learner_id,
        username=settings.learner_name,
        estimator=AdaptiveDifficultyEstimator(settings.get_estimator_config()),
        reward=settings.get_reward_config(),
        session_word_count=settings.session_word_count,
        daily_goal=settings.daily_goal,
    )


def _test_manager(
    settings: Settings, store: StateStore, corpus: VocabularyCorpus
) -> TestSessionManager:
    return TestSessionManager(
        store,
        corpus,
        learner_id=settings.learner_id,
        username=settings.learner_name,
        levels=settings.get_test_level_config(),
        reward=settings.get_reward_config(),
        question_count=settings.test_question_count,
        daily_goal=settings.daily_goal,
    )


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, turning trainer errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except LexiconError as e:
        console.print(f"\n[red]Error:[/red] {e}")
        raise typer.Exit(1)


# =============================================================================
# Display Helpers
# =============================================================================


def display_word_front(word, index: int, total: int, hint: bool) -> None:
    header = f"Word {index}/{total}  |  difficulty {word.difficulty}"
    content = f"[bold]{word.word}[/bold]  [dim]{word.pronunciation}[/dim]"
    if hint and word.first_example:
        content += f"\n\n[dim]Hint: {word.first_example}[/dim]"
    console.print(Panel(content, title=header, title_align="left", border_style="cyan", padding=(1, 2)))


def display_word_back(word, is_correct: bool) -> None:
    style = STYLES["correct"] if is_correct else STYLES["incorrect"]
    icon = "[green]✓[/green]" if is_correct else "[red]✗[/red]"
    lines = [f"{icon} [bold]{word.word}[/bold]"]
    for definition in word.definitions:
        lines.append(f"  [italic]{definition.part_of_speech}[/italic] {definition.meaning}")
    console.print(Panel("\n".join(lines), border_style=style, padding=(1, 2)))


def display_question(question: TestQuestion, index: int, total: int) -> None:
    header = f"Question {index}/{total}  |  {style_question_type(question.type)}  |  {question.time_limit_s}s"
    content = question.prompt
    if question.options:
        content += "\n\n" + "\n".join(
            f"  {OPTION_LETTERS[i]}. {option}" for i, option in enumerate(question.options)
        )
    console.print(Panel(content, title=header, title_align="left", border_style="cyan", padding=(1, 2)))


def resolve_option(question: TestQuestion, raw: str) -> str:
    """Map an option letter to its text; anything else is taken literally."""
    choice = raw.strip().upper()
    if question.options and len(choice) == 1 and choice in OPTION_LETTERS[: len(question.options)]:
        return question.options[OPTION_LETTERS.index(choice)]
    return raw


# =============================================================================
# Commands
# =============================================================================


@app.command()
def study(
    mode: str = typer.Option("learn", "--mode", "-m", help="learn or review"),
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Words in this session"),
) -> None:
    """
    Start an interactive study session.

    Shows each word, asks whether you recalled it, then reveals the meaning.
    Progress is saved after every word.
    """
    settings = get_settings()

    async def session(store: StateStore) -> None:
        corpus = load_default_corpus(settings.corpus_path)
        manager = _study_manager(settings, store, corpus)
        try:
            snapshot = await manager.start_session(mode, count)
        except ExhaustionError:
            console.print("\n[green]Nothing to study right now.[/green]")
            console.print("All caught up. Check back later.")
            return

        console.print(f"\n[bold cyan]Lexicon[/bold cyan] - {snapshot.mode.value} session")
        console.print(f"  Words: {len(snapshot.word_queue)}")
        console.print()

        total = len(snapshot.word_queue)
        index = 0
        # The session ends itself once the queue is exhausted
        while (word := manager.current_word()) is not None:
            index += 1
            display_word_front(word, index, total, manager.estimator.should_offer_hint())
            started = time.monotonic()
            knew = Confirm.ask("Did you know it?", default=True)
            latency_ms = int((time.monotonic() - started) * 1000)

            await manager.answer_word(word.id, knew, latency_ms)
            display_word_back(word, knew)

        summary = manager.last_summary
        if summary is not None:
            lines = [
                f"Words studied: {summary.words_studied}",
                f"Accuracy: {summary.accuracy:.0f}%",
                f"Experience: +{summary.experience_gained}",
            ]
            if summary.achievements_unlocked:
                lines.append(f"Achievements: {', '.join(summary.achievements_unlocked)}")
            console.print(Panel("\n".join(lines), title="[bold]Session Complete[/bold]", border_style="green"))

    _run(_with_store(settings, session))


@app.command()
def test(
    level: str = typer.Option("beginner", "--level", "-l", help="beginner, intermediate, advanced or master"),
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Number of questions"),
) -> None:
    """
    Take a level test.

    Multiple-choice questions accept the option letter; other questions
    take the word itself. Answers given after the time limit count as expired.
    """
    settings = get_settings()

    async def session(store: StateStore) -> None:
        corpus = load_default_corpus(settings.corpus_path)
        manager = _test_manager(settings, store, corpus)
        snapshot = await manager.start_test(level, count)

        total = len(snapshot.questions)
        console.print(f"\n[bold cyan]Lexicon[/bold cyan] - {snapshot.level.value} test, {total} questions\n")

        for index, question in enumerate(snapshot.questions, 1):
            display_question(question, index, total)
            started = time.monotonic()
            raw = Prompt.ask("Answer", default="")
            elapsed_ms = int((time.monotonic() - started) * 1000)
            answer = resolve_option(question, raw)

            if elapsed_ms > question.time_limit_ms:
                recorded = manager.expire_question(question.id, answer)
                console.print("[yellow]Time's up.[/yellow]")
            else:
                recorded = manager.answer_question(question.id, answer, elapsed_ms)

            if recorded.is_correct:
                console.print(f"[{STYLES['correct']}]Correct[/]")
            else:
                console.print(f"[{STYLES['incorrect']}]Incorrect[/] - {question.correct_answer}")
            manager.navigate_question(1)

        summary = await manager.end_test()
        result = summary.result
        verdict = "[green]PASSED[/green]" if result.passed else "[red]NOT PASSED[/red]"
        lines = [
            f"{verdict}",
            f"Score: {result.score}/{result.max_score}",
            f"Accuracy: {result.accuracy:.1f}%",
            f"Experience: +{summary.experience_gained}",
        ]
        if result.weak_areas:
            lines.append(f"Weak areas: {', '.join(result.weak_areas)}")
        console.print(Panel("\n".join(lines), title="[bold]Test Results[/bold]", border_style="cyan"))

    _run(_with_store(settings, session))


@app.command()
def progress() -> None:
    """Show level, streak, today's progress and mastery breakdown."""
    settings = get_settings()

    async def show(store: StateStore) -> None:
        corpus = load_default_corpus(settings.corpus_path)
        manager = _study_manager(settings, store, corpus)
        profile = await manager.load_profile()
        records = await store.get_records_by_learner(settings.learner_id)
        results = await store.get_test_results(settings.learner_id)

        console.print(Panel(
            f"[bold]{profile.username}[/bold]\n"
            f"Level {profile.level}  |  {profile.experience} exp  |  streak {profile.streak}\n"
            f"Words studied: {profile.total_words_studied}  |  tests: {profile.tests_taken}",
            title="[bold]Profile[/bold]",
            border_style="cyan",
        ))

        today = daily_progress(records, utcnow().date(), profile.daily_goal)
        console.print(
            f"Today: {today.completed}/{today.target} words "
            f"({today.new_words} new, {today.review_words} review), "
            f"accuracy {today.accuracy:.0f}%, {timedelta(seconds=today.time_spent_s)}"
        )

        table = Table(title="Mastery")
        table.add_column("Level")
        table.add_column("Words", justify="right")
        for level, words in mastery_breakdown(records).items():
            table.add_row(f"[{level.color}]{level.display_name}[/{level.color}]", str(words))
        console.print(table)

        if results:
            history = Table(title="Recent Tests")
            history.add_column("Completed")
            history.add_column("Level")
            history.add_column("Score", justify="right")
            history.add_column("Result")
            for result in test_history(results)[:10]:
                history.add_row(
                    result.completed_at.strftime("%Y-%m-%d %H:%M"),
                    result.level.value,
                    f"{result.score}/{result.max_score} ({result.accuracy:.0f}%)",
                    "[green]passed[/green]" if result.passed else "[red]failed[/red]",
                )
            console.print(history)

        if profile.achievements:
            console.print(f"\nAchievements: {', '.join(profile.achievements)}")

    _run(_with_store(settings, show))


@app.command()
def search(
    query: str = typer.Argument(..., help="Text to search for"),
    limit: int = typer.Option(20, "--limit", help="Maximum results"),
) -> None:
    """Search headwords, meanings, examples and tags."""
    settings = get_settings()
    try:
        corpus = load_default_corpus(settings.corpus_path)
    except LexiconError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    results = corpus.search(query, limit=limit)
    if not results:
        console.print(f"[yellow]No words match '{query}'[/yellow]")
        raise typer.Exit(0)

    table = Table()
    table.add_column("Word")
    table.add_column("Meaning")
    table.add_column("Difficulty", justify="right")
    table.add_column("Matched", style="dim")
    for result in results:
        table.add_row(
            result.word.word,
            result.word.primary_meaning,
            str(result.word.difficulty),
            ", ".join(result.matched_fields),
        )
    console.print(table)


@app.command()
def export(
    path: Path = typer.Argument(..., help="Destination JSON file"),
) -> None:
    """Export profile, study records and test results to JSON."""
    settings = get_settings()

    async def dump(store: StateStore) -> dict:
        return await export_data(store, settings.learner_id)

    payload = _run(_with_store(settings, dump))
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    console.print(
        f"[green]Exported[/green] {len(payload['study_records'])} study records "
        f"and {len(payload['test_results'])} test results to {path}"
    )


@app.command(name="import")
def import_(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file from 'lexicon export'"),
) -> None:
    """Import learner data previously exported."""
    settings = get_settings()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] {path} is not valid JSON: {e}")
        raise typer.Exit(1)

    async def load(store: StateStore) -> dict[str, int]:
        return await import_data(store, payload)

    counts = _run(_with_store(settings, load))
    console.print(
        f"[green]Imported[/green] {counts['study_records']} study records "
        f"and {counts['test_results']} test results"
    )


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Clear study records, test results and profile progress."""
    settings = get_settings()
    if not yes and not Confirm.ask("Reset all progress?", default=False):
        raise typer.Exit(0)

    async def clear(store: StateStore) -> None:
        await store.reset_learner(settings.learner_id)

    _run(_with_store(settings, clear))
    console.print("[green]Progress reset.[/green]")


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """CLI entry point."""
    settings = get_settings()
    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    run()

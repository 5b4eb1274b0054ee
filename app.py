"""
Terminal front end for the aniracetam sentence trainer.
Wires the collection store, translator and SM-2 scheduler to rich prompts.
"""

import argparse
import logging
import sys
from functools import partial
from typing import Callable, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from config import Settings, get_settings, load_user_config, save_user_config
from models import ReviewLog, utcnow
from spaced_rep import collection_stats, record_review, select_due
from store import SentenceStore
from translator import TranslationError, translate

logger = logging.getLogger(__name__)

QUALITY_CHOICES = [
    ("0", "Again (0) - Incorrect response"),
    ("1", "Hard (1) - Correct response after difficulty"),
    ("2", "Good (2) - Correct response after hesitation"),
    ("3", "Easy (3) - Perfect response"),
]

MENU = [
    ("1", "Add a new sentence", "add"),
    ("2", "Review sentences", "review"),
    ("3", "Show statistics", "stats"),
    ("4", "Exit", "exit"),
]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def display_header(console: Console) -> None:
    title = Text("aniracetam", style="bold blue", justify="center")
    console.print(Panel(title, border_style="blue", expand=False))
    console.print("Terminal Language Learning Program\n", style="blue")


def ask_non_empty(console: Console, message: str, error: str) -> str:
    while True:
        answer = Prompt.ask(message, console=console).strip()
        if answer:
            return answer
        console.print(error, style="red")


def setup_language(console: Console, settings: Settings) -> str:
    """Return the configured target language, asking for it on first run."""
    config = load_user_config(settings.config_path)

    if not config.target_language:
        language = ask_non_empty(
            console,
            "Enter the language code you want to learn (e.g., es for Spanish, fr for French)",
            "Please enter a language code",
        )
        config.target_language = language
        save_user_config(settings.config_path, config)
        console.print(f"\nLanguage set to: {escape(language)}\n", style="green")

    return config.target_language


def add_sentence(console: Console, store: SentenceStore, target_language: str,
                 translate_fn: Callable[[str, str], str],
                 clock: Callable = utcnow) -> None:
    sentence = ask_non_empty(console, "Enter a sentence in English to translate",
                             "Please enter a sentence")

    try:
        translated = translate_fn(sentence, target_language)
    except TranslationError as e:
        console.print(f"Translation failed: {escape(str(e))}", style="red")
        return

    store.add(sentence, translated, target_language, clock())

    console.print("\nSentence added successfully!", style="green")
    console.print(f"English: {escape(sentence)}", style="cyan")
    console.print(f"{escape(target_language)}: {escape(translated)}\n", style="cyan")


def ask_quality(console: Console) -> int:
    for _, label in QUALITY_CHOICES:
        console.print(f"  {label}")
    answer = Prompt.ask(
        "How well did you know this?",
        console=console,
        choices=[value for value, _ in QUALITY_CHOICES],
    )
    return int(answer)


def review_sentences(console: Console, store: SentenceStore, clock: Callable = utcnow) -> None:
    """Run one review session over everything that is due."""
    sentences = store.load_all()

    if not sentences:
        console.print("No sentences to review. Add some sentences first!\n", style="yellow")
        return

    due_sentences = select_due(sentences, clock())

    if not due_sentences:
        console.print("No sentences are due for review right now.\n", style="yellow")
        return

    reviewed = {}
    logs = []
    try:
        for sentence in due_sentences:
            console.print(f"\n{escape(sentence.source_text)}", style="cyan")
            Prompt.ask("Translate this sentence (press Enter to see answer)",
                       console=console, default="", show_default=False)
            console.print(f"Correct translation: {escape(sentence.target_text)}\n", style="cyan")

            quality = ask_quality(console)
            now = clock()
            reviewed[sentence.id] = record_review(sentence, quality, now)
            logs.append(ReviewLog(item_id=sentence.id, quality=quality, reviewed_at=now))
    finally:
        # keep whatever was graded, even if the session was interrupted
        if reviewed:
            store.save_all(reviewed.get(s.id, s) for s in sentences)
            store.log_reviews(logs)
        logger.info("Reviewed %d of %d due sentences", len(reviewed), len(due_sentences))

    console.print("Review session completed!\n", style="green")


def show_stats(console: Console, store: SentenceStore, clock: Callable = utcnow) -> None:
    stats = collection_stats(store.load_all(), clock())

    table = Table(title="Your sentences")
    table.add_column("Total", justify="right")
    table.add_column("Due", justify="right", style="yellow")
    table.add_column("New", justify="right", style="cyan")
    table.add_column("Learning", justify="right")
    table.add_column("Mature", justify="right", style="green")
    table.add_row(str(stats.total), str(stats.due), str(stats.new),
                  str(stats.learning), str(stats.mature))
    console.print(table)
    console.print()


def ask_action(console: Console) -> str:
    for key, label, _ in MENU:
        console.print(f"  {key}) {label}")
    key = Prompt.ask("What would you like to do?", console=console,
                     choices=[key for key, _, _ in MENU])
    return next(action for k, _, action in MENU if k == key)


def run(console: Console, settings: Settings, store: SentenceStore,
        language: Optional[str] = None,
        translate_fn: Optional[Callable[[str, str], str]] = None) -> None:
    display_header(console)

    if language:
        config = load_user_config(settings.config_path)
        config.target_language = language
        save_user_config(settings.config_path, config)
    target_language = setup_language(console, settings)

    if translate_fn is None:
        translate_fn = partial(translate, url=settings.translate_url,
                               timeout=settings.translate_timeout)

    while True:
        action = ask_action(console)

        if action == "add":
            add_sentence(console, store, target_language, translate_fn)
        elif action == "review":
            review_sentences(console, store)
        elif action == "stats":
            show_stats(console, store)
        elif action == "exit":
            console.print("Goodbye!", style="blue")
            return


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="aniracetam",
        description="Terminal language learning with spaced repetition",
    )
    parser.add_argument("--data-dir", help="Where sentences and config are kept (default: ~/.aniracetam)")
    parser.add_argument("--language", help="Set the target language code and remember it")
    parser.add_argument("--log-level", help="Logging level (default: WARNING)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        settings = get_settings(data_dir=args.data_dir, log_level=args.log_level)
    except ValidationError as e:
        Console(stderr=True).print(f"Invalid settings:\n{escape(str(e))}", style="red")
        return 2
    configure_logging(settings.log_level)

    console = Console()
    store = SentenceStore(settings.db_path)
    imported = store.import_legacy_json(settings.legacy_sentences_path)
    if imported:
        console.print(f"Imported {imported} sentences from {settings.legacy_sentences_path}", style="green")

    try:
        run(console, settings, store, language=args.language)
    except (KeyboardInterrupt, EOFError):
        console.print("\nGoodbye!", style="blue")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Main application entry point for Hanasu."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from . import __version__
from .config import HanasuConfig
from .errors import HanasuError
from .glossary import KeywordGlossary, JsonKeywordStore, KeywordExtractor
from .languages import SUPPORTED_LANGUAGES
from .llm import StreamingChatClient, get_provider
from .models.events import Delta, Failed
from .models.glossary import WILDCARD
from .models.session import LanguagePair, SessionStatus
from .session import SessionController, SessionPublisher
from .speech import RecognizerResolver, RECOGNIZER_VARIANTS
from .translation import TranslationClient, QuestionClient
from .ui import TranscriptView

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "hanasu.yaml"


class Server:

    def __init__(self, config_path: str, log_level: Optional[str] = None):
        self.config = HanasuConfig(config_path)
        # Command line overrides the configured level
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))
        self.console = Console()
        self.controller: Optional[SessionController] = None
        self.view: Optional[TranscriptView] = None

    def build_chat_client(self) -> StreamingChatClient:
        return StreamingChatClient(
            api_key=self.config.get_api_key(),
            provider=get_provider(self.config.get('llm.provider', 'openai')),
            model=self.config.get('llm.model', 'gpt-4o-mini'),
            base_url=self.config.get('llm.base_url'),
            read_timeout=float(self.config.get('llm.read_timeout_seconds', 30.0)),
        )

    def build_glossary(self) -> KeywordGlossary:
        return KeywordGlossary(JsonKeywordStore(self.config.get_keyword_storage_path()))

    def init(self, source: str, target: str, recognizers: Sequence[str]) -> None:
        logger.info("Initializing services...")
        chat_client = self.build_chat_client()

        translation_client = TranslationClient(
            chat_client,
            temperature=float(self.config.get('llm.translation_temperature', 0.1)),
        )
        question_client = QuestionClient(
            chat_client,
            temperature=float(self.config.get('llm.question_temperature', 0.7)),
        )
        resolver = RecognizerResolver(recognizers, config=self.config)

        self.controller = SessionController(
            translation_client=translation_client,
            glossary=self.build_glossary(),
            recognizer_factory=resolver,
            language_pair=LanguagePair(source=source, target=target),
            publisher=SessionPublisher(),
            question_client=question_client,
            debounce_seconds=self.config.get_debounce_seconds(),
        )
        self.view = TranscriptView(self.console)
        logger.info(f"Session configured: {source} -> {target}, recognizers={list(recognizers)}")

    async def run(self, duration: Optional[float]) -> None:
        """Capture until the duration elapses, the session errors out, or Ctrl+C."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + duration if duration else None

        self.controller.start()
        try:
            while self.controller.status is not SessionStatus.ERROR:
                if deadline is not None and loop.time() >= deadline:
                    break
                await asyncio.sleep(0.1)

            # Let the last utterances finish translating before tearing down
            drain_timeout = float(self.config.get('session.drain_timeout', 10.0))
            try:
                await asyncio.wait_for(self.controller.drain(), timeout=drain_timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Pending translations did not finish within {drain_timeout}s")
        finally:
            self.controller.stop()

    async def ask_question(self, reference_url: Optional[str]) -> None:
        self.console.print("\n💡 Suggested questions:", style="bold blue")
        stream = self.controller.generate_question(reference_url)
        async for event in stream:
            if isinstance(event, Delta):
                self.console.print(event.text, end="", markup=False)
            elif isinstance(event, Failed):
                self.console.print(f"\n❌ Question generation failed: {event.reason}", style="bold red")
        self.console.print()

    def summarize(self) -> None:
        if self.controller.last_error:
            self.console.print(f"Session ended: {self.controller.last_error}", style="yellow")
        self.view.print_summary(self.controller.log.list_ordered())

    def cleanup(self) -> None:
        if self.controller:
            self.controller.stop()
        if self.view:
            self.view.close()


def setup_logging(config, level: str = "INFO") -> None:

    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/hanasu.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info("="*50)
    logger.info("Hanasu starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("="*50)


def run_session(args: argparse.Namespace) -> None:
    server = Server(args.config, args.log_level)
    source = args.source or server.config.get('session.source_language', 'en')
    target = args.target or server.config.get('session.target_language', 'ja')
    recognizers = args.recognizer or server.config.get('speech.recognizers', ['google', 'console'])

    try:
        server.init(source, target, recognizers)
        server.console.print(f"🎙️  Hanasu {source} → {target}  (Ctrl+C to stop)", style="bold green")
        try:
            asyncio.run(server.run(args.duration))
        except KeyboardInterrupt:
            server.console.print("\n🛑 Stopped", style="bold yellow")
        server.summarize()
        if args.question:
            asyncio.run(server.ask_question(args.reference_url))
    finally:
        server.cleanup()


def list_keywords(args: argparse.Namespace) -> None:
    server = Server(args.config, args.log_level)
    entries = server.build_glossary().list()

    table = Table(title="📚 Keywords", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Term", style="cyan")
    table.add_column("Replacement", style="green")
    table.add_column("Languages")
    for entry in entries:
        table.add_row(entry.id, entry.term, entry.replacement, f"{entry.source_lang} → {entry.target_lang}")
    server.console.print(table)


def add_keyword(args: argparse.Namespace) -> None:
    server = Server(args.config, args.log_level)
    entry = server.build_glossary().add(args.term, args.replacement, args.source, args.target)
    server.console.print(f"✅ Added {entry.id}: {entry.term} → {entry.replacement}", style="bold green")


def remove_keyword(args: argparse.Namespace) -> None:
    server = Server(args.config, args.log_level)
    if not server.build_glossary().remove(args.id):
        raise HanasuError(f"No keyword with id {args.id}")
    server.console.print(f"🗑️  Removed {args.id}", style="bold yellow")


def import_keywords(args: argparse.Namespace) -> None:
    server = Server(args.config, args.log_level)
    extractor = KeywordExtractor(server.build_chat_client())
    drafts = asyncio.run(extractor.extract_from_url(args.url, args.source, args.target))

    if args.dry_run:
        for draft in drafts:
            server.console.print(f"  {draft.term} → {draft.replacement}")
        server.console.print(f"Found {len(drafts)} keywords (not saved)", style="yellow")
        return

    added = server.build_glossary().import_entries(drafts)
    server.console.print(f"✅ Imported {len(added)} keywords from {args.url}", style="bold green")


def build_parser() -> argparse.ArgumentParser:
    language_codes = [language.code for language in SUPPORTED_LANGUAGES]

    parser = argparse.ArgumentParser(
        description="Hanasu - Live speech translation",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Hanasu v{__version__}"
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        type=str,
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to configuration YAML file (default: {DEFAULT_CONFIG_PATH})"
    )
    common.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", parents=[common], help="Run a live translation session")
    run_parser.add_argument("--source", choices=language_codes, help="Spoken language code")
    run_parser.add_argument("--target", choices=language_codes, help="Translation language code")
    run_parser.add_argument(
        "--recognizer",
        action="append",
        choices=sorted(RECOGNIZER_VARIANTS),
        help="Speech recognizer to try, in order (repeatable)"
    )
    run_parser.add_argument(
        "--duration",
        type=float,
        help="Stop capturing after this many seconds (default: until Ctrl+C)"
    )
    run_parser.add_argument(
        "--question",
        action="store_true",
        help="Generate follow-up questions after the session"
    )
    run_parser.add_argument("--reference-url", type=str, help="Conference page to ground the questions")
    run_parser.set_defaults(handler=run_session)

    keywords_parser = subparsers.add_parser("keywords", help="Manage the keyword glossary")
    keyword_commands = keywords_parser.add_subparsers(dest="keyword_command", required=True)

    list_parser = keyword_commands.add_parser("list", parents=[common], help="List keywords")
    list_parser.set_defaults(handler=list_keywords)

    add_parser = keyword_commands.add_parser("add", parents=[common], help="Add a keyword")
    add_parser.add_argument("term")
    add_parser.add_argument("replacement")
    add_parser.add_argument("--source", default=WILDCARD, help="Source language code (default: any)")
    add_parser.add_argument("--target", default=WILDCARD, help="Target language code (default: any)")
    add_parser.set_defaults(handler=add_keyword)

    remove_parser = keyword_commands.add_parser("remove", parents=[common], help="Remove a keyword")
    remove_parser.add_argument("id")
    remove_parser.set_defaults(handler=remove_keyword)

    import_parser = keyword_commands.add_parser("import-url", parents=[common],
                                                help="Extract keywords from a web page")
    import_parser.add_argument("url")
    import_parser.add_argument("--source", default=WILDCARD, help="Source language code (default: any)")
    import_parser.add_argument("--target", default=WILDCARD, help="Target language code (default: any)")
    import_parser.add_argument("--dry-run", action="store_true", help="Show keywords without saving")
    import_parser.set_defaults(handler=import_keywords)

    return parser


def main() -> None:
    """Main entry point for Hanasu application."""
    parser = build_parser()
    args = parser.parse_args()

    try:
        args.handler(args)
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except (HanasuError, FileNotFoundError, ValueError) as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

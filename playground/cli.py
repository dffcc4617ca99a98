"""
Playground CLI.

Usage:
    playground serve                      Run the HTTP API
    playground providers                  List providers and key status
    playground key PROVIDER [--clear]     Store or clear an API key
    playground profiles [list|save|apply|delete] [ARG]
    playground ask "question" [FILES...]  Single question, get answer, exit
    playground chat [FILES...]            Interactive chat

Examples:
    playground key openai
    playground ask "summarise this" notes.md
    playground -p anthropic -m claude-sonnet-4-5 chat
    playground chat --tools calculator ask_human --mode react
"""

import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.history import FileHistory

from playground.commands.slash import SLASH_COMMANDS
from playground.config.app_config import DEFAULT_HOST, DEFAULT_PORT
from playground.context import PlaygroundContext
from playground.models.attachment import AttachedFile
from playground.models.events import TurnEvent, TurnResult
from playground.models.human_input import HumanInputField
from playground.models.profile import PlaygroundSettings
from playground.services.attachments import read_attachment
from playground.services.human_input import HumanInputRequest
from playground.streaming.dispatch import submit_turn
from playground.utils.custom_exceptions import ValidationError
from playground.utils.logging_utils import logger

REPL_COMMANDS = ['/quit', '/exit', '/new', '/retry', '/attach', '/model', '/provider', '/mode', '/tools', '/star', '/usage']

DIM = "\033[90m"
RED = "\033[31m"
YELLOW = "\033[33m"
RESET = "\033[0m"


def load_attachments(paths: List[str]) -> List[AttachedFile]:
    attachments = []
    for path in paths:
        try:
            attachments.append(read_attachment(path))
        except OSError as e:
            print(f"{RED}Cannot attach {path}: {e}{RESET}", file=sys.stderr)
    return attachments


def effective_settings(context: PlaygroundContext, args) -> PlaygroundSettings:
    """Stored settings with command-line overrides applied, not persisted."""
    settings = context.settings
    overrides = {}
    if getattr(args, 'provider', None):
        overrides['selectedProviderId'] = args.provider
    if getattr(args, 'model', None):
        overrides['selectedModelId'] = args.model
    if getattr(args, 'mode', None):
        overrides['agenticMode'] = args.mode
    if getattr(args, 'tools', None) is not None:
        overrides['enabledToolNames'] = args.tools
    if getattr(args, 'no_confirm', False):
        overrides['confirmToolRuns'] = False
    return settings.model_copy(update=overrides)


class PlaygroundCLI:

    def __init__(self, context: PlaygroundContext, settings: PlaygroundSettings,
                 attachments: Optional[List[AttachedFile]] = None):
        self.context = context
        self.settings = settings
        self.attachments = list(attachments or [])
        self.conversation = self._new_conversation()
        self.prompt_session: Optional[PromptSession] = None
        self._human_event: Optional[asyncio.Event] = None
        self._unsubscribe = None

    def _new_conversation(self):
        return self.context.conversations.create(
            providerId=self.settings.selectedProviderId,
            modelId=self.settings.selectedModelId,
        )

    def _setup_prompt_session(self):
        """Set up prompt_toolkit session with history and completions."""
        self.context.home.mkdir(parents=True, exist_ok=True)
        history_file = self.context.home / 'history'
        words = REPL_COMMANDS + [c.command for c in SLASH_COMMANDS]
        self.prompt_session = PromptSession(
            history=FileHistory(str(history_file)),
            completer=WordCompleter(words, ignore_case=True, sentence=True),
            complete_while_typing=True,
        )

    def _attach_broker(self):
        self._human_event = asyncio.Event()

        def on_change(request: Optional[HumanInputRequest]):
            if request is not None:
                self._human_event.set()

        self._unsubscribe = self.context.broker.subscribe(on_change)

    def _detach_broker(self):
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    # -----------------------------------------------------------------------
    # Output
    # -----------------------------------------------------------------------

    def _print_event(self, event: TurnEvent):
        data = event.data
        if event.type == "delta":
            sys.stdout.write(data["delta"])
            sys.stdout.flush()
        elif event.type == "message":
            message = data["message"]
            if message["role"] == "assistant" and message["content"]:
                print(message["content"])
        elif event.type == "tool_request":
            print(f"\n{DIM}[tool] {data['tool']} {data.get('params') or {}}{RESET}")
        elif event.type == "tool_result":
            print(f"{DIM}[result] {data['result']['text']}{RESET}\n")
        elif event.type == "stopped":
            print(f"\n{YELLOW}Stopped after {data['hops']} tool rounds{RESET}")
        elif event.type == "error":
            print(f"\n{RED}Error: {data['message']}{RESET}", file=sys.stderr)

    # -----------------------------------------------------------------------
    # Human input
    # -----------------------------------------------------------------------

    async def _prompt(self, text: str, is_password: bool = False) -> str:
        if self.prompt_session is None:
            self._setup_prompt_session()
        return await self.prompt_session.prompt_async(
            FormattedText([('bold yellow', text)]), is_password=is_password
        )

    async def _prompt_field(self, field: HumanInputField):
        label = field.label or field.key
        if field.options:
            for index, option in enumerate(field.options, 1):
                print(f"  {index}. {option}")
        while True:
            raw = (await self._prompt(f"{label}: ")).strip()
            if not raw and not field.required:
                return [] if field.type == "checkbox" else ""
            if not raw:
                print(f"{DIM}An answer is required (Ctrl+C to dismiss){RESET}")
                continue
            if field.type == "checkbox":
                picks = [self._pick(field, part.strip()) for part in raw.split(",")]
                if all(picks):
                    return picks
            elif field.type in ("select", "radio"):
                pick = self._pick(field, raw)
                if pick:
                    return pick
            else:
                return raw
            print(f"{DIM}Choose from the listed options{RESET}")

    @staticmethod
    def _pick(field: HumanInputField, raw: str) -> Optional[str]:
        if raw.isdigit() and 1 <= int(raw) <= len(field.options):
            return field.options[int(raw) - 1]
        for option in field.options:
            if option.lower() == raw.lower():
                return option
        return None

    async def answer(self, request: HumanInputRequest):
        """Present a request at the terminal and resolve or cancel it."""
        print(f"\n{YELLOW}? {request.question}{RESET}")
        answers = {}
        try:
            for field in request.fields:
                answers[field.key] = await self._prompt_field(field)
        except (KeyboardInterrupt, EOFError):
            self.context.broker.cancel(request.id)
            print(f"{DIM}Dismissed{RESET}")
            return
        self.context.broker.resolve(answers, request_id=request.id)

    # -----------------------------------------------------------------------
    # Turns
    # -----------------------------------------------------------------------

    async def send(self, text: Optional[str], retry: bool = False) -> TurnResult:
        session = self.context.session_for(self.conversation.id)
        if retry:
            turn = session.retry(self.conversation.id, self.settings, listener=self._print_event)
        else:
            attachments, self.attachments = self.attachments, []
            turn = submit_turn(session, self.context.commands, self.conversation.id, text,
                               self.settings, attachments=attachments, listener=self._print_event)
        task = asyncio.ensure_future(turn)

        loop = asyncio.get_running_loop()
        loop.add_signal_handler(signal.SIGINT, session.cancel)
        try:
            while not task.done():
                waiter = asyncio.ensure_future(self._human_event.wait())
                await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
                waiter.cancel()
                if self._human_event.is_set():
                    self._human_event.clear()
                    request = self.context.broker.active
                    if request is not None:
                        await self.answer(request)
        finally:
            loop.remove_signal_handler(signal.SIGINT)

        result = task.result()
        if result.outcome == "cancelled":
            print(f"\n{DIM}Cancelled{RESET}")
        elif result.outcome not in ("local",):
            print()
        return result

    async def ask(self, question: str) -> TurnResult:
        self._attach_broker()
        try:
            return await self.send(question)
        finally:
            self._detach_broker()

    async def chat(self):
        """Interactive chat loop."""
        self._setup_prompt_session()
        self._attach_broker()
        provider = self.context.registry.display_name(self.settings.selectedProviderId)
        model = self.context.registry.model_display_name(self.settings.selectedProviderId,
                                                         self.settings.selectedModelId)
        print(f"{DIM}Playground • {provider} / {model} • /help for commands{RESET}\n")

        try:
            while True:
                try:
                    user_input = (await self.prompt_session.prompt_async(
                        FormattedText([('bold cyan', '> ')])
                    )).strip()
                except KeyboardInterrupt:
                    continue
                except EOFError:
                    break

                if not user_input:
                    continue
                if user_input.startswith('/') and user_input.split()[0].lower() in REPL_COMMANDS + ['/help']:
                    if not await self._handle_command(user_input):
                        break
                    continue

                print()
                await self.send(user_input)
        finally:
            self._detach_broker()
        print(f"{DIM}Goodbye{RESET}")

    async def _handle_command(self, cmd: str) -> bool:
        """Handle REPL commands. Returns False to exit."""
        parts = cmd.split(maxsplit=1)
        command = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ""

        if command in ('/quit', '/exit'):
            return False
        elif command == '/help':
            print(self.context.commands.execute('/help'))
            print("""
Session commands:
  /new             Start a new conversation
  /retry           Re-run the last turn
  /attach <path>   Attach a file to the next message
  /provider <id>   Switch provider
  /model <id>      Switch model
  /mode <name>     Agentic mode (none, react, plan_execute, chain_of_thought, tree_of_thought)
  /tools [names]   Enable tools (no names: list them)
  /star            Star the last assistant message
  /usage           Token usage this session
  /quit            Exit
""")
        elif command == '/new':
            self.conversation = self._new_conversation()
            print(f"{DIM}New conversation{RESET}")
        elif command == '/retry':
            await self.send(None, retry=True)
        elif command == '/attach':
            self.attachments.extend(load_attachments([arg]) if arg else [])
            print(f"{DIM}{len(self.attachments)} file(s) attached to the next message{RESET}")
        elif command == '/provider':
            if self.context.registry.get(arg) is None:
                print(f"{RED}Unknown provider: {arg}{RESET}")
            else:
                models = self.context.registry.models_for(arg)
                self.settings = self.settings.model_copy(update={
                    'selectedProviderId': arg,
                    'selectedModelId': models[0].id if models else self.settings.selectedModelId,
                })
                print(f"{DIM}Provider: {self.context.registry.display_name(arg)}{RESET}")
        elif command == '/model':
            self.settings = self.settings.model_copy(update={'selectedModelId': arg})
            print(f"{DIM}Model: {self.context.registry.model_display_name(self.settings.selectedProviderId, arg)}{RESET}")
        elif command == '/mode':
            try:
                self.settings = PlaygroundSettings(**{**self.settings.model_dump(), 'agenticMode': arg or 'none'})
            except ValueError:
                print(f"{RED}Unknown mode: {arg}{RESET}")
        elif command == '/tools':
            if arg:
                self.settings = self.settings.model_copy(update={'enabledToolNames': arg.split()})
            enabled = set(self.settings.enabledToolNames)
            for tool in self.context.tools.all():
                mark = '✓' if tool.name in enabled else ' '
                print(f"  [{mark}] {tool.name}: {tool.description}")
        elif command == '/star':
            replies = [m for m in self.conversation.messages if m.role == 'assistant']
            if replies:
                self.context.starred.star(self.conversation.id, replies[-1].id)
                print(f"{DIM}Starred{RESET}")
        elif command == '/usage':
            for provider_id, tokens in self.context.transport.usage.as_dict().items():
                print(f"  {self.context.registry.display_name(provider_id)}: {tokens} tokens")
        return True


async def _run_and_close(context: PlaygroundContext, coro):
    try:
        return await coro
    finally:
        await context.aclose()


def cmd_serve(args):
    import uvicorn
    from playground.server import create_app

    app = create_app(home=args.home)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)


def cmd_providers(args):
    context = PlaygroundContext(home=args.home)
    for provider in context.registry.all():
        if not provider.requires_key:
            status = 'no key needed'
        elif context.credentials.has_key(provider.id):
            status = 'key saved'
        else:
            status = 'no key'
        print(f"{provider.id:<12} {provider.name:<16} {DIM}{status}{RESET}")
        if args.verbose:
            for model in context.registry.models_for(provider.id):
                tags = f" [{', '.join(model.tags)}]" if model.tags else ""
                print(f"    {model.id}{DIM}{tags}{RESET}")


def cmd_key(args):
    context = PlaygroundContext(home=args.home)
    provider = context.registry.get(args.provider_id)
    if provider is None:
        print(f"Unknown provider: {args.provider_id}", file=sys.stderr)
        sys.exit(1)
    if args.clear:
        context.credentials.clear(provider.id)
        print(f"Cleared key for {provider.name}")
        return

    from prompt_toolkit import prompt
    key = prompt(f"{provider.key_label or provider.name + ' API key'}: ", is_password=True)
    context.credentials.save(provider.id, key)
    if args.test and key.strip():
        ok = asyncio.run(_run_and_close(context, context.transport.test_connection(provider, key.strip())))
        print("Key works" if ok else "Key was rejected")


def cmd_profiles(args):
    context = PlaygroundContext(home=args.home)
    profiles = context.profiles
    if args.action == 'save':
        try:
            profile = profiles.save(args.arg or '', context.settings)
        except ValidationError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        print(f"Saved {profile.name} ({profile.id})")
    elif args.action == 'apply':
        settings = profiles.apply(args.arg or '', context.settings)
        if settings is None:
            print(f"No profile {args.arg}", file=sys.stderr)
            sys.exit(1)
        context.save_settings(settings)
        print(f"Applied: {settings.selectedProviderId} / {settings.selectedModelId}")
    elif args.action == 'delete':
        if not profiles.delete(args.arg or ''):
            print(f"No profile {args.arg}", file=sys.stderr)
            sys.exit(1)
        print("Deleted")
    else:
        for profile in profiles.list():
            print(f"{profile.id}  {profile.name:<24} {DIM}{profiles.describe(profile)}{RESET}")


def cmd_ask(args):
    question = args.question
    if not question and not sys.stdin.isatty():
        question = sys.stdin.read()
    if not question:
        print("Error: no question provided", file=sys.stderr)
        sys.exit(1)

    context = PlaygroundContext(home=args.home)
    cli = PlaygroundCLI(context, effective_settings(context, args), load_attachments(args.files))
    result = asyncio.run(_run_and_close(context, cli.ask(question)))
    if result.outcome == "errored":
        sys.exit(1)


def cmd_chat(args):
    context = PlaygroundContext(home=args.home)
    cli = PlaygroundCLI(context, effective_settings(context, args), load_attachments(args.files))
    asyncio.run(_run_and_close(context, cli.chat()))


def _add_turn_args(parser):
    parser.add_argument('--mode', choices=['none', 'react', 'plan_execute', 'chain_of_thought', 'tree_of_thought'],
                        help='Agentic mode')
    parser.add_argument('--tools', nargs='*', help='Tools the model may request')
    parser.add_argument('--no-confirm', action='store_true', help='Run tools without asking first')


def create_parser():
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog='playground',
        description='Multi-provider AI playground',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split('Examples:')[1] if 'Examples:' in __doc__ else None,
    )

    parser.add_argument('--provider', '-p', help='Provider id to use')
    parser.add_argument('--model', '-m', help='Model id to use')
    parser.add_argument('--home', type=Path, help='Data directory (default: ~/.ai-playground)')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    serve_parser = subparsers.add_parser('serve', help='Run the HTTP API')
    serve_parser.add_argument('--host', default=DEFAULT_HOST)
    serve_parser.add_argument('--port', type=int, default=DEFAULT_PORT)
    serve_parser.add_argument('--log-level', default='info')
    serve_parser.set_defaults(func=cmd_serve)

    providers_parser = subparsers.add_parser('providers', help='List providers')
    providers_parser.add_argument('--verbose', '-v', action='store_true', help='Also list models')
    providers_parser.set_defaults(func=cmd_providers)

    key_parser = subparsers.add_parser('key', help='Store or clear an API key')
    key_parser.add_argument('provider_id')
    key_parser.add_argument('--clear', action='store_true')
    key_parser.add_argument('--test', action='store_true', help='Check the key after saving')
    key_parser.set_defaults(func=cmd_key)

    profiles_parser = subparsers.add_parser('profiles', help='Manage saved profiles')
    profiles_parser.add_argument('action', nargs='?', default='list', choices=['list', 'save', 'apply', 'delete'])
    profiles_parser.add_argument('arg', nargs='?', help='Profile name (save) or id (apply, delete)')
    profiles_parser.set_defaults(func=cmd_profiles)

    ask_parser = subparsers.add_parser('ask', help='Ask a question')
    ask_parser.add_argument('question', nargs='?', help='Question to ask')
    ask_parser.add_argument('files', nargs='*', help='Files to attach')
    _add_turn_args(ask_parser)
    ask_parser.set_defaults(func=cmd_ask)

    chat_parser = subparsers.add_parser('chat', help='Interactive chat')
    chat_parser.add_argument('files', nargs='*', help='Files to attach to the first message')
    _add_turn_args(chat_parser)
    chat_parser.set_defaults(func=cmd_chat)

    return parser


def main():
    """CLI entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        args.func(args)
    except KeyboardInterrupt:
        print()
        sys.exit(0)
    except Exception as e:
        logger.debug("CLI command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()

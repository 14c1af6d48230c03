"""tforge CLI - collect, rate and export LLM fine-tuning data."""

import argparse
import asyncio
import json
import logging
import subprocess
import sys
from pathlib import Path

import yaml

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import DEFAULT_CONFIG, DEFAULT_CONFIG_NAME  # noqa: E402
from core.errors import TrainforgeError  # noqa: E402

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _service(args):
    from training.service import TrainerService
    return TrainerService.from_config(args.config)


# ── Commands ──────────────────────────────────────────────────────────

def cmd_init(args):
    """Initialize a new trainforge project."""
    config_path = Path.cwd() / DEFAULT_CONFIG_NAME
    if config_path.exists():
        print(f"  [ok] {DEFAULT_CONFIG_NAME} already exists")
    else:
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(DEFAULT_CONFIG, f, sort_keys=False)
        print(f"  [ok] {DEFAULT_CONFIG_NAME} created")

    print("\nProject initialized. Next steps:")
    print("  1. Run: tforge keys set openai sk-...")
    print("  2. Run: tforge session create my-project --model gpt-4-turbo")


def cmd_keys(args):
    service = _service(args)
    try:
        if args.keys_command == "set":
            service.save_api_key(args.provider, args.api_key)
            print(f"Saved API key for {args.provider}")
        elif args.keys_command == "delete":
            service.delete_api_key(args.provider)
            print(f"Deleted API key for {args.provider}")
        elif args.keys_command == "test":
            ok = service.credentials.test_key(args.provider)
            print(f"{args.provider}: {'valid' if ok else 'missing or invalid'}")
            if not ok:
                sys.exit(1)
        else:
            statuses = service.list_keys()
            if not statuses:
                print("No API keys stored. Add one with `tforge keys set <provider> <key>`.")
            for status in statuses:
                mark = "active" if status.is_active else "inactive"
                updated = status.last_updated.strftime("%Y-%m-%d %H:%M") if status.last_updated else "-"
                print(f"  {status.provider:<10} {mark:<8} updated {updated}")
    finally:
        service.close()


def cmd_models(args):
    """List known models per provider."""
    from llm.providers import PROVIDER_INFO, ProviderTag, get_model_info, provider_models

    for tag in ProviderTag:
        print(f"{PROVIDER_INFO[tag]['name']} ({tag.value})")
        for model in provider_models(tag):
            info = get_model_info(model)
            print(f"  - {model:<28} context={info.context_window:<7} max_output={info.max_output_tokens}")


def cmd_generate(args):
    service = _service(args)
    try:
        request = service.build_request(
            args.model,
            args.prompt,
            temperature=args.temperature,
            max_tokens=args.max_tokens,
            context=args.context,
            system_prompt=args.system,
        )

        if args.stream:
            printed = 0

            def on_chunk(chunk):
                nonlocal printed
                print(chunk.content[printed:], end="", flush=True)
                printed = len(chunk.content)

            result = asyncio.run(service.stream_content(request, on_chunk))
            print()
        else:
            result = asyncio.run(service.generate_content(request))
            print(result.content)

        print(f"\n[{result.provider.value}/{result.model}] {result.tokens_used} tokens, ~${result.cost:.4f}")

        if args.session:
            pair = service.add_generation(args.session, request, result, quality_score=args.score)
            print(f"Saved as training pair {pair.id}")
    finally:
        service.close()


def cmd_session(args):
    service = _service(args)
    try:
        if args.session_command == "create":
            session = service.create_session(args.project, args.model)
            print(f"Created session {session.id}")
        elif args.session_command == "stats":
            stats = service.get_stats(args.session_id)
            print(json.dumps(stats.model_dump(by_alias=True), indent=2))
        elif args.session_command == "ready":
            session = service.training.mark_session_ready(args.session_id)
            print(f"Session {session.id} is {session.status.value}")
        elif args.session_command == "progress":
            session = service.training.update_progress(args.session_id, args.percent)
            print(f"Session {session.id} progress {session.progress:.1f}%")
        else:
            sessions = service.training.list_sessions(args.project)
            if not sessions:
                print("No training sessions found.")
            for session in sessions:
                print(f"  {session.id}  {session.project_id:<20} {session.status.value:<10} {session.model_id or '-'}")
    finally:
        service.close()


def cmd_pair(args):
    from training.schemas import PairInput

    service = _service(args)
    try:
        if args.pair_command == "add":
            pair = PairInput(
                prompt=args.prompt,
                response=args.response,
                quality_score=args.score,
                tokens_used=args.tokens,
            )
            report = service.validate_training_pair(pair)
            if not report.is_valid or report.suggestions:
                print(report)
            stored = service.add_training_pair(args.session_id, pair)
            print(f"Added pair {stored.id}")
        elif args.pair_command == "rate":
            service.rate(args.pair_id, args.score)
            print(f"Rated pair {args.pair_id}: {args.score}")
        elif args.pair_command == "delete":
            removed = service.training.delete_pair(args.pair_id)
            print(f"Deleted pair {args.pair_id}" if removed else f"Pair {args.pair_id} not found")
        else:
            report = service.validate_training_pair(
                PairInput(prompt=args.prompt, response=args.response, quality_score=args.score)
            )
            print(report)
            if not report.is_valid:
                sys.exit(1)
    finally:
        service.close()


def cmd_export(args):
    from training.exporter import ExportFormat, ExportOptions

    service = _service(args)
    try:
        options = ExportOptions(format=ExportFormat(args.format), min_quality=args.min_quality)
        data = service.export_training_data(args.session_id, options)
    finally:
        service.close()

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(data)
        print(f"Exported to {args.output}")
    else:
        print(data)


def cmd_refine(args):
    from training.refinery import OutputFormat, get_data_preview

    path = Path(args.file)
    data = path.read_bytes()
    file_type = "application/pdf" if path.suffix.lower() == ".pdf" else "text/plain"

    service = _service(args)
    try:
        uploaded = service.refinery.register_file(path.name, len(data), file_type, args.project)
        refined = service.refinery.refine(
            uploaded.id,
            data,
            OutputFormat(args.format),
            on_progress=lambda p: print(f"  [{p.progress:>3}%] {p.message}"),
        )
    finally:
        service.close()

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(refined.formatted_data)
        print(f"Wrote {refined.record_count} records to {args.output}")
    else:
        print(get_data_preview(refined.formatted_data))


def cmd_serve(args):
    """Launch the HTTP API."""
    print(f"Starting API on http://{args.host}:{args.port}")
    subprocess.run([
        sys.executable, "-m", "uvicorn",
        "dashboard.app:app",
        "--host", args.host,
        "--port", str(args.port),
        "--reload" if args.reload else "--no-access-log",
    ], cwd=str(PROJECT_ROOT))


# ── Argument parser ───────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tforge",
        description="tforge - LLM fine-tuning data studio",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", "-c", help=f"Path to {DEFAULT_CONFIG_NAME}")
    sub = parser.add_subparsers(dest="command", help="Available commands")

    # init
    sub.add_parser("init", help="Initialize a new trainforge project")

    # keys
    p_keys = sub.add_parser("keys", help="Manage provider API keys")
    keys_sub = p_keys.add_subparsers(dest="keys_command")
    keys_sub.add_parser("list", help="List stored keys")
    p_set = keys_sub.add_parser("set", help="Store a key")
    p_set.add_argument("provider")
    p_set.add_argument("api_key")
    p_del = keys_sub.add_parser("delete", help="Remove a key")
    p_del.add_argument("provider")
    p_test = keys_sub.add_parser("test", help="Check a stored key")
    p_test.add_argument("provider")

    # models
    sub.add_parser("models", help="List known models")

    # generate
    p_gen = sub.add_parser("generate", help="Generate a response")
    p_gen.add_argument("--model", "-m", required=True, help="Model id, e.g. gpt-4-turbo")
    p_gen.add_argument("--prompt", "-p", required=True, help="Prompt text")
    p_gen.add_argument("--system", help="System instruction")
    p_gen.add_argument("--context", help="Additional context")
    p_gen.add_argument("--temperature", "-t", type=float, help="Sampling temperature (0-2)")
    p_gen.add_argument("--max-tokens", type=int, help="Max output tokens (1-4096)")
    p_gen.add_argument("--stream", action="store_true", help="Print the response word by word")
    p_gen.add_argument("--session", help="Save the result as a pair in this session")
    p_gen.add_argument("--score", type=int, help="Quality score for the saved pair")

    # session
    p_sess = sub.add_parser("session", help="Manage training sessions")
    sess_sub = p_sess.add_subparsers(dest="session_command", required=True)
    p_sc = sess_sub.add_parser("create", help="Create a session")
    p_sc.add_argument("project")
    p_sc.add_argument("--model", "-m", help="Target model id")
    p_sl = sess_sub.add_parser("list", help="List sessions")
    p_sl.add_argument("--project")
    p_ss = sess_sub.add_parser("stats", help="Show session statistics")
    p_ss.add_argument("session_id")
    p_sr = sess_sub.add_parser("ready", help="Mark a session ready for training")
    p_sr.add_argument("session_id")
    p_sp = sess_sub.add_parser("progress", help="Record training progress (0-100)")
    p_sp.add_argument("session_id")
    p_sp.add_argument("percent", type=float)

    # pair
    p_pair = sub.add_parser("pair", help="Manage training pairs")
    pair_sub = p_pair.add_subparsers(dest="pair_command", required=True)
    p_pa = pair_sub.add_parser("add", help="Add a prompt/response pair")
    p_pa.add_argument("session_id")
    p_pa.add_argument("--prompt", "-p", required=True)
    p_pa.add_argument("--response", "-r", required=True)
    p_pa.add_argument("--score", "-s", type=int, help="Quality score 1-5")
    p_pa.add_argument("--tokens", type=int, default=0)
    p_pr = pair_sub.add_parser("rate", help="Rate a pair")
    p_pr.add_argument("pair_id")
    p_pr.add_argument("score", type=int)
    p_pd = pair_sub.add_parser("delete", help="Delete a pair")
    p_pd.add_argument("pair_id")
    p_pv = pair_sub.add_parser("validate", help="Check a pair without storing it")
    p_pv.add_argument("--prompt", "-p", required=True)
    p_pv.add_argument("--response", "-r", required=True)
    p_pv.add_argument("--score", "-s", type=int)

    # export
    p_exp = sub.add_parser("export", help="Export a session's training data")
    p_exp.add_argument("session_id")
    p_exp.add_argument("--format", "-f", default="generic", choices=["openai", "anthropic", "csv", "generic"])
    p_exp.add_argument("--min-quality", type=int, choices=range(1, 6), help="Drop pairs rated below this")
    p_exp.add_argument("--output", "-o", help="Output file path")

    # refine
    p_ref = sub.add_parser("refine", help="Turn a document into training records")
    p_ref.add_argument("file")
    p_ref.add_argument("--format", "-f", default="json", choices=["json", "csv"])
    p_ref.add_argument("--project")
    p_ref.add_argument("--output", "-o", help="Output file path")

    # serve
    p_serve = sub.add_parser("serve", help="Launch the HTTP API")
    p_serve.add_argument("--port", type=int, default=8000, help="Port number")
    p_serve.add_argument("--host", default="127.0.0.1", help="Host address")
    p_serve.add_argument("--reload", action="store_true", help="Enable auto-reload")

    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()
    configure_logging(args.verbose)

    commands = {
        "init": cmd_init,
        "keys": cmd_keys,
        "models": cmd_models,
        "generate": cmd_generate,
        "session": cmd_session,
        "pair": cmd_pair,
        "export": cmd_export,
        "refine": cmd_refine,
        "serve": cmd_serve,
    }

    if not args.command:
        parser.print_help()
        sys.exit(0)

    handler = commands.get(args.command)
    try:
        handler(args)
    except TrainforgeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(e.exit_code)


if __name__ == "__main__":
    main()

"""CLI entry point: python -m deliberation_shape <artifact>"""

from __future__ import annotations

import argparse
import json
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from deliberation_shape.config import get_settings
from deliberation_shape.graph.builder import envelope_from_state, run_analysis_graph


def _generate_run_id() -> str:
    """Generate a unique run ID: shape-YYYYMMDD-HHMMSS-XXXX."""
    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    suffix = os.urandom(2).hex()
    return f"shape-{ts}-{suffix}"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="deliberation-shape",
        description="Structural analysis of multi-model deliberation claim graphs",
    )
    parser.add_argument(
        "artifact",
        type=str,
        help="Mapper artifact file (JSON, or YAML with a .yaml/.yml suffix)",
    )
    parser.add_argument(
        "--model-count",
        type=int,
        default=None,
        help="Number of models that answered (default: from artifact, else inferred)",
    )
    parser.add_argument(
        "--responses",
        type=str,
        default=None,
        metavar="FILE",
        help="Raw model responses for the shadow pass (list of {model_index, content})",
    )
    parser.add_argument(
        "--query",
        type=str,
        default="",
        help="The user question, used to rank shadow statements",
    )
    parser.add_argument(
        "--shape-only",
        action="store_true",
        default=False,
        help="Print only the problem structure, not the full analysis",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write JSON to this file instead of stdout",
    )
    parser.add_argument(
        "--no-log",
        action="store_true",
        default=False,
        help="Disable run event logging",
    )
    args = parser.parse_args(argv)

    if args.model_count is not None and args.model_count < 1:
        parser.error("--model-count must be >= 1")
    if args.query and not args.responses:
        parser.error("--query requires --responses")

    return args


def load_document(path: str | Path) -> Any:
    """Read a JSON or YAML document. YAML is chosen by file suffix."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        return yaml.safe_load(text)
    return json.loads(text)


def _load_or_exit(path: str, what: str) -> Any:
    try:
        return load_document(path)
    except OSError as exc:
        print(f"ERROR: cannot read {what} '{path}': {exc}", file=sys.stderr)
        sys.exit(1)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        print(f"ERROR: {what} '{path}' is not valid JSON/YAML: {exc}", file=sys.stderr)
        sys.exit(1)


def run(args: argparse.Namespace) -> None:
    settings = get_settings()

    errors = settings.validate()
    if errors:
        for err in errors:
            print(f"ERROR: {err}", file=sys.stderr)
        sys.exit(1)
    for warn in settings.warnings():
        print(f"WARNING: {warn}", file=sys.stderr)

    artifact = _load_or_exit(args.artifact, "artifact")
    if args.model_count is not None:
        if isinstance(artifact, dict):
            artifact = {**artifact, "model_count": args.model_count}
        else:
            print("WARNING: artifact is not a mapping; --model-count ignored", file=sys.stderr)

    responses: list = []
    if args.responses:
        loaded = _load_or_exit(args.responses, "responses")
        if isinstance(loaded, list):
            responses = [r for r in loaded if isinstance(r, dict)]
        else:
            print("WARNING: responses file is not a list; shadow pass skipped", file=sys.stderr)

    state = run_analysis_graph(artifact, responses, args.query, settings)
    envelope = envelope_from_state(state)

    if not args.no_log and settings.event_log_enabled:
        from deliberation_shape.event_log.writer import EventLog

        project_root = Path(__file__).resolve().parent.parent
        run_id = _generate_run_id()
        event_log = EventLog(project_root / settings.run_log_dir, run_id)
        event_log.emit_many(state.get("events") or [])
        event_log.write_summary(envelope)
        print(f"Run: {run_id} ({event_log.run_dir})", file=sys.stderr)

    payload = envelope["shape"] if args.shape_only else envelope
    text = json.dumps(payload, indent=2, ensure_ascii=False)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text + "\n", encoding="utf-8")
        print(f"Analysis saved to: {output_path}", file=sys.stderr)
    else:
        sys.stdout.write(text + "\n")
        sys.stdout.flush()

    shape = envelope["shape"]
    print(
        f"Shape: {shape['primary']} ({shape['confidence']:.2f}) | "
        f"{len(shape['peaks'])} peak(s) | {len(shape['patterns'])} pattern(s) | "
        f"{len(envelope['diagnostics'])} diagnostic(s)",
        file=sys.stderr,
    )


def main(argv: list[str] | None = None) -> None:
    run(parse_args(argv))


if __name__ == "__main__":
    main()

"""
Chunk a document and optionally run a task instruction over every chunk.

Examples:
  python scripts/chunk_text.py --file notes.txt
  python scripts/chunk_text.py --file notes.txt --no-oracle --process "Summarize this section" --format markdown
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure repo root on path when invoked as a script (python scripts/chunk_text.py ...)
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bulkquery.domain.chunking import default_oracle, detect_chunks
from bulkquery.domain.processing import default_client, export_results, process_chunks


def load_text(path: Path | None, inline_text: str | None) -> str:
    if inline_text:
        return inline_text
    if path is None:
        return ""
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return path.read_text(encoding="utf-8")


def main() -> None:
    parser = argparse.ArgumentParser(description="Split a document into chunks and optionally process them.")
    parser.add_argument("--file", type=Path, help="Path to a document file")
    parser.add_argument("--text", type=str, help="Inline document text")
    parser.add_argument("--no-oracle", dest="no_oracle", action="store_true", help="Skip the model and chunk locally")
    parser.add_argument("--process", dest="task_prompt", default=None, help="Instruction to apply to every chunk")
    parser.add_argument("--mode", choices=["sequential", "parallel"], default="sequential")
    parser.add_argument("--format", choices=["text", "markdown", "json"], default="text", help="Export format")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    doc_text = load_text(args.file, args.text)
    if not doc_text.strip():
        raise SystemExit("Provide --file or --text with content.")

    oracle = None if args.no_oracle else default_oracle()
    result = detect_chunks(doc_text, oracle=oracle, task_hint=args.task_prompt)

    if not args.task_prompt:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return

    results = process_chunks(result.chunks, args.task_prompt, args.mode, default_client())
    print(export_results(result.chunks, results, args.format))


if __name__ == "__main__":
    main()

from __future__ import annotations

import argparse
import asyncio
import json
import random
import sys
from pathlib import Path
from typing import Callable, Optional, TextIO

from flashdeck.core.errors import FlashdeckError
from flashdeck.modules.documents import extract_pdf_text
from flashdeck.modules.flashcards.generator import AgentCompletionClient, generate_cards
from flashdeck.modules.flashcards.parser import GeneratedCardParser
from flashdeck.modules.study import Card, SessionState
from flashdeck.modules.study import session as study


def _load_text(args: argparse.Namespace) -> str:
    if args.text_file and args.pdf:
        raise SystemExit("Provide either --text-file or --pdf, not both")
    if args.pdf:
        return extract_pdf_text(Path(args.pdf).read_bytes()).text
    if args.text_file:
        return Path(args.text_file).read_text(encoding="utf-8")
    raise SystemExit("--text-file or --pdf is required")


def _load_cards(path: str) -> list[Card]:
    items = json.loads(Path(path).read_text(encoding="utf-8"))
    return [
        Card(id=str(item.get("id", i)), question=item["question"], answer=item["answer"])
        for i, item in enumerate(items, start=1)
    ]


def _dump_cards(cards) -> str:
    return json.dumps([c.model_dump() for c in cards], indent=2, ensure_ascii=False)


def run_study(
    cards: list[Card],
    *,
    rng=None,
    read: Optional[Callable[[str], str]] = None,
    out: Optional[TextIO] = None,
) -> SessionState:
    """Terminal loop: Enter/f flips, n advances, q quits."""
    read = read or input
    out = out or sys.stdout
    state = study.start(cards, rng)
    if state.total == 0:
        print("No flashcards to study.", file=out)
        return state

    while not state.finished:
        card = study.current_card(state)
        p = study.progress(state)
        face = f"A: {card.answer}" if state.revealed else f"Q: {card.question}"
        print(f"[{p.current}/{p.total} {p.percent}%] {face}", file=out)
        try:
            cmd = read("(f)lip, (n)ext, (q)uit > ").strip().lower()
        except EOFError:
            cmd = "q"
        if cmd in ("", "f"):
            state = study.flip(state)
        elif cmd == "n":
            state = study.advance(state)
        elif cmd == "q":
            break

    if state.finished:
        print(f"Session complete! You reviewed {state.total} cards.", file=out)
    return state


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="flashdeck", description="Flashdeck flashcards CLI"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p = sub.add_parser("parse", help="Parse raw model output into flashcards")
    p.add_argument("file", help="File with the raw completion text ('-' for stdin)")

    e = sub.add_parser("extract", help="Extract plain text from a PDF")
    e.add_argument("pdf", help="Path to a PDF file")

    g = sub.add_parser("generate", help="Generate flashcards from text or a PDF")
    g.add_argument("--text-file", help="Path to a plain text file")
    g.add_argument("--pdf", help="Path to a PDF file")

    s = sub.add_parser("study", help="Study a JSON list of flashcards in the terminal")
    s.add_argument("file", help="JSON file: [{id?, question, answer}, ...]")
    s.add_argument("--seed", type=int, default=None, help="Shuffle seed")

    args = parser.parse_args(argv)
    try:
        if args.cmd == "parse":
            raw = sys.stdin.read() if args.file == "-" else Path(args.file).read_text(encoding="utf-8")
            print(_dump_cards(GeneratedCardParser().parse(raw)))
            return 0
        if args.cmd == "extract":
            print(extract_pdf_text(Path(args.pdf).read_bytes()).text)
            return 0
        if args.cmd == "generate":
            text = _load_text(args)
            cards = asyncio.run(generate_cards(text, AgentCompletionClient()))
            print(_dump_cards(cards))
            return 0
        if args.cmd == "study":
            rng = random.Random(args.seed) if args.seed is not None else None
            run_study(_load_cards(args.file), rng=rng)
            return 0
    except FlashdeckError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())

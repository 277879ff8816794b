#!/usr/bin/env python3
"""
cli.py — convert messages to and from Structured JSON.

Usage
-----
structured-i18n restructure --locales-dir ./src/locales --components-dir ./src/components --output ./transifex/strings_en.json
structured-i18n destructure --locale es --input ./transifex/strings_es.json --locales-dir ./src/locales --components-dir ./src/components
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

from .errors import TranslationError
from .locales import load_registry
from .sources import check_source_locale, read_source_messages, write_translations
from .structure import destructure


def _components(components_dir: Path | None) -> List[Tuple[str, Path]]:
    if components_dir is None:
        return []
    if not components_dir.is_dir():
        raise FileNotFoundError(f"{components_dir} is not a directory")
    return [(file.stem, file) for file in sorted(components_dir.rglob("*.vue"))]


# --------------------------------------------------------------------------- #
def _get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Convert messages to and from Structured JSON.")
    p.add_argument("--config", type=Path, help="YAML file describing the locales")
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    sub = p.add_subparsers(dest="command", required=True)

    def _add(name: str, help_: str) -> argparse.ArgumentParser:
        sp = sub.add_parser(name, help=help_)
        sp.add_argument("--locales-dir", type=Path, required=True, help="Directory with locale files")
        sp.add_argument("--components-dir", type=Path, help="Directory with single file components")
        return sp

    sp = _add("restructure", "Write the source messages as Structured JSON")
    sp.add_argument("--output", type=Path, default=Path("strings.json"), help="Output file")

    sp = _add("destructure", "Write translations from Structured JSON")
    sp.add_argument("--locale", required=True, help="Locale of the translations")
    sp.add_argument("--input", type=Path, required=True, help="Structured JSON downloaded for the locale")
    return p


def _write_output(tree: Dict[str, Any], dst: Path) -> None:
    dst.write_text(json.dumps(tree, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"✅ wrote {dst} ({len(tree)} top-level keys)")


def main(argv: list[str] | None = None) -> None:
    args = _get_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        registry = load_registry(args.config)
        components = _components(args.components_dir)
        source = read_source_messages(args.locales_dir, components, registry)

        match args.command:
            case "restructure":
                structured = check_source_locale(source.messages, source.comments, registry)
                _write_output(structured, args.output)
            case "destructure":
                translated = destructure(
                    args.input.read_text(encoding="utf-8"), registry[args.locale]
                )
                written = write_translations(
                    args.locale, source.messages, translated, args.locales_dir, components, registry
                )
                for path in written:
                    print(f"✅ wrote {path}")
            case _:
                sys.exit(f"Unknown command {args.command!r}")
    except TranslationError as exc:
        sys.exit(f"❌ {exc}")


if __name__ == "__main__":
    main()

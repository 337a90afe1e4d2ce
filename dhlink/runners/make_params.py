# MIT License © 2025 Motohiro Suzuki
"""
runners/make_params.py

Generate a fresh DH group and write it as a dhlink YAML config fragment.

  dhlink-params --bits 512 --role initiator -o initiator.yml

Both devices must load the same params; only the Initiator's are ever sent.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import yaml

from dhlink.crypto.dh import generate_parameters
from dhlink.protocol.types import Role


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="dhlink-params", description="generate DH parameters for dhlink")
    ap.add_argument("--bits", type=int, default=512)
    ap.add_argument("--generator", type=int, choices=[2, 5], default=2)
    ap.add_argument("--role", choices=[r.value for r in Role], default=Role.INITIATOR.value)
    ap.add_argument("-o", "--output", default=None, help="write YAML here instead of stdout")
    return ap


def render_fragment(role: str, p: int, g: int) -> str:
    return yaml.safe_dump({"role": role, "params": {"p": p, "g": g}}, sort_keys=False)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        params = generate_parameters(key_size=args.bits, generator=args.generator)
    except ValueError as e:
        print(f"[dhlink-params] cannot generate parameters: {e}", file=sys.stderr)
        return 2

    text = render_fragment(args.role, params.p, params.g)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"[dhlink-params] wrote {args.output} ({params.p.bit_length()}-bit p, g={params.g})")
    else:
        sys.stdout.write(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

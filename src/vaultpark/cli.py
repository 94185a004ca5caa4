"""Command-line tool for VaultPark tokens.

Examples::

    vaultpark encode --user-id driver-42 --vehicle ABC-123
    vaultpark verify 'VAULTPARK|driver-42|1700000000000|ABC-123|...' --no-expiry
    vaultpark render 'VAULTPARK|...' --output badge.png

Settings come from ``VAULTPARK_*`` environment variables; ``--format`` and
``--signing-key`` override them.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from vaultpark.config import VaultParkConfig
from vaultpark.exceptions import TokenEncodeError, VaultParkConfigError
from vaultpark.qr import render_qr_png


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vaultpark", description="Encode, verify and render VaultPark QR tokens.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    parser.add_argument("--format", dest="token_format", choices=["v1", "v2"], help="Token layout")
    parser.add_argument("--signing-key", help="HMAC key; omit for unkeyed SHA-256")
    sub = parser.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encode", help="Generate a token")
    enc.add_argument("--user-id", required=True)
    enc.add_argument("--vehicle", required=True, help="Vehicle number")
    enc.add_argument("--timestamp", type=int, help="Epoch milliseconds (default: now)")
    enc.add_argument("--gate", help="Gate hint (v2 only)")
    enc.add_argument("--lot", help="Lot id (v2 only)")
    enc.add_argument("--png", type=Path, help="Also write a QR image to this path")

    ver = sub.add_parser("verify", help="Check a token")
    ver.add_argument("token")
    ver.add_argument("--no-expiry", action="store_true", help="Skip the expiry window check")

    ren = sub.add_parser("render", help="Write a token as a QR PNG")
    ren.add_argument("token")
    ren.add_argument("--output", "-o", type=Path, required=True)
    ren.add_argument("--box-size", type=int, default=10)

    return parser


def _config_from_args(args: argparse.Namespace) -> VaultParkConfig:
    overrides: dict[str, Any] = {}
    if args.token_format:
        overrides["token_format"] = args.token_format
    if args.signing_key:
        overrides["signing_key"] = args.signing_key
    return VaultParkConfig.from_env(**overrides)


def _cmd_encode(args: argparse.Namespace, config: VaultParkConfig) -> int:
    token = config.build_encoder().encode(
        args.user_id,
        args.vehicle,
        args.timestamp,
        gate_hint=args.gate,
        lot_id=args.lot,
    )
    if args.png is not None:
        args.png.write_bytes(render_qr_png(token))
    print(token)
    return 0


def _cmd_verify(args: argparse.Namespace, config: VaultParkConfig) -> int:
    parsed = config.build_validator().parse(args.token, check_expiry=not args.no_expiry)
    print(json.dumps(parsed.model_dump(mode="json", exclude={"hash"}), indent=2))
    return 0 if parsed.is_valid else 1


def _cmd_render(args: argparse.Namespace, config: VaultParkConfig) -> int:
    args.output.write_bytes(render_qr_png(args.token, box_size=args.box_size))
    print(str(args.output))
    return 0


_COMMANDS = {
    "encode": _cmd_encode,
    "verify": _cmd_verify,
    "render": _cmd_render,
}


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = _config_from_args(args)
        return _COMMANDS[args.command](args, config)
    except (TokenEncodeError, VaultParkConfigError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

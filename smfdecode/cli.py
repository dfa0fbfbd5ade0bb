from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from core.config import Settings, UnexpectedChunkPolicy, get_settings
from core.describe import describe_result
from core.errors import SmfDecodeError
from core.models import DecodeResult
from core.sequence import SequenceDecoder
from core.utils import ensure_dir, load_smf_bytes, setup_logging
from smfdecode.api_client import ContractError, HTTPError, NetworkError, SmfDecodeClient


# exit codes (keep stable)
EXIT_OK = 0
EXIT_DECODE_FAILED = 2
EXIT_NETWORK_OR_HTTP = 4
EXIT_BAD_ARGS = 5


def _print_err(msg: str) -> None:
    print(msg, file=sys.stderr)


def _add_decoder_options(p: argparse.ArgumentParser) -> None:
    # None defaults: settings decide unless the flag is given
    p.add_argument(
        "--policy",
        default=None,
        choices=[x.value for x in UnexpectedChunkPolicy],
        help="What to do with a non-MTrk chunk where a track is expected",
    )
    p.add_argument("--sysex-mode", dest="sysex_mode", default=None, choices=["scan", "length"], help="SysEx body rule")
    p.add_argument("--max-event-size", dest="max_event_size", type=int, default=None, help="Max event body in bytes")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="smfdecode", description="Standard MIDI File decoder")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    # ------------------------------------------------------------
    # inspect: decode locally, print header + events
    # ------------------------------------------------------------
    i = sub.add_parser("inspect", help="Decode a MIDI file and print header, warnings and events")
    i.add_argument("file", type=str, help="Path to MIDI file")
    i.add_argument("--max-events", dest="max_events", type=int, default=None, help="Events shown per track")
    _add_decoder_options(i)

    # ------------------------------------------------------------
    # json: decode locally, write DecodeResult JSON
    # ------------------------------------------------------------
    j = sub.add_parser("json", help="Decode a MIDI file into JSON")
    j.add_argument("file", type=str, help="Path to MIDI file")
    j.add_argument("--out", type=str, default="", help="Output .json path (default: stdout)")
    _add_decoder_options(j)

    # ------------------------------------------------------------
    # remote: decode through the HTTP service
    # ------------------------------------------------------------
    r = sub.add_parser("remote", help="Decode a MIDI file through the HTTP service")
    r.add_argument("file", type=str, help="Path to MIDI file")
    r.add_argument("--base-url", dest="base_url", default="http://127.0.0.1:8000", help="Server base url")
    r.add_argument(
        "--policy",
        default=None,
        choices=[x.value for x in UnexpectedChunkPolicy],
        help="Unexpected-chunk policy sent to the server",
    )

    return p


def _settings_from_args(args: argparse.Namespace) -> Settings:
    s = get_settings()
    update = {}
    if getattr(args, "policy", None):
        update["unexpected_chunk_policy"] = UnexpectedChunkPolicy(args.policy)
    if getattr(args, "sysex_mode", None):
        update["sysex_mode"] = args.sysex_mode
    if getattr(args, "max_event_size", None) is not None:
        if args.max_event_size <= 0:
            raise ValueError("--max-event-size must be positive")
        update["max_event_data_size"] = int(args.max_event_size)
    return s.model_copy(update=update) if update else s


def _decode_local(args: argparse.Namespace) -> DecodeResult:
    settings = _settings_from_args(args)
    data = load_smf_bytes(Path(args.file))
    return SequenceDecoder(settings).decode(data)


# -------------------------------
# Commands
# -------------------------------
def cmd_inspect(args: argparse.Namespace) -> int:
    try:
        result = _decode_local(args)
    except (FileNotFoundError, ValueError) as e:
        _print_err(str(e))
        return EXIT_BAD_ARGS
    except SmfDecodeError as e:
        _print_err(f"Decode failed [{e.kind.value}]: {e}")
        return EXIT_DECODE_FAILED

    print(describe_result(result, max_events=args.max_events))
    return EXIT_OK


def cmd_json(args: argparse.Namespace) -> int:
    try:
        result = _decode_local(args)
    except (FileNotFoundError, ValueError) as e:
        _print_err(str(e))
        return EXIT_BAD_ARGS
    except SmfDecodeError as e:
        _print_err(f"Decode failed [{e.kind.value}]: {e}")
        return EXIT_DECODE_FAILED

    text = result.model_dump_json(indent=2)
    if not args.out:
        print(text)
        return EXIT_OK

    out_path = Path(args.out).resolve()
    ensure_dir(out_path.parent)
    out_path.write_text(text, encoding="utf-8")
    print(str(out_path))
    return EXIT_OK


def cmd_remote(args: argparse.Namespace) -> int:
    client = SmfDecodeClient(base_url=args.base_url)
    try:
        result = client.decode_file(Path(args.file), policy=args.policy)
        print(describe_result(result))
        return EXIT_OK
    except HTTPError as e:
        _print_err(str(e))
        return EXIT_DECODE_FAILED if e.status_code == 422 else EXIT_NETWORK_OR_HTTP
    except NetworkError as e:
        _print_err(str(e))
        return EXIT_NETWORK_OR_HTTP
    except ContractError as e:
        _print_err(f"Contract error: {e}")
        return EXIT_NETWORK_OR_HTTP
    except ValueError as e:
        _print_err(str(e))
        return EXIT_BAD_ARGS
    finally:
        client.close()


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else get_settings().log_level)

    if args.cmd == "inspect":
        return cmd_inspect(args)
    if args.cmd == "json":
        return cmd_json(args)
    if args.cmd == "remote":
        return cmd_remote(args)

    _print_err("Unknown command.")
    return EXIT_BAD_ARGS


if __name__ == "__main__":
    raise SystemExit(main())

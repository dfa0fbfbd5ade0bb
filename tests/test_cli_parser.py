from __future__ import annotations

import pytest

from smfdecode.cli import build_parser


def test_cli_parser_inspect_defaults():
    p = build_parser()
    args = p.parse_args(["inspect", "a.mid"])
    assert args.cmd == "inspect"
    assert args.file == "a.mid"
    assert args.max_events is None
    assert args.policy is None
    assert args.sysex_mode is None
    assert args.max_event_size is None
    assert args.verbose is False


def test_cli_parser_inspect_decoder_options():
    p = build_parser()
    args = p.parse_args(
        ["-v", "inspect", "a.mid", "--policy", "abort", "--sysex-mode", "length", "--max-event-size", "64", "--max-events", "3"]
    )
    assert args.verbose is True
    assert args.policy == "abort"
    assert args.sysex_mode == "length"
    assert args.max_event_size == 64
    assert args.max_events == 3


def test_cli_parser_json_defaults():
    p = build_parser()
    args = p.parse_args(["json", "a.mid"])
    assert args.cmd == "json"
    assert args.out == ""


def test_cli_parser_remote_defaults():
    p = build_parser()
    args = p.parse_args(["remote", "a.mid"])
    assert args.base_url == "http://127.0.0.1:8000"
    assert args.policy is None


def test_cli_parser_rejects_unknown_policy():
    p = build_parser()
    with pytest.raises(SystemExit):
        p.parse_args(["inspect", "a.mid", "--policy", "maybe"])


def test_cli_parser_requires_command():
    p = build_parser()
    with pytest.raises(SystemExit):
        p.parse_args([])

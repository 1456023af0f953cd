from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Any, List, Optional

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from busbind import BusBinding, BusError, get_binding, set_debug  # noqa: E402
from busbind.logging_setup import configure_logging  # noqa: E402


def _parse_arg(text: str) -> Any:
    try:
        value = json.loads(text)
    except ValueError:
        return text
    if isinstance(value, (bool, int, float, str)):
        return value
    return text


def _print_json(value: Any) -> None:
    print(json.dumps(value, ensure_ascii=False))


def cmd_unique_name(binding: BusBinding, scope: str) -> int:
    _print_json(binding.get_unique_name(scope))
    return 0


def cmd_call(binding: BusBinding, args: argparse.Namespace) -> int:
    values = [_parse_arg(item) for item in args.args]
    result = binding.call_method(
        args.scope, args.method, args.service, args.path, args.interface, *values
    )
    _print_json(result)
    return 0


def cmd_emit(binding: BusBinding, args: argparse.Namespace) -> int:
    values = [_parse_arg(item) for item in args.args]
    binding.send_signal(args.scope, args.signal, args.service, args.path, args.interface, *values)
    print("SENT")
    return 0


def cmd_monitor(binding: BusBinding, args: argparse.Namespace) -> int:
    def _on_signal(*values: Any) -> None:
        _print_json({"key": key, "args": list(values)})

    key = binding.register_signal(
        args.scope, args.signal, args.service, args.path, args.interface, _on_signal
    )
    ticks = 0
    try:
        while args.ticks <= 0 or ticks < args.ticks:
            binding.read_queued_messages()
            binding.dispatch_pending()
            ticks += 1
            if args.interval > 0:
                time.sleep(args.interval)
    except KeyboardInterrupt:
        pass
    finally:
        binding.unregister_signal(key)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Probe the D-Bus system and session buses.")
    parser.add_argument("--verbose", action="store_true", help="Trace every bus step to stderr.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    def _scoped(name: str, help_text: str) -> argparse.ArgumentParser:
        command = sub.add_parser(name, help=help_text)
        command.add_argument("--scope", choices=("system", "session"), default="session")
        return command

    _scoped("unique-name", "Print this process's unique bus name.")

    call = _scoped("call", "Call a method and print the reply as JSON.")
    call.add_argument("service")
    call.add_argument("path")
    call.add_argument("interface")
    call.add_argument("method")
    call.add_argument("args", nargs="*")

    emit = _scoped("emit", "Broadcast a signal.")
    emit.add_argument("service")
    emit.add_argument("path")
    emit.add_argument("interface")
    emit.add_argument("signal")
    emit.add_argument("args", nargs="*")

    monitor = _scoped("monitor", "Print matching signals as JSON lines.")
    monitor.add_argument("interface")
    monitor.add_argument("signal")
    monitor.add_argument("--service", default="")
    monitor.add_argument("--path", default="/")
    monitor.add_argument("--ticks", type=int, default=0, help="Stop after N ticks (0 = forever).")
    monitor.add_argument("--interval", type=float, default=0.05)

    return parser


def main(argv: Optional[List[str]] = None, binding: Optional[BusBinding] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        set_debug(True)
        configure_logging()
    bus = binding or get_binding()
    try:
        if args.cmd == "unique-name":
            return cmd_unique_name(bus, args.scope)
        if args.cmd == "call":
            return cmd_call(bus, args)
        if args.cmd == "emit":
            return cmd_emit(bus, args)
        if args.cmd == "monitor":
            return cmd_monitor(bus, args)
    except BusError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())

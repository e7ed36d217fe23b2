"""Command-line entry point: classify captured payment messages.

Reads one message from the flags or a JSON-lines file and prints one JSON
outcome per message on stdout.  Logs go to stderr.
"""
from dotenv import load_dotenv
import argparse
import asyncio
import json
import os
import sys
import time
from typing import Any, Dict, Iterator, List, Optional

from payguard.config import reload_config
from payguard.models import Message, TransactionRecord
from payguard.pipeline import TransactionPipeline
from payguard.utils.logger import configure_logging, log_error, log_info


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate and de-duplicate mobile-money payment messages.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--text', type=str, help='Raw message text to classify.')
    source.add_argument('--file', type=str, help='JSON-lines file of messages (raw_text, sender_address, arrival_timestamp, phone).')
    parser.add_argument('--phone', type=str, help='Counterparty phone, if already known.')
    parser.add_argument('--sender', type=str, default='', help='Sender address of the message.')
    parser.add_argument('--timestamp', type=int, help='Arrival time in epoch milliseconds (default: now).')
    parser.add_argument('--records', type=str, help='JSON-lines file of stored transactions to check conflicts against.')
    parser.add_argument('--log-level', type=str, help='Override LOG_LEVEL.')
    return parser


def _read_json_lines(path: str) -> Iterator[Dict[str, Any]]:
    with open(path, encoding='utf-8') as handle:
        for line_no, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}:{line_no}: invalid JSON ({e.msg})") from e


def message_from_dict(data: Dict[str, Any]) -> Message:
    """Build a ``Message`` from a JSON object, accepting short key names."""
    raw_text = data.get('raw_text', data.get('text'))
    if not raw_text:
        raise ValueError("message is missing 'raw_text'")
    return Message(
        raw_text=raw_text,
        sender_address=data.get('sender_address', data.get('sender', '')) or '',
        arrival_timestamp=int(data.get('arrival_timestamp', data.get('timestamp', 0)) or 0),
        phone=data.get('phone'),
    )


def record_from_dict(data: Dict[str, Any]) -> TransactionRecord:
    return TransactionRecord(
        phone=str(data['phone']),
        raw_message=data.get('raw_message', ''),
        timestamp=int(data['timestamp']),
        amount=data.get('amount'),
    )


def load_messages(args: argparse.Namespace) -> List[Message]:
    if args.file:
        return [message_from_dict(item) for item in _read_json_lines(args.file)]
    timestamp = args.timestamp if args.timestamp is not None else int(time.time() * 1000)
    return [Message(raw_text=args.text, sender_address=args.sender, arrival_timestamp=timestamp, phone=args.phone)]


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    if args.log_level is not None:
        os.environ['LOG_LEVEL'] = args.log_level

    config = reload_config()
    configure_logging(config.log_level, config.log_format)
    config.log_configuration()

    issues = config.validate_configuration()
    if issues:
        log_error("Configuration validation failed", issues=issues)
        print("❌ Configuration issues found:", file=sys.stderr)
        for issue in issues:
            print(f"  - {issue}", file=sys.stderr)
        return 1

    try:
        messages = load_messages(args)
        records = [record_from_dict(item) for item in _read_json_lines(args.records)] if args.records else []
    except (OSError, ValueError, KeyError) as e:
        log_error("Could not load input", error=str(e))
        print(f"❌ {e}", file=sys.stderr)
        return 2

    pipeline = TransactionPipeline(config)
    outcomes = asyncio.run(pipeline.process_batch(messages, records))
    for outcome in outcomes:
        print(json.dumps(outcome.to_dict(), ensure_ascii=False, default=str))

    log_info("Messages processed", received=len(messages), processed=len(outcomes),
             error_summary=pipeline.error_log.summary())
    return 0


if __name__ == '__main__':
    sys.exit(main())

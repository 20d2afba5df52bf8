"""Emit one Socket.IO event from the command line.

Connects, optionally joins a namespace, emits an event and closes.

    pip install sio-client

    # Root namespace
    python examples/emitter.py --url http://localhost:1337 broadcast '{"foo": "bar"}'

    # Namespaced, with extra handshake headers
    python examples/emitter.py --namespace /chat \\
        --header "Authorization: Bearer 12b3c4d5" message '{"text": "hi"}'
"""

import argparse
import json
import logging

from sio_client import connect


def main(url: str, namespace: str, event: str, args, headers: dict[str, str], version: int):
    with connect(url, headers=headers, version=version) as client:
        if namespace:
            client.of(namespace)
        client.emit(event, args)
        print(f"Emitted {event!r} to {url}{namespace}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Socket.IO emitter")
    parser.add_argument("--url", default="http://localhost:1337")
    parser.add_argument("--namespace", default="", help="e.g. /chat")
    parser.add_argument("--version", type=int, default=3, help="Engine.IO version (EIO)")
    parser.add_argument(
        "--header",
        action="append",
        default=[],
        help='Extra header as "Name: value" (repeatable)',
    )
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("event")
    parser.add_argument("payload", nargs="?", default="{}", help="JSON arguments")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)
    headers = dict(
        (name.strip(), value.strip())
        for name, _, value in (h.partition(":") for h in args.header)
    )
    main(args.url, args.namespace, args.event, json.loads(args.payload), headers, args.version)

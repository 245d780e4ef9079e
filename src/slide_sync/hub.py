"""Command-line entry point that runs the websocket broadcast hub."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from slide_sync.config import load_config
from slide_sync.transport.websocket import HubState, bound_port, serve_broadcast_hub

logger = logging.getLogger(__name__)


async def run_hub(host: str, port: int, *, log_transport: bool = False) -> None:
    """Serve until cancelled."""

    server, state = await serve_broadcast_hub(host, port, state=HubState(log_transport=log_transport))
    logger.info("hub ready on %s:%d", host, bound_port(server))
    try:
        await asyncio.Future()
    finally:
        server.close()
        await server.wait_closed()
        logger.info("hub stopped: relayed=%d rejected=%d", state.relayed, state.rejected)


def main(argv: Optional[Sequence[str]] = None) -> None:
    import argparse

    cfg = load_config()
    parser = argparse.ArgumentParser(description='slide-sync broadcast hub')
    parser.add_argument('--host', default=cfg.hub.host)
    parser.add_argument('--port', type=int, default=cfg.hub.port)
    parser.add_argument('--debug', action='store_true', help='Enable DEBUG logging')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    try:
        asyncio.run(run_hub(args.host, args.port, log_transport=cfg.debug_policy.logging.log_transport))
    except KeyboardInterrupt:
        logger.info("interrupted")


if __name__ == '__main__':
    main()

#!/usr/bin/env python3
"""Match session client entry point.

Usage:
    python run.py --demo                    # Scripted server, no network
    python run.py --connect                 # Connect to the configured server
    python run.py --connect -v 2            # Request a match with variant 2
"""
import asyncio
import logging
import sys
from pathlib import Path

from matchsession.config import load_config, load_env

load_env(Path(__file__).parent / ".env")


def show_help():
    print("""
Match Session Client

Usage:
    python run.py --demo                    # Scripted server, no network
    python run.py --connect                 # Connect to the configured server
    python run.py --connect -v 2            # Request a match with variant 2

Options:
    --demo              Use the in-process demo server
    --connect           Connect to server.url from js/config.json
    --ready             Demo only: also send ready signals from both sides
    -v, --variant       Selected variant sent with the match request
    --help, -h          Show this help message
""")


def _parse_variant(args: list, default):
    for flag in ("-v", "--variant"):
        if flag in args:
            return args[args.index(flag) + 1]
    return default


def _build_transport(args: list, config):
    if "--demo" in args:
        from matchsession.demo_transport import DemoTransport
        return DemoTransport(send_ready="--ready" in args)
    from matchsession.bridge.socketio_transport import SocketIOTransport
    return SocketIOTransport(
        server_url=config.server_url,
        socketio_path=config.socketio_path,
        find_match_event=config.find_match_event,
        cancel_match_event=config.cancel_match_event,
    )


async def _run(args: list, config) -> int:
    from matchsession.router import EventRouter
    from matchsession.session.controller import TransitionController
    from matchsession.session.phases import SessionPhase

    loop = asyncio.get_running_loop()
    handed_off = loop.create_future()
    session_over = asyncio.Event()

    def on_hand_off(hand_off):
        if not handed_off.done():
            handed_off.set_result(hand_off)

    def on_view(view):
        if view.phase is SessionPhase.IDLE and controller.live_session_id is None:
            session_over.set()

    transport = _build_transport(args, config)
    controller = TransitionController(
        transport,
        hand_off=on_hand_off,
        retry_policy=config.retry,
        population_start_delay=config.population_start_delay,
        readiness_start_delay=config.readiness_start_delay,
    )
    router = EventRouter(controller, source=getattr(transport, "server_url", "demo"))
    router.attach(transport)
    await transport.connect()

    while not controller.participant_created:
        await asyncio.sleep(0.05)

    variant = _parse_variant(args, config.selected_variant)
    session_id = await controller.request_match(variant)
    if session_id is None:
        print("Error: matchmaking could not be started")
        return 1
    print(f"[Session {session_id}] Searching for an opponent... Ctrl+C to cancel")

    dispose = controller.add_listener(on_view)
    try:
        done, _ = await asyncio.wait(
            [handed_off, asyncio.ensure_future(session_over.wait())],
            return_when=asyncio.FIRST_COMPLETED,
        )
    except asyncio.CancelledError:
        await controller.cancel()
        raise
    finally:
        dispose()
        router.detach()

    if handed_off.done():
        result = handed_off.result()
        print(f"[Session {result.session_id}] Starting {result.mode} match as "
              f"{result.position.value} ({result.trigger})")
        return 0
    print("Session ended without a match")
    return 1


def main():
    args = sys.argv[1:]
    if not args or "--help" in args or "-h" in args:
        show_help()
        return 0

    if "--demo" not in args and "--connect" not in args:
        show_help()
        return 1

    try:
        config = load_config(Path(__file__).parent / "js" / "config.json")
        logging.basicConfig(
            level=getattr(logging, config.log_level.upper(), logging.WARNING),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        if "--demo" in args:
            print("[Demo Mode] Using scripted server")
        return asyncio.run(_run(args, config))

    except KeyboardInterrupt:
        print("\n[Session] Cancelled.")
        return 1
    except ImportError as e:
        print(f"Error: {e}. Run: pip install -e .")
        return 1
    except Exception as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

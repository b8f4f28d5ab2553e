# Area: Bridge (Transport to Session Integration)
"""End-to-end tests: DemoTransport driving a real controller on asyncio."""
import asyncio

from matchsession.demo_transport import DEMO_OPPONENT_ID, DEMO_ROOM_ID, DemoTransport
from matchsession.room.identity import Position
from matchsession.router import EventRouter
from matchsession.session.controller import TransitionController
from matchsession.session.phases import SessionPhase


async def _play(transport, **controller_kwargs):
    loop = asyncio.get_running_loop()
    handed_off = loop.create_future()
    controller = TransitionController(
        transport, hand_off=handed_off.set_result, **controller_kwargs
    )
    EventRouter(controller, source="demo").attach(transport)
    await transport.connect()
    while not controller.participant_created:
        await asyncio.sleep(0.001)
    assert await controller.request_match(0) == 1
    hand_off = await asyncio.wait_for(handed_off, timeout=2.0)
    return controller, hand_off


class TestDemoTransport:
    def test_population_path_hands_off_as_player1(self):
        transport = DemoTransport(join_delay=0.01, opponent_delay=0.01)
        controller, hand_off = asyncio.run(_play(
            transport, population_start_delay=0.02, readiness_start_delay=0.01,
        ))
        assert hand_off.trigger == "population"
        assert hand_off.position is Position.PLAYER1
        assert hand_off.room.room_id == DEMO_ROOM_ID
        assert hand_off.room.connection_ids() == ("demo-local", DEMO_OPPONENT_ID)
        assert controller.phase is SessionPhase.IDLE

    def test_ready_signals_take_readiness_path(self):
        transport = DemoTransport(join_delay=0.01, opponent_delay=0.01, send_ready=True)
        controller, hand_off = asyncio.run(_play(
            transport, population_start_delay=5.0, readiness_start_delay=0.01,
        ))
        assert hand_off.trigger == "readiness"
        assert controller.phase is SessionPhase.IDLE

    def test_cancel_drops_scripted_events(self):
        async def scenario():
            transport = DemoTransport(join_delay=0.05, opponent_delay=0.05)
            controller = TransitionController(transport)
            EventRouter(controller).attach(transport)
            await transport.connect()
            await asyncio.sleep(0.01)
            await controller.request_match(0)
            assert transport.pending_count() == 2
            assert await controller.cancel() is True
            assert transport.pending_count() == 0
            await asyncio.sleep(0.15)
            return controller

        controller = asyncio.run(scenario())
        assert controller.phase is SessionPhase.IDLE
        assert controller.view().room is None

    def test_request_before_connect_fails(self):
        async def scenario():
            transport = DemoTransport()
            controller = TransitionController(transport)
            return await controller.request_match(0)

        assert asyncio.run(scenario()) is None

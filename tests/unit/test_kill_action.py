"""Unit tests for the kill action and the kill/move packets."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from amongst.configurations.configuration_constants import (KillError,
                                                            PlayerStage,
                                                            VitalState)
from amongst.server import kill_action
from amongst.server.session import SessionCallback
from tests.fixtures.protocol_helpers import line


@pytest.fixture()
def crew(session, name_player):
    """Impostor Red and crewmate Blue, both in MAIN in the cafeteria."""
    name_player("a", "Red")
    name_player("b", "Blue")
    for player in session.players.named():
        player.stage = PlayerStage.MAIN
        player.location = "cafeteria"
    session.players[0].is_impostor = True
    return session.players[0], session.players[1]


class TestKill:

    def test_successful_kill(self, session, transport, crew):
        actor, target = crew
        transport.clear()

        assert kill_action.kill(session, actor, target) is None

        assert target.vital_state == VitalState.DEAD
        assert transport.sent_to("b") == [{"type": "death", "cause": "kill"}]

    def test_target_not_in_main(self, session, transport, crew):
        actor, target = crew
        target.stage = PlayerStage.LOBBY
        transport.clear()

        assert kill_action.kill(session, actor, target) == KillError.INVALID_PLAYER
        assert target.vital_state == VitalState.ALIVE
        assert transport.sent == []

    def test_actor_not_impostor(self, session, crew):
        actor, target = crew
        actor.is_impostor = False

        assert kill_action.kill(session, actor, target) == KillError.NOT_IMPOSTOR
        assert target.vital_state == VitalState.ALIVE

    def test_impostor_cannot_be_killed(self, session, crew):
        actor, target = crew
        target.is_impostor = True

        assert kill_action.kill(session, actor, target) == KillError.NOT_IMPOSTOR

    def test_different_rooms(self, session, crew):
        actor, target = crew
        target.location = "electrical"

        assert kill_action.kill(session, actor, target) == KillError.NOT_IN_ROOM
        assert target.vital_state == VitalState.ALIVE

    def test_stage_checked_before_impostor(self, session, crew):
        actor, target = crew
        target.stage = PlayerStage.WAITING
        actor.is_impostor = False
        target.location = "medbay"

        assert kill_action.kill(session, actor, target) == KillError.INVALID_PLAYER

    def test_impostor_checked_before_room(self, session, crew):
        actor, target = crew
        actor.is_impostor = False
        target.location = "medbay"

        assert kill_action.kill(session, actor, target) == KillError.NOT_IMPOSTOR

    def test_dead_target_cannot_be_killed_again(self, session, transport, crew):
        actor, target = crew
        kill_action.kill(session, actor, target)
        transport.clear()

        assert kill_action.kill(session, actor, target) == KillError.INVALID_PLAYER
        assert transport.sent == []

    def test_witnesses_in_room_see_body(self, session, transport, crew, name_player):
        actor, target = crew
        name_player("c", "Green")
        name_player("d", "Pink")
        session.players[2].stage = PlayerStage.MAIN
        session.players[2].location = "cafeteria"
        session.players[3].stage = PlayerStage.MAIN
        session.players[3].location = "medbay"
        transport.clear()

        kill_action.kill(session, actor, target)

        bodies = transport.of_type("body")
        assert sorted(h for h, _ in bodies) == ["a", "c"]
        assert bodies[0][1] == {"type": "body", "name": "Blue", "location": "cafeteria"}

    def test_on_kill_hook_called(self, session, crew):
        actor, target = crew
        callback = MagicMock(spec=SessionCallback)
        session.callback = callback

        kill_action.kill(session, actor, target)

        callback.on_kill.assert_called_once_with(session, actor, target)

    def test_on_kill_hook_not_called_on_failure(self, session, crew):
        actor, target = crew
        actor.is_impostor = False
        callback = MagicMock(spec=SessionCallback)
        session.callback = callback

        kill_action.kill(session, actor, target)

        callback.on_kill.assert_not_called()


class TestKillPacket:

    def test_kill_packet_success(self, transport, dispatcher, crew):
        actor, target = crew
        transport.clear()

        dispatcher.handle_read("a", line({"type": "kill", "target": "Blue"}))

        assert target.vital_state == VitalState.DEAD
        assert {"type": "kill", "success": True} in transport.sent_to("a")

    @pytest.mark.parametrize("target", ["Nobody", None, 7, "Red"])
    def test_kill_packet_bad_target(self, transport, dispatcher, crew, target):
        transport.clear()

        dispatcher.handle_read("a", line({"type": "kill", "target": target}))

        assert transport.sent_to("a") == [
            {"type": "kill", "success": False, "error": "invalid-player"}
        ]

    def test_kill_packet_reports_error(self, transport, dispatcher, crew):
        actor, target = crew
        target.location = "medbay"
        transport.clear()

        dispatcher.handle_read("a", line({"type": "kill", "target": "Blue"}))

        assert transport.sent_to("a") == [
            {"type": "kill", "success": False, "error": "not-in-room"}
        ]

    def test_dead_player_cannot_kill(self, transport, dispatcher, crew):
        actor, target = crew
        actor.vital_state = VitalState.DEAD
        transport.clear()

        dispatcher.handle_read("a", line({"type": "kill", "target": "Blue"}))

        assert target.vital_state == VitalState.ALIVE
        assert transport.sent == []


class TestMovePacket:

    def test_move_to_known_room(self, transport, dispatcher, crew):
        actor, _ = crew
        transport.clear()

        dispatcher.handle_read("a", line({"type": "move", "location": "electrical"}))

        assert actor.location == "electrical"
        assert transport.sent_to("a") == [{"type": "location", "location": "electrical"}]

    @pytest.mark.parametrize("room", ["bridge", None, 3])
    def test_move_to_unknown_room(self, transport, dispatcher, crew, room):
        actor, _ = crew
        transport.clear()

        dispatcher.handle_read("a", line({"type": "move", "location": room}))

        assert actor.location == "cafeteria"
        assert transport.sent == []

    def test_move_ignored_in_lobby(self, session, dispatcher, name_player):
        name_player("a", "Red")

        dispatcher.handle_read("a", line({"type": "move", "location": "electrical"}))

        assert session.players[0].location is None

"""Fixed-capacity player slot table.

Slots are allocated when a connection is welcomed and returned when it
disconnects. The slot index is the player's identifier for the lifetime of
the connection. A handle -> slot map is kept in sync with the slots so that
resolving the sender of a line does not scan the table.
"""

from __future__ import annotations

import dataclasses
import logging
import typing

from amongst.configurations.configuration_constants import (NOT_FOUND,
                                                            PlayerStage,
                                                            VitalState)
from amongst.utils.typing import ConnectionHandle, SlotID

logger = logging.getLogger(__name__)


class SlotError(RuntimeError):
    """Raised when slot bookkeeping would break the one-handle-one-slot rule."""


@dataclasses.dataclass
class Player:
    """State of a single slot.

    A free slot has ``connection_handle`` set to None.
    """

    slot: SlotID
    connection_handle: ConnectionHandle | None = None
    name: str = ""
    stage: PlayerStage = PlayerStage.NAMING
    vital_state: VitalState = VitalState.ALIVE
    location: str | None = None
    is_impostor: bool = False

    @property
    def is_connected(self) -> bool:
        return self.connection_handle is not None

    @property
    def is_alive(self) -> bool:
        return self.vital_state == VitalState.ALIVE

    def reset(self) -> None:
        """Return the record to its fresh-slot values, keeping the handle."""
        self.name = ""
        self.stage = PlayerStage.NAMING
        self.vital_state = VitalState.ALIVE
        self.location = None
        self.is_impostor = False

    def to_dict(self) -> dict:
        return {
            "slot": self.slot,
            "connected": self.is_connected,
            "name": self.name,
            "stage": self.stage.name.lower(),
            "vital_state": self.vital_state.name.lower(),
            "location": self.location,
        }


class PlayerTable:
    """Ordered, fixed-size collection of Player slots."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")

        self.capacity = capacity
        self._players: list[Player] = [Player(slot=i) for i in range(capacity)]
        self._slot_by_handle: dict[ConnectionHandle, SlotID] = {}

    def __len__(self) -> int:
        return self.capacity

    def __iter__(self) -> typing.Iterator[Player]:
        return iter(self._players)

    def __getitem__(self, slot: SlotID) -> Player:
        return self._players[slot]

    def find_slot_by_connection(self, handle: ConnectionHandle) -> SlotID:
        """Slot owned by ``handle``, or NOT_FOUND."""
        return self._slot_by_handle.get(handle, NOT_FOUND)

    def find_free_slot(self) -> SlotID:
        """First slot without a connection, or NOT_FOUND when full."""
        for player in self._players:
            if player.connection_handle is None:
                return player.slot
        return NOT_FOUND

    def find_slot_by_name(self, name: str) -> SlotID:
        if not name:
            return NOT_FOUND
        for player in self._players:
            if player.is_connected and player.name == name:
                return player.slot
        return NOT_FOUND

    def assign(self, slot: SlotID, handle: ConnectionHandle) -> Player:
        """Bind ``handle`` to the free slot ``slot``."""
        if handle is None:
            raise SlotError("Cannot assign an unset connection handle")

        player = self._players[slot]
        if player.connection_handle is not None:
            raise SlotError(
                f"Slot {slot} is already owned by {player.connection_handle}"
            )
        if handle in self._slot_by_handle:
            raise SlotError(
                f"Handle {handle} already owns slot {self._slot_by_handle[handle]}"
            )

        player.connection_handle = handle
        self._slot_by_handle[handle] = slot
        logger.debug(f"Assigned handle {handle} to slot {slot}")
        return player

    def release(self, slot: SlotID) -> ConnectionHandle | None:
        """Return ``slot`` to the free pool.

        Returns the handle that owned the slot, or None if it was already free.
        """
        player = self._players[slot]
        handle = player.connection_handle
        if handle is None:
            return None

        player.connection_handle = None
        self._slot_by_handle.pop(handle, None)
        logger.debug(f"Released slot {slot} from handle {handle}")
        return handle

    def occupied(self) -> list[Player]:
        return [p for p in self._players if p.is_connected]

    def named(self) -> list[Player]:
        return [p for p in self._players if p.is_connected and p.name]

    def in_stage(self, stage: PlayerStage) -> list[Player]:
        return [p for p in self._players if p.is_connected and p.stage == stage]

    def is_at_capacity(self) -> bool:
        return self.find_free_slot() == NOT_FOUND

from __future__ import annotations

import typing

SlotID = int
ConnectionHandle = typing.Hashable
PacketType = str
Packet = dict[str, typing.Any]

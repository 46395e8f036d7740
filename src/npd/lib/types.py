"""Stable identifier newtypes."""

from typing import NewType

EventId = NewType("EventId", str)
CommandName = NewType("CommandName", str)
PackageName = NewType("PackageName", str)

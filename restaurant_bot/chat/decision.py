"""
Pure decision step of the conversation state machine.

``decide(session, event)`` looks at the current session and one inbound event and
returns the ``Action`` the orchestrator should carry out. It never mutates the
session and never performs I/O.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..places.models import Coordinates
from .commands import (
    ACTION_KEY,
    ADD_TO_FAVORITES,
    DELETE_FAVORITE,
    RANDOM_PICK,
    RESTAURANT_KEY,
    GlobalCommand,
    match_global_command,
    parse_positive_int,
    parse_postback,
)
from .models import EventKind, FlowContext, InboundEvent, Session, Stage


class ActionType(str, Enum):
    # Global commands
    start_search = "start_search"
    view_favorites = "view_favorites"
    random_favorite = "random_favorite"
    end = "end"
    continue_ = "continue"
    # Idle / ended
    show_help = "show_help"
    closing = "closing"
    # Search flow
    geocode_address = "geocode_address"
    use_coordinates = "use_coordinates"
    reprompt_location = "reprompt_location"
    set_top_count = "set_top_count"
    reprompt_top_count = "reprompt_top_count"
    search_radius = "search_radius"
    reprompt_radius = "reprompt_radius"
    select_index = "select_index"
    select_random = "select_random"
    reprompt_selection = "reprompt_selection"
    # Postbacks
    add_favorite = "add_favorite"
    delete_favorite = "delete_favorite"
    ignore = "ignore"


@dataclass(frozen=True)
class Action:
    type: ActionType
    text: str = ""
    number: int | None = None
    location: Coordinates | None = None
    place_id: str | None = None


_COMMAND_ACTIONS: dict[GlobalCommand, ActionType] = {
    GlobalCommand.start_search: ActionType.start_search,
    GlobalCommand.view_favorites: ActionType.view_favorites,
    GlobalCommand.random_favorite: ActionType.random_favorite,
    GlobalCommand.end: ActionType.end,
    GlobalCommand.continue_: ActionType.continue_,
}

_REPROMPTS: dict[Stage, ActionType] = {
    Stage.awaiting_location: ActionType.reprompt_location,
    Stage.awaiting_top_count: ActionType.reprompt_top_count,
    Stage.awaiting_radius: ActionType.reprompt_radius,
    Stage.browsing_results: ActionType.reprompt_selection,
}


def _decide_postback(event: InboundEvent) -> Action:
    payload = parse_postback(event.postback_data)
    action = payload.get(ACTION_KEY)
    place_id = payload.get(RESTAURANT_KEY) or None
    if action == ADD_TO_FAVORITES:
        return Action(ActionType.add_favorite, place_id=place_id)
    if action == DELETE_FAVORITE and place_id:
        return Action(ActionType.delete_favorite, place_id=place_id)
    return Action(ActionType.ignore)


def _decide_search_text(session: Session, text: str) -> Action:
    stage = session.stage

    if stage == Stage.awaiting_location:
        if not text:
            return Action(ActionType.reprompt_location)
        return Action(ActionType.geocode_address, text=text)

    if stage == Stage.awaiting_top_count:
        count = parse_positive_int(text)
        if count is None:
            return Action(ActionType.reprompt_top_count)
        return Action(ActionType.set_top_count, number=count)

    if stage == Stage.awaiting_radius:
        radius = parse_positive_int(text)
        if radius is None:
            return Action(ActionType.reprompt_radius)
        return Action(ActionType.search_radius, number=radius)

    if stage == Stage.browsing_results:
        if text == RANDOM_PICK:
            return Action(ActionType.select_random)
        index = parse_positive_int(text)
        if index is None or index > len(session.candidates):
            return Action(ActionType.reprompt_selection)
        return Action(ActionType.select_index, number=index)

    return Action(ActionType.show_help)


def decide(session: Session, event: InboundEvent) -> Action:
    if event.kind == EventKind.follow:
        return Action(ActionType.show_help)

    if event.kind == EventKind.postback:
        return _decide_postback(event)

    # Global commands win over any stage
    if event.kind == EventKind.text:
        command = match_global_command(event.text)
        if command is not None:
            return Action(_COMMAND_ACTIONS[command])

    if session.stage == Stage.ended:
        return Action(ActionType.closing)

    if session.flow != FlowContext.search:
        return Action(ActionType.show_help)

    if event.kind == EventKind.location:
        if session.stage == Stage.awaiting_location and event.location is not None:
            return Action(ActionType.use_coordinates, location=event.location)
        return Action(_REPROMPTS.get(session.stage, ActionType.show_help))

    return _decide_search_text(session, event.text.strip())

"""
Conversation orchestrator.

Responsibilities:
- Serialize events per user and load that user's ``Session``.
- Turn each event into an ``Action`` via ``decide`` and carry it out.
- Call the places gateway and the favorites store, translating their failures
  into user-facing messages without advancing the session.
- Render the outbound messages and hand them to the event's reply channel.
"""
from __future__ import annotations

import logging
import random
import time

from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from ..analytics.store import record_event
from ..favorites.models import Favorite
from ..favorites.store import FavoritesStore
from ..places.client import PlacesError, PlacesGateway
from ..places.models import Restaurant
from ..places.ranking import top_ranked
from . import render
from .channel import ReplyChannel
from .decision import Action, ActionType, decide
from .messages import OutboundMessage
from .models import FlowContext, InboundEvent, Session, Stage
from .session_store import SessionStore

logger = logging.getLogger(__name__)


class ConversationOrchestrator:
    def __init__(
        self,
        places: PlacesGateway,
        favorites: FavoritesStore,
        sessions: SessionStore | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._places = places
        self._favorites = favorites
        self.sessions = sessions or SessionStore()
        self._rng = rng or random.Random()

    async def handle(self, event: InboundEvent, channel: ReplyChannel) -> None:
        """Process one event for its user; holds the user's lock until replies are sent."""
        async with self.sessions.locked(event.user_id):
            session = self.sessions.get(event.user_id)
            action = decide(session, event)
            logger.debug(
                "user=%s stage=%s flow=%s action=%s",
                event.user_id, session.stage.value, session.flow.value, action.type.value,
            )
            session, messages = await self._execute(action, session, event.user_id, channel)
            self.sessions.put(event.user_id, session)
            await channel.send(messages)

    async def _execute(
        self,
        action: Action,
        session: Session,
        user_id: str,
        channel: ReplyChannel,
    ) -> tuple[Session, list[OutboundMessage]]:
        kind = action.type

        if kind == ActionType.start_search:
            return Session.for_search(), [render.location_prompt()]
        if kind == ActionType.view_favorites:
            return await self._view_favorites(session, user_id)
        if kind == ActionType.random_favorite:
            return await self._random_favorite(session, user_id)
        if kind == ActionType.end:
            session.end()
            return session, [render.closing_message()]
        if kind == ActionType.continue_:
            return session, self._continue(session)

        if kind == ActionType.show_help:
            return session, [render.help_message()]
        if kind == ActionType.closing:
            return session, [render.closing_message()]

        if kind == ActionType.geocode_address:
            return await self._geocode(session, action.text)
        if kind == ActionType.use_coordinates:
            session.set_location(action.location)
            return session, [render.top_count_prompt()]
        if kind == ActionType.reprompt_location:
            return session, [render.location_prompt()]
        if kind == ActionType.set_top_count:
            session.set_top_count(action.number)
            return session, [render.radius_prompt()]
        if kind == ActionType.reprompt_top_count:
            logger.debug("Rejected top count input for user=%s", user_id)
            return session, [render.top_count_invalid()]
        if kind == ActionType.search_radius:
            return await self._search(session, action.number)
        if kind == ActionType.reprompt_radius:
            logger.debug("Rejected radius input for user=%s", user_id)
            return session, [render.radius_invalid()]
        if kind == ActionType.select_index:
            return await self._show_detail(session, session.candidates[action.number - 1])
        if kind == ActionType.select_random:
            return await self._show_detail(session, self._rng.choice(session.candidates), random_pick=True)
        if kind == ActionType.reprompt_selection:
            return session, [render.selection_invalid(len(session.candidates))]

        if kind == ActionType.add_favorite:
            return await self._add_favorite(session, user_id, action.place_id, channel)
        if kind == ActionType.delete_favorite:
            return await self._delete_favorite(session, user_id, action.place_id)

        return session, []

    # ── Search flow ──────────────────────────────────────────────────────

    async def _geocode(self, session: Session, address: str) -> tuple[Session, list[OutboundMessage]]:
        coords = await self._places.geocode(address)
        if coords is None:
            return session, [render.location_not_found()]
        session.set_location(coords)
        return session, [render.top_count_prompt()]

    async def _search(self, session: Session, radius: int) -> tuple[Session, list[OutboundMessage]]:
        start_time = time.time()
        try:
            results = await self._places.search_nearby(session.location, radius)
        except PlacesError:
            logger.warning("Nearby search failed (radius=%s)", radius, exc_info=True)
            return session, [render.upstream_error()]

        candidates = top_ranked(results, session.top_count)
        record_event("search", {
            "radius": radius,
            "top_count": session.top_count,
            "total_candidates": len(results),
            "results_returned": len(candidates),
            "response_time_ms": round((time.time() - start_time) * 1000, 1),
        })
        if not candidates:
            return session, [render.no_results()]

        session.start_browsing(radius, candidates)
        return session, self._render_results_page(session)

    def _render_results_page(self, session: Session) -> list[OutboundMessage]:
        start = session.cursor
        page = session.next_page()
        return render.results_page(page, start, len(session.candidates), session.has_more_results)

    async def _show_detail(
        self,
        session: Session,
        restaurant: Restaurant,
        random_pick: bool = False,
    ) -> tuple[Session, list[OutboundMessage]]:
        try:
            details = await self._places.get_details(restaurant.place_id)
        except PlacesError:
            logger.warning("Place details failed for %s", restaurant.place_id, exc_info=True)
            return session, [render.upstream_error()]

        session.select(restaurant)
        record_event("selection", {"place_id": restaurant.place_id, "random": random_pick})
        return session, render.detail_messages(details, restaurant)

    def _continue(self, session: Session) -> list[OutboundMessage]:
        if session.flow == FlowContext.search and session.stage == Stage.browsing_results:
            if not session.has_more_results:
                return [render.results_exhausted(len(session.candidates))]
            return self._render_results_page(session)

        if session.flow == FlowContext.favorites:
            if not session.has_more_favorites:
                session.end()
                return [render.favorites_exhausted()]
            return self._render_favorites_page(session)

        return [render.nothing_to_continue()]

    # ── Favorites flow ───────────────────────────────────────────────────

    async def _load_favorites(self, user_id: str) -> list[Favorite] | None:
        try:
            return await run_in_threadpool(self._favorites.list_by_user, user_id)
        except SQLAlchemyError:
            logger.warning("Listing favorites failed for user=%s", user_id, exc_info=True)
            return None

    def _render_favorites_page(self, session: Session) -> list[OutboundMessage]:
        page = session.next_favorites_page()
        messages = render.favorites_page(page, len(session.favorites), session.has_more_favorites)
        if not session.has_more_favorites:
            session.end()
        return messages

    async def _view_favorites(self, session: Session, user_id: str) -> tuple[Session, list[OutboundMessage]]:
        favorites = await self._load_favorites(user_id)
        if favorites is None:
            return session, [render.store_error()]

        if not favorites:
            session = Session()
            session.end()
            return session, [render.favorites_empty()]

        session = Session.for_favorites(favorites)
        return session, self._render_favorites_page(session)

    async def _random_favorite(self, session: Session, user_id: str) -> tuple[Session, list[OutboundMessage]]:
        favorites = await self._load_favorites(user_id)
        if favorites is None:
            return session, [render.store_error()]

        if not favorites:
            session = Session()
            session.end()
            return session, [render.favorites_empty()]

        favorite = self._rng.choice(favorites)
        try:
            details = await self._places.get_details(favorite.restaurant_id)
        except PlacesError:
            logger.warning("Place details failed for favorite %s", favorite.restaurant_id, exc_info=True)
            return session, [render.upstream_error()]

        session = Session()
        session.end()
        return session, render.favorite_detail_messages(details, favorite)

    async def _add_favorite(
        self,
        session: Session,
        user_id: str,
        place_id: str | None,
        channel: ReplyChannel,
    ) -> tuple[Session, list[OutboundMessage]]:
        target = session.selected()
        if target is None:
            return session, [render.favorite_no_selection()]
        if place_id and place_id != target.place_id:
            # The user tapped an older detail card from this search
            target = session.find_candidate(place_id) or target

        await channel.send([render.favorite_loading()])

        location = target.location
        address = target.address
        if location is None:
            try:
                details = await self._places.get_details(target.place_id)
            except PlacesError:
                logger.warning("Place details failed for %s", target.place_id, exc_info=True)
                return session, [render.upstream_error()]
            location = details.location
            address = address or details.formatted_address
            if location is None:
                logger.warning("No coordinates for %s, cannot save favorite", target.place_id)
                return session, [render.upstream_error()]

        try:
            exists = await run_in_threadpool(self._favorites.exists, user_id, target.place_id)
            if exists:
                messages = [render.favorite_exists(target.name)]
            else:
                await run_in_threadpool(
                    self._favorites.add,
                    user_id,
                    target.place_id,
                    target.name,
                    address,
                    location.lat,
                    location.lng,
                )
                record_event("favorite_added", {"place_id": target.place_id})
                messages = [render.favorite_added(target.name)]
        except SQLAlchemyError:
            logger.warning("Saving favorite failed for user=%s", user_id, exc_info=True)
            return session, [render.store_error()]

        session.end()
        return session, messages

    async def _delete_favorite(
        self,
        session: Session,
        user_id: str,
        place_id: str,
    ) -> tuple[Session, list[OutboundMessage]]:
        try:
            deleted = await run_in_threadpool(self._favorites.delete, user_id, place_id)
        except SQLAlchemyError:
            logger.warning("Deleting favorite failed for user=%s", user_id, exc_info=True)
            return session, [render.store_error()]

        session.end()
        if not deleted:
            return session, [render.favorite_not_found()]
        record_event("favorite_deleted", {"place_id": place_id})
        return session, [render.favorite_deleted()]

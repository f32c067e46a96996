"""WebSocket push channel for leaderboard updates."""

from __future__ import annotations

import asyncio
import json
import logging
from contextlib import suppress

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ...services import Subscriber, UpdateBroadcaster

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

WS_PATH = "/ws/leaderboard"


async def _pump(ws: WebSocket, subscriber: Subscriber, broadcaster: UpdateBroadcaster) -> None:
    """Forward snapshots from the subscriber mailbox to the socket."""

    while True:
        snapshot = await subscriber.get()
        try:
            await ws.send_json(snapshot.to_message())
        except Exception as exc:
            broadcaster.report_failure(subscriber, exc)
            return


@router.websocket(WS_PATH)
async def leaderboard_stream(ws: WebSocket):
    """
    Push channel:
    - registers the socket before accepting so no update is missed,
    - sends ``{"type": "subscribed"}`` once ready, then every broadcast,
    - answers ``{"type": "ping"}`` with ``{"type": "pong"}``.
    """
    broadcaster: UpdateBroadcaster = ws.app.state.broadcaster
    subscriber = broadcaster.subscribe()
    sender = None
    try:
        await ws.accept()
        await ws.send_json({"type": "subscribed", "subscriber": subscriber.id})
        sender = asyncio.create_task(_pump(ws, subscriber, broadcaster))

        while True:
            raw = await ws.receive_text()
            try:
                msg = json.loads(raw)
            except ValueError:
                continue
            if isinstance(msg, dict) and msg.get("type") == "ping":
                await ws.send_json({"type": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.unsubscribe(subscriber)
        if sender is not None:
            sender.cancel()
            with suppress(asyncio.CancelledError):
                await sender


__all__ = ["WS_PATH", "router"]

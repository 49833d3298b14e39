"""WebSocket handler for session change events."""

import asyncio
import logging

from fastapi import WebSocket, WebSocketDisconnect

from faceoff.services.change_broadcaster import ChangeBroadcaster, ViewerConnection

logger = logging.getLogger(__name__)


async def _drain_incoming(websocket: WebSocket) -> None:
    """Read and discard client frames until the socket closes.

    The channel is push-only; reading is how a disconnect is noticed while
    no events are flowing.
    """
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def _forward_events(websocket: WebSocket, connection: ViewerConnection) -> None:
    while True:
        frame = await connection.next_frame()
        await websocket.send_text(frame)


async def session_websocket(websocket: WebSocket, broadcaster: ChangeBroadcaster):
    """Stream session events to one viewer.

    No state is sent on connect; the viewer fetches a snapshot over REST and
    then applies events. Send failures are logged and drop only this viewer.
    """
    # Registered before the handshake completes so no event emitted after
    # the client sees the accept can be missed.
    connection = broadcaster.register()
    try:
        await websocket.accept()
    except Exception:
        broadcaster.unregister(connection)
        raise

    reader = asyncio.create_task(_drain_incoming(websocket))
    writer = asyncio.create_task(_forward_events(websocket, connection))
    try:
        done, _ = await asyncio.wait({reader, writer}, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.error(
                    f"Transport failure for viewer {connection.id}: {type(exc).__name__}: {exc}"
                )
    finally:
        broadcaster.unregister(connection)
        for task in (reader, writer):
            task.cancel()
        for task in (reader, writer):
            try:
                await task
            except (asyncio.CancelledError, WebSocketDisconnect):
                pass
            except Exception as e:
                logger.debug(f"Viewer {connection.id} task ended with {type(e).__name__}: {e}")

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from campusflow.auth.dependencies import get_stream_caller
from campusflow.core import config
from campusflow.services.change_feed import ChangeFeed, change_feed
from campusflow.services.collections import get_collection
from campusflow.services.policy import Caller

router = APIRouter(tags=['feed'])

logger = logging.getLogger(__name__)


def format_event(collection: str, payload: dict) -> str:
    return f"event: insert\nid: {collection}:{payload.get('id')}\ndata: {json.dumps(payload)}\n\n"


async def stream_events(request: Request, feed: ChangeFeed, collection: str, caller: Caller):
    """Subscribe on first iteration and unsubscribe however the stream ends."""
    subscription = feed.subscribe(collection, caller)
    try:
        while not subscription.closed:
            if await request.is_disconnected():
                break
            try:
                payload = await asyncio.wait_for(subscription.get(), timeout=config.FEED_KEEPALIVE_SECONDS)
            except asyncio.TimeoutError:
                yield ': keepalive\n\n'
                continue
            if payload is None:
                break
            yield format_event(collection, payload)
    finally:
        subscription.close()
        logger.info('Caller %s left the %s feed', caller.id, collection)


@router.get('/{collection}')
async def subscribe(
    collection: str,
    request: Request,
    caller: Caller = Depends(get_stream_caller),
):
    info = get_collection(collection)
    return StreamingResponse(
        stream_events(request, change_feed, info.name, caller),
        media_type='text/event-stream',
        headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'},
    )

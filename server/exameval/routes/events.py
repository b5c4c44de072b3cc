import asyncio
import json
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from exameval.database import get_db
from exameval.dependencies import bearer_scheme, resolve_user
from exameval.models import UserRole
from exameval.services.assignments import ALL_STUDENTS
from exameval.services.sse_manager import section_channel, sse_manager, user_channel

router = APIRouter(tags=["Events"])


@router.get("")
async def events(
    request: Request,
    token: Optional[str] = None,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
):
    """
    SSE endpoint for dashboard updates.
    EventSource cannot set headers, so the token may also come as ?token=.
    """
    user = resolve_user(credentials.credentials if credentials else token, db)

    channels = [user_channel(user.id)]
    if user.role == UserRole.STUDENT:
        channels.append(section_channel(ALL_STUDENTS))
        if user.section:
            channels.append(section_channel(user.section))

    async def event_generator():
        queue = await sse_manager.connect(channels)
        try:
            while True:
                # Check for client disconnect
                if await request.is_disconnected():
                    break

                # Wait for message with timeout
                try:
                    data = await asyncio.wait_for(queue.get(), timeout=30.0)
                    yield f"data: {json.dumps(data, default=str)}\n\n"
                except asyncio.TimeoutError:
                    # Send ping to keep connection alive
                    yield ": ping\n\n"
        except asyncio.CancelledError:
            pass
        finally:
            sse_manager.disconnect(queue)

    return StreamingResponse(event_generator(), media_type="text/event-stream")

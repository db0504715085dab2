from fastapi import APIRouter, Depends, Response

from app.api.deps import get_sessions
from app.models.search import QueryUpdate, SessionSnapshot
from app.services.sessions import SessionRegistry

router = APIRouter(prefix="/v1/sessions", tags=["sessions"])


@router.post("", response_model=SessionSnapshot, status_code=201)
async def open_session(sessions: SessionRegistry = Depends(get_sessions)) -> SessionSnapshot:
    session_id, controller = await sessions.open()
    return controller.snapshot(session_id)


@router.get("/{session_id}", response_model=SessionSnapshot)
async def read_session(session_id: str, sessions: SessionRegistry = Depends(get_sessions)) -> SessionSnapshot:
    return sessions.get(session_id).snapshot(session_id)


@router.put("/{session_id}/query", response_model=SessionSnapshot)
async def update_query(
    session_id: str,
    payload: QueryUpdate,
    sessions: SessionRegistry = Depends(get_sessions),
) -> SessionSnapshot:
    controller = sessions.get(session_id)
    controller.set_query(payload.query)
    return controller.snapshot(session_id)


@router.delete("/{session_id}", status_code=204)
async def close_session(session_id: str, sessions: SessionRegistry = Depends(get_sessions)) -> Response:
    await sessions.close(session_id)
    return Response(status_code=204)

from fastapi import Depends, Request

from app.core.container import AppContainer
from app.services.sessions import SessionRegistry


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_sessions(container: AppContainer = Depends(get_container)) -> SessionRegistry:
    return container.sessions

"""Request dependencies shared by the routers."""

from typing import Annotated

from fastapi import Depends, Request

from ..state import BoardState, NotificationQueue


def get_board(request: Request) -> BoardState:
    """Board state built for this app at startup."""
    return request.app.state.board


def get_notifications(request: Request) -> NotificationQueue:
    return request.app.state.notifications


BoardDep = Annotated[BoardState, Depends(get_board)]
NotificationsDep = Annotated[NotificationQueue, Depends(get_notifications)]

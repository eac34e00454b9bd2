"""Request dependencies shared by route modules."""

from fastapi import Request

from memory_lane.game import Game


def get_game(request: Request) -> Game:
    return request.app.state.game

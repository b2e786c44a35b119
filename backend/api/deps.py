# api/deps.py
from fastapi import Request

from services.bootstrap import Services


def get_services(request: Request) -> Services:
    return request.app.state.services

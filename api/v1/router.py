# api/v1/router.py
from fastapi import APIRouter

from . import chat, generators, plans, users

api_router = APIRouter()

api_router.include_router(users.router, tags=["Profile"])
api_router.include_router(chat.router, tags=["Chat"])
api_router.include_router(generators.router, tags=["Generators"])
api_router.include_router(plans.router, tags=["Plans"])

"""
API v1 routes aggregation
"""
from fastapi import APIRouter
from friends_api.api.v1 import social

api_router = APIRouter()

# Social/Friends
api_router.include_router(social.router, tags=["social"])

from fastapi import APIRouter
from app.api.endpoints import medical_query

api_router = APIRouter()

# Combine all sub-routers into one
api_router.include_router(medical_query.router)

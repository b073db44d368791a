from fastapi import APIRouter
from contact_backend.api.v1.endpoints import contact

api_router = APIRouter()

api_router.include_router(contact.router, tags=["Contact"])

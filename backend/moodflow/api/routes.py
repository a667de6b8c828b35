from fastapi import APIRouter
from .v1 import graph

api_router = APIRouter(prefix="/api", tags=["moodflow"])

api_router.include_router(graph.router, prefix="/v1", tags=["graph"])

@api_router.get("/")
def read_root():
    return {"message": "Moodflow graph engine"}

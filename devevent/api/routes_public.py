"""
Public API routes - no authentication required
"""

from fastapi import APIRouter, Request

router = APIRouter()

@router.get("/health")
async def health_check(request: Request):
    """Health check endpoint"""
    database = request.app.state.database
    return {"status": "ok", "database": "connected" if database.connected else "idle"}

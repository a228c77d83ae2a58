import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pinna.core.errors import PinnaException
from pinna.core.logger import logs
from pinna.routes.map_route import router as map_router
from pinna.routes.places_route import router as places_router
from pinna.services.session_state import session_registry

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Detach every position feed still attached on shutdown
    await session_registry.close_all()

app = FastAPI(title="Pinna Place Catalog", lifespan=lifespan)
app.include_router(places_router)
app.include_router(map_router)

@app.exception_handler(PinnaException)
async def pinna_exception_handler(request: Request, exc: PinnaException):
    logs.log(logging.WARNING, f"{exc.code.value} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

# --- Root Endpoint ---
@app.get("/")
async def root():
    return {
        "message": "Welcome to the Pinna place catalog API",
        "status": "running",
        "endpoints": {
            "health": "/health",
            "places": "/places",
            "sessions": "/sessions",
            "docs": "/docs"
        },
        "version": "1.0.0"
    }

# --- Health Check ---
@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "Pinna Place Catalog"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("pinna.main:app", host="0.0.0.0", port=8000, reload=True)

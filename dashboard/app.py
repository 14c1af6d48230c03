"""FastAPI application serving the trainforge API."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dashboard.api import router as api_v1_router

app = FastAPI(title="trainforge API", version="0.1.0")

app.include_router(api_v1_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    return {"status": "ok"}

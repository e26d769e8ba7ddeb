import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from src.creatorai.db.app_db import app_db_lifespan
from src.creatorai.langGraph.router_with_streaming import stream_router
from src.creatorai.langGraph.routers import generation_router, library_router

logging.basicConfig(level=logging.INFO)

app = FastAPI(
    title="Creator AI Generation API",
    description="Streaming generation of lesson plans and capstone projects, part regeneration and a content library.",
    version="1.0.0",
    lifespan=app_db_lifespan,
)

# Allowed origins
origins = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:8000",
    "http://127.0.0.1",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)

    process_time = time.perf_counter() - start_time
    response.headers["X-Process-Time-Seconds"] = f"{process_time:.4f}"

    return response


@app.get("/")
def root():
    return {"message": "Creator AI generation service is running."}


app.include_router(stream_router, tags=["Streaming Generation"])
app.include_router(generation_router, tags=["Regeneration & Files"])
app.include_router(library_router, prefix="/library", tags=["Content Library"])

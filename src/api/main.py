from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.routes.analyze import router as analyze_router
from src.api.routes.mindmap import router as mindmap_router

app = FastAPI(
    title="Video Topics API",
    description="Topic segmentation and mind-map trees for video transcripts",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:8000",
    ],
    allow_origin_regex=r"http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analyze_router)
app.include_router(mindmap_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}

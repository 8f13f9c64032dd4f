import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()  # loads backend/.env if present; must run before config is imported

from app.core import config  # noqa: E402
from app.routers.omdb import router as omdb_router  # noqa: E402
from app.routers.tv import router as tv_router  # noqa: E402

logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s  %(name)s – %(message)s")

app = FastAPI(title="Showverse Ratings API", version="0.1.0", docs_url="/api/docs")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(tv_router, prefix="/api")
app.include_router(omdb_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}

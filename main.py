import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import CORS_ORIGINS

# Routers
from routers.admin import router as admin_router
from routers.health import router as health_router
from routers.quiz import router as quiz_router

logger = logging.getLogger("quiz-api")
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Agentic AI Assessment – Quiz API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "x-admin-token"],
)


def _error_list(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected %s %s: invalid request data", request.method, request.url.path)
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request data", "detail": _error_list(exc)},
    )


@app.get("/")
def health_root():
    return {"ok": True}


app.include_router(quiz_router)  # /api/quiz/...
app.include_router(admin_router)  # /admin/...
app.include_router(health_router)  # /health/...

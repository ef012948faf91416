# main.py (raíz)
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from src.api.routes.auth_routes import router as auth_router
from src.api.routes.cart_routes import router as cart_router
from src.api.routes.course_routes import router as course_router
from src.api.routes.payment_routes import router as payment_router
from src.api.routes.progress_routes import router as progress_router
from src.api.routes.rating_routes import router as rating_router
from src.api.routes.upload_routes import router as upload_router
from src.config.database import cerrar_conexiones, inicializar_conexiones
from src.config.settings import get_settings
from src.utils.errors import AppError

settings = get_settings()
logging.basicConfig(level=settings.log_level, format="%(asctime)s [%(levelname)s] %(message)s")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        inicializar_conexiones(settings)
    except Exception as e:
        logging.warning(f"⚠️ Error inicializando conexiones: {e}")
    yield
    cerrar_conexiones()


app = FastAPI(title="LearnHub API", version="1.0.0",
              description="Marketplace de cursos online: cursos, progreso, ratings e inscripciones.",
              lifespan=lifespan)


# ===============================================================
# ❗ Respuesta uniforme de errores: {success, message, error?}
# ===============================================================
def _error_body(status_code: int, message: str, error=None) -> JSONResponse:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = jsonable_encoder(error)
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logging.error(f"[{request.method} {request.url.path}] {type(exc).__name__}: {exc.message}")
    return _error_body(exc.status_code, exc.message, exc.error)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return _error_body(422, "Validation failed", exc.errors())


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return _error_body(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logging.exception(f"[{request.method} {request.url.path}] Error no controlado: {exc}")
    return _error_body(500, "Internal Server Error")


@app.get("/", tags=["Health"])
async def root():
    return {"message": "✅ LearnHub API is up and running."}

app.include_router(auth_router, prefix="/api/v1")
app.include_router(course_router, prefix="/api/v1")
app.include_router(progress_router, prefix="/api/v1")
app.include_router(cart_router, prefix="/api/v1")
app.include_router(rating_router, prefix="/api/v1")
app.include_router(payment_router, prefix="/api/v1")
app.include_router(upload_router, prefix="/api/v1")


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)

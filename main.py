# main.py
import os
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from routes import user, bus, booking
from database import client, ensure_indexes
from utils.errors import BookingAPIError, SeatConflict
from utils.logger import logger
import uvicorn

app = FastAPI(title="Bus Reservation API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(user.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(bus.router, prefix="/api/buses", tags=["Buses"])
app.include_router(booking.router, prefix="/api/bookings", tags=["Bookings"])


# === Error responses ===
@app.exception_handler(BookingAPIError)
async def booking_api_error_handler(request: Request, exc: BookingAPIError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} {type(exc).__name__}: {exc.message}")
    content = {"status": "error", "message": exc.message}
    if exc.errors:
        content["errors"] = exc.errors
    if isinstance(exc, SeatConflict):
        content["seats"] = exc.seats
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err["loc"][1:]), "message": err["msg"]}
        for err in exc.errors()
    ]
    logger.warning(f"{request.method} {request.url.path} -> 400 validation failed: {errors}")
    return JSONResponse(
        status_code=400,
        content={"status": "error", "message": "Validation failed", "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} -> unhandled {type(exc).__name__}")
    return JSONResponse(
        status_code=500,
        content={"status": "error", "message": "Internal server error"},
    )


@app.get("/health")
async def health():
    return {"status": "success", "message": "Bus Reservation API is running"}


@app.on_event("startup")
def create_db_indexes():
    ensure_indexes()
    logger.info("MongoDB indexes ensured")


@app.on_event("shutdown")
def shutdown_db_client():
    client.close()

if __name__ == "__main__":
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)

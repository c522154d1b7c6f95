import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.exceptions import ServiceError, ValidationError
from app.core.logging_config import configure_logging
from app.db.base import init_db
from app.api.routes import users as users_router
from app.api.routes import providers as providers_router
from app.api.routes import services as services_router
from app.api.routes import bookings as bookings_router
from app.api.routes import review as review_router
from app.api.routes import admin as admin_router

logger = logging.getLogger(__name__)


def create_app(create_tables: bool = True) -> FastAPI:
    configure_logging()

    app = FastAPI(title="Service Booking Platform API")

    if create_tables:
        @app.on_event("startup")
        def startup():
            init_db()

    @app.exception_handler(ServiceError)
    def service_error_handler(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            # storage details stay in the log
            detail = "Something went wrong, please try again"
        else:
            detail = exc.message
        body = {"error": exc.code, "detail": detail}
        if isinstance(exc, ValidationError):
            body["errors"] = exc.errors
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in err["loc"] if p != "body"), "message": err["msg"]}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=422,
            content=jsonable_encoder(
                {"error": ValidationError.code, "detail": "Invalid request", "errors": errors}
            ),
        )

    @app.get("/")
    def root():
        return {"message": "Service Booking Platform API running"}

    app.include_router(users_router.router)
    app.include_router(providers_router.router)
    app.include_router(services_router.router)
    app.include_router(bookings_router.router)
    app.include_router(review_router.router)
    app.include_router(admin_router.router)

    logger.info("Service Booking Platform API configured")
    return app


app = create_app()

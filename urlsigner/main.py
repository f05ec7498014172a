import logging
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from urlsigner.clock import Clock, system_clock
from urlsigner.config import Settings, build_signer, get_settings
from urlsigner.exceptions import InvalidExpiration
from urlsigner.models import LinkRequest, LinkResponse, ValidateRequest, ValidateResponse

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, clock: Clock | None = None) -> FastAPI:
    """Service that issues signed links to its own ``/v1/signed`` routes and checks them."""
    settings = settings or get_settings()
    clock = clock or system_clock
    logging.basicConfig(level=settings.log_level)

    signer = build_signer(settings, clock=clock)
    app = FastAPI(title=settings.app_name)

    def error_response(status_code: int, message: str, code: str) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content={"error": {"code": code, "message": message}},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(_: Request, exc: RequestValidationError):
        missing = [".".join(str(i) for i in e["loc"] if i != "body") for e in exc.errors() if e.get("type") == "missing"]
        message = f"missing parameters: {', '.join(missing)}" if missing else "invalid request parameters"
        return error_response(400, message, "bad_request")

    @app.exception_handler(InvalidExpiration)
    async def invalid_expiration_handler(_: Request, exc: InvalidExpiration):
        return error_response(400, str(exc), "invalid_expiration")

    @app.exception_handler(HTTPException)
    async def http_exception_handler(_: Request, exc: HTTPException):
        code = {400: "bad_request", 403: "forbidden"}.get(exc.status_code, "error")
        return error_response(exc.status_code, str(exc.detail or "request failed"), code)

    def require_signed_url(request: Request) -> int:
        # Same answer for expired, tampered and incomplete links.
        if not signer.validate(str(request.url)):
            raise HTTPException(status_code=403, detail="invalid or expired link")
        return int(request.query_params[settings.expires_parameter])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "environment": settings.app_env, "algorithm": signer.algorithm.name}

    @app.post("/v1/links", response_model=LinkResponse)
    def create_link(payload: LinkRequest, request: Request):
        if not settings.min_ttl_seconds <= payload.ttl_seconds <= settings.max_ttl_seconds:
            raise HTTPException(
                status_code=400,
                detail=f"ttl_seconds must be between {settings.min_ttl_seconds} and {settings.max_ttl_seconds}",
            )

        expires_at = clock() + payload.ttl_seconds
        target = str(request.url_for("signed_resource", path=payload.path.lstrip("/")))
        url = signer.sign(target, datetime.fromtimestamp(expires_at, tz=timezone.utc))
        logger.info("Issued signed link for /%s expiring at %d", payload.path.lstrip("/"), expires_at)
        return LinkResponse(url=url, expires_at=expires_at)

    @app.post("/v1/links/validate", response_model=ValidateResponse)
    def validate_link(payload: ValidateRequest):
        return ValidateResponse(valid=signer.validate(payload.url))

    @app.get("/v1/signed/{path:path}")
    def signed_resource(path: str, expires_at: int = Depends(require_signed_url)) -> dict:
        return {"path": path, "expires_at": expires_at}

    return app


app = create_app()

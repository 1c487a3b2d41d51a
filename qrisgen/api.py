"""FastAPI application for qrisgen."""
from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from .config import settings
from .crc import verify_crc
from .logging_conf import configure_logging
from .middleware import RequestLoggingMiddleware
from .monitoring import metrics_payload, record_payload_generated, record_service_error
from .qris_encoder import PayloadSummary, describe_payload
from .schemas import (
    BuildRequest,
    BuildResponse,
    DecodeRequest,
    DecodeResponse,
    DynamicQRRequest,
    DynamicQRResponse,
    ParseRequest,
    ParseResponse,
    PayloadSummaryModel,
)
from .services.errors import ServiceError
from .services.generator import DynamicQRGenerator
from .services.scan import ScanService
from .tlv import build_emv, parse_emv, tree_from_dict, tree_to_dict

app = FastAPI(title="qrisgen", version="0.1.0")
app.add_middleware(RequestLoggingMiddleware)

logger = logging.getLogger("qrisgen.api")


def _warn_insecure_defaults() -> None:
    if settings.api_key == "dev-secret-key":
        logger.warning(
            "api key is using its default value",
            extra={"config_key": "api_key", "environment": settings.environment},
        )


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    _warn_insecure_defaults()


async def require_api_key(x_api_key: str = Header(...)) -> None:
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


def _summary_model(summary: PayloadSummary) -> PayloadSummaryModel:
    return PayloadSummaryModel(
        point_of_initiation=summary.point_of_initiation,
        merchant_name=summary.merchant_name,
        merchant_city=summary.merchant_city,
        currency=summary.currency,
        amount=summary.amount,
        reference=summary.reference,
        crc_valid=summary.crc_valid,
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    route = request.scope.get("route")
    route_path = route.path if route else request.url.path
    logger.warning(
        "service error",
        extra={"code": exc.code, "path": route_path, "method": request.method, "detail": exc.message},
    )
    record_service_error(exc.code, route_path)
    return JSONResponse(status_code=exc.status_code, content={"code": exc.code, "message": exc.message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    route = request.scope.get("route")
    route_path = route.path if route else request.url.path
    logger.exception(
        "unhandled exception",
        extra={"path": route_path, "method": request.method},
    )
    return JSONResponse(status_code=500, content={"code": "ERR_INTERNAL", "message": "Internal server error"})


@app.get("/health", tags=["system"])
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metrics", tags=["system"])
async def metrics() -> Response:
    payload, content_type = metrics_payload()
    return Response(content=payload, media_type=content_type)


@app.post("/v1/qris/dynamic", response_model=DynamicQRResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
async def generate_dynamic(payload: DynamicQRRequest) -> DynamicQRResponse:
    generator = DynamicQRGenerator()
    result = generator.create(
        base_payload=payload.base_payload,
        amount=payload.amount,
        reference=payload.reference,
        size=payload.size,
    )

    return DynamicQRResponse(
        payload=result.payload,
        crc=result.crc,
        qr_data_url=result.data_url,
        summary=_summary_model(result.summary),
    )


@app.post("/v1/qris/parse", response_model=ParseResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
async def parse_payload(payload: ParseRequest) -> ParseResponse:
    text = payload.payload.strip()
    tree = parse_emv(text, strict=payload.strict)
    return ParseResponse(
        tags=tree_to_dict(tree),
        crc_valid=verify_crc(text),
        summary=_summary_model(describe_payload(text)),
    )


@app.post("/v1/qris/build", response_model=BuildResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
async def build_payload(payload: BuildRequest) -> BuildResponse:
    built = build_emv(tree_from_dict(payload.tags))
    record_payload_generated("custom")
    return BuildResponse(payload=built, crc=built[-4:])


@app.post("/v1/qris/decode", response_model=DecodeResponse, tags=["qris"], dependencies=[Depends(require_api_key)])
async def decode_image(payload: DecodeRequest) -> DecodeResponse:
    result = await ScanService().decode(payload.image)
    return DecodeResponse(payload=result.payload, tags=tree_to_dict(result.tree), crc_valid=result.crc_valid)

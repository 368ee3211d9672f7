#!/usr/bin/env python3
"""
Cost Proxy Service - FastAPI Backend
Forwards per-request credentials to vendor billing APIs and returns their data
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI, Header, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config.settings import get_config

# Import provider implementations to register them
from ..providers import aws, cursor, model_billing, openai, vercel  # noqa: F401
from ..providers.base import APIError, CloudProviderError, ProviderFactory
from .models import ErrorResponse, HealthCheck, ProviderList

logger = logging.getLogger(__name__)

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status: {"model": ErrorResponse} for status in (400, 401, 403, 404, 429, 500)
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    logger.info("Starting Cost Proxy Service...")
    config = get_config()
    logger.info(f"Registered providers: {', '.join(ProviderFactory.get_available_providers())}")
    logger.info(
        f"✅ Cost Proxy Service ready on {config.server.get('host')}:{config.server.get('port')}"
    )
    yield
    logger.info("Shutting down Cost Proxy Service...")


# FastAPI app
app = FastAPI(
    title="Cost Proxy Service",
    version=__version__,
    description="Credential-forwarding proxy for cloud and AI billing APIs",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_config().server.get("cors_origins", ["*"])),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CloudProviderError)
async def provider_error_handler(request: Request, exc: CloudProviderError):
    """Return provider failures as {"error", "details"?} bodies with their status."""
    logger.warning(
        f"{request.method} {request.url.path} failed with {exc.status_code}: {exc.message}"
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


async def fetch_provider_data(
    provider_name: str,
    credentials: dict[str, Any],
    start_date: str | None,
    end_date: str | None,
) -> dict[str, Any]:
    """Build the provider from configured defaults plus request credentials and call it."""
    provider_config = {
        **get_config().get_provider_config(provider_name),
        **{key: value for key, value in credentials.items() if value is not None},
    }
    provider = ProviderFactory.create_provider(provider_name, provider_config)

    try:
        return await provider.get_cost_data(start_date, end_date)
    except CloudProviderError:
        raise
    except Exception as e:
        logger.error(f"❌ Unexpected error fetching {provider_name} data: {e}")
        raise APIError(
            "Internal server error", status_code=500, provider=provider_name, details=str(e)
        ) from e
    finally:
        provider.close()


# Health endpoints
@app.get("/health", response_model=HealthCheck)
async def health():
    """Liveness probe"""
    return HealthCheck(status="ok")


@app.get("/api/providers", response_model=ProviderList)
async def get_providers():
    """List the registered billing providers"""
    return ProviderList(providers=sorted(ProviderFactory.get_available_providers()))


@app.get("/api/aws/costs", responses=ERROR_RESPONSES)
async def get_aws_costs(
    start_date: str | None = Query(None, description="Start date (YYYY-MM-DD)"),
    end_date: str | None = Query(None, description="End date (YYYY-MM-DD)"),
    x_aws_access_key: str | None = Header(None),
    x_aws_secret_key: str | None = Header(None),
    x_aws_region: str | None = Header(None),
):
    """Daily per-service costs from AWS Cost Explorer"""
    return await fetch_provider_data(
        "aws",
        {
            "access_key_id": x_aws_access_key,
            "secret_access_key": x_aws_secret_key,
            "region": x_aws_region,
        },
        start_date,
        end_date,
    )


@app.get("/api/openai/usage", responses=ERROR_RESPONSES)
async def get_openai_usage(
    start_date: str | None = Query(None, description="Start date (YYYY-MM-DD)"),
    end_date: str | None = Query(None, description="End date (YYYY-MM-DD)"),
    x_api_key: str | None = Header(None),
):
    """Organisation usage from the OpenAI API"""
    return await fetch_provider_data("openai", {"api_key": x_api_key}, start_date, end_date)


@app.get("/api/vercel/costs", responses=ERROR_RESPONSES)
async def get_vercel_costs(
    start_date: str | None = Query(None, description="Start date (YYYY-MM-DD)"),
    end_date: str | None = Query(None, description="End date (YYYY-MM-DD)"),
    x_vercel_token: str | None = Header(None),
    x_vercel_team_id: str | None = Header(None),
):
    """Usage from the Vercel API"""
    return await fetch_provider_data(
        "vercel",
        {"api_token": x_vercel_token, "team_id": x_vercel_team_id},
        start_date,
        end_date,
    )


@app.get("/api/cursor/usage", responses=ERROR_RESPONSES)
async def get_cursor_usage(
    start_date: str | None = Query(None, description="Start date (YYYY-MM-DD)"),
    end_date: str | None = Query(None, description="End date (YYYY-MM-DD)"),
    x_api_key: str | None = Header(None),
):
    """Mock Cursor usage"""
    return await fetch_provider_data("cursor", {"api_key": x_api_key}, start_date, end_date)


@app.get("/api/{vendor}/usage", responses=ERROR_RESPONSES)
async def get_model_usage(
    vendor: str,
    start_date: str | None = Query(None, description="Start date (YYYY-MM-DD)"),
    end_date: str | None = Query(None, description="End date (YYYY-MM-DD)"),
    x_api_key: str | None = Header(None),
):
    """Per-model billing from Anthropic, Cohere or Gemini"""
    if vendor not in model_billing.MODEL_VENDORS:
        return JSONResponse(status_code=404, content={"error": f"Unknown provider '{vendor}'"})
    return await fetch_provider_data(vendor, {"api_key": x_api_key}, start_date, end_date)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Cost Proxy Service",
        "version": __version__,
        "status": "running",
        "endpoints": {
            "health": "/health",
            "providers": "/api/providers",
            "aws": "/api/aws/costs",
            "openai": "/api/openai/usage",
            "vercel": "/api/vercel/costs",
            "cursor": "/api/cursor/usage",
            "models": "/api/{anthropic,cohere,gemini}/usage",
            "docs": "/docs",
        },
    }


if __name__ == "__main__":
    server = get_config().server
    uvicorn.run(app, host=server.get("host", "0.0.0.0"), port=server.get("port", 3001))

#!/usr/bin/env python3
"""Beta signup service - signup, email verification and questionnaire endpoints"""

from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from beta_signup.config import config
from beta_signup.logging_config import get_logger, setup_logging
from beta_signup.routers.health import health
from beta_signup.routers.signup import router as signup_router

# Configure logging (INFO -> stdout, WARNING/ERROR -> stderr)
setup_logging()
logger = get_logger(__name__)


app = FastAPI(
    title="Beta Signup",
    description="Beta application intake with email verification and follow-up questionnaire",
    version="1.0.0",
    docs_url=None,
    redoc_url=None,
)

# The hosting proxy terminates TLS; client addresses arrive in X-Forwarded-For
# and are used as the rate limit key, so only listed proxies are believed
app.add_middleware(
    ProxyHeadersMiddleware, trusted_hosts=config["forwarded_allow_ips"]
)

app.include_router(health)
app.include_router(signup_router)

# Serve the marketing page last so the API routes take precedence
static_dir = config.get("static_dir")
if static_dir and Path(static_dir).is_dir():
    app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
elif static_dir:
    logger.warning(f"STATIC_DIR {static_dir} does not exist, not serving the page")


if __name__ == "__main__":
    port = config.get("port")
    logger.info(f"Starting beta signup service on 0.0.0.0:{port}")
    logger.info("Health check available at /health")

    try:
        uvicorn.run(
            app, host="0.0.0.0", port=port, log_level=config["log_level"].lower()
        )
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        raise

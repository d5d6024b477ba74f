"""
Escrow Payments Backend - FastAPI Application

Razorpay order creation for buyers and webhook-driven payment confirmation.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
import logging

from .config import Settings, settings as default_settings
from .exceptions import PaymentError
from .db.init_db import create_engine, create_session_factory, initialize_database
from .mocks.razorpay_gateway import MockRazorpayGateway
from .services.razorpay_client import PaymentGateway, RazorpayClient
from .services.transaction_store import TransactionStore
from .api.payments import router as payments_router
from .api.webhooks import router as webhooks_router


# Configure logging
logging.basicConfig(
    level=getattr(logging, default_settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def build_payment_gateway(app_settings: Settings) -> PaymentGateway:
    """Real Razorpay client, or the in-process mock in demo mode."""
    if app_settings.demo_mode:
        logger.warning("Demo mode: using mock Razorpay gateway")
        return MockRazorpayGateway()

    return RazorpayClient(
        key_id=app_settings.razorpay_key_id,
        key_secret=app_settings.razorpay_key_secret,
        base_url=app_settings.razorpay_api_base_url,
        timeout_seconds=app_settings.gateway_timeout_seconds,
    )


def create_app(
    app_settings: Optional[Settings] = None,
    payment_gateway: Optional[PaymentGateway] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        app_settings: Settings to use, defaults to the environment-loaded instance
        payment_gateway: Gateway to inject instead of building one from settings

    Returns:
        FastAPI app whose lifespan owns the database engine and gateway client
    """
    app_settings = app_settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        - Startup: create engine and tables, construct store and gateway once
        - Shutdown: close gateway client, dispose engine
        """
        logger.info("Starting escrow payments backend...")
        logger.info(f"Demo mode: {app_settings.demo_mode}")

        engine = create_engine(app_settings.database_path, app_settings.store_timeout_seconds)
        try:
            await initialize_database(engine)
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            await engine.dispose()
            raise

        gateway = payment_gateway or build_payment_gateway(app_settings)

        if not app_settings.razorpay_webhook_secret:
            logger.warning("RAZORPAY_WEBHOOK_SECRET is not set; all webhooks will be rejected")

        app.state.settings = app_settings
        app.state.transaction_store = TransactionStore(
            create_session_factory(engine),
            timeout_seconds=app_settings.store_timeout_seconds
        )
        app.state.payment_gateway = gateway

        logger.info("Server startup complete")

        yield

        logger.info("Shutting down escrow payments backend...")
        try:
            await gateway.aclose()
        except Exception as e:
            logger.error(f"Error closing payment gateway client: {e}")
        await engine.dispose()

    app = FastAPI(
        title="Escrow Payments API",
        description="Razorpay order creation and payment webhook reconciliation",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS for the checkout frontend; webhooks are server-to-server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PaymentError)
    async def payment_error_handler(request: Request, exc: PaymentError):
        """
        Handle classified payment errors.

        Status code comes from the error kind; body is PaymentError.to_dict().
        """
        logger.warning(
            f"Payment error: {exc.error_code} - {exc.message}",
            extra={"details": exc.details}
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
        )

    @app.exception_handler(Exception)
    async def general_error_handler(request: Request, exc: Exception):
        """
        Catch-all handler for unexpected errors.

        Logs full exception for debugging but returns generic message to client.
        """
        logger.error(f"Unexpected error: {str(exc)}", exc_info=True)

        return JSONResponse(
            status_code=500,
            content={
                "error_code": "internal",
                "message": "An unexpected error occurred",
                "details": {}
            },
        )

    @app.get("/api/health")
    async def health_check():
        """
        Health check endpoint for monitoring and load balancers.

        Returns:
            Server status and version information
        """
        return {
            "status": "healthy",
            "version": "0.1.0",
            "demo_mode": app_settings.demo_mode,
            "webhook_secret_configured": bool(app_settings.razorpay_webhook_secret),
        }

    app.include_router(payments_router, prefix="/api/payments", tags=["Payments"])
    app.include_router(webhooks_router, prefix="/api/webhooks", tags=["Webhooks"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "escrowpay.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.demo_mode,
        log_level=default_settings.log_level.lower()
    )

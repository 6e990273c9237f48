"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import NoReturn

from fastapi import FastAPI, HTTPException, Request, status

from pylon_emulator.api.models import (
    ResolutionResponse,
    VerificationStatusResponse,
    VerifyAgeRequest,
    VerifyAgeResponse,
)
from pylon_emulator.api.wallet import router as wallet_router
from pylon_emulator.app_logging import configure_logging
from pylon_emulator.containers import AppContainer
from pylon_emulator.services.sessions import (
    AlreadyResolved,
    VerificationError,
    VerificationNotFound,
)
from pylon_emulator.services.verifications import CollaboratorFailure


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(
        title=container.settings.service_name,
        version=container.settings.service_version,
        lifespan=lifespan,
    )
    app.state.container = container

    app.include_router(wallet_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Fixed health payload, independent of store state."""
        return {
            "status": "ok",
            "service": container.settings.service_name,
            "version": container.settings.service_version,
        }

    @app.post("/v1/verify/age")
    async def verify_age(body: VerifyAgeRequest, request: Request) -> VerifyAgeResponse:
        """Start an age verification and return the wallet URL."""
        state_container: AppContainer = request.app.state.container
        ticket = await state_container.verification_service.request_verification(
            min_age=body.policy.min_age,
            callback_url=body.callback_url,
        )
        return VerifyAgeResponse(
            verification_id=ticket.verification_id,
            status=ticket.status,
            wallet_url=ticket.wallet_url,
        )

    @app.get("/v1/verify/{verification_id}")
    async def verification_status(
        verification_id: str, request: Request
    ) -> VerificationStatusResponse:
        """Return the current state of a verification."""
        state_container: AppContainer = request.app.state.container
        try:
            session = await state_container.verification_service.get_verification(
                verification_id
            )
        except VerificationError as exc:
            _raise_http_error(exc)
        return VerificationStatusResponse(
            verification_id=session.id,
            status=session.status,
            min_age=session.min_age,
            callback_url=session.callback_url,
            result=session.result,
            error=session.error,
        )

    @app.post("/webhook/accept/{verification_id}")
    async def accept(verification_id: str, request: Request) -> ResolutionResponse:
        """Simulate the user approving the request in their wallet."""
        logger.info("Wallet accepted", extra={"session_id": verification_id})
        return await _resolve(request, verification_id, consent=True)

    @app.post("/webhook/reject/{verification_id}")
    async def reject(verification_id: str, request: Request) -> ResolutionResponse:
        """Simulate the user declining the request in their wallet."""
        logger.info("Wallet rejected", extra={"session_id": verification_id})
        return await _resolve(request, verification_id, consent=False)

    return app


async def _resolve(
    request: Request, verification_id: str, consent: bool
) -> ResolutionResponse:
    state_container: AppContainer = request.app.state.container
    try:
        session = await state_container.verification_service.resolve(
            verification_id, consent
        )
    except VerificationError as exc:
        _raise_http_error(exc)
    return ResolutionResponse(verification_id=session.id, status=session.status)


def _raise_http_error(exc: VerificationError) -> NoReturn:
    """Translate lifecycle errors into HTTP responses."""
    if isinstance(exc, VerificationNotFound):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, AlreadyResolved):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, CollaboratorFailure):
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        raise exc
    raise HTTPException(status_code=code, detail=str(exc)) from exc

from __future__ import annotations

import sys

from creatorpulse.core.settings_errors import SettingsError

# Settings load on first import of the config module; report problems before
# anything else pulls it in.
try:
    from creatorpulse.core.config import settings
except SettingsError as exc:
    print("\n".join(exc.report_lines()), file=sys.stderr)
    sys.exit(1)

import logging  # noqa: E402
import types  # noqa: E402
from collections.abc import Callable  # noqa: E402
from importlib.metadata import PackageNotFoundError, version  # noqa: E402
from typing import Any, cast  # noqa: E402

from fastapi import FastAPI  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from slowapi.errors import RateLimitExceeded  # noqa: E402
from slowapi.middleware import SlowAPIMiddleware  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402
from starlette.exceptions import HTTPException as StarletteHTTPException  # noqa: E402
from starlette.types import ExceptionHandler  # noqa: E402

from creatorpulse.api.router import router as api_router  # noqa: E402
from creatorpulse.core.errors import (  # noqa: E402
    http_exception_handler,
    rate_limit_exception_handler,
    request_validation_exception_handler,
    unhandled_exception_handler,
)
from creatorpulse.core.lifespan import lifespan  # noqa: E402
from creatorpulse.core.logging import configure_logging  # noqa: E402
from creatorpulse.core.rate_limit import limiter  # noqa: E402
from creatorpulse.db.session import get_engine, get_session_maker  # noqa: E402
from creatorpulse.fetchers import FetcherRegistry, build_default_fetchers  # noqa: E402
from creatorpulse.llm.client import LLMClient, OpenAIClient  # noqa: E402
from creatorpulse.mail.sender import EmailSender, ResendEmailSender  # noqa: E402
from creatorpulse.services.auth_service import auth_service_factory_provider  # noqa: E402
from creatorpulse.services.content_service import content_service_factory_provider  # noqa: E402
from creatorpulse.services.feedback_service import feedback_service_factory_provider  # noqa: E402
from creatorpulse.services.newsletter_service import (  # noqa: E402
    newsletter_service_factory_provider,
)
from creatorpulse.services.source_service import source_service_factory_provider  # noqa: E402
from creatorpulse.services.trend_service import trend_service_factory_provider  # noqa: E402
from creatorpulse.services.writing_sample_service import (  # noqa: E402
    writing_sample_service_factory_provider,
)

logger = logging.getLogger(__name__)


def build_services(
    llm_client: LLMClient,
    email_sender: EmailSender,
    fetchers: FetcherRegistry,
) -> dict[str, Callable[[AsyncSession], Any]]:
    """Session-scoped service factories shared by the API and the scheduled jobs."""
    content_factory = content_service_factory_provider(fetchers)
    return {
        "auth_service": auth_service_factory_provider(),
        "source_service": source_service_factory_provider(),
        "content_service": content_factory,
        "trend_service": trend_service_factory_provider(llm_client, content_factory),
        "newsletter_service": newsletter_service_factory_provider(
            llm_client, email_sender, content_factory
        ),
        "feedback_service": feedback_service_factory_provider(),
        "writing_sample_service": writing_sample_service_factory_provider(),
    }


_EXCEPTION_HANDLERS: tuple[tuple[type[Exception], Callable[..., Any]], ...] = (
    (StarletteHTTPException, http_exception_handler),
    (RequestValidationError, request_validation_exception_handler),
    (RateLimitExceeded, rate_limit_exception_handler),
    (Exception, unhandled_exception_handler),
)


def _api_version() -> str:
    try:
        return version("creatorpulse-api")
    except PackageNotFoundError:
        logger.warning("creatorpulse-api is not installed; reporting version 0.1.0")
        return "0.1.0"


def create_app(
    *,
    session_maker: async_sessionmaker[AsyncSession] | None = None,
    llm_client: LLMClient | None = None,
    email_sender: EmailSender | None = None,
    fetchers: FetcherRegistry | None = None,
) -> FastAPI:
    """Build the API.

    Collaborators that are not passed in are created from settings. An injected
    `session_maker` stays owned by the caller, so its engine is not disposed on
    shutdown.
    """
    configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=_api_version(),
        debug=settings.environment == "local",
        lifespan=lifespan,
    )
    for exc_class, handler in _EXCEPTION_HANDLERS:
        app.add_exception_handler(exc_class, cast(ExceptionHandler, handler))
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.include_router(api_router, prefix="/api")

    app.state.engine = get_engine() if session_maker is None else None
    app.state.session_maker = session_maker or get_session_maker()
    app.state.services = types.MappingProxyType(
        build_services(
            llm_client or OpenAIClient(),
            email_sender or ResendEmailSender(),
            fetchers if fetchers is not None else build_default_fetchers(settings),
        )
    )
    return app


app = create_app()

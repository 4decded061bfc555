from fastapi import FastAPI

from typecard.api.routes import cards
from typecard.core.middleware import CardRateLimitMiddleware
from typecard.core.observability import configure_logging
from typecard.core.observability import init_sentry
from typecard.settings import Settings


def create_app() -> FastAPI:
    settings = Settings()
    configure_logging(settings)
    init_sentry(settings)

    app = FastAPI(title="Commit Type Card", version="0.1.0")
    app.state.settings = settings
    app.add_middleware(
        CardRateLimitMiddleware,
        requests_per_window=settings.rate_limit_per_minute,
        window_seconds=settings.rate_limit_window_seconds,
        username_requests_per_window=settings.username_rate_limit_per_minute,
        trust_forwarded_for=settings.trust_forwarded_for,
    )
    app.include_router(cards.router)
    return app


app = create_app()

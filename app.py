import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional, Union

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from hype_engine import __version__
from hype_engine.config import Settings
from hype_engine.context import EngineContext
from hype_engine.errors import (
    ConfigurationError, GenerationFailedError, GenerationRateLimitedError, HypeError,
    InvalidRequestError,
)
from hype_engine.generation.cascade import encode_stream
from hype_engine.models.recommendation import RiskTolerance
from hype_engine.ranking.trending import clamp_limit
from hype_engine.scoring.aggregator import DEFAULT_TIMEFRAME

log = logging.getLogger("hype.api")



class ChatMessage(BaseModel):
    role: str
    content: str = ""


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = []


class DailyMovesRequest(BaseModel):
    positions: Optional[Union[List[str], str]] = None


def normalise_symbol(symbol: str) -> str:
    symbol = symbol.upper().strip().lstrip("$")
    exchange_map = {
        "LON:": ".L",
        "EPA:": ".PA",
        "ETR:": ".DE",
        "AMS:": ".AS",
        "TSX:": ".TO",
        "ASX:": ".AX",
    }
    for prefix, suffix in exchange_map.items():
        if symbol.startswith(prefix):
            return symbol[len(prefix):] + suffix
    return symbol


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def create_app(context: Optional[EngineContext] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or (context.settings if context else Settings.from_env())
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(message)s")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.engine is None
        if owned:
            app.state.engine = EngineContext.build(settings)
        app.state.engine.warmer.start()
        yield
        if owned:
            await app.state.engine.aclose()
            app.state.engine = None
        else:
            app.state.engine.warmer.shutdown()

    app = FastAPI(
        title="HypeTrader API",
        description="Social + news hype scores, trending tickers and sentiment-driven trade ideas.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.engine = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Error mapping ────────────────────────────────────────

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return error_response(422, "Invalid request parameters", detail=jsonable_encoder(exc.errors()))

    @app.exception_handler(InvalidRequestError)
    async def invalid_request(request: Request, exc: InvalidRequestError):
        return error_response(400, str(exc))

    @app.exception_handler(ConfigurationError)
    async def not_configured(request: Request, exc: ConfigurationError):
        return error_response(500, str(exc))

    @app.exception_handler(GenerationRateLimitedError)
    async def generation_rate_limited(request: Request, exc: GenerationRateLimitedError):
        return error_response(429, str(exc), rateLimited=True)

    @app.exception_handler(GenerationFailedError)
    async def generation_failed(request: Request, exc: GenerationFailedError):
        return error_response(500, str(exc))

    @app.exception_handler(HypeError)
    async def engine_error(request: Request, exc: HypeError):
        log.error(f"{request.url.path}: {type(exc).__name__}: {exc}")
        return error_response(500, str(exc))

    def engine(request: Request) -> EngineContext:
        ctx = request.app.state.engine
        if ctx is None:
            raise HTTPException(503, "Engine not started")
        return ctx

    # ── Routes ───────────────────────────────────────────────

    @app.get("/")
    async def root():
        return {
            "status": "ok",
            "service": "hypetrader",
            "version": __version__,
            "docs": "/docs",
            "endpoints": [
                "/symbol/{symbol}", "/trending", "/suggest", "/daily-moves", "/chat", "/health",
            ],
        }

    @app.get("/health")
    async def health(request: Request):
        ctx = engine(request)
        return {
            "status": "healthy",
            "version": __version__,
            "news_configured": bool(ctx.settings.alpha_vantage_key),
            "generation_providers": ctx.cascade.provider_ids,
            "cache_entries": len(ctx.cache),
            "momentum_tracked": len(ctx.momentum),
            "scheduler": ctx.warmer.status(),
            "timestamp": int(time.time()),
        }

    @app.get("/symbol/{symbol}", tags=["Hype"])
    async def get_symbol(request: Request, symbol: str,
                         timeframe: str = Query(DEFAULT_TIMEFRAME, description="1h, 4h, 24h or 7d")):
        ctx = engine(request)
        try:
            composite = await ctx.aggregator.compute_score(normalise_symbol(symbol), timeframe)
        except HypeError:
            raise
        except Exception as e:
            log.exception(f"Hype score failed for {symbol}")
            raise HTTPException(500, f"Failed to compute hype score: {e}")
        return composite.to_dict()

    @app.get("/hype/{symbol}", tags=["Hype"], include_in_schema=False)
    async def get_hype(request: Request, symbol: str, timeframe: str = Query(DEFAULT_TIMEFRAME)):
        return await get_symbol(request, symbol, timeframe)

    @app.get("/trending", tags=["Hype"])
    async def get_trending(
        request: Request,
        limit: int = Query(10, description="1-50, clamped"),
        source: str = Query("all", description="echoed back; only the StockTwits feed is ranked"),
    ):
        ctx = engine(request)
        try:
            tickers = await ctx.ranker.rank(clamp_limit(limit))
        except HypeError:
            raise
        except Exception as e:
            log.exception("Trending ranking failed")
            raise HTTPException(500, f"Failed to rank trending tickers: {e}")
        return {
            "tickers": [t.to_dict() for t in tickers],
            "count": len(tickers),
            "source": source,
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/suggest", tags=["Decisions"])
    async def get_suggestion(
        request: Request,
        ticker: Optional[str] = Query(None, description="Omit to use the top trending pick"),
        risk: RiskTolerance = Query(RiskTolerance.MODERATE),
        max_capital: Optional[float] = Query(None, alias="maxCapital", ge=0),
    ):
        ctx = engine(request)
        try:
            if ticker and ticker.strip():
                recommendation = await ctx.decisions.decide(normalise_symbol(ticker), risk, max_capital)
            else:
                recommendation = await ctx.decisions.top_suggestion(risk, max_capital)
        except HypeError:
            raise
        except Exception as e:
            log.exception("Suggestion failed")
            raise HTTPException(500, f"Failed to build suggestion: {e}")
        if recommendation is None:
            return error_response(404, "No trending tickers available right now")
        return recommendation.to_dict()

    @app.get("/daily-moves", tags=["Decisions"])
    async def get_daily_moves(request: Request,
                              positions: Optional[str] = Query(None, description="Free-form holdings")):
        return await _daily_moves(engine(request), positions)

    @app.post("/daily-moves", tags=["Decisions"])
    async def post_daily_moves(request: Request):
        ctx = engine(request)
        positions = None
        try:
            body = await request.json()
            if isinstance(body, dict):
                positions = DailyMovesRequest(**body).positions
        except (ValueError, ValidationError) as e:
            log.info(f"Ignoring unreadable daily-moves body: {e}")
        return await _daily_moves(ctx, positions)

    async def _daily_moves(ctx: EngineContext, positions):
        try:
            slate = await ctx.decisions.produce_daily_slate(positions)
        except HypeError:
            raise
        except Exception as e:
            log.exception("Daily slate failed")
            raise HTTPException(500, f"Failed to build daily moves: {e}")
        return slate.to_dict()

    @app.post("/chat", tags=["Chat"])
    async def chat(request: Request, body: ChatRequest):
        ctx = engine(request)
        messages = [{"role": m.role, "content": m.content} for m in body.messages]
        try:
            text = await ctx.cascade.generate(messages)
        except HypeError:
            raise
        except Exception as e:
            log.exception("Chat generation failed")
            raise HTTPException(500, f"Failed to get response: {e}")
        return StreamingResponse(encode_stream(text), media_type="text/plain; charset=utf-8")

    @app.delete("/cache", tags=["Admin"])
    async def clear_cache(request: Request, prefix: Optional[str] = Query(None)):
        cleared = engine(request).cache.invalidate(prefix)
        log.info(f"Cache cleared: {cleared} entries (prefix={prefix!r})")
        return {"cleared": cleared}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = Settings.from_env()
    uvicorn.run("app:app", host="0.0.0.0", port=settings.port, reload=False, log_level="info")

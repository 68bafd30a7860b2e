"""FastAPI application for ChartChat - conversational chart image analysis."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Depends, File, Form, Query, Request, UploadFile, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from app.agent.chart_analyst import ChartAnalyst
from app.agent.providers.factory import create_default_provider, get_available_providers
from app.agent.response_resolver import ParseError, RawText, Structured
from app.agent.turn_encoder import encode_from_form
from app.config import get_settings
from app.errors import InvalidInput, UpstreamFailure
from app.models.request import ChartImage
from app.models.response import ChatResponse, EchoResponse, ErrorResponse

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

MISSING_FIELDS_ERROR = "Image and prompt are required"
JSON_PARSING_ERROR = "JSON parsing error"
INTERNAL_ERROR = "Internal Server Error"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    Builds the vision provider once from configuration and attaches a
    ChartAnalyst to ``app.state``.
    """
    logger.info("Starting ChartChat backend...")
    settings = get_settings()
    logger.info(f"Environment: {settings.app_env}")

    app.state.chart_analyst = None
    try:
        provider = create_default_provider(settings)
        app.state.chart_analyst = ChartAnalyst(provider)
        logger.info(f"✓ Vision provider ready: {provider.name} ({provider.get_model('planning')})")
    except ValueError as e:
        logger.warning(f"⚠ No vision provider configured - chart analysis disabled: {e}")

    yield

    # Cleanup
    analyst = app.state.chart_analyst
    if analyst is not None:
        await analyst.provider.aclose()
    logger.info("Shutting down ChartChat backend...")


# Initialize FastAPI app
app = FastAPI(
    title="ChartChat API",
    description="Upload a chart image and talk about it with a vision model",
    version="1.0.0",
    lifespan=lifespan,
)

settings = get_settings()

# Configure CORS based on environment
if settings.is_production and settings.cors_origin_list:
    cors_origins = settings.cors_origin_list
else:
    # Development: Allow all origins
    cors_origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_chart_analyst(request: Request) -> Optional[ChartAnalyst]:
    """Dependency returning the analyst built at startup, if any."""
    return getattr(request.app.state, "chart_analyst", None)


def error_response(status_code: int, error: str, response: Optional[str] = None) -> JSONResponse:
    """Build the ``{"error": ...}`` JSON envelope."""
    body = ErrorResponse(error=error, response=response)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.get("/")
async def root():
    """Root endpoint - API health check."""
    return {
        "service": "ChartChat API",
        "version": "1.0.0",
        "status": "operational",
        "endpoints": {
            "analyze": "/api/gen",
            "health": "/health",
        },
    }


@app.get("/health")
async def health_check(analyst: Optional[ChartAnalyst] = Depends(get_chart_analyst)):
    """Health check reporting which vision providers are configured."""
    return {
        "status": "healthy" if analyst is not None else "degraded",
        "provider": analyst.provider.name if analyst is not None else None,
        "configured_providers": [p.value for p in get_available_providers()],
    }


@app.post(
    "/api/gen",
    response_model=ChatResponse,
    status_code=status.HTTP_200_OK,
    summary="Ask a question about a chart image",
    description="""
    Send a chart image, a question and (optionally) the prior conversation.

    The history is a JSON array of `{role, content}` objects for the turns
    before this question. It is folded into one prompt ahead of the question.

    Returns:
    - `{"response": {...}}` when the reply contained a structured analysis
    - `{"response": "..."}` when the reply was plain text
    """,
    responses={
        400: {"model": ErrorResponse, "description": "Image or prompt missing"},
        500: {"model": ErrorResponse, "description": "JSON parsing error or internal error"},
    },
)
async def analyze_chart(
    image: Optional[UploadFile] = File(None),
    prompt: Optional[str] = Form(None),
    history: Optional[str] = Form(None),
    analyst: Optional[ChartAnalyst] = Depends(get_chart_analyst),
):
    """
    Analyze a chart image for one conversation turn.

    Args:
        image: Uploaded chart image
        prompt: The new user question
        history: Serialized prior turns

    Returns:
        JSON response with the structured analysis or raw text
    """
    try:
        chart_image = None
        if image is not None:
            data = await image.read()
            if data:
                chart_image = ChartImage(data=data, media_type=image.content_type or "")

        try:
            chart_request = encode_from_form(chart_image, prompt, history)
        except InvalidInput as e:
            logger.info(f"Rejected chart request: {e}")
            return error_response(status.HTTP_400_BAD_REQUEST, MISSING_FIELDS_ERROR)

        if analyst is None:
            logger.error("Chart analysis requested but no vision provider is configured")
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR)

        outcome = await analyst.analyze(chart_request)

        if isinstance(outcome, Structured):
            return JSONResponse(content={"response": outcome.result.model_dump(by_alias=True)})
        if isinstance(outcome, RawText):
            return JSONResponse(content={"response": outcome.text})
        if isinstance(outcome, ParseError):
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                JSON_PARSING_ERROR,
                response=outcome.raw_text,
            )

        raise TypeError(f"Unexpected outcome: {outcome!r}")

    except UpstreamFailure as e:
        logger.error(f"Error processing chat analysis: {e}", exc_info=True)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR)

    except Exception as e:
        logger.error(f"Error processing chat analysis: {type(e).__name__}: {e}", exc_info=True)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR)


@app.get("/api/gen", response_model=EchoResponse, response_model_by_alias=True)
async def echo_chart_params(
    image_url: Optional[str] = Query(None, alias="imageUrl"),
    prompt: Optional[str] = Query(None),
):
    """Echo the query parameters back unchanged. Performs no analysis."""
    return {"prompt": prompt, "imageUrl": image_url}

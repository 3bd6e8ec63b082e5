from typing import Annotated
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.core import schemas
from app.core.database import RelationalStore, get_store
from app.core.exceptions import MedicalQueryError
from app.core.llm import TextGenerator, get_text_generator
from app.core.nlq.pipeline import MedicalQueryPipeline, validate_question

router = APIRouter(prefix="/api", tags=["Medical Query"])

logger = logging.getLogger(__name__)


# Reject bad input before any capability is touched. The body is parsed by
# hand so malformed JSON or a non-object body is a 400, not a 422.
async def get_question(request: Request) -> str:
    try:
        body = await request.json()
    except ValueError:
        body = None

    if not isinstance(body, dict):
        return validate_question(None)
    payload = schemas.MedicalQueryRequest.model_validate(body)
    return validate_question(payload.question)


# Build the pipeline per request from the shared capabilities
def get_pipeline(
    generator: Annotated[TextGenerator, Depends(get_text_generator)],
    store: Annotated[RelationalStore, Depends(get_store)],
) -> MedicalQueryPipeline:
    return MedicalQueryPipeline(generator=generator, store=store)


question_dep = Annotated[str, Depends(get_question)]
pipeline_dep = Annotated[MedicalQueryPipeline, Depends(get_pipeline)]


@router.post(
    "/medical-query",
    response_model=schemas.MedicalQueryResponse,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "schema": schemas.MedicalQueryRequest.model_json_schema()
                }
            },
        }
    },
    responses={
        400: {"model": schemas.ErrorResponse},
        500: {"model": schemas.ErrorResponse},
    },
)
async def medical_query(question: question_dep, pipeline: pipeline_dep):
    """
    Classify a free-text question and answer it from the clinic database or
    from general medical knowledge.
    """
    try:
        response = await pipeline.answer(question)
    except MedicalQueryError:
        # Validation and configuration errors have their own handlers
        raise
    except Exception as e:
        logger.exception("Medical query failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "An error occurred", "details": str(e)},
        )

    return JSONResponse(content=schemas.response_payload(response))


@router.get("/health", response_model=schemas.HealthResponse)
async def health_check():
    return {"status": "OK", "message": "Medical Query API is running"}

"""AI-assisted content generation and customer support chat"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront_gateway.api.dependencies import get_openai_client, get_request_id
from storefront_gateway.api.v1.schemas import (
    ChatRequest,
    ChatResponse,
    DescriptionResponse,
    EmbeddingRequest,
    EmbeddingResponse,
    GenerateDescriptionRequest,
)
from storefront_gateway.config import settings
from storefront_gateway.domain.exceptions import AIServiceError
from storefront_gateway.domain.support import FALLBACK_REPLY, build_system_prompt, format_product_context
from storefront_gateway.infrastructure.clients.ai import OpenAIClient
from storefront_gateway.infrastructure.database.repositories import ProductRepository
from storefront_gateway.infrastructure.database.session import get_db
from storefront_gateway.infrastructure.observability.logging import log_upstream_error
from storefront_gateway.infrastructure.observability.metrics import record_upstream_failure

router = APIRouter()

DEFAULT_DESCRIPTION_PROMPT = "Describe this product in detail"


@router.post("/ai/generate-description", response_model=DescriptionResponse)
async def generate_description(
    request_body: GenerateDescriptionRequest,
    request: Request,
    openai: OpenAIClient = Depends(get_openai_client),
):
    """Describe a product image with the vision model"""
    if not openai.configured:
        raise HTTPException(status_code=500, detail="OpenAI API key is not configured")

    try:
        description = await openai.describe_image(
            request_body.image_url,
            request_body.prompt or DEFAULT_DESCRIPTION_PROMPT,
        )
    except AIServiceError as e:
        record_upstream_failure("openai")
        log_upstream_error(get_request_id(request), "openai", e)
        raise HTTPException(status_code=500, detail="Failed to generate description")

    return DescriptionResponse(description=description)


@router.get("/ai/embeddings")
def embeddings_health():
    return {"status": "ok", "message": "Embeddings API is operational"}


@router.post("/ai/embeddings", response_model=EmbeddingResponse)
async def create_embedding(
    request_body: EmbeddingRequest,
    request: Request,
    openai: OpenAIClient = Depends(get_openai_client),
):
    try:
        embedding = await openai.embed(request_body.text)
    except AIServiceError as e:
        record_upstream_failure("openai")
        log_upstream_error(get_request_id(request), "openai", e)
        raise HTTPException(status_code=500, detail="Failed to generate embedding")

    return EmbeddingResponse(embedding=embedding)


@router.post("/chat/ai-response", response_model=ChatResponse)
async def chat_response(
    request_body: ChatRequest,
    request: Request,
    db: Session = Depends(get_db),
    openai: OpenAIClient = Depends(get_openai_client),
):
    """
    Answer a customer support message.

    Up to three products whose names match the message are added to the
    system prompt. A failed product lookup only drops the context.
    """
    request_id = get_request_id(request)

    try:
        products = ProductRepository(db).search_by_name(request_body.message)
    except SQLAlchemyError as e:
        db.rollback()
        logging.warning(f"Product context lookup failed: {e}", extra={"request_id": request_id})
        products = []

    system_prompt = build_system_prompt(settings.store_name, format_product_context(products))

    try:
        reply = await openai.chat(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": request_body.message},
            ],
            max_tokens=250,
        )
    except AIServiceError as e:
        record_upstream_failure("openai")
        log_upstream_error(request_id, "openai", e)
        raise HTTPException(status_code=500, detail="Failed to generate response")

    return ChatResponse(response=reply or FALLBACK_REPLY)

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple, Type, TypeVar

import httpx
import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from config import settings
from models.schemas import AlgoValidationResponse, ItemExtractionResponse
from services.item_recognition.errors import OracleError, OracleResponseError, OracleTransportError
from services.item_recognition.models import (
    ConfirmedCandidate,
    ModelConfig,
    OracleConfirmation,
    OracleExtraction,
    RawCandidate,
    TokenUsage,
)
from services.item_recognition.prompts import load_prompt
from services.retry import with_retry

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)

TRANSPORT_ERRORS = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
    httpx.TransportError,
)


class ItemOracle(ABC):
    """Text-generation collaborator that names items mentioned in an article."""

    @abstractmethod
    async def extract_candidates(
        self,
        title: str,
        text: str,
        model_config: ModelConfig,
        hints: Optional[Sequence[str]] = None,
    ) -> OracleExtraction:
        pass

    @abstractmethod
    async def confirm_candidates(
        self,
        title: str,
        text: str,
        names: Sequence[str],
        model_config: ModelConfig,
    ) -> OracleConfirmation:
        pass

    async def extract_annotated(
        self,
        title: str,
        annotated_text: str,
        model_config: ModelConfig,
    ) -> OracleExtraction:
        """Extraction over text carrying inline «hint» annotations."""
        return await self.extract_candidates(title, annotated_text, model_config)


class OpenAIItemOracle(ItemOracle):
    """Oracle backed by an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
        max_retries: Optional[int] = None,
    ):
        self._api_key = api_key
        self._api_base = api_base
        self._client = client
        self._max_retries = max_retries

    def _get_api_key(self) -> str:
        api_key = self._api_key or settings.openai_api_key
        if not api_key:
            raise ValueError("No OpenAI API key configured")
        return api_key

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._get_api_key(),
                base_url=self._api_base or settings.openai_api_base,
                timeout=settings.openai_timeout_seconds,
                max_retries=0,
            )
        return self._client

    async def extract_candidates(
        self,
        title: str,
        text: str,
        model_config: ModelConfig,
        hints: Optional[Sequence[str]] = None,
    ) -> OracleExtraction:
        user_prompt = load_prompt(
            "item_extraction_user_prompt", title=title, content=text, hints=list(hints or [])
        )
        parsed, usage = await self._complete(
            load_prompt("item_extraction_system_prompt"),
            user_prompt,
            ItemExtractionResponse,
            model_config,
            "item extraction",
        )
        return OracleExtraction(candidates=_to_candidates(parsed), usage=usage)

    async def extract_annotated(
        self,
        title: str,
        annotated_text: str,
        model_config: ModelConfig,
    ) -> OracleExtraction:
        parsed, usage = await self._complete(
            load_prompt("inline_extraction_system_prompt"),
            load_prompt("inline_extraction_user_prompt", title=title, content=annotated_text),
            ItemExtractionResponse,
            model_config,
            "inline item extraction",
        )
        return OracleExtraction(candidates=_to_candidates(parsed), usage=usage)

    async def confirm_candidates(
        self,
        title: str,
        text: str,
        names: Sequence[str],
        model_config: ModelConfig,
    ) -> OracleConfirmation:
        if not names:
            return OracleConfirmation(confirmed=[])

        parsed, usage = await self._complete(
            load_prompt("algo_validation_system_prompt"),
            load_prompt("algo_validation_user_prompt", title=title, content=text, candidates=list(names)),
            AlgoValidationResponse,
            model_config,
            "algo candidate validation",
        )
        confirmed: List[ConfirmedCandidate] = []
        if parsed is not None:
            confirmed = [
                ConfirmedCandidate(name=item.name, snippet=item.snippet)
                for item in parsed.valid_items
                if item.is_relevant
            ]
        return OracleConfirmation(confirmed=confirmed, usage=usage)

    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        response_model: Type[ResponseT],
        model_config: ModelConfig,
        operation: str,
    ) -> Tuple[Optional[ResponseT], TokenUsage]:
        request_kwargs = self._build_request(system_prompt, user_prompt, response_model, model_config)

        start_time = time.time()
        response = await with_retry(
            lambda: self._create(request_kwargs),
            operation_name=operation,
            max_retries=self._max_retries,
        )
        logger.debug(f"{operation} completed in {time.time() - start_time:.2f}s")

        usage = _parse_usage(response)
        try:
            return _parse_content(response, response_model), usage
        except OracleResponseError as e:
            logger.warning(f"{operation} returned a malformed response, treating as empty: {e}")
            return None, usage

    def _build_request(
        self,
        system_prompt: str,
        user_prompt: str,
        response_model: Type[BaseModel],
        model_config: ModelConfig,
    ) -> dict:
        request_kwargs = {
            "model": model_config.model or settings.openai_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": response_model.__name__,
                    "schema": response_model.model_json_schema(),
                },
            },
        }
        reasoning_effort = model_config.reasoning_effort or settings.openai_reasoning_effort
        if reasoning_effort:
            request_kwargs["reasoning_effort"] = reasoning_effort
        return request_kwargs

    async def _create(self, request_kwargs: dict):
        client = self._get_client()
        try:
            return await client.chat.completions.create(**request_kwargs)
        except TRANSPORT_ERRORS as e:
            raise OracleTransportError(f"OpenAI transport error: {e}") from e
        except openai.APIStatusError as e:
            if e.status_code == 429 or e.status_code >= 500:
                raise OracleTransportError(f"OpenAI API error {e.status_code}: {e}") from e
            raise OracleError(f"OpenAI API error {e.status_code}: {e}") from e


def _parse_content(response, response_model: Type[ResponseT]) -> ResponseT:
    try:
        content = response.choices[0].message.content
    except (AttributeError, IndexError) as e:
        raise OracleResponseError(f"Response has no message content: {e}") from e
    if not content:
        raise OracleResponseError("Response message content is empty")
    try:
        return response_model.model_validate_json(content)
    except (ValidationError, json.JSONDecodeError) as e:
        raise OracleResponseError(str(e)) from e


def _parse_usage(response) -> TokenUsage:
    usage = getattr(response, "usage", None)
    if usage is None:
        return TokenUsage()
    details = getattr(usage, "completion_tokens_details", None)
    reasoning = getattr(details, "reasoning_tokens", None) or 0
    return TokenUsage(
        prompt_tokens=usage.prompt_tokens or 0,
        completion_tokens=usage.completion_tokens or 0,
        reasoning_tokens=reasoning,
    )


def _to_candidates(parsed: Optional[ItemExtractionResponse]) -> List[RawCandidate]:
    if parsed is None:
        return []
    return [
        RawCandidate(
            name=item.name,
            snippet=item.snippet,
            context=item.context,
            confidence=item.confidence,
            mention_type=item.mention_type,
            variant_category=item.variant_category,
        )
        for item in parsed.items
    ]


def get_oracle() -> ItemOracle:
    return OpenAIItemOracle()

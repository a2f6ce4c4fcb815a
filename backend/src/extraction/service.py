import re
import json
import asyncio
import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Callable, Optional, Sequence

import google.generativeai as genai
from openai import AsyncOpenAI

from src.clients.schemas import ClientResponse
from src.clients.services import ClientService
from src.common.outcome import Outcome
from src.config import settings
from src.documents.schemas import PreparedDocument
from src.documents.services import DocumentService
from src.documents.types import DocumentType
from src.extraction.exceptions import ExtractionError
from src.extraction.normalization import (
    UNKNOWN_CLIENT_NAME,
    normalize_extracted_client,
    unresolved_client_issue,
    validate_extraction,
)
from src.extraction.prompts import build_client_prompt, build_document_prompt
from src.extraction.schemas import ClientExtractionResponse, IssueCode, unique_questions
from src.matching.schemas import Confidence, EntityKind, MatchResult
from src.matching.service import match_entities
from src.profiles.services import ProfileService

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert invoice and quote parser for a small business invoicing system. "
    "You always answer with a single JSON object."
)

Validator = Callable[[Any], list[str]]


def parse_json_object(content: Optional[str], provider: str) -> dict[str, Any]:
    """
    Parse a model answer into a JSON object.

    Falls back to the outermost ``{...}`` block when the answer wraps the JSON
    in prose or code fences.

    Raises:
        ExtractionError: If the answer is empty or holds no JSON object
    """
    if not content or not content.strip():
        raise ExtractionError(f"{provider} returned an empty response")

    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        found = re.search(r'\{.*\}', content, re.DOTALL)
        if not found:
            raise ExtractionError(f"{provider} response contains no JSON object")
        try:
            data = json.loads(found.group(0))
        except json.JSONDecodeError as e:
            raise ExtractionError(f"{provider} returned invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ExtractionError(f"{provider} returned {type(data).__name__} instead of an object")
    return data


class ExtractionProvider(ABC):
    """One LLM backend: a prompt in, a JSON object out, within ``timeout`` seconds."""
    name: str = "provider"

    def __init__(self, timeout: float):
        self.timeout = timeout

    @abstractmethod
    async def complete(self, prompt: str) -> dict[str, Any]:
        ...


class OpenAIProvider(ExtractionProvider):
    name = "openai"

    def __init__(self, api_key: str, model: str, timeout: float):
        super().__init__(timeout)
        self.model = model
        self.client = AsyncOpenAI(api_key=api_key)

    async def complete(self, prompt: str) -> dict[str, Any]:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
            temperature=0.2,
        )
        return parse_json_object(response.choices[0].message.content, self.name)


class GeminiProvider(ExtractionProvider):
    name = "gemini"

    def __init__(self, api_key: str, model: str, timeout: float):
        super().__init__(timeout)
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model, system_instruction=SYSTEM_PROMPT)

    async def complete(self, prompt: str) -> dict[str, Any]:
        response = await self.model.generate_content_async(
            prompt,
            generation_config=genai.GenerationConfig(
                response_mime_type="application/json",
                temperature=0.2,
            )
        )
        return parse_json_object(response.text, self.name)


@lru_cache
def build_default_providers() -> tuple[ExtractionProvider, ...]:
    """Providers configured in settings, in the order they are tried."""
    providers: list[ExtractionProvider] = []
    if settings.OPENAI_API_KEY:
        providers.append(OpenAIProvider(settings.OPENAI_API_KEY, settings.OPENAI_MODEL, settings.OPENAI_TIMEOUT))
    if settings.GEMINI_API_KEY:
        providers.append(GeminiProvider(settings.GEMINI_API_KEY, settings.GEMINI_MODEL, settings.GEMINI_TIMEOUT))
    if not providers:
        logger.warning("No extraction provider configured, extraction will always degrade")
    return tuple(providers)


class ExtractionService:
    """
    Turns free-form text into invoice, quote or client data.

    Providers are tried in order, each once and under its own timeout. A
    provider that fails, times out or answers with an incomplete object is
    skipped. When none succeeds the extraction degrades to the last
    incomplete answer (or an empty object), which normalization then repairs
    into a document that needs clarification.
    """

    def __init__(
        self,
        providers: Sequence[ExtractionProvider],
        business_name: str = "My Business",
        default_tax_rate: str = "0",
    ):
        self.providers = list(providers)
        self.business_name = business_name
        self.default_tax_rate = default_tax_rate

    async def extract(self, prompt: str, validator: Optional[Validator] = None) -> Outcome[dict[str, Any]]:
        """
        Ask each provider in turn until one returns a usable object.

        Args:
            prompt: Full prompt text
            validator: Returns the structural problems of an answer; an
                answer with problems counts as a failure

        Returns:
            Ok with the first usable answer, or Degraded with the last
            incomplete answer (``{}`` if there was none)
        """
        if not self.providers:
            return Outcome.degraded({}, "no extraction provider configured")

        partial: Optional[dict[str, Any]] = None
        failures: list[str] = []

        for provider in self.providers:
            try:
                data = await asyncio.wait_for(provider.complete(prompt), timeout=provider.timeout)
            except asyncio.TimeoutError:
                logger.error(f"Extraction provider {provider.name} timed out after {provider.timeout}s", exc_info=True)
                failures.append(f"{provider.name} timed out")
                continue
            except Exception as e:
                logger.error(f"Extraction provider {provider.name} failed: {e}", exc_info=True)
                failures.append(f"{provider.name} failed: {e}")
                continue

            errors = validator(data) if validator else []
            if not errors:
                logger.info(f"Extraction succeeded with provider {provider.name}")
                return Outcome.ok(data)

            logger.warning(f"Extraction provider {provider.name} returned an incomplete object: {'; '.join(errors)}")
            failures.append(f"{provider.name} incomplete: {'; '.join(errors)}")
            partial = data

        return Outcome.degraded(partial or {}, f"all extraction providers failed ({', '.join(failures)})")

    async def parse_document(
        self,
        text: str,
        document_type: DocumentType,
        user_id: str,
        document_service: DocumentService,
        profile_service: Optional[ProfileService] = None,
    ) -> PreparedDocument:
        """
        Extract an invoice or a quote from text and run it through the document workflow.

        Nothing is saved; the result is a preview the user confirms or corrects.
        The prompt carries the business name and default tax rate of the
        user's profile, or the service defaults when the user has none.

        Raises:
            ExtractionError: If the text is blank
        """
        text = text.strip()
        if not text:
            raise ExtractionError(f"There is no text to extract the {document_type.value} from.")

        clients = await document_service.client_service.list_for_user(user_id)
        products = await document_service.product_service.list_active_for_user(user_id)
        profile = await profile_service.find(user_id) if profile_service else None
        business_name = profile.business_name if profile else self.business_name
        default_tax_rate = profile.default_tax_rate if profile else self.default_tax_rate
        prompt = build_document_prompt(text, document_type, clients, products, business_name, default_tax_rate)

        outcome = await self.extract(prompt, validator=lambda raw: validate_extraction(raw, document_type))
        prepared = await document_service.prepare(user_id, extraction=outcome.value, creating=True)

        if outcome.is_degraded:
            logger.warning(f"{document_type.value} extraction for user {user_id} degraded: {outcome.reason}")
            prepared = prepared.model_copy(
                update={"degradations": [f"extraction: {outcome.reason}", *prepared.degradations]}
            )
        return prepared

    async def extract_client(self, text: str, user_id: str, client_service: ClientService) -> ClientExtractionResponse:
        """
        Extract client details from text and rank the saved clients against them.

        An extracted id is kept only if it is one of the user's clients; a
        high confidence match fills it in when the extractor gave none.

        Raises:
            ExtractionError: If the text is blank
        """
        text = text.strip()
        if not text:
            raise ExtractionError("There is no text to extract the client from.")

        candidates = await client_service.list_for_user(user_id)
        outcome = await self.extract(build_client_prompt(text, candidates))
        client, issues = normalize_extracted_client(outcome.value)

        candidate_ids = {candidate.id for candidate in candidates}
        if client.id is not None and client.id not in candidate_ids:
            logger.warning(f"Extracted client id {client.id} is not a saved client of user {user_id}")
            client = client.model_copy(update={"id": None})
            issues.append(unresolved_client_issue(client.name))

        if client.name == UNKNOWN_CLIENT_NAME:
            match = MatchResult()
        else:
            match = match_entities(client, candidates, EntityKind.CLIENT)
            if client.id is None and match.confidence == Confidence.HIGH:
                client = client.model_copy(update={"id": match.best.id, "confidence": Confidence.HIGH})
                issues = [issue for issue in issues if issue.code != IssueCode.UNRESOLVED_CLIENT]

        degradations = []
        if outcome.is_degraded:
            logger.warning(f"Client extraction for user {user_id} degraded: {outcome.reason}")
            degradations.append(f"extraction: {outcome.reason}")

        return ClientExtractionResponse(
            client=client,
            matches=[ClientResponse.model_validate(candidate) for candidate in match.matches],
            confidence=match.confidence,
            scores=match.scores,
            needs_clarification=bool(issues),
            clarification_questions=unique_questions(issues),
            issues=issues,
            degradations=degradations,
        )

import httpx
import json
from loguru import logger
from typing import Any, Dict, List, Optional, Union

from app.core.config import GenerationConfig
from app.core.exceptions import GenerationAPIError
from app.models.metadata import (
    ALT_TEXT_MAX_LENGTH,
    META_DESCRIPTION_MAX_LENGTH,
    META_TITLE_MAX_LENGTH,
    GeneratedAltText,
    GeneratedMetadata,
    ImageUnit,
    MetadataUnit,
    Unit,
    clamp,
)
from app.models.outcome import Outcome, RemoteFailure, Success
from app.utils.masking import mask_secret

SYSTEM_INSTRUCTION = "You are an expert e-commerce SEO assistant. Always respond with valid JSON only."

INVALID_JSON_SENTINEL = "AI-error-invalid-json"
ALT_TEXT_UNAVAILABLE = "AI-generated alt text unavailable"
META_TITLE_UNAVAILABLE = "AI-generated title unavailable."
META_DESCRIPTION_UNAVAILABLE = "AI-generated description unavailable."


class TextGenerationService:
    """
    Asks an Azure OpenAI chat deployment for SEO text for one unit at a time.

    A reply that is not valid JSON is not an error: the caller gets a Success
    carrying a sentinel value and the raw text, so a bulk run keeps going.
    Network and API failures come back as RemoteFailure.
    """

    def __init__(self, config: GenerationConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

        self.headers = {
            "Content-Type": "application/json",
            "api-key": config.api_key,
        }
        logger.info(
            f"🔑 Azure OpenAI service initialized | Deployment: {config.deployment} | "
            f"Key: {mask_secret(config.api_key)}"
        )

    async def generate(self, unit: Unit) -> Outcome:
        if isinstance(unit, ImageUnit):
            return await self.generate_alt_text(unit)
        return await self.generate_metadata(unit)

    # ---------------------------------------------------------
    # Alt text
    # ---------------------------------------------------------
    @staticmethod
    def build_alt_text_prompt(unit: ImageUnit) -> str:
        prompt = (
            "You are an expert e-commerce SEO assistant. For the given product image, generate a concise, "
            f"SEO-optimized alt text (max {ALT_TEXT_MAX_LENGTH} characters, min 90).\n"
            "Focus on descriptive, keyword-rich text that enhances accessibility and searchability.\n"
            "\n"
            f"Product Title: {unit.title}\n"
            f"Product Description: {unit.description or 'Not provided'}\n"
            f"Product Type: {unit.product_type or 'Not specified'}\n"
            f"Vendor: {unit.vendor or 'Not specified'}\n"
            f"Image URL: {unit.image_url or 'Not provided'}\n"
        )
        if unit.alt_text:
            prompt += f"Current Alt Text: {unit.alt_text}\n"
        prompt += (
            "\n"
            'Return ONLY a JSON object with a single "altText" field:\n'
            '{"altText": "your alt text here"}'
        )
        return prompt

    async def generate_alt_text(self, unit: ImageUnit) -> Outcome:
        prompt = self.build_alt_text_prompt(unit)
        content: List[Dict[str, Any]] = [{"type": "text", "text": prompt}]
        if unit.image_url:
            content.append({"type": "image_url", "image_url": {"url": unit.image_url, "detail": "low"}})

        logger.info(f"🧠 Generating alt text for {unit.key}")
        try:
            raw = await self._complete(content, temperature=0.3, max_tokens=100)
        except (httpx.HTTPError, GenerationAPIError) as e:
            logger.error(f"❌ Alt text generation failed for {unit.key}: {e}")
            return RemoteFailure(message=f"Failed to generate alt text: {e}")

        parsed = self._parse(raw)
        if parsed is None:
            logger.warning(f"⚠ Model returned invalid JSON for {unit.key}: {raw}")
            return Success(value=GeneratedAltText(alt_text=INVALID_JSON_SENTINEL, raw=raw, parsed=False))

        alt_text = parsed.get("altText") or ALT_TEXT_UNAVAILABLE
        return Success(value=GeneratedAltText(alt_text=clamp(str(alt_text), ALT_TEXT_MAX_LENGTH)))

    # ---------------------------------------------------------
    # Meta title / description
    # ---------------------------------------------------------
    @staticmethod
    def build_metadata_prompt(unit: MetadataUnit) -> str:
        prompt = (
            "You are an expert e-commerce SEO assistant. For the given product, generate an SEO-optimized "
            "meta title and meta description.\n"
            f"- Meta Title: Max {META_TITLE_MAX_LENGTH} characters. Should be catchy and include the main keyword.\n"
            f"- Meta Description: Max {META_DESCRIPTION_MAX_LENGTH} characters. "
            "Should be a compelling summary that encourages clicks.\n"
            "\n"
            f"Product Title: {unit.title}\n"
        )
        if unit.meta_title:
            prompt += f"Current Meta Title: {unit.meta_title}\n"
        if unit.meta_description:
            prompt += f"Current Meta Description: {unit.meta_description}\n"
        prompt += (
            "\n"
            'Return ONLY a JSON object with two fields: "metaTitle" and "metaDescription".\n'
            '{"metaTitle": "your title here", "metaDescription": "your description here"}'
        )
        return prompt

    async def generate_metadata(self, unit: MetadataUnit) -> Outcome:
        prompt = self.build_metadata_prompt(unit)

        logger.info(f"🧠 Generating metadata for {unit.key}")
        try:
            raw = await self._complete(prompt, temperature=0.5, max_tokens=150)
        except (httpx.HTTPError, GenerationAPIError) as e:
            logger.error(f"❌ Metadata generation failed for {unit.key}: {e}")
            return RemoteFailure(message=f"Failed to generate metadata: {e}")

        parsed = self._parse(raw)
        if parsed is None:
            logger.warning(f"⚠ Model returned invalid JSON for {unit.key}: {raw}")
            return Success(value=GeneratedMetadata(
                meta_title=INVALID_JSON_SENTINEL,
                meta_description=INVALID_JSON_SENTINEL,
                raw=raw,
                parsed=False,
            ))

        return Success(value=GeneratedMetadata(
            meta_title=clamp(str(parsed.get("metaTitle") or META_TITLE_UNAVAILABLE), META_TITLE_MAX_LENGTH),
            meta_description=clamp(
                str(parsed.get("metaDescription") or META_DESCRIPTION_UNAVAILABLE),
                META_DESCRIPTION_MAX_LENGTH,
            ),
        ))

    # ---------------------------------------------------------
    # Transport
    # ---------------------------------------------------------
    async def _complete(self, content: Union[str, List[Dict[str, Any]]], temperature: float, max_tokens: int) -> str:
        payload = {
            "messages": [
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": content},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        async with httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport) as client:
            response = await client.post(
                self.config.completions_url,
                params={"api-version": self.config.api_version},
                headers=self.headers,
                json=payload
            )

        if response.status_code == 429:
            logger.warning("⏳ Rate limited by Azure OpenAI.")
            raise GenerationAPIError("Rate limited by Azure OpenAI (429).")

        if response.status_code != 200:
            logger.error(f"❌ API Error ({response.status_code}): {response.text}")
            raise GenerationAPIError(f"Azure OpenAI returned status {response.status_code}.")

        try:
            result_data = response.json()
        except ValueError as e:
            raise GenerationAPIError("Azure OpenAI returned a non-JSON envelope.") from e

        if not isinstance(result_data, dict):
            raise GenerationAPIError("Azure OpenAI returned an unexpected response.")

        usage = result_data.get("usage")
        if isinstance(usage, dict):
            logger.info(f"📊 Tokens used: {usage.get('total_tokens', 0)}")

        choices = result_data.get("choices") or []
        first = choices[0] if isinstance(choices, list) and choices else {}
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        return content if isinstance(content, str) and content else "{}"

    @staticmethod
    def _parse(raw: str) -> Optional[Dict[str, Any]]:
        try:
            parsed = json.loads(raw)
        except ValueError:
            return None
        return parsed if isinstance(parsed, dict) else None

"""
Provider adapters.

Three completion backends (primary OpenAI chat, secondary Gemini, tertiary
Perplexity live search) and one structured backend (OpenAI function calling).
Each adapter maps one request onto one provider call; retry policy belongs to
the callers.
"""
import json
from typing import Any, Dict, List, Protocol

from saturn.core.logging import get_logger
from saturn.core.metrics import record_llm_error
from saturn.services.llm.errors import ProtocolError
from saturn.services.llm.llm_client import ProviderClient
from saturn.services.llm.schema import ExtractionSchema

logger = get_logger(__name__)

VALIDITY_FIELD = "is_valid_json_response"


class CompletionBackend(Protocol):
    async def generate_completion(self, query: str) -> str:
        ...


class StructuredBackend(Protocol):
    async def generate_structured(
        self,
        query: str,
        schema: ExtractionSchema,
        context: Dict[str, Any],
    ) -> Dict[str, Any]:
        ...


class OpenAIChatClient(ProviderClient):
    """Primary completion backend (OpenAI chat completions)."""

    system_prompt = "You are a helpful assistant."

    async def generate_completion(self, query: str) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": query},
            ],
        }
        data = await self.post_json("/chat/completions", payload)
        return self.choice_content(data)


class GeminiClient(ProviderClient):
    """Secondary completion backend (Gemini generateContent)."""

    def _headers(self) -> Dict[str, str]:
        # Gemini authenticates with a ``key`` query parameter.
        return {"Content-Type": "application/json"}

    async def generate_completion(self, query: str) -> str:
        payload = {"contents": [{"parts": [{"text": query}]}]}
        data = await self.post_json(
            f"/models/{self.model}:generateContent",
            payload,
            params={"key": self.config.api_key or ""},
        )

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            record_llm_error(self.provider, "no_candidates")
            raise ProtocolError(self.provider, "No candidates found in the response.") from exc

        if not isinstance(text, str) or not text or text == "null":
            record_llm_error(self.provider, "empty_candidate")
            raise ProtocolError(self.provider, "Candidate text is empty.")
        return text


class PerplexityClient(ProviderClient):
    """Tertiary completion backend with live web search."""

    system_prompt = "Be precise and concise."

    async def generate_completion(self, query: str) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": query},
            ],
            "temperature": 0.2,
            "top_p": 0.9,
            "return_citations": True,
            "return_images": False,
            "return_related_questions": False,
            "search_recency_filter": "month",
            "stream": False,
            "presence_penalty": 0.0,
            "frequency_penalty": 1.0,
        }
        data = await self.post_json("/chat/completions", payload)
        return self.choice_content(data)


class OpenAIStructuredClient(ProviderClient):
    """Structured extraction backend using OpenAI function calling."""

    def build_payload(
        self,
        query: str,
        schema: ExtractionSchema,
        context: Dict[str, Any],
    ) -> Dict[str, Any]:
        properties = schema.properties_payload()
        properties[VALIDITY_FIELD] = {
            "type": "boolean",
            "description": "Indicates if the response is valid JSON.",
        }
        required: List[str] = list(schema.required)
        if VALIDITY_FIELD not in required:
            required.append(VALIDITY_FIELD)

        arguments = json.dumps(context)
        messages = [
            {
                "role": "user",
                "content": f"Respond to the following query in perfect json: {query}",
            },
            {
                "role": "assistant",
                "content": None,
                "function_call": {"name": schema.name, "arguments": arguments},
            },
            {"role": "function", "name": schema.name, "content": arguments},
        ]

        return {
            "model": self.model,
            "messages": messages,
            "tools": [
                {
                    "type": "function",
                    "function": {
                        "name": schema.name,
                        "description": schema.description,
                        "parameters": {
                            "type": "object",
                            "properties": properties,
                            "required": required,
                        },
                    },
                }
            ],
            "tool_choice": "auto",
        }

    async def generate_structured(
        self,
        query: str,
        schema: ExtractionSchema,
        context: Dict[str, Any],
    ) -> Dict[str, Any]:
        data = await self.post_json(
            "/chat/completions",
            self.build_payload(query, schema, context),
        )
        message = self.first_choice_message(data)

        tool_calls = message.get("tool_calls") or []
        if isinstance(tool_calls, list) and tool_calls:
            first_call = tool_calls[0] if isinstance(tool_calls[0], dict) else {}
            function = first_call.get("function")
            if not isinstance(function, dict):
                record_llm_error(self.provider, "malformed_tool_call")
                raise ProtocolError(self.provider, "Tool call has no function object.")
            return self._parse_object(function.get("arguments"), "tool call arguments")

        content = message.get("content")
        if content:
            return self._parse_object(content, "message content")

        record_llm_error(self.provider, "no_structured_payload")
        raise ProtocolError(
            self.provider,
            "No valid response or tool call found in the response.",
        )

    def _parse_object(self, raw: Any, source: str) -> Dict[str, Any]:
        if not isinstance(raw, str):
            record_llm_error(self.provider, "invalid_json")
            raise ProtocolError(self.provider, f"{source} is not a JSON string")
        try:
            parsed = json.loads(raw)
        except ValueError as exc:
            record_llm_error(self.provider, "invalid_json")
            logger.debug("structured_invalid_json", provider=self.provider, source=source)
            raise ProtocolError(self.provider, f"{source} is not valid JSON: {exc}") from exc
        if not isinstance(parsed, dict):
            record_llm_error(self.provider, "invalid_json")
            raise ProtocolError(self.provider, f"{source} is not a JSON object")
        return parsed

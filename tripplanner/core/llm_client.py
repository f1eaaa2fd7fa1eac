import json
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from tripplanner.core.config import settings
from tripplanner.core.exceptions import UpstreamServiceError
from tripplanner.core.logger import logger


def _to_openai_tool(tool: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": tool["name"],
            "description": tool.get("description", ""),
            "parameters": tool["input_schema"],
        },
    }


def _parse_arguments(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("⚠️ LLM returned tool arguments that are not valid JSON")
        return None
    return parsed if isinstance(parsed, dict) else None


class LLMGateway:
    """Chat-completion gateway normalizing responses into content blocks.

    Tool calls come back as ``{"type": "tool_use", "id", "name", "input"}``
    blocks and plain text as ``{"type": "text", "text"}`` blocks. Arguments
    that fail to decode are passed on as ``input=None`` so the executor can
    report the failure for that call alone.
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None):
        self.client = client or AsyncOpenAI(
            api_key=settings.OPENROUTER_API_KEY or "missing-key",
            base_url=settings.BASE_URL,
        )
        self.model = model or settings.LLM_MODEL

    async def _create(self, **kwargs):
        try:
            response = await self.client.chat.completions.create(model=self.model, **kwargs)
        except OpenAIError as e:
            logger.error(f"🔥 LLM backend error: {e}")
            raise UpstreamServiceError("AI model is temporarily unavailable.")
        if not response.choices:
            logger.error("❌ No choices returned from LLM!")
            raise UpstreamServiceError("AI model returned an empty response.")
        logger.info("✅ LLM response received.")
        return response

    async def complete_with_tools(
        self,
        system: str,
        messages: List[Dict[str, str]],
        tools: List[Dict[str, Any]],
        max_tokens: Optional[int] = None,
        tool_choice: Optional[str] = None,
    ) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "messages": [{"role": "system", "content": system}, *messages],
            "max_tokens": max_tokens or settings.LLM_MAX_TOKENS,
            "tools": [_to_openai_tool(t) for t in tools],
        }
        if tool_choice:
            kwargs["tool_choice"] = {"type": "function", "function": {"name": tool_choice}}

        response = await self._create(**kwargs)
        choice = response.choices[0]
        message = choice.message

        content: List[Dict[str, Any]] = []
        if message.content:
            content.append({"type": "text", "text": message.content})
        for call in message.tool_calls or []:
            content.append({
                "type": "tool_use",
                "id": call.id,
                "name": call.function.name,
                "input": _parse_arguments(call.function.arguments),
            })
        return {"content": content, "stop_reason": choice.finish_reason}

    async def complete_text(self, system: str, prompt: str, max_tokens: Optional[int] = None) -> str:
        response = await self._create(
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            max_tokens=max_tokens or settings.LLM_MAX_TOKENS,
            temperature=settings.LLM_TEMPERATURE,
        )
        return response.choices[0].message.content or ""


_gateway: Optional[LLMGateway] = None


def get_llm_gateway() -> LLMGateway:
    """FastAPI dependency; tests override it with a scripted fake."""
    global _gateway
    if _gateway is None:
        _gateway = LLMGateway()
    return _gateway

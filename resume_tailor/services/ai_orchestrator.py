import json
import re
import requests
from typing import List, Dict, Any, Optional
from resume_tailor.core.config import settings
from resume_tailor.core.exceptions import AIError, AIKillSwitchError
import logging
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

logger = logging.getLogger(__name__)

class AIDomain:
    RESUME = "resume"
    JOB = "job"
    MATCH = "match"
    CUSTOMIZATION = "customization"
    COVER_LETTER = "cover_letter"
    ATS = "ats"
    GENERAL = "general"


def json_schema_format(name: str, schema: Dict[str, Any]) -> Dict[str, Any]:
    """Build a strict JSON-schema response_format block."""
    return {
        "type": "json_schema",
        "json_schema": {"name": name, "strict": True, "schema": schema},
    }


class AIOrchestrator:
    @staticmethod
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(requests.exceptions.RequestException),
        reraise=True
    )
    def _post(payload: Dict[str, Any]) -> Dict[str, Any]:
        """Internal method to perform the actual API call with transport retries."""
        response = requests.post(
            url=settings.ai.api_url,
            headers={
                "Authorization": f"Bearer {settings.ai.openrouter_api_key}",
                "Content-Type": "application/json",
                "HTTP-Referer": "http://localhost:3000",  # Required by OpenRouter
                "X-Title": settings.app_name,
            },
            data=json.dumps(payload),
            timeout=settings.ai.timeout_seconds
        )
        response.raise_for_status()
        return response.json()

    @classmethod
    def _do_call(
        cls,
        messages: List[Dict[str, str]],
        model_name: str,
        temperature: float = 0.7,
        response_format: Optional[Dict[str, Any]] = None,
        json_output: bool = False
    ) -> str:
        logger.info(f"Calling AI Model: {model_name}")

        payload: Dict[str, Any] = {
            "model": model_name,
            "messages": messages,
            "temperature": temperature
        }
        if response_format:
            payload["response_format"] = response_format

        try:
            body = cls._post(payload)
        except requests.exceptions.Timeout:
            logger.error("AI service timeout.")
            raise AIError("AI service reached timeout limit.")
        except requests.exceptions.HTTPError as e:
            logger.error(f"AI service HTTP error: {e}")
            raise AIError(f"AI service returned error: {e.response.status_code}")
        except requests.exceptions.RequestException as e:
            logger.error(f"AI service transport error: {e}")
            raise AIError(f"AI service error: {str(e)}")

        choices = body.get("choices") or []
        content = (choices[0].get("message") or {}).get("content") if choices else None
        if not content or not isinstance(content, str):
            return ""

        if json_output:
            # Basic JSON extraction if model returns text around it
            json_match = re.search(r'\{.*\}', content, re.DOTALL)
            if json_match:
                return json_match.group()

        return content

    @classmethod
    def call_model(
        cls,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        response_format: Optional[Dict[str, Any]] = None,
        json_output: bool = False,
        domain: str = AIDomain.GENERAL
    ) -> str:
        """
        Centralized AI model caller with kill-switch, retries and fallback.
        Returns the message content, or an empty string when the model sent none.
        """
        logger.info(f"AI Coordination Request | Domain: {domain}")

        if settings.ai.kill_switch:
            logger.warning("AI Kill-switch is active. Blocking request.")
            raise AIKillSwitchError()

        if not settings.ai.openrouter_api_key:
            logger.error("OpenRouter API Key missing.")
            raise AIError("AI service configuration error.")

        try:
            return cls._do_call(messages, settings.ai.model_name, temperature, response_format, json_output)
        except AIError as e:
            if not settings.ai.fallback_model or settings.ai.fallback_model == settings.ai.model_name:
                raise
            logger.warning(f"Primary model {settings.ai.model_name} failed: {e.message}. Attempting fallback.")
            try:
                return cls._do_call(messages, settings.ai.fallback_model, temperature, response_format, json_output)
            except AIError as fe:
                logger.error(f"Fallback model {settings.ai.fallback_model} also failed: {fe.message}")
                raise AIError(f"AI service completely unavailable (Primary: {e.message}, Fallback: {fe.message})")

    @classmethod
    def analyze_text(
        cls,
        system_prompt: str,
        user_content: str,
        task: str,
        schema_name: Optional[str] = None,
        schema: Optional[Dict[str, Any]] = None,
        temperature: float = 0.3,
        domain: str = AIDomain.GENERAL
    ) -> Dict[str, Any]:
        """
        Helper for analysis tasks that expect JSON back.
        `task` names the operation in error messages, e.g. "parse resume".
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content}
        ]
        response_format = json_schema_format(schema_name or domain, schema) if schema else None
        response_text = cls.call_model(
            messages,
            temperature=temperature,
            response_format=response_format,
            json_output=True,
            domain=domain
        )
        if not response_text:
            raise AIError(f"Failed to {task}: No response from AI")
        try:
            data = json.loads(response_text)
        except json.JSONDecodeError:
            logger.error(f"Failed to decode AI JSON response: {response_text[:500]}")
            raise AIError(f"Failed to {task}: could not parse AI response")
        if not isinstance(data, dict):
            raise AIError(f"Failed to {task}: unexpected AI response shape")
        return data

    @classmethod
    def complete_text(
        cls,
        system_prompt: str,
        user_content: str,
        temperature: float = 0.7,
        domain: str = AIDomain.GENERAL
    ) -> str:
        """Plain-text completion; returns an empty string when the model sent nothing."""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content}
        ]
        return cls.call_model(messages, temperature=temperature, domain=domain).strip()

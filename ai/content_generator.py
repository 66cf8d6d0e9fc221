#!/usr/bin/env python3
"""
Application Content Generator

Generates cover letters, selection criteria statements and screening answers
through an OpenAI-compatible chat-completions endpoint.

Generation never raises: on any failure the caller gets an empty string and
the pipeline skips the field.

Example:
    from ai.content_generator import ContentGenerator, JobRole

    generator = ContentGenerator(api_key=settings.openai_api_key)
    letter = await generator.generate_cover_letter(
        settings.profile, JobRole("Project Manager", "Acme"), description
    )
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import aiohttp

from ai import prompts
from core.config import get_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobRole:
    """The role an application is for."""
    title: str
    company: str


class ContentGenerator:
    """
    Chat-completions client for application text.

    Args:
        api_key: Bearer credential for the endpoint
        model: Model name (default OPENAI_MODEL)
        base_url: API base URL (default OPENAI_BASE_URL)
        max_retries: Attempts per request
        timeout: Request timeout in seconds
        session: Optional shared aiohttp.ClientSession
    """

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        max_retries: Optional[int] = None,
        timeout: Optional[int] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        cfg = get_config()
        self.api_key = api_key
        self.model = model or cfg.OPENAI_MODEL
        self.base_url = (base_url or cfg.OPENAI_BASE_URL).rstrip("/")
        self.max_retries = max(1, max_retries if max_retries is not None else cfg.AI_MAX_RETRIES)
        self.timeout = timeout or cfg.AI_TIMEOUT_SECONDS
        self.max_tokens = max_tokens or cfg.AI_MAX_TOKENS
        self.temperature = temperature if temperature is not None else cfg.AI_TEMPERATURE
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self._session

    async def close(self):
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def chat(self, system_prompt: str, user_prompt: str) -> str:
        """One completion; returns the stripped reply or "" on failure."""
        if not self.api_key:
            logger.warning("Content generation skipped: no API key")
            return ""

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

        for attempt in range(self.max_retries):
            try:
                session = await self._get_session()
                async with session.post(
                    f"{self.base_url}/chat/completions",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=payload,
                ) as response:
                    data = await response.json(content_type=None)
                    if response.status == 200 and data.get("choices"):
                        content = data["choices"][0]["message"]["content"] or ""
                        return content.strip()
                    error = (data.get("error") or {}).get("message") or f"HTTP {response.status}"
                    raise RuntimeError(error)
            except Exception as e:
                logger.warning(f"Content generation failed (attempt {attempt + 1}): {e}")
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(1 * (attempt + 1))
        return ""

    # ============== Application content ==============

    @staticmethod
    def _candidate(profile) -> dict:
        return {
            "full_name": profile.full_name,
            "location": profile.location,
            "background_bio": profile.background_bio,
        }

    async def generate_cover_letter(self, profile, role: JobRole, description: str) -> str:
        prompt = prompts.COVER_LETTER_PROMPT.format(
            job_title=role.title, company=role.company, description=description,
            **self._candidate(profile),
        )
        return await self.chat(prompts.COVER_LETTER_SYSTEM, prompt)

    async def generate_selection_criteria(self, profile, role: JobRole, description: str) -> str:
        prompt = prompts.SELECTION_CRITERIA_PROMPT.format(
            job_title=role.title, company=role.company, description=description,
            **self._candidate(profile),
        )
        return await self.chat(prompts.SELECTION_CRITERIA_SYSTEM, prompt)

    async def answer_question(self, profile, role: JobRole, question: str) -> str:
        prompt = prompts.SCREENING_ANSWER_PROMPT.format(
            job_title=role.title, company=role.company, question=question,
            **self._candidate(profile),
        )
        return await self.chat(prompts.SCREENING_ANSWER_SYSTEM, prompt)

    async def choose_option(self, question: str, options: Sequence[str], location: str) -> str:
        """Pick one of the given options; "" if the reply matches none of them."""
        if not options:
            return ""
        prompt = prompts.MULTIPLE_CHOICE_PROMPT.format(
            question=question,
            options="\n".join(f"- {opt}" for opt in options),
            location=location,
        )
        reply = (await self.chat(prompts.MULTIPLE_CHOICE_SYSTEM, prompt)).strip().strip('"')
        if not reply:
            return ""
        lowered = reply.lower()
        for option in options:
            if option.strip().lower() == lowered:
                return option
        for option in options:
            if option.strip() and option.strip().lower() in lowered:
                return option
        return ""


def create_generator(settings) -> ContentGenerator:
    """Generator for one session's settings."""
    return ContentGenerator(api_key=settings.openai_api_key)


__all__: List[str] = ["ContentGenerator", "JobRole", "create_generator"]

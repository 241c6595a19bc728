"""The query-to-plan pipeline."""
from __future__ import annotations

import time
from typing import Callable, Optional

import click

from .context.gatherer import ContextGatherer, ContextGatheringOptions
from .core.utils.agent_config import AgentConfig
from .core.utils.config import Settings
from .core.utils.logger import get_logger
from .planning.command_filter import filter_install_commands
from .planning.models import Plan
from .planning.recovery import recover_plan
from .project.inspector import ProjectInspector
from .prompts import build_prompt
from .providers.llm import (
    LLMClient,
    RetryConfig,
    StreamHooks,
    call_with_retry,
    consume_stream,
)

LOGGER = get_logger(__name__)


class ConsoleStreamPrinter:
    """Mirror streamed parts to the console under a header per part kind."""

    def __init__(self, echo: Callable[..., None] = click.echo) -> None:
        self.echo = echo
        self._seen_thought = False
        self._seen_answer = False

    def on_thought(self, text: str) -> None:
        if not self._seen_thought:
            self._seen_thought = True
            self.echo("Agent thoughts:")
        self.echo(text)

    def on_answer(self, text: str) -> None:
        if not self._seen_answer:
            self._seen_answer = True
            self.echo("Agent plan:")
        self.echo(text)

    def hooks(self) -> StreamHooks:
        return StreamHooks(on_thought=self.on_thought, on_answer=self.on_answer)


class DatabaseAgent:
    """Turn a natural-language query into a validated, filtered :class:`Plan`."""

    def __init__(
        self,
        settings: Settings,
        client: LLMClient,
        *,
        agent_config: Optional[AgentConfig] = None,
        inspector: Optional[ProjectInspector] = None,
        hooks: Optional[StreamHooks] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self.client = client
        self.inspector = inspector or ProjectInspector(settings.workspace_root)
        options = ContextGatheringOptions(max_file_chars=settings.max_file_chars).with_agent_config(agent_config)
        self.gatherer = ContextGatherer(settings.workspace_root, options, inspector=self.inspector)
        self.hooks = hooks if hooks is not None else ConsoleStreamPrinter().hooks()
        self.retry_config = RetryConfig(max_retries=settings.max_retries)
        self.sleep = sleep

    def run(self, query: str) -> Plan:
        LOGGER.info("Received query: %r", query)
        bundle = self.gatherer.gather(query)
        prompt = build_prompt(query, bundle)
        LOGGER.debug("Prompt assembled (%d characters)", len(prompt))

        chunks = call_with_retry(self.client, prompt, self.retry_config, sleep=self.sleep)
        LOGGER.info("Processing response...")
        result = consume_stream(chunks, self.hooks)

        plan = recover_plan(result.answer)
        commands = filter_install_commands(plan.commands_to_run, self.inspector)
        LOGGER.info(
            "Plan recovered: %d steps, %d files, %d commands",
            len(plan.steps),
            len(plan.files_to_modify),
            len(commands),
        )
        return plan.with_commands(commands)


__all__ = ["ConsoleStreamPrinter", "DatabaseAgent"]

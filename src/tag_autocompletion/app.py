"""
Public application facade for the tag autocompletion service.

This is the single stable entry point for the library. Hosts create one
app per process, call initialize() once and route their prompt-processing
events to on_prompt_processing().
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Union

from .callbacks import OracleLatencyCallback
from .config import TagAutocompletionConfig
from .context.generation_context import GenerationContext
from .coordination.operation_registry import RegistryTracker
from .coordination.profile_lease import ProfileLeaseManager, ProfileSwitch
from .exceptions import AppNotInitializedError, ConfigurationError
from .llm_factory import get_llm_instance
from .models import GenerationMode
from .oracle import TagOracle
from .orchestration.tag_orchestrator import TagResolutionOrchestrator
from .schemas import ConnectionCheckResult, PromptProcessingEvent
from .search.tag_search_client import TagSearchClient

logger = logging.getLogger(__name__)


class TagAutocompletionApp:
    """
    Public application facade for tag autocompletion.

    All dependency wiring is encapsulated here: the LLM, the search client,
    the profile lease and the per-run operation registries.

    Usage:
        config = load_config_from_env()
        app = TagAutocompletionApp(config, profile_switch)
        app.initialize()
        corrected = await app.correct_prompt("blonde hair, padded_room", GenerationMode.CHARACTER)
    """

    def __init__(
        self,
        config: TagAutocompletionConfig,
        profile_switch: ProfileSwitch,
        search_client: Optional[TagSearchClient] = None,
        llm: Optional[Any] = None,
    ):
        """
        :param config: TagAutocompletionConfig instance
        :param profile_switch: Host profile switching capability
        :param search_client: Pre-built search client (built from config if None)
        :param llm: Pre-built chat model (built via llm_factory if None)
        """
        self._config = config
        self._profile_switch = profile_switch
        self._search_client = search_client
        self._llm = llm if llm is not None else config.llm

        self.latency_callback = OracleLatencyCallback()
        self.registries = RegistryTracker(poll_interval=config.lease_poll_interval)
        self.lease_manager = ProfileLeaseManager(
            profile_switch,
            config.profile_name,
            wait_timeout=config.lease_wait_timeout,
            poll_interval=config.lease_poll_interval,
            settle_delay=config.profile_settle_delay,
        )
        self._orchestrator: Optional[TagResolutionOrchestrator] = None

    @property
    def config(self) -> TagAutocompletionConfig:
        return self._config

    @property
    def initialized(self) -> bool:
        return self._orchestrator is not None

    def initialize(self) -> None:
        """
        Wire the oracle, search client and orchestrator.

        Call this once before using correct_prompt() or on_prompt_processing().
        """
        if self._orchestrator:
            return

        if self._config.debug:
            logging.getLogger(__package__).setLevel(logging.DEBUG)

        if self._llm is None:
            self._llm = get_llm_instance(
                provider=self._config.llm_provider,
                model=self._config.llm_model,
            )
        self._config.llm = self._llm

        if self._search_client is None:
            self._search_client = TagSearchClient(
                self._config.api_endpoint,
                timeout=self._config.timeout,
            )

        oracle = TagOracle(self._llm, callbacks=[self.latency_callback])
        self._orchestrator = TagResolutionOrchestrator(
            self._config,
            oracle,
            self._search_client,
            self.lease_manager,
            registries=self.registries,
        )
        logger.info(
            f"Tag autocompletion initialized (endpoint={self._config.api_endpoint}, "
            f"profile={self._config.profile_name}, enabled={self._config.enabled})"
        )

    def _require_orchestrator(self) -> TagResolutionOrchestrator:
        if not self._orchestrator:
            raise AppNotInitializedError("App not initialized. Call initialize() first.")
        return self._orchestrator

    async def correct_prompt(
        self,
        prompt: str,
        mode: Union[GenerationMode, int, None] = None,
        context: Optional[GenerationContext] = None,
    ) -> str:
        """
        Correct a tag prompt.

        :param prompt: Raw image prompt
        :param mode: Generation mode (host integer values are accepted)
        :param context: Host chat context
        :return: Corrected prompt (the input unchanged when disabled or on failure)
        :raises AppNotInitializedError: If initialize() has not been called
        """
        return await self._require_orchestrator().resolve(prompt, mode, context)

    async def on_prompt_processing(
        self,
        event: PromptProcessingEvent,
        context: Optional[GenerationContext] = None,
    ) -> None:
        """
        Host event hook: replace ``event.prompt`` with the corrected prompt.

        The run drains its own oracle calls before releasing the lease; this
        hook then waits, for a bounded time, until the lease is idle. Never
        raises.
        """
        if not self._config.enabled or not event.prompt:
            return

        try:
            orchestrator = self._require_orchestrator()
            logger.info(f"Processing image prompt: {event.prompt}")
            corrected = await orchestrator.resolve(event.prompt, event.generation_type, context)
            if corrected and corrected != event.prompt:
                logger.info(f"Image prompt corrected: {corrected}")
                event.prompt = corrected
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error(f"Prompt processing failed, keeping original prompt: {exc}")
        finally:
            await self.lease_manager.wait_until_idle(
                max_wait=self._config.lease_wait_timeout + self._config.drain_timeout
            )

    def set_enabled(self, enabled: bool) -> None:
        """
        Toggle the feature.

        :raises ConfigurationError: When enabling without the dedicated profile
        """
        if enabled and not self.lease_manager.profile_available():
            raise ConfigurationError(
                f'Connection profile "{self._config.profile_name}" not found. '
                "Create it before enabling tag autocompletion."
            )
        self._config.enabled = enabled
        logger.info(f"Tag autocompletion {'enabled' if enabled else 'disabled'}")

    def check_profile(self) -> bool:
        """Whether the dedicated connection profile exists."""
        available = self.lease_manager.profile_available()
        if not available:
            logger.warning(f'Connection profile "{self._config.profile_name}" not found')
        return available

    async def check_connection(self) -> ConnectionCheckResult:
        """Probe the search service with a known tag."""
        self._require_orchestrator()
        return await self._search_client.check_connection()

    def status(self) -> Dict[str, object]:
        """Diagnostic snapshot of the lease, registry and oracle latency."""
        return {
            "enabled": self._config.enabled,
            "initialized": self.initialized,
            "lease": self.lease_manager.status(),
            "active_runs": len(self.registries),
            "active_operations": self.registries.active_operations,
            "oracle_calls": self.latency_callback.call_count,
            "oracle_errors": self.latency_callback.error_count,
            "oracle_latency_ms": self.latency_callback.get_total_latency_ms(),
        }

    def reset_all_operations(self) -> None:
        """Emergency reset: cancel every in-flight oracle call and free the lease."""
        logger.warning("Emergency reset of all tag autocompletion operations")
        self.registries.cancel_all()
        self.lease_manager.force_reset()

    async def aclose(self) -> None:
        if self._search_client is not None:
            await self._search_client.aclose()

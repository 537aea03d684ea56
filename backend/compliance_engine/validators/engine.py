"""Validation Engine — orchestrates validators, retries, caching and history.

This is the main entry point for compliance validation. It runs the configured
built-in validators plus every registered plugin against a unit of source text
and produces one AggregatedResult.

Usage:
    async with ValidationEngine() as engine:
        result = await engine.validate(code, "src/app.tsx")
        if not result.overall_compliant:
            # Surface result.recommendations to the author
"""

import asyncio
import inspect
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional, Union

import structlog
from tenacity import AsyncRetrying, RetryCallState, RetryError, stop_after_attempt, wait_incrementing

from compliance_engine.models.events import ScheduledRunFailedEvent, ValidationCompletedEvent
from compliance_engine.reporting import exporter
from compliance_engine.services.event_bus import VALIDATION_CHANNEL, EventBus
from compliance_engine.services.notifier import Notifier
from compliance_engine.services.scheduler import ValidationScheduler
from compliance_engine.validators.aggregator import aggregate_results
from compliance_engine.validators.cache import MemoryCache, compute_fingerprint
from compliance_engine.validators.errors import ValidationOrchestrationError
from compliance_engine.validators.history import DEFAULT_HISTORY_LIMIT, ValidationHistory
from compliance_engine.validators.models import (
    AggregatedResult,
    CacheStrategy,
    ExportFormat,
    ReportingPolicy,
    ValidationConfig,
    ValidationMetrics,
    ValidationMode,
)
from compliance_engine.validators.registry import ActiveValidator, PluginInfo, ValidatorRegistry

if TYPE_CHECKING:
    from compliance_engine.config import Settings

logger = structlog.get_logger()

# Supplies (code, file_path) pairs for scheduled runs
SourceProvider = Callable[[], Iterable[tuple[str, str]]]

ConfigInput = Union[ValidationConfig, dict, None]


class ValidationEngine:
    """Orchestrates validators and produces unified, scored results.

    Design principles:
        - Isolated: a failing or slow validator never affects the others
        - Bounded: every validator is raced against the per-validator timeout
        - Retried: only failures of the execution phase as a whole are retried
        - Observable: logs every run with timing

    Cache, history and registry are shared between concurrent calls without
    locking; identical concurrent calls each execute and the last cache write wins.
    """

    def __init__(
        self,
        config: ConfigInput = None,
        *,
        registry: Optional[ValidatorRegistry] = None,
        cache: Optional[MemoryCache] = None,
        history: Optional[ValidationHistory] = None,
        notifier: Optional[Notifier] = None,
        event_bus: Optional[EventBus] = None,
        retry_base_delay: float = 1.0,
        source_provider: Optional[SourceProvider] = None,
    ):
        """Initialize the engine.

        Args:
            config: Base configuration (model or camelCase/snake_case dict)
            registry: Validator registry. If None, uses the built-in validators.
            cache: Result cache. If None, one is sized from config.cache.
            history: Result history. If None, keeps the last 50 results.
            notifier: Threshold evaluator for notifications
            event_bus: Bus that notification and completion events are published on
            retry_base_delay: Seconds; the n-th retry waits n * retry_base_delay
            source_provider: Sources validated by scheduled runs
        """
        if isinstance(config, ValidationConfig):
            self.config = config
        else:
            self.config = ValidationConfig().merged(config)

        self.registry = registry or ValidatorRegistry()
        self.cache = cache if cache is not None else MemoryCache(
            max_size=self.config.cache.max_size,
            default_ttl=self.config.cache.ttl,
        )
        self.history = history if history is not None else ValidationHistory(DEFAULT_HISTORY_LIMIT)
        self.notifier = notifier or Notifier()
        self.event_bus = event_bus or EventBus()
        self.retry_base_delay = retry_base_delay
        self.source_provider = source_provider

        self._scheduler: Optional[ValidationScheduler] = None
        # Validator tasks that lost their timeout race and are still running
        self._late_tasks: set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, settings: "Settings", **kwargs: Any) -> "ValidationEngine":
        """Build an engine whose defaults come from application settings."""
        kwargs.setdefault("history", ValidationHistory(settings.HISTORY_LIMIT))
        kwargs.setdefault("retry_base_delay", settings.RETRY_BASE_DELAY_SECONDS)
        return cls(settings.to_validation_config(), **kwargs)

    # ── Lifecycle ──

    async def __aenter__(self) -> "ValidationEngine":
        if self.config.scheduling.enabled:
            self.start_scheduled_validation()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()

    async def dispose(self) -> None:
        """Stop scheduling and release cache, history and plugins."""
        if self._scheduler is not None:
            await self._scheduler.aclose()
            self._scheduler = None

        for task in list(self._late_tasks):
            task.cancel()
        self._late_tasks.clear()

        self.cache.clear()
        self.history.clear()
        self.registry.clear_plugins()
        logger.info("validation_engine_disposed")

    # ── Validation ──

    async def validate(
        self,
        code: str,
        file_path: str = "unknown",
        config_override: ConfigInput = None,
    ) -> AggregatedResult:
        """Validate source text with every active validator.

        Args:
            code: Source text to validate
            file_path: Path reported for the source text
            config_override: Per-call overrides, merged key-by-key onto the base config

        Returns:
            AggregatedResult; a cached copy (cache_hit=True) when available

        Raises:
            ValidationOrchestrationError: If the execution phase failed on every attempt
        """
        config = self.config.merged(config_override)
        started_at = time.perf_counter()

        if not config.enabled:
            logger.info("validation_disabled", file_path=file_path)
            return aggregate_results({}, code, file_path, started_at=started_at)

        use_cache = config.cache.strategy != CacheStrategy.NONE
        fingerprint = compute_fingerprint(code, file_path, self.registry.active_ids(config), config)

        if use_cache:
            cached = self._cache_get(fingerprint)
            if cached is not None:
                logger.info("validation_cache_hit", file_path=file_path, score=cached.overall_score)
                return cached.as_cache_hit()

        cpu_started_at = time.process_time()
        outcomes, validation_times, retry_count = await self._execute_with_retry(code, file_path, config)

        result = aggregate_results(
            outcomes,
            code,
            file_path,
            started_at=started_at,
            retry_count=retry_count,
            validation_times=validation_times,
            cpu_time_ms=(time.process_time() - cpu_started_at) * 1000,
            previous=self.history.latest(),
        )

        if use_cache:
            self._cache_set(fingerprint, result, config.cache.ttl)

        self.history.append(result)

        logger.info(
            "validation_complete",
            file_path=file_path,
            compliant=result.overall_compliant,
            score=result.overall_score,
            total_issues=result.total_issues,
            retry_count=retry_count,
            duration_ms=result.execution_time,
            validator_timings=validation_times,
        )

        await self._publish_outcome(result, config)
        return result

    async def _execute_with_retry(
        self,
        code: str,
        file_path: str,
        config: ValidationConfig,
    ) -> tuple[dict[str, Any], dict[str, float], int]:
        """Run the execution phase, retrying it as a whole on failure.

        Returns:
            (outcomes by validator id, elapsed ms by validator id, retries used)
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(config.retries + 1),
            wait=wait_incrementing(start=self.retry_base_delay, increment=self.retry_base_delay),
            before_sleep=_log_retry(file_path),
        )

        try:
            async for attempt in retrying:
                with attempt:
                    active = self.registry.resolve(config)
                    outcomes, validation_times = await self._execute(active, code, file_path, config)
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.error(
                "validation_failed",
                file_path=file_path,
                retries=config.retries,
                error=str(cause),
            )
            raise ValidationOrchestrationError(
                f"Validation failed after {config.retries} retries: {cause}",
                retry_count=config.retries,
                file_path=file_path,
            ) from cause

        return outcomes, validation_times, attempt.retry_state.attempt_number - 1

    async def _execute(
        self,
        active: list[ActiveValidator],
        code: str,
        file_path: str,
        config: ValidationConfig,
    ) -> tuple[dict[str, Any], dict[str, float]]:
        """One execution attempt. Each validator contributes at most one outcome."""
        timeout = config.timeout_seconds

        if config.mode == ValidationMode.PARALLEL:
            runs = await asyncio.gather(
                *(self._run_with_timeout(v, code, file_path, timeout) for v in active)
            )
        else:
            runs = []
            for validator in active:
                runs.append(await self._run_with_timeout(validator, code, file_path, timeout))

        outcomes: dict[str, Any] = {}
        validation_times: dict[str, float] = {}
        for validator, (outcome, elapsed_ms) in zip(active, runs):
            validation_times[validator.id] = elapsed_ms
            if outcome is not None:
                outcomes[validator.id] = outcome

        return outcomes, validation_times

    async def _run_with_timeout(
        self,
        validator: ActiveValidator,
        code: str,
        file_path: str,
        timeout: float,
    ) -> tuple[Optional[Any], float]:
        """Race one validator against the timeout.

        A validator that loses the race keeps running in the background; its
        late result is discarded. Failures are logged and contribute nothing.
        """
        started = time.perf_counter()
        task = asyncio.ensure_future(self._invoke(validator, code, file_path))
        done, _ = await asyncio.wait({task}, timeout=timeout)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        if not done:
            self._track_late_task(validator.id, task)
            logger.warning(
                "validator_timed_out",
                validator=validator.id,
                kind=validator.kind,
                timeout_ms=round(timeout * 1000),
            )
            return None, elapsed_ms

        if task.cancelled():
            logger.warning("validator_cancelled", validator=validator.id)
            return None, elapsed_ms

        error = task.exception()
        if error is not None:
            logger.error(
                "validator_failed",
                validator=validator.id,
                kind=validator.kind,
                error=str(error),
                error_type=type(error).__name__,
            )
            return None, elapsed_ms

        return task.result(), elapsed_ms

    @staticmethod
    async def _invoke(validator: ActiveValidator, code: str, file_path: str) -> Any:
        if validator.is_async:
            return await validator.run(code, file_path)

        # Synchronous validators must not block the event loop
        result = await asyncio.to_thread(validator.run, code, file_path)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _track_late_task(self, validator_id: str, task: asyncio.Task) -> None:
        self._late_tasks.add(task)

        def _discard(finished: asyncio.Task) -> None:
            self._late_tasks.discard(finished)
            if finished.cancelled():
                return
            error = finished.exception()
            if error is not None:
                logger.debug("late_validator_failed", validator=validator_id, error=str(error))
            else:
                logger.debug("late_validator_result_discarded", validator=validator_id)

        task.add_done_callback(_discard)

    # ── Cache access (faults are never fatal) ──

    def _cache_get(self, key: str) -> Optional[AggregatedResult]:
        try:
            return self.cache.get(key)
        except Exception as e:
            logger.warning("cache_read_failed", error=str(e))
            return None

    def _cache_set(self, key: str, result: AggregatedResult, ttl: float) -> None:
        try:
            self.cache.set(key, result, ttl=ttl)
        except Exception as e:
            logger.warning("cache_write_failed", error=str(e))

    # ── Events ──

    async def _publish_outcome(self, result: AggregatedResult, config: ValidationConfig) -> None:
        completed = ValidationCompletedEvent(
            file_path=result.metadata.file_path,
            overall_score=result.overall_score,
            overall_compliant=result.overall_compliant,
            total_issues=result.total_issues,
            retry_count=result.metadata.retry_count,
            execution_time_ms=result.execution_time,
        )
        await self.event_bus.publish(VALIDATION_CHANNEL, completed.model_dump())

        notification = self.notifier.evaluate(result, config.notifications)
        if notification is None:
            return
        for channel in config.notifications.channels:
            await self.event_bus.publish(channel, notification.model_dump())

    # ── Plugins ──

    def register_plugin(self, plugin: Any, options: Optional[dict] = None) -> PluginInfo:
        """Register a plugin; it runs on every subsequent validation."""
        return self.registry.register_plugin(plugin, options)

    def unregister_plugin(self, name: str) -> bool:
        return self.registry.unregister_plugin(name)

    def list_plugins(self) -> list[PluginInfo]:
        return self.registry.list_plugins()

    # ── History, metrics and reports ──

    def get_validation_history(self) -> list[AggregatedResult]:
        """Snapshot of recorded results, oldest first."""
        return self.history.entries()

    def get_validation_metrics(self) -> ValidationMetrics:
        return self.history.get_metrics()

    def build_dashboard(self) -> dict[str, Any]:
        return exporter.build_dashboard(self.history.entries(), self.history.get_metrics())

    def render_compliance_report(self) -> str:
        """Markdown compliance report over the recorded history."""
        return exporter.render_compliance_report(self.history.entries(), self.history.get_metrics())

    def export_results(
        self,
        result: AggregatedResult,
        format: Union[ExportFormat, str] = ExportFormat.JSON,
    ) -> str:
        return exporter.export_results(result, format)

    def write_reports(
        self,
        result: AggregatedResult,
        policy: Optional[ReportingPolicy] = None,
    ) -> list[Path]:
        """Write one report file per configured format; see exporter.write_reports."""
        return exporter.write_reports(result, policy or self.config.reporting)

    # ── Scheduling ──

    def start_scheduled_validation(
        self,
        source_provider: Optional[SourceProvider] = None,
        interval_ms: Optional[int] = None,
    ) -> None:
        """Start (or restart) periodic validation. Requires a running event loop."""
        if source_provider is not None:
            self.source_provider = source_provider

        self.stop_scheduled_validation()

        interval = interval_ms or self.config.scheduling.interval
        self._scheduler = ValidationScheduler(
            job=self._run_scheduled_validation,
            interval_seconds=interval / 1000,
            immediate=self.config.scheduling.immediate,
            on_error=self._report_scheduled_failure,
        )
        self._scheduler.start()

    def stop_scheduled_validation(self) -> None:
        if self._scheduler is not None:
            self._scheduler.stop()
            self._scheduler = None

    @property
    def is_scheduled(self) -> bool:
        return self._scheduler is not None and self._scheduler.is_running

    async def _run_scheduled_validation(self) -> None:
        if self.source_provider is None:
            logger.info("scheduled_validation_skipped", reason="no source provider")
            return

        sources = list(self.source_provider())
        logger.info("scheduled_validation_started", sources=len(sources))
        for code, file_path in sources:
            try:
                await self.validate(code, file_path)
            except ValidationOrchestrationError as e:
                logger.error("scheduled_source_failed", file_path=file_path, error=str(e))
                await self._report_scheduled_failure(e)

    async def _report_scheduled_failure(self, error: Exception) -> None:
        event = ScheduledRunFailedEvent(
            message=str(error),
            file_path=getattr(error, "file_path", None),
            retry_count=getattr(error, "retry_count", None),
        )
        await self.event_bus.publish(VALIDATION_CHANNEL, event.model_dump())


def _log_retry(file_path: str) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        logger.warning(
            "validation_retry",
            file_path=file_path,
            attempt=retry_state.attempt_number,
            wait_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
            error=str(outcome.exception()) if outcome else None,
        )

    return before_sleep

"""Validator registry — built-in validators and runtime plugins behind one contract.

The registry is read-mostly. Plugins are expected to be registered during
setup; registering or unregistering while validations are in flight is not
atomic with respect to those runs.
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, runtime_checkable

import structlog
from pydantic import BaseModel, Field, ValidationError

from compliance_engine.validators.accessibility_validator import AccessibilityValidator
from compliance_engine.validators.base import BaseValidator
from compliance_engine.validators.errors import PluginContractError
from compliance_engine.validators.gdpr_validator import GDPRValidator
from compliance_engine.validators.models import ValidationConfig, camel_alias
from compliance_engine.validators.norwegian_validator import NorwegianValidator
from compliance_engine.validators.nsm_validator import NSMValidator

logger = structlog.get_logger()

REQUIRED_PLUGIN_MEMBERS = ("name", "version", "validate", "get_metadata")


@runtime_checkable
class ValidatorPlugin(Protocol):
    """Contract for caller-supplied validators.

    ``validate`` may be a plain function or a coroutine function and must return
    something readable as ``{score, compliant, issues}``.
    """

    name: str
    version: str

    def validate(self, code: str, file_path: str, options: Optional[dict] = None) -> Any: ...

    def get_metadata(self) -> dict: ...


class PluginMetadata(BaseModel):
    description: str
    supported_file_types: list[str] = Field(default_factory=list)
    configurable_options: dict[str, Any] = Field(default_factory=dict)

    model_config = {"alias_generator": camel_alias, "populate_by_name": True}


class PluginInfo(BaseModel):
    name: str
    version: str
    metadata: PluginMetadata


@dataclass(frozen=True)
class ActiveValidator:
    """One runnable entry of a validation attempt."""

    id: str
    run: Callable[[str, str], Any]
    is_async: bool = False
    kind: str = "builtin"
    label: str = field(default="", compare=False)


class ValidatorRegistry:
    """Holds built-in validators keyed by id and plugins keyed by name."""

    def __init__(self, validators: Optional[list[BaseValidator]] = None):
        """Initialize with the default validators or a custom list.

        Args:
            validators: Optional list of built-ins. If None, uses all defaults.
        """
        builtins = validators or self._default_validators()
        self._builtins: dict[str, BaseValidator] = {v.validation_type.value: v for v in builtins}
        self._plugins: dict[str, ValidatorPlugin] = {}
        self._plugin_options: dict[str, dict] = {}
        self._plugin_metadata: dict[str, PluginMetadata] = {}

    @staticmethod
    def _default_validators() -> list[BaseValidator]:
        return [
            GDPRValidator(),
            NSMValidator(),
            AccessibilityValidator(),
            NorwegianValidator(),
        ]

    # ── Built-ins ──

    def builtin_ids(self) -> list[str]:
        return list(self._builtins.keys())

    def get_builtin(self, validator_id: str) -> Optional[BaseValidator]:
        return self._builtins.get(validator_id)

    # ── Plugins ──

    def register_plugin(self, plugin: Any, options: Optional[dict] = None) -> PluginInfo:
        """Register a plugin after checking it against the plugin contract.

        Raises:
            PluginContractError: If a contract member is missing or metadata is malformed
            ValueError: If the name collides with a built-in validator id
        """
        plugin_name = str(getattr(plugin, "name", type(plugin).__name__))
        problems = [f"missing '{member}'" for member in REQUIRED_PLUGIN_MEMBERS if not hasattr(plugin, member)]
        for member in ("validate", "get_metadata"):
            if hasattr(plugin, member) and not callable(getattr(plugin, member)):
                problems.append(f"'{member}' is not callable")
        if problems:
            logger.error("plugin_rejected", plugin=plugin_name, problems=problems)
            raise PluginContractError(plugin_name, problems)

        if plugin_name in self._builtins:
            raise ValueError(f"Plugin name '{plugin_name}' collides with a built-in validator")

        try:
            metadata = PluginMetadata.model_validate(plugin.get_metadata())
        except ValidationError as e:
            logger.error("plugin_rejected", plugin=plugin_name, error=str(e))
            raise PluginContractError(plugin_name, [f"invalid metadata: {e.error_count()} error(s)"]) from e

        if plugin_name in self._plugins:
            logger.warning("plugin_replaced", plugin=plugin_name)

        self._plugins[plugin_name] = plugin
        self._plugin_options[plugin_name] = dict(options or {})
        self._plugin_metadata[plugin_name] = metadata
        logger.info("plugin_registered", plugin=plugin_name, version=str(plugin.version))
        return PluginInfo(name=plugin_name, version=str(plugin.version), metadata=metadata)

    def unregister_plugin(self, name: str) -> bool:
        """Remove a plugin by name. Returns False if it was not registered."""
        removed = self._plugins.pop(name, None) is not None
        self._plugin_options.pop(name, None)
        self._plugin_metadata.pop(name, None)
        if removed:
            logger.info("plugin_unregistered", plugin=name)
        return removed

    def list_plugins(self) -> list[PluginInfo]:
        return [
            PluginInfo(name=name, version=str(plugin.version), metadata=self._plugin_metadata[name])
            for name, plugin in self._plugins.items()
        ]

    def plugin_names(self) -> list[str]:
        return list(self._plugins.keys())

    def clear_plugins(self) -> None:
        self._plugins.clear()
        self._plugin_options.clear()
        self._plugin_metadata.clear()

    # ── Resolution ──

    def resolve(self, config: ValidationConfig) -> list[ActiveValidator]:
        """Active validators for a run: selected built-ins in config order, then plugins.

        Unknown built-in ids are skipped with a warning.
        """
        active: list[ActiveValidator] = []

        for validation_type in config.validators:
            validator = self._builtins.get(validation_type.value)
            if validator is None:
                logger.warning("validator_not_registered", validator=validation_type.value)
                continue
            active.append(ActiveValidator(
                id=validation_type.value,
                run=validator.validate,
                label=validator.name,
            ))

        # Snapshot so a concurrent register/unregister cannot change this run's set
        for name, plugin in list(self._plugins.items()):
            options = self._plugin_options.get(name, {})
            active.append(ActiveValidator(
                id=name,
                run=self._bind_plugin(plugin, options),
                is_async=inspect.iscoroutinefunction(plugin.validate),
                kind="plugin",
                label=f"{name}@{plugin.version}",
            ))

        return active

    @staticmethod
    def _bind_plugin(plugin: ValidatorPlugin, options: dict) -> Callable[[str, str], Any]:
        def run(code: str, file_path: str) -> Any:
            return plugin.validate(code, file_path, options)

        if inspect.iscoroutinefunction(plugin.validate):
            async def run_async(code: str, file_path: str) -> Any:
                return await plugin.validate(code, file_path, options)

            return run_async
        return run

    def active_ids(self, config: ValidationConfig) -> list[str]:
        """Ids that resolve() would run, without building callables."""
        ids = [t.value for t in config.validators if t.value in self._builtins]
        return ids + self.plugin_names()

"""Transform pipeline: an ordered chain of transformers with an error strategy."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pkm_sync.items.models import Item
from pkm_sync.pipeline_config import ErrorStrategy, TransformerKind
from pkm_sync.transform.base import ConfigurationError, Transformer, TransformerError
from pkm_sync.transform.content_cleanup import ContentCleanupTransformer
from pkm_sync.transform.filtering import FilterTransformer
from pkm_sync.transform.link_extraction import LinkExtractionTransformer
from pkm_sync.transform.options import TransformConfig
from pkm_sync.transform.tagging import AutoTaggingTransformer
from pkm_sync.transform.thread_grouping import ThreadGroupingTransformer

logger = logging.getLogger(__name__)

BUILTIN_TRANSFORMERS: dict[TransformerKind, Callable[[], Transformer]] = {
    TransformerKind.CONTENT_CLEANUP: ContentCleanupTransformer,
    TransformerKind.LINK_EXTRACTION: LinkExtractionTransformer,
    TransformerKind.AUTO_TAGGING: AutoTaggingTransformer,
    TransformerKind.FILTER: FilterTransformer,
    TransformerKind.THREAD_GROUPING: ThreadGroupingTransformer,
}


class TransformPipeline:
    """Runs registered transformers in configured order.

    Transformers are registered by name, then ``configure`` selects and
    orders them via ``pipeline_order``. An unconfigured or disabled
    pipeline passes items through unchanged.
    """

    def __init__(self) -> None:
        self._registry: dict[str, Transformer] = {}
        self._stages: list[Transformer] = []
        self._config: TransformConfig | None = None

    @property
    def config(self) -> TransformConfig | None:
        return self._config

    @property
    def stages(self) -> list[str]:
        return [t.name for t in self._stages]

    def add_transformer(self, transformer: Transformer) -> None:
        """Register a transformer under its name, replacing any previous one.

        Raises:
            ConfigurationError: If the transformer is missing or unnamed.
        """
        if transformer is None:
            raise ConfigurationError("transformer cannot be None")
        if not transformer.name:
            raise ConfigurationError("transformer name cannot be empty")
        self._registry[transformer.name] = transformer

    def registered_transformers(self) -> list[str]:
        return list(self._registry)

    def configure(self, config: TransformConfig | Mapping[str, Any]) -> None:
        """Build the active transformer chain from *config*.

        Raises:
            ConfigurationError: If ``pipeline_order`` names an unregistered
                transformer or a transformer rejects its options.
        """
        if not isinstance(config, TransformConfig):
            config = TransformConfig.from_mapping(config, owner="pipeline")

        self._config = config
        self._stages = []
        if not config.enabled:
            logger.info("Transform pipeline disabled")
            return

        for name in config.pipeline_order:
            transformer = self._registry.get(name)
            if transformer is None:
                raise ConfigurationError(f"transformer '{name}' not found in registry")
            options = config.transformers.get(name)
            if options is not None:
                try:
                    transformer.configure(options)
                except ConfigurationError:
                    raise
                except Exception as exc:
                    raise ConfigurationError(
                        f"failed to configure transformer '{name}': {exc}"
                    ) from exc
            self._stages.append(transformer)

        logger.info(
            "Transform pipeline configured: %s (error strategy: %s)",
            " -> ".join(self.stages) or "<empty>",
            config.error_strategy.value,
        )

    def transform(self, items: list[Item] | None) -> list[Item]:
        """Pass *items* through every configured stage.

        ``None`` entries are dropped before the first stage.

        Raises:
            TransformerError: Under ``fail_fast``, for the first failing stage.
        """
        batch = [item for item in items or () if item is not None]
        if self._config is None or not self._config.enabled or not self._stages:
            return batch

        strategy = self._config.error_strategy
        for transformer in self._stages:
            try:
                batch = self._run_stage(transformer, batch)
            except TransformerError as exc:
                if strategy is ErrorStrategy.FAIL_FAST:
                    raise
                if strategy is ErrorStrategy.LOG_AND_CONTINUE:
                    logger.warning("%s; continuing with unmodified items", exc)
                else:
                    logger.warning("%s; dropping %d items", exc, len(batch))
                    batch = []
        return batch

    def _run_stage(self, transformer: Transformer, items: list[Item]) -> list[Item]:
        name = transformer.name
        logger.debug("Running transformer %s on %d items", name, len(items))
        try:
            result = transformer.transform(list(items))
        except TransformerError:
            raise
        except Exception as exc:
            logger.warning("Transformer %s raised an unexpected error", name, exc_info=True)
            raise TransformerError(name, exc) from exc
        if result is None:
            raise TransformerError(name, "returned no result")
        return [item for item in result if item is not None]


def build_default_pipeline(config: TransformConfig | Mapping[str, Any] | None = None) -> TransformPipeline:
    """Return a pipeline with every built-in transformer registered.

    If *config* is given the pipeline is configured with it as well.
    """
    pipeline = TransformPipeline()
    for factory in BUILTIN_TRANSFORMERS.values():
        pipeline.add_transformer(factory())
    if config is not None:
        pipeline.configure(config)
    return pipeline

"""
Runtime configuration of the geometry engine.

The engine itself is pure; configuration only affects diagnostics and the raster
collaborator. Geometric comparisons are always exact.
"""

import logging
import os
from dataclasses import dataclass

_LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'
_TRUE = {'1', 'true', 'yes', 'on'}


@dataclass(frozen=True)
class EngineConfig:
    """
    Engine settings.

    Attributes:
        debug: enables debug logging of intermediate counts
        log_level: level used when debug is off
        raster_threshold: correlation value at or above which a raster pixel is set. Below 1 a single
            overlapping pixel pair sets the pixel, above 1 that many pairs are needed
    """

    debug: bool = False
    log_level: str = 'WARNING'
    raster_threshold: float = 0.5

    def __post_init__(self):
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f'<EngineConfig>: unknown log level {self.log_level!r}')
        if not self.raster_threshold > 0.0:
            raise ValueError(f'<EngineConfig>: raster_threshold must be positive, got {self.raster_threshold}')

    @property
    def level(self) -> int:
        return logging.DEBUG if self.debug else logging.getLevelName(self.log_level.upper())

    @classmethod
    def from_env(cls, environ=None) -> 'EngineConfig':
        """
        Builds a configuration from MINKOWSKI_* environment variables
        Args:
            environ: mapping to read from. Default = os.environ

        Returns: The configuration, defaults for unset variables

        """
        env = os.environ if environ is None else environ
        kwargs = {}
        if 'MINKOWSKI_DEBUG' in env:
            kwargs['debug'] = env['MINKOWSKI_DEBUG'].strip().lower() in _TRUE
        if 'MINKOWSKI_LOG_LEVEL' in env:
            kwargs['log_level'] = env['MINKOWSKI_LOG_LEVEL'].strip()
        if 'MINKOWSKI_RASTER_THRESHOLD' in env:
            kwargs['raster_threshold'] = float(env['MINKOWSKI_RASTER_THRESHOLD'])
        return cls(**kwargs)


DEFAULT_CONFIG = EngineConfig()


def configure_logging(config: EngineConfig = DEFAULT_CONFIG):
    """
    Installs a stream handler on the root logger. Only entry points call this, never library code.
    """
    logging.basicConfig(level=config.level, format=_LOG_FORMAT)
    logging.getLogger('minkowski_geom').setLevel(config.level)

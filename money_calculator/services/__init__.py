"""Service layer modules."""

from .currency_registry import (
    CurrencyNotFoundError,
    CurrencyRegistry,
    init_registry,
    registry,
)
from .fx_conversion import (
    ConversionResult,
    ExchangeService,
    InvalidMoneyAmountError,
    Money,
)
from .rate_cache import (
    DEFAULT_VALIDITY_MINUTES,
    CacheConfigurationError,
    CachedRateProvider,
    CacheEntry,
    CacheStats,
    init_rate_cache,
    pair_key,
)
from .scheduler import ensure_sweep_state, init_scheduler, run_sweep, shutdown_scheduler

"""Exchange registry for discovering and instantiating market data sources."""
from typing import Dict, List, Type
import logging

from core.exceptions import UnknownExchangeError
from .base import RestMarketDataSource
from .binance import BinanceClient
from .bitstamp import BitstampClient

logger = logging.getLogger(__name__)


class ExchangeRegistry:
    """Registry of REST market data sources by name."""

    _exchanges: Dict[str, Type[RestMarketDataSource]] = {}

    @classmethod
    def register(cls, name: str, source_class: Type[RestMarketDataSource]) -> Type[RestMarketDataSource]:
        """Register an adapter under a case-insensitive name."""
        cls._exchanges[name.lower()] = source_class
        logger.debug(f"Registered exchange: {name}")
        return source_class

    @classmethod
    def get(cls, name: str, sandbox: bool = False) -> RestMarketDataSource:
        """Get an adapter instance by name."""
        key = (name or "").lower()
        if key not in cls._exchanges:
            raise UnknownExchangeError(f"exchange {name} does not exist")
        return cls._exchanges[key](sandbox=sandbox)

    @classmethod
    def list_all(cls) -> List[str]:
        """List all registered exchange names."""
        return sorted(cls._exchanges.keys())


ExchangeRegistry.register("binance", BinanceClient)
ExchangeRegistry.register("bitstamp", BitstampClient)


def get_source(name: str, sandbox: bool = False) -> RestMarketDataSource:
    """Create the market data source for an exchange name."""
    return ExchangeRegistry.get(name, sandbox=sandbox)

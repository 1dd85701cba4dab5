"""DemandaStore implementations."""

from gestao_demandas.demandas.stores.inmemory import InMemoryDemandaStore
from gestao_demandas.demandas.stores.postgres import PostgresDemandaStore

__all__ = ["InMemoryDemandaStore", "PostgresDemandaStore"]

"""Fixtures shared by every test module: config files, env vars and payloads."""

from collections.abc import Callable, Generator, Iterator
from contextlib import AbstractContextManager, contextmanager
from datetime import date, timedelta
from pathlib import Path
from typing import Any

import pytest

from gestao_demandas.config import get_settings


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Empty directory to point DEMANDAS_CONFIG_DIR at."""
    path = tmp_path / "config"
    path.mkdir()
    return path


@pytest.fixture
def write_config(config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Write ``{filename: toml_text}`` pairs into ``config_dir``."""

    def write(files: dict[str, str]) -> None:
        for name, text in files.items():
            (config_dir / name).write_text(text)

    return write


@pytest.fixture
def env_override(
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[[dict[str, str]], AbstractContextManager[None]]:
    """Scope environment variables to a ``with`` block.

        with env_override({"DEMANDAS_ENV": "production"}):
            ...
    """

    @contextmanager
    def override(variables: dict[str, str]) -> Iterator[None]:
        with monkeypatch.context() as patch:
            for key, value in variables.items():
                patch.setenv(key, value)
            yield

    return override


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def future_date() -> str:
    """A due date safely in the future, as sent by clients."""
    return (date.today() + timedelta(days=30)).isoformat()


@pytest.fixture
def demanda_payload(future_date: str) -> dict[str, Any]:
    """A valid creation payload in wire format."""
    return {
        "nomeDemanda": "Revisar contrato",
        "funcionarioId": 7,
        "nomeFuncionario": "Ana Souza",
        "emailFuncionario": "ana@example.com",
        "categoria": "Jurídico",
        "prioridade": "Importante",
        "complexidade": "Médio",
        "descricao": "Revisar cláusulas do contrato de fornecimento",
        "local": "Sede",
        "dataLimite": future_date,
    }

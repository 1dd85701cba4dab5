"""Business validation gate for demanda payloads.

Runs on the camelCase payload before anything reaches the store and reports
every violated rule at once, in the messages shown to end users.
"""

from collections.abc import Mapping
from datetime import date
from typing import Any

from gestao_demandas.demandas.models import Complexidade, Prioridade, StatusDemanda
from gestao_demandas.utils.dates import parse_date

MIN_NOME_LENGTH = 3
MIN_DESCRICAO_LENGTH = 10

PRIORIDADES = tuple(p.value for p in Prioridade)
COMPLEXIDADES = tuple(c.value for c in Complexidade)
STATUSES = tuple(s.value for s in StatusDemanda)

MSG_NOME = "Nome da demanda é obrigatório e deve ter pelo menos 3 caracteres"
MSG_CATEGORIA = "Categoria é obrigatória"
MSG_PRIORIDADE = "Prioridade é obrigatória e deve ser: Importante, Média ou Relevante"
MSG_COMPLEXIDADE = "Complexidade é obrigatória e deve ser: Fácil, Médio ou Difícil"
MSG_DESCRICAO = "Descrição é obrigatória e deve ter pelo menos 10 caracteres"
MSG_LOCAL = "Local é obrigatório"
MSG_DATA_LIMITE = "Data limite é obrigatória"
MSG_DATA_LIMITE_PASSADA = "Data limite não pode ser anterior a hoje"
MSG_DATA_LIMITE_INVALIDA = "Data limite inválida"
MSG_STATUS = "Status inválido: deve ser pendente, aprovada, reprovada ou finalizado_pendente_aprovacao"


class DemandaValidationError(Exception):
    """Payload failed one or more business rules."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


def _filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _long_enough(value: Any, minimum: int) -> bool:
    return isinstance(value, str) and len(value.strip()) >= minimum


def validate_demanda(
    data: Mapping[str, Any],
    *,
    today: date | None = None,
    check_due_date: bool = True,
) -> list[str]:
    """Check a camelCase payload against the business rules.

    Args:
        data: Full record (create) or merged record (update)
        today: Reference day for the due-date rule, defaults to the local date
        check_due_date: Whether a past due date is rejected

    Returns:
        Violated rule messages, empty when the payload is acceptable
    """
    errors: list[str] = []

    if not _long_enough(data.get("nomeDemanda"), MIN_NOME_LENGTH):
        errors.append(MSG_NOME)
    if not _filled(data.get("categoria")):
        errors.append(MSG_CATEGORIA)
    if data.get("prioridade") not in PRIORIDADES:
        errors.append(MSG_PRIORIDADE)
    if data.get("complexidade") not in COMPLEXIDADES:
        errors.append(MSG_COMPLEXIDADE)
    if not _long_enough(data.get("descricao"), MIN_DESCRICAO_LENGTH):
        errors.append(MSG_DESCRICAO)
    if not _filled(data.get("local")):
        errors.append(MSG_LOCAL)

    raw_due = data.get("dataLimite")
    if not _filled(raw_due):
        errors.append(MSG_DATA_LIMITE)
    else:
        try:
            due = parse_date(raw_due)
        except ValueError:
            errors.append(MSG_DATA_LIMITE_INVALIDA)
        else:
            if check_due_date and due < (today or date.today()):
                errors.append(MSG_DATA_LIMITE_PASSADA)

    status = data.get("status")
    if _filled(status) and status not in STATUSES:
        errors.append(MSG_STATUS)

    return errors

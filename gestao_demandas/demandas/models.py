"""Demanda domain models.

Attributes are snake_case in Python and camelCase on the wire
(``nome_demanda`` <-> ``nomeDemanda``); both spellings are accepted on input.
"""

import json
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from gestao_demandas.utils.dates import ensure_utc, parse_date, utc_now


class Prioridade(str, Enum):
    """Urgency of a work item."""

    IMPORTANTE = "Importante"
    MEDIA = "Média"
    RELEVANTE = "Relevante"


class Complexidade(str, Enum):
    """Estimated effort of a work item."""

    FACIL = "Fácil"
    MEDIO = "Médio"
    DIFICIL = "Difícil"


class StatusDemanda(str, Enum):
    """Lifecycle state of a work item."""

    PENDENTE = "pendente"
    APROVADA = "aprovada"
    REPROVADA = "reprovada"
    FINALIZADO_PENDENTE_APROVACAO = "finalizado_pendente_aprovacao"


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_json(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def wire_keys(cls, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Rename attribute names in ``payload`` to their camelCase aliases.

        Unknown keys pass through. When both spellings are present the
        camelCase value wins.
        """
        renamed: dict[str, Any] = {}
        for key, value in payload.items():
            field = cls.model_fields.get(key)
            wire = field.alias if field is not None and field.alias else key
            if wire != key and wire in payload:
                continue
            renamed[wire] = value
        return renamed


class Demanda(CamelModel):
    """A unit of work assigned to or created by an employee."""

    id: int | None = Field(default=None, description="Store-assigned identifier")
    tag: str | None = Field(default=None, description="Unique human-readable tag")
    nome_demanda: str = Field(default="", description="Short title")
    funcionario_id: int | None = Field(default=None, description="Owning employee")
    nome_funcionario: str = Field(default="", description="Owner display name")
    email_funcionario: str = Field(default="", description="Owner e-mail")
    categoria: str = Field(..., description="Free-form category")
    prioridade: Prioridade
    complexidade: Complexidade
    descricao: str = Field(..., description="Long description")
    local: str = Field(..., description="Where the work happens")
    data_criacao: datetime = Field(default_factory=utc_now)
    data_limite: date = Field(..., description="Due date")
    data_conclusao: datetime | None = Field(default=None, description="Completion time")
    status: StatusDemanda = StatusDemanda.PENDENTE
    is_rotina: bool = Field(default=False, description="Recurring item")
    dias_semana: list[str] = Field(default_factory=list, description="Recurrence weekdays")
    atribuidos: list[Any] = Field(default_factory=list, description="Assignees")
    comentarios: str = ""
    comentario_gestor: str = ""
    data_atualizacao: datetime = Field(default_factory=utc_now)
    criado_por: int | None = None
    atualizado_por: int | None = None

    @field_validator("data_limite", mode="before")
    @classmethod
    def _parse_due_date(cls, value: Any) -> Any:
        if isinstance(value, str | datetime):
            return parse_date(value)
        return value

    @field_validator("data_criacao", "data_atualizacao", "data_conclusao", mode="after")
    @classmethod
    def _to_utc(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        return ensure_utc(value)

    @field_validator("dias_semana", "atribuidos", mode="before")
    @classmethod
    def _decode_list(cls, value: Any) -> Any:
        # Older rows and backup files hold these lists as JSON text
        if isinstance(value, str):
            value = json.loads(value) if value.strip() else None
        return [] if value is None else value

    @field_validator(
        "nome_funcionario", "email_funcionario", "comentarios", "comentario_gestor",
        mode="before",
    )
    @classmethod
    def _none_as_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class SortField(str, Enum):
    """Columns a listing may be ordered by."""

    DATA_CRIACAO = "dataCriacao"
    DATA_LIMITE = "dataLimite"
    STATUS = "status"
    PRIORIDADE = "prioridade"
    CATEGORIA = "categoria"

    @property
    def attribute(self) -> str:
        """Model attribute / table column backing this sort key."""
        return _SORT_ATTRIBUTES[self]


_SORT_ATTRIBUTES = {
    SortField.DATA_CRIACAO: "data_criacao",
    SortField.DATA_LIMITE: "data_limite",
    SortField.STATUS: "status",
    SortField.PRIORIDADE: "prioridade",
    SortField.CATEGORIA: "categoria",
}


class SortSpec(BaseModel):
    """Ordering of a listing. Ties are broken by id in the same direction."""

    field: SortField = SortField.DATA_CRIACAO
    ascending: bool = False

    @classmethod
    def parse(cls, order_by: str | None, direction: str | None) -> "SortSpec":
        """Build from raw query values.

        Unknown columns fall back to creation date; anything other than
        "ASC" (any case) sorts descending.
        """
        try:
            field = SortField(order_by) if order_by else SortField.DATA_CRIACAO
        except ValueError:
            field = SortField.DATA_CRIACAO
        ascending = (direction or "").upper() == "ASC"
        return cls(field=field, ascending=ascending)


class DemandaFilters(BaseModel):
    """Equality and range filters for listings. Unset filters match all."""

    status: str | None = None
    funcionario_id: int | None = None
    categoria: str | None = None
    prioridade: str | None = None
    data_inicio: datetime | None = None
    data_fim: datetime | None = None

    def matches(self, demanda: Demanda) -> bool:
        """Evaluate the filters against a single record."""
        if self.status is not None and demanda.status.value != self.status:
            return False
        if self.funcionario_id is not None and demanda.funcionario_id != self.funcionario_id:
            return False
        if self.categoria is not None and demanda.categoria != self.categoria:
            return False
        if self.prioridade is not None and demanda.prioridade.value != self.prioridade:
            return False
        if self.data_inicio is not None and demanda.data_criacao < self.data_inicio:
            return False
        if self.data_fim is not None and demanda.data_criacao > self.data_fim:
            return False
        return True


class PageRequest(BaseModel):
    """1-based page number and page size."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class DemandaPage(BaseModel):
    """One page of a listing plus totals."""

    items: list[Demanda]
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, items: list[Demanda], request: PageRequest, total: int) -> "DemandaPage":
        pages = -(-total // request.limit) if total else 0
        return cls(items=items, page=request.page, limit=request.limit, total=total, pages=pages)


class DemandaStatistics(BaseModel):
    """Aggregates over items created within a trailing window."""

    total: int = 0
    aprovadas: int = 0
    pendentes: int = 0
    reprovadas: int = 0
    em_analise: int = 0
    rotina: int = 0
    media_dias_atraso: float | None = None


class RestoreResult(BaseModel):
    """Outcome of replacing all records from a snapshot."""

    restored: int = 0
    failed: int = 0

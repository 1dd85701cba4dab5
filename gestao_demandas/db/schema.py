"""PostgreSQL schema for demand records, audit entries and the backup index.

Statements are idempotent and run at startup before any store is used.
"""

from gestao_demandas.db.pool import PostgresPool
from gestao_demandas.observability.logging import get_logger

logger = get_logger(__name__)

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS demandas (
        id BIGINT GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
        tag TEXT NOT NULL,
        nome_demanda TEXT NOT NULL,
        funcionario_id BIGINT,
        nome_funcionario TEXT NOT NULL DEFAULT '',
        email_funcionario TEXT NOT NULL DEFAULT '',
        categoria TEXT NOT NULL,
        prioridade TEXT NOT NULL,
        complexidade TEXT NOT NULL,
        descricao TEXT NOT NULL,
        local TEXT NOT NULL,
        data_criacao TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        data_limite DATE NOT NULL,
        data_conclusao TIMESTAMPTZ,
        status TEXT NOT NULL DEFAULT 'pendente',
        is_rotina BOOLEAN NOT NULL DEFAULT FALSE,
        dias_semana JSONB,
        atribuidos JSONB,
        comentarios TEXT NOT NULL DEFAULT '',
        comentario_gestor TEXT NOT NULL DEFAULT '',
        data_atualizacao TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        criado_por BIGINT,
        atualizado_por BIGINT,
        CONSTRAINT uq_demandas_tag UNIQUE (tag)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_demandas_status ON demandas (status)",
    "CREATE INDEX IF NOT EXISTS idx_demandas_funcionario_id ON demandas (funcionario_id)",
    "CREATE INDEX IF NOT EXISTS idx_demandas_data_limite ON demandas (data_limite)",
    "CREATE INDEX IF NOT EXISTS idx_demandas_categoria ON demandas (categoria)",
    "CREATE INDEX IF NOT EXISTS idx_demandas_prioridade ON demandas (prioridade)",
    "CREATE INDEX IF NOT EXISTS idx_demandas_data_criacao ON demandas (data_criacao)",
    """
    CREATE TABLE IF NOT EXISTS auditoria (
        id BIGINT GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
        acao TEXT NOT NULL,
        tabela TEXT NOT NULL,
        registro_id BIGINT NOT NULL,
        dados_antigos JSONB,
        dados_novos JSONB,
        usuario_id BIGINT,
        data_hora TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        ip TEXT,
        CONSTRAINT chk_auditoria_acao CHECK (acao IN ('CREATE', 'UPDATE', 'DELETE'))
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_auditoria_registro ON auditoria (tabela, registro_id)",
    """
    CREATE TABLE IF NOT EXISTS backups (
        id BIGINT GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
        nome_arquivo TEXT NOT NULL,
        data_backup TEXT NOT NULL,
        tamanho BIGINT NOT NULL,
        tipo TEXT NOT NULL,
        data_criacao TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_backups_tipo_criacao ON backups (tipo, data_criacao DESC)",
)


async def ensure_schema(pool: PostgresPool) -> None:
    """Create tables and indexes if they do not exist."""
    async with pool.acquire() as conn:
        async with conn.transaction():
            for statement in SCHEMA_STATEMENTS:
                await conn.execute(statement)
    logger.info("postgres_schema_ready", statements=len(SCHEMA_STATEMENTS))

"""Audit event published once per credit query."""

import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class QueryKind(StrEnum):
    """Kind of credit query, serialized by name."""

    BY_DOCUMENT_NUMBER = "CONSULTA_POR_NFSE"
    BY_CREDIT_NUMBER = "CONSULTA_POR_NUMERO_CREDITO"
    LIST_ALL = "LISTAR_TODOS"
    BY_TYPE = "CONSULTA_POR_TIPO"
    RECENT = "CONSULTA_RECENTES"
    EXISTS = "VERIFICAR_EXISTENCIA"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    QueryKind.BY_DOCUMENT_NUMBER: "Consulta por número da NFS-e",
    QueryKind.BY_CREDIT_NUMBER: "Consulta por número do crédito",
    QueryKind.LIST_ALL: "Listagem de todos os créditos",
    QueryKind.BY_TYPE: "Consulta por tipo de crédito",
    QueryKind.RECENT: "Consulta de créditos recentes",
    QueryKind.EXISTS: "Verificação de existência de crédito",
}


def _new_event_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class AuditEvent(BaseModel):
    """Description of one completed query.

    Serialized with ``model_dump(by_alias=True, mode="json")``; the aliases
    are the field names consumers of the topic expect.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    event_id: str = Field(default_factory=_new_event_id, alias="eventId")
    timestamp: datetime = Field(default_factory=_now)
    query_kind: QueryKind = Field(alias="tipoConsulta")
    parameter: str | None = Field(default=None, alias="parametroConsulta")
    result_count: int | None = Field(default=None, alias="quantidadeResultados")
    client_ip: str | None = Field(default=None, alias="enderecoIp")
    user_agent: str | None = Field(default=None, alias="userAgent")
    elapsed_ms: int | None = Field(default=None, alias="tempoExecucaoMs")
    success: bool = Field(alias="sucesso")
    error_message: str | None = Field(default=None, alias="mensagemErro")
    additional_info: str | None = Field(default=None, alias="informacoesAdicionais")

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return value.isoformat(timespec="seconds")

    @classmethod
    def success_event(
        cls,
        query_kind: QueryKind,
        parameter: str | None,
        result_count: int | None,
        elapsed_ms: int,
        client_ip: str | None,
        user_agent: str | None,
        additional_info: str | None = None,
    ) -> Self:
        return cls(
            query_kind=query_kind,
            parameter=parameter,
            result_count=result_count,
            client_ip=client_ip,
            user_agent=user_agent,
            elapsed_ms=elapsed_ms,
            success=True,
            additional_info=additional_info,
        )

    @classmethod
    def failure_event(
        cls,
        query_kind: QueryKind,
        parameter: str | None,
        error_message: str,
        elapsed_ms: int,
        client_ip: str | None,
        user_agent: str | None,
        additional_info: str | None = None,
    ) -> Self:
        """Build a failed-query event; failures always report zero results."""
        return cls(
            query_kind=query_kind,
            parameter=parameter,
            result_count=0,
            client_ip=client_ip,
            user_agent=user_agent,
            elapsed_ms=elapsed_ms,
            success=False,
            error_message=error_message,
            additional_info=additional_info,
        )

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, mode="json")

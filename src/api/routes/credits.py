"""Read-only credit endpoints, mounted under ``{api_prefix}/creditos``.

Each handler records how many records it returns on the audit context so the
audit event of a successful query carries a real result count.
Credit payloads are handed to ``ORJSONResponse`` as models so monetary values
keep their scale in the body; ``response_model`` still documents them.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from src.api.constants import CREDITS_PATH
from src.api.dependencies import CreditServiceDep
from src.api.middleware.audit import record_result_count
from src.api.utils.responses import ORJSONResponse
from src.api.schemas.errors import ErrorResponse
from src.core.config import Settings, get_settings
from src.domain.credits import CreditResponse

router = APIRouter(prefix=CREDITS_PATH, tags=["Créditos"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Crédito não encontrado"}}
_BAD_REQUEST = {400: {"model": ErrorResponse, "description": "Parâmetro inválido"}}


@router.get(
    "",
    response_model=list[CreditResponse],
    summary="Listar todos os créditos",
)
async def list_credits(service: CreditServiceDep) -> ORJSONResponse:
    credits = await service.list_all()
    record_result_count(len(credits))
    return ORJSONResponse(content=credits)


@router.get(
    "/recentes",
    response_model=list[CreditResponse],
    summary="Créditos mais recentes",
    responses=_BAD_REQUEST,
)
async def find_recent_credits(
    service: CreditServiceDep,
    settings: Annotated[Settings, Depends(get_settings)],
    limite: Annotated[
        int | None, Query(description="Quantidade máxima de registros")
    ] = None,
) -> ORJSONResponse:
    """Most recently constituted credits, ``limite`` defaulting to the configured value."""
    limit = settings.credit_query_config.default_recent_limit if limite is None else limite
    credits = await service.find_recent(limit)
    record_result_count(len(credits))
    return ORJSONResponse(content=credits)


@router.get(
    "/credito/{numero_credito}/existe",
    response_model=bool,
    summary="Verificar existência de crédito",
)
async def credit_exists(
    service: CreditServiceDep,
    numero_credito: Annotated[str, Path(description="Número do crédito")],
) -> bool:
    exists = await service.exists_by_credit_number(numero_credito)
    record_result_count(1 if exists else 0)
    return exists


@router.get(
    "/credito/{numero_credito}",
    response_model=CreditResponse,
    summary="Consultar crédito por número",
    responses={**_NOT_FOUND, **_BAD_REQUEST},
)
async def find_credit_by_number(
    service: CreditServiceDep,
    numero_credito: Annotated[str, Path(description="Número do crédito")],
) -> ORJSONResponse:
    credit = await service.find_by_credit_number(numero_credito)
    record_result_count(1)
    return ORJSONResponse(content=credit)


@router.get(
    "/tipo/{tipo_credito}",
    response_model=list[CreditResponse],
    summary="Consultar créditos por tipo",
    responses=_BAD_REQUEST,
)
async def find_credits_by_type(
    service: CreditServiceDep,
    tipo_credito: Annotated[str, Path(description="Tipo do crédito (ex.: ISSQN)")],
) -> ORJSONResponse:
    credits = await service.find_by_type(tipo_credito)
    record_result_count(len(credits))
    return ORJSONResponse(content=credits)


@router.get(
    "/{numero_nfse}",
    response_model=list[CreditResponse],
    summary="Consultar créditos por NFS-e",
    responses={**_NOT_FOUND, **_BAD_REQUEST},
)
async def find_credits_by_document_number(
    service: CreditServiceDep,
    numero_nfse: Annotated[str, Path(description="Número da NFS-e")],
) -> ORJSONResponse:
    """Credits of an NFS-e, newest constitution date first; 404 when none exist."""
    credits = await service.find_by_document_number(numero_nfse)
    record_result_count(len(credits))
    return ORJSONResponse(content=credits)

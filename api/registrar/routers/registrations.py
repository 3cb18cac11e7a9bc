from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from registrar.models.error import Problem
from registrar.models.registration import (
    GithubUserRegistrationRequest,
    GithubUserRegistrationResponse,
    TransactionStatusResponse,
    parse_field_element,
)
from registrar.services.registration_errors import RegistrationError, RegistrationErrorKind, StarknetRpcError
from registrar.services.registration_service import RegistrationService
from registrar.services.starknet_rpc import TXN_HASH_NOT_FOUND, StarknetRpcClient

logger = logging.getLogger(__name__)

router = APIRouter()

PROBLEM_MEDIA_TYPE = "application/problem+json"

_PROBLEM_RESPONSES = {
    401: {"model": Problem},
    404: {"model": Problem},
    500: {"model": Problem},
    502: {"model": Problem},
    503: {"model": Problem},
}


def problem_response(status: int, category: str, title: str, detail: str) -> JSONResponse:
    problem = Problem(type=category, title=title, status=status, detail=detail)
    return JSONResponse(status_code=status, content=problem.model_dump(), media_type=PROBLEM_MEDIA_TYPE)


def get_registration_service(request: Request) -> RegistrationService | None:
    return getattr(request.app.state, "registration_service", None)


def get_starknet_rpc(request: Request) -> StarknetRpcClient | None:
    return getattr(request.app.state, "starknet_rpc", None)


def _misconfigured(request: Request) -> JSONResponse:
    logger.error("registrar_misconfigured error=%s", getattr(request.app.state, "config_error", "unknown"))
    return problem_response(
        503,
        "registrar_misconfigured",
        "Service unavailable",
        "Registration backend is not configured",
    )


def _registration_problem(exc: RegistrationError, registration: GithubUserRegistrationRequest) -> JSONResponse:
    account = hex(registration.account_address)
    code = registration.authorization_code
    if exc.kind == RegistrationErrorKind.AUTHENTICATION:
        logger.warning("Failed to get new GitHub access token from code %s. Error: %s", code, exc.cause)
        return problem_response(
            401,
            exc.kind.value,
            "Invalid GitHub code",
            f"Failed to get new GitHub access token from code {code}",
        )
    if exc.kind == RegistrationErrorKind.IDENTIFICATION:
        logger.error("Failed to get GitHub user id. Error: %s", exc.cause)
        return problem_response(500, exc.kind.value, "GitHub GET /user failure", "Failed to get GitHub user id")
    if exc.kind == RegistrationErrorKind.SIGNATURE:
        logger.warning("Signed data has an invalid signature for account %s. Error: %s", account, exc.cause)
        return problem_response(
            401,
            exc.kind.value,
            "Invalid signature",
            f"Signed data has an invalid signature for account {account}",
        )
    logger.error("Failed to register account %s in the registry contract. Error: %s", account, exc.cause)
    return problem_response(
        500,
        exc.kind.value,
        "Transaction error",
        f"Failed to register account {account} in the registry contract",
    )


@router.post(
    "/registrations/github",
    response_model=GithubUserRegistrationResponse,
    responses=_PROBLEM_RESPONSES,
)
async def register_github_user(
    registration: GithubUserRegistrationRequest,
    request: Request,
    service: RegistrationService | None = Depends(get_registration_service),
):
    """Link a GitHub account to a Starknet account in the badge registry."""
    if service is None:
        return _misconfigured(request)
    try:
        transaction_hash = await service.register_contributor(
            registration.authorization_code,
            registration.account_address,
            registration.signed_data,
        )
    except RegistrationError as exc:
        return _registration_problem(exc, registration)

    logger.info(
        "successfully registered user with account %s tx=%s",
        hex(registration.account_address),
        hex(transaction_hash),
    )
    return GithubUserRegistrationResponse(transaction_hash=transaction_hash)


@router.get(
    "/registrations/transactions/{transaction_hash}",
    response_model=TransactionStatusResponse,
    responses=_PROBLEM_RESPONSES,
)
async def get_registration_transaction(
    transaction_hash: str,
    request: Request,
    rpc: StarknetRpcClient | None = Depends(get_starknet_rpc),
):
    """Report ledger status of a previously returned registration transaction."""
    if rpc is None:
        return _misconfigured(request)
    try:
        tx_hash = parse_field_element(transaction_hash)
    except ValueError:
        return problem_response(404, "transaction_not_found", "Transaction not found", "Invalid transaction hash")

    try:
        status = await rpc.get_transaction_status(tx_hash)
    except StarknetRpcError as exc:
        if exc.code == TXN_HASH_NOT_FOUND:
            return problem_response(
                404,
                "transaction_not_found",
                "Transaction not found",
                f"Transaction {hex(tx_hash)} is unknown to the node",
            )
        logger.error("transaction_status_failed tx=%s error=%s", hex(tx_hash), exc)
        return problem_response(502, "ledger_unavailable", "Ledger error", "Failed to fetch transaction status")
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("transaction_status_failed tx=%s error=%s", hex(tx_hash), exc)
        return problem_response(502, "ledger_unavailable", "Ledger error", "Failed to fetch transaction status")

    return TransactionStatusResponse(
        transaction_hash=tx_hash,
        finality_status=str(status.get("finality_status")),
        execution_status=status.get("execution_status"),
    )

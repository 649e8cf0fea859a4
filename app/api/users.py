"""User listing and balance adjustment endpoints for the admin console."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.core.database import get_executor
from app.core.resilience import ResilientExecutor
from app.schemas.balance import AdjustBalanceRequest, AdjustBalanceResponse
from app.schemas.errors import ErrorResponse, ValidationErrorResponse
from app.schemas.users import UserOut, UsersResponse
from app.services.ledger import Direction, adjust_balance
from app.services.user_query import SortBy, SortOrder, count_users, list_users

router = APIRouter()

ADJUST_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.get(
    "/users",
    response_model=UsersResponse,
    responses={400: {"model": ValidationErrorResponse}},
)
def get_users(
    executor: Annotated[ResilientExecutor, Depends(get_executor)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1)] = 10,
    sort_by: Annotated[SortBy, Query(alias="sortBy")] = "created_at",
    sort_order: Annotated[SortOrder, Query(alias="sortOrder")] = "desc",
) -> UsersResponse:
    """
    Return one page of users plus the total user count.

    Clients compute the page count as ceil(totalUsers / limit).
    """
    users = list_users(executor, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
    total = count_users(executor)
    return UsersResponse(
        users=[UserOut.model_validate(u) for u in users],
        totalUsers=total,
    )


@router.post("/{userId}/credit", response_model=AdjustBalanceResponse, responses=ADJUST_RESPONSES)
def credit_user_balance(
    user_id: Annotated[uuid.UUID, Path(alias="userId")],
    body: AdjustBalanceRequest,
    executor: Annotated[ResilientExecutor, Depends(get_executor)],
) -> AdjustBalanceResponse:
    """Add funds to a user's balance. 404 if the user does not exist."""
    balance = adjust_balance(executor, user_id, body.amount, Direction.CREDIT, body.description)
    return AdjustBalanceResponse(message="User credited successfully", balance=balance)


@router.post("/{userId}/debit", response_model=AdjustBalanceResponse, responses=ADJUST_RESPONSES)
def debit_user_balance(
    user_id: Annotated[uuid.UUID, Path(alias="userId")],
    body: AdjustBalanceRequest,
    executor: Annotated[ResilientExecutor, Depends(get_executor)],
) -> AdjustBalanceResponse:
    """Remove funds from a user's balance. 404 if the user does not exist, 400 if funds are insufficient."""
    balance = adjust_balance(executor, user_id, body.amount, Direction.DEBIT, body.description)
    return AdjustBalanceResponse(message="User debited successfully", balance=balance)

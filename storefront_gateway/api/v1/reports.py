"""GET /api/admin/... - financial reports for the back-office dashboard"""

import time
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront_gateway.api.dependencies import get_request_id, require_roles
from storefront_gateway.api.v1.schemas import (
    CashFlowResponse,
    ExpensesTotalResponse,
    MarginPointSchema,
    ProfitMarginResponse,
    ProfitTotalResponse,
    RevenueByCategoryResponse,
    RevenueTotalResponse,
)
from storefront_gateway.domain.aggregation import (
    cash_flow_by_day,
    profit_margin_series,
    revenue_by_category,
    sum_amounts,
    total_profit,
)
from storefront_gateway.domain.authorization import ADMIN_ROLES
from storefront_gateway.domain.models import Principal, TransactionRow
from storefront_gateway.infrastructure.database.repositories import TransactionRepository
from storefront_gateway.infrastructure.database.session import get_db
from storefront_gateway.infrastructure.observability.logging import log_report
from storefront_gateway.infrastructure.observability.metrics import record_upstream_failure

router = APIRouter()

admin_only = require_roles(*ADMIN_ROLES)


def _fetch(
    db: Session,
    request_id: str,
    principal: Principal,
    type: Optional[str] = None,
    require_category: bool = False,
) -> List[TransactionRow]:
    """Completed transactions owned by the caller; 500 on database failure"""
    try:
        return TransactionRepository(db).get_completed(
            principal.user_id, type=type, require_category=require_category
        )
    except SQLAlchemyError as e:
        db.rollback()
        record_upstream_failure("database")
        logging.error(f"Error fetching transactions: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to fetch transactions")


@router.get("/admin/revenue/total", response_model=RevenueTotalResponse)
def get_total_revenue(
    request: Request,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    """Sum of completed income"""
    start_time = time.time()
    request_id = get_request_id(request)

    rows = _fetch(db, request_id, principal, type="income")

    log_report(request_id, principal.user_id, "revenue_total", len(rows), (time.time() - start_time) * 1000)
    return RevenueTotalResponse(total_revenue=sum_amounts(rows))


@router.get("/admin/revenue/category", response_model=RevenueByCategoryResponse)
def get_revenue_by_category(
    request: Request,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    """Completed income grouped by category (uncategorized rows are excluded by the query)"""
    start_time = time.time()
    request_id = get_request_id(request)

    rows = _fetch(db, request_id, principal, type="income", require_category=True)

    log_report(request_id, principal.user_id, "revenue_category", len(rows), (time.time() - start_time) * 1000)
    return RevenueByCategoryResponse(revenue_by_category=revenue_by_category(rows))


@router.get("/admin/expenses/total", response_model=ExpensesTotalResponse)
def get_total_expenses(
    request: Request,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    start_time = time.time()
    request_id = get_request_id(request)

    rows = _fetch(db, request_id, principal, type="expense")

    log_report(request_id, principal.user_id, "expenses_total", len(rows), (time.time() - start_time) * 1000)
    return ExpensesTotalResponse(total_expenses=sum_amounts(rows))


@router.get("/admin/profit/total", response_model=ProfitTotalResponse)
def get_total_profit(
    request: Request,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    """Completed income minus completed expenses"""
    start_time = time.time()
    request_id = get_request_id(request)

    income = _fetch(db, request_id, principal, type="income")
    expenses = _fetch(db, request_id, principal, type="expense")

    log_report(
        request_id, principal.user_id, "profit_total", len(income) + len(expenses), (time.time() - start_time) * 1000
    )
    return ProfitTotalResponse(total_profit=total_profit(income, expenses))


@router.get("/admin/profit/margin", response_model=ProfitMarginResponse)
def get_profit_margin(
    request: Request,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    """
    Daily profit margin series.

    Returns:
        [{date, margin}] sorted by date, margin in percent with 2 decimals
    """
    start_time = time.time()
    request_id = get_request_id(request)

    rows = _fetch(db, request_id, principal)
    series = profit_margin_series(rows)

    log_report(request_id, principal.user_id, "profit_margin", len(rows), (time.time() - start_time) * 1000)
    return ProfitMarginResponse(
        profit_margin=[MarginPointSchema(date=point.date, margin=point.margin) for point in series]
    )


@router.get("/admin/cashflow", response_model=CashFlowResponse)
def get_cash_flow(
    request: Request,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    """Net daily cash flow keyed by YYYY-MM-DD"""
    start_time = time.time()
    request_id = get_request_id(request)

    rows = _fetch(db, request_id, principal)

    log_report(request_id, principal.user_id, "cashflow", len(rows), (time.time() - start_time) * 1000)
    return CashFlowResponse(cash_flow=cash_flow_by_day(rows))

from fastapi import APIRouter

from workforce_pto.api.balances import employee_balance_router
from workforce_pto.api.employees import employees_router
from workforce_pto.api.requests import requests_router
from workforce_pto.api.rules import rules_router

api_router = APIRouter()
api_router.include_router(rules_router)
api_router.include_router(employee_balance_router)
api_router.include_router(requests_router)
api_router.include_router(employees_router)

from fastapi import APIRouter
from appraze.routers import auth, employees, reviews, templates, team, billing

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(employees.router, tags=["Employees"])
api_router.include_router(reviews.router, tags=["Reviews"])
api_router.include_router(templates.router, tags=["Templates"])
api_router.include_router(team.router, tags=["Team"])
api_router.include_router(team.teams_router, tags=["Teams"])
api_router.include_router(billing.router, tags=["Billing"])

from fastapi import FastAPI

from . import auth, dashboard, employees, evaluations, health, reports


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the FastAPI application."""
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(dashboard.router)
    app.include_router(evaluations.router)
    app.include_router(employees.router)
    app.include_router(reports.router)

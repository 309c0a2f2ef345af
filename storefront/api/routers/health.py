from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
def root():
    return "Store API Server is Running!"


@router.get("/health")
def health(request: Request):
    report = getattr(request.app.state, "migration_report", None)
    if report is None:
        return {"status": "starting", "migrations": None}
    return {
        "status": "ok" if report.ok else "degraded",
        "migrations": {
            "applied": report.applied,
            "failed": sorted(report.failed),
        },
    }

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/healthz")
async def healthz(request: Request, deep: bool = False):
    """Health check endpoint (Kubernetes style).

    With ``deep=true`` every completion provider is probed as well.
    """
    service = getattr(request.app.state, "summary_service", None)
    if not deep:
        return {"status": "ok", "service_ready": service is not None}

    if service is None:
        return {"status": "degraded", "service_ready": False, "providers": []}

    results = await service.check_health()
    providers = [
        {"name": name, "healthy": health.healthy, "error": health.error_message}
        for name, health in results
    ]
    healthy = any(item["healthy"] for item in providers)
    return {
        "status": "ok" if healthy else "degraded",
        "service_ready": True,
        "providers": providers,
    }

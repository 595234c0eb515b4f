from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from server.api.deps import get_availability_gateway
from server.api.services import metrics
from server.api.services.payloads import availability_payload
from streamscout.availability_gateway import StreamingAvailabilityGateway

router = APIRouter(prefix="/api")


@router.get("/providers/{title_id}")
def providers_for_title(
    title_id: str,
    gateway: StreamingAvailabilityGateway = Depends(get_availability_gateway),
) -> Any:
    """
    Disponibilidad de un título en el país configurado.

    - id vacío => 400 (no se llama al proveedor)
    - 404 del proveedor => 200 con notFound=true
    - proveedor caído => 200 con degraded=true y listas vacías
    - 429/402/403 => se propagan (handler global)
    """
    title = title_id.strip()
    if not title:
        return JSONResponse(status_code=400, content={"error": "Title id required"})

    result = gateway.lookup_or_degraded(title)
    if result.degraded:
        metrics.inc("providers_degraded_total", 1)
    return availability_payload(result)

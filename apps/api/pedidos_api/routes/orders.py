"""Order intake and administration routes."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from starlette.concurrency import run_in_threadpool

from pedidos_api.dependencies import get_order_service, get_order_store
from pedidos_api.errors import OrderNotFoundError
from pedidos_api.models import UploadCandidate
from pedidos_api.orders.service import OrderService
from pedidos_api.orders.store import OrderStore

router = APIRouter(tags=["pedidos"])


def _parse_order_id(raw: str) -> int:
    """Order ids are numeric; anything else cannot match an order."""
    try:
        return int(raw)
    except ValueError:
        raise OrderNotFoundError(raw)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else ""


@router.post("/pedido")
async def create_order(
    request: Request,
    email: Optional[str] = Form(None),
    comment: Optional[str] = Form(None),
    comprobante: Optional[UploadFile] = File(None),
    service: OrderService = Depends(get_order_service),
):
    """Receive a payment proof and register a pending order."""
    candidate = None
    if comprobante is not None and comprobante.filename:
        await comprobante.seek(0)
        candidate = UploadCandidate(
            filename=comprobante.filename,
            content_type=comprobante.content_type or "",
            stream=comprobante.file,
            declared_size=comprobante.size,
        )

    # File writes block, keep them off the event loop
    order = await run_in_threadpool(service.submit, email, comment, candidate, _client_ip(request))

    return {
        "success": True,
        "message": "Pedido recibido",
        "id": order.id,
        "pedido": order.to_dict(),
    }


@router.get("/pedidos")
async def list_orders(store: OrderStore = Depends(get_order_store)):
    """List all orders, newest first, with status counts."""
    listing = store.list()
    return {
        "success": True,
        "total": listing.total,
        "pendientes": listing.pending,
        "aprobados": listing.approved,
        "pedidos": [o.to_dict() for o in listing.orders],
    }


@router.get("/pedido/{order_id}")
async def get_order(order_id: str, service: OrderService = Depends(get_order_service)):
    """Get a single order."""
    order = service.get(_parse_order_id(order_id))
    return {"success": True, "pedido": order.to_dict()}


@router.post("/aprobar/{order_id}")
async def approve_order(order_id: str, service: OrderService = Depends(get_order_service)):
    """Approve an order and email the customer."""
    result = await run_in_threadpool(service.approve, _parse_order_id(order_id))
    order = result.order
    return {
        "success": True,
        "message": "Pedido aprobado" if result.changed else "El pedido ya estaba aprobado",
        "pedido": {
            "id": order.id,
            "email": order.email,
            "estado": order.status.value,
            "aprobadoEn": order.to_dict()["aprobadoEn"],
            "emailEnviado": result.email_sent,
        },
    }


@router.delete("/pedido/{order_id}")
async def delete_order(order_id: str, service: OrderService = Depends(get_order_service)):
    """Delete an order and its payment proof."""
    await run_in_threadpool(service.delete, _parse_order_id(order_id))
    return {"success": True, "message": "Pedido eliminado"}

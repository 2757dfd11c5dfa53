from fastapi import APIRouter

from api.routes.inventory import router as inventory_router
from api.routes.notifications import router as notifications_router
from api.routes.orders import router as orders_router
from api.routes.system import router as system_router

api_router = APIRouter()

api_router.include_router(system_router)
api_router.include_router(notifications_router)
api_router.include_router(inventory_router)
api_router.include_router(orders_router)

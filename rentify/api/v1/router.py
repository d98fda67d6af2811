from fastapi import APIRouter

from rentify.api.routers import roles, auth, users, properties, bookings, contracts

api_router = APIRouter()

api_router.include_router(roles.router)
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(properties.router)
api_router.include_router(bookings.router)
api_router.include_router(contracts.router)

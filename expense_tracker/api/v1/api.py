from fastapi import APIRouter

from expense_tracker.api.v1.routes import users, households, categories, subcategories, expenses

api_router = APIRouter()

api_router.include_router(users.router)
api_router.include_router(households.router)
api_router.include_router(categories.router)
api_router.include_router(subcategories.router)
api_router.include_router(expenses.router)

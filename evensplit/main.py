from fastapi import FastAPI
from evensplit.core.logging_config import configure_logging
from evensplit.db import base  # noqa: F401  registers every model
from evensplit.api.v1.routes.system import router as system_router
from evensplit.api.v1.routes.user import router as user_router
from evensplit.api.v1.routes.friends import router as friends_router
from evensplit.api.v1.routes.group import router as group_router
from evensplit.api.v1.routes.expense import router as expense_router
from evensplit.api.v1.routes.balances import router as balances_router

configure_logging()

app = FastAPI(title="EvenSplit Backend")

@app.get("/")
async def root():
    return {"message": "EvenSplit Backend is live"}

app.include_router(system_router, prefix="/api/v1/system")
app.include_router(user_router, prefix="/api/v1/users")
app.include_router(friends_router, prefix="/api/v1/friends")
app.include_router(group_router, prefix="/api/v1/groups")
app.include_router(expense_router, prefix="/api/v1/expenses")
app.include_router(balances_router, prefix="/api/v1/balances")

from fastapi import FastAPI

# Routers
from cleanchoice.api.routers.brands import router as brands_router
from cleanchoice.api.routers.exports import router as exports_router


app = FastAPI(title="CleanChoice Brand Claims", version="0.1")

app.include_router(brands_router)
app.include_router(exports_router)

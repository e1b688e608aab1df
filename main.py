from contextlib import asynccontextmanager

from fastapi import FastAPI
from app.routers import follows, connections, blocks, relationships
from app.storage.database import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Relationship Engine", lifespan=lifespan)

# 注册路由
app.include_router(follows.follows_router)
app.include_router(connections.connections_router)
app.include_router(blocks.blocks_router)
app.include_router(relationships.relationships_router)


# uvicorn main:app
# uvicorn main:app --reload
@app.get("/")
def root():
    return {"message": "Welcome to Relationship Engine"}

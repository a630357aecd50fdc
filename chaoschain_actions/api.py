from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException

from .config import settings
from .errors import UnknownActionError
from .models import ActionResult, InvokeRequest, ListActionsResponse
from .orchestrator import ActionDispatcher, get_dispatcher

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Only close the default dispatcher if a request actually created it
    if get_dispatcher.cache_info().currsize:
        await get_dispatcher().aclose()
        get_dispatcher.cache_clear()


app = FastAPI(title="ChaosChain Actions", version="0.1.0", lifespan=lifespan)


# --------------------------------------------------------------------------- #
# Core Endpoints
# --------------------------------------------------------------------------- #

@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/actions", response_model=ListActionsResponse)
def list_actions(dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    return ListActionsResponse(actions=dispatcher.list_actions())


@app.post("/actions/{name}", response_model=ActionResult)
async def invoke(name: str, request: InvokeRequest, dispatcher: ActionDispatcher = Depends(get_dispatcher)):
    """Run an action. Rejected invocations still return 200 with ``ok: false``."""
    try:
        return await dispatcher.invoke(name, request.text, state=request.state, user=request.user)
    except UnknownActionError as e:
        raise HTTPException(status_code=404, detail=str(e))

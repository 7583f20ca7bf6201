from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from lifelog.auth import get_context, get_current_user
from lifelog.context import AppContext
from lifelog.errors import LifelogError
from lifelog.services.data_service import backup_filename

router = APIRouter(prefix="/api/v1/data", tags=["Data"])


@router.get("/export")
async def export_data(user_id: str = Depends(get_current_user), ctx: AppContext = Depends(get_context)):
    """Download the user's backup envelope as a JSON attachment."""
    try:
        envelope = await ctx.data_service().export_user_data(user_id)
    except LifelogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return JSONResponse(
        content=envelope.model_dump(),
        headers={"Content-Disposition": f'attachment; filename="{backup_filename()}"'},
    )


@router.post("/import")
async def import_data(
    envelope: dict = Body(...),
    user_id: str = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    try:
        imported = await ctx.data_service().import_user_data(user_id, envelope)
    except LifelogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"status": "success", "data": {"imported": imported}}

from fastapi import APIRouter, HTTPException, Response

from cleanchoice.config import get_settings
from cleanchoice.services.crawl.pipeline import RecordStoreError, read_jsonl
from cleanchoice.services.export_service import COLLECTIONS, source_path, to_csv

router = APIRouter(tags=["exports"])


@router.get("/exports/{collection}.csv")
def api_export_csv(collection: str):
    order = COLLECTIONS.get(collection)
    if order is None:
        raise HTTPException(status_code=404, detail="Unknown collection")
    settings = get_settings()
    path = source_path(collection, data_dir=settings.data_dir, store_path=settings.store_path)
    try:
        rows = read_jsonl(path)
    except RecordStoreError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to read {collection}: {exc}")
    return Response(
        content=to_csv(rows, order),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={collection}.csv"},
    )

from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Sequence, Type

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pymongo import ReturnDocument
from pymongo.database import Database

from ..database import get_database
from ..models import Document

MAX_PAGE_SIZE = 500


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_object_id(raw: str) -> ObjectId:
    try:
        return ObjectId(raw)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail=f"Invalid id: {raw}")


def serialize(doc: dict) -> dict:
    """
    Convierte un documento de MongoDB en algo que FastAPI pueda devolver
    como JSON (los ObjectId pasan a str).
    """
    out = {}
    for key, value in doc.items():
        if isinstance(value, ObjectId):
            out[key] = str(value)
        elif isinstance(value, dict):
            out[key] = serialize(value)
        elif isinstance(value, list):
            out[key] = [
                serialize(v) if isinstance(v, dict) else str(v) if isinstance(v, ObjectId) else v
                for v in value
            ]
        else:
            out[key] = value
    return out


def _payload(body: Document, exclude_unset: bool = False) -> dict:
    data = body.model_dump(mode="json", exclude_unset=exclude_unset)
    data.pop("_id", None)
    return data


def build_crud_router(
    collection_name: str,
    schema: Type[Document],
    label: str,
    filter_fields: Iterable[str] = (),
    default_sort: Optional[Sequence[tuple[str, int]]] = None,
    router: Optional[APIRouter] = None,
) -> APIRouter:
    """
    Router CRUD genérico sobre una colección:

    - GET    /        lista (skip, limit y filtros de igualdad)
    - GET    /{id}    un documento
    - POST   /        crea
    - PUT    /{id}    actualización parcial
    - DELETE /{id}    borra

    Si se pasa `router`, las rutas se añaden a ese router (para poder
    declarar antes rutas fijas que /{id} taparía).
    """
    if router is None:
        router = APIRouter()
    filter_fields = tuple(filter_fields)
    sort = list(default_sort or [("createdAt", -1)])

    def _collection(db: Database):
        return db[collection_name]

    @router.get("")
    @router.get("/", include_in_schema=False)
    def list_documents(
        request: Request,
        skip: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=MAX_PAGE_SIZE),
        db: Database = Depends(get_database),
    ) -> list[dict]:
        query: dict[str, Any] = {
            field: request.query_params[field]
            for field in filter_fields
            if request.query_params.get(field)
        }
        cursor = _collection(db).find(query).sort(sort).skip(skip).limit(limit)
        return [serialize(doc) for doc in cursor]

    @router.get("/{doc_id}")
    def get_document(doc_id: str, db: Database = Depends(get_database)) -> dict:
        doc = _collection(db).find_one({"_id": parse_object_id(doc_id)})
        if not doc:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return serialize(doc)

    @router.post("", status_code=201)
    @router.post("/", status_code=201, include_in_schema=False)
    def create_document(body: schema, db: Database = Depends(get_database)) -> dict:
        now = utcnow()
        doc = _payload(body)
        doc["createdAt"] = now
        doc["updatedAt"] = now
        result = _collection(db).insert_one(doc)
        doc["_id"] = result.inserted_id
        return serialize(doc)

    @router.put("/{doc_id}")
    def update_document(doc_id: str, body: schema, db: Database = Depends(get_database)) -> dict:
        oid = parse_object_id(doc_id)
        changes = _payload(body, exclude_unset=True)
        changes.pop("createdAt", None)
        changes["updatedAt"] = utcnow()
        doc = _collection(db).find_one_and_update(
            {"_id": oid},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return serialize(doc)

    @router.delete("/{doc_id}")
    def delete_document(doc_id: str, db: Database = Depends(get_database)) -> dict:
        result = _collection(db).delete_one({"_id": parse_object_id(doc_id)})
        if result.deleted_count == 0:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return {"message": f"{label} deleted successfully"}

    return router

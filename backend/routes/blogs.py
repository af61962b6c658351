from fastapi import Depends, HTTPException
from pymongo.database import Database

from ..database import get_database
from ..models import Blog
from ..services.crud import build_crud_router, serialize

router = build_crud_router(
    "blogs",
    Blog,
    label="Blog",
    filter_fields=("author",),
)


# dos segmentos, no choca con GET /{doc_id}
@router.get("/slug/{slug}")
def get_blog_by_slug(slug: str, db: Database = Depends(get_database)):
    blog = db["blogs"].find_one({"slug": slug})
    if not blog:
        raise HTTPException(status_code=404, detail="Blog not found")
    return serialize(blog)

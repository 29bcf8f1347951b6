"""Category registry endpoint."""

from fastapi import APIRouter

from dealroom.domain.categories import categories
from dealroom.schemas.document import CategoryResponse

router = APIRouter()


@router.get("", response_model=list[CategoryResponse])
def list_categories() -> list[CategoryResponse]:
    """All document categories in display order."""
    return [
        CategoryResponse(
            key=c.key,
            label=c.label,
            description=c.description,
            required=c.required,
            max_files=c.max_files,
            accepted_extensions=sorted(c.accepted_extensions),
        )
        for c in categories()
    ]

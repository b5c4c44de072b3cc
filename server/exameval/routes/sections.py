from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from exameval.database import get_db
from exameval.dependencies import require_teacher
from exameval.errors import ErrorResponse
from exameval.models import Section, User
from exameval.schemas import SectionCreate, SectionResponse

router = APIRouter(tags=["Sections"])


@router.get("")
async def list_sections(user: User = Depends(require_teacher), db: Session = Depends(get_db)):
    sections = db.query(Section).order_by(Section.name).all()
    return {
        "success": True,
        "count": len(sections),
        "data": [SectionResponse.model_validate(s) for s in sections],
    }


@router.post("", status_code=201)
async def create_section(
    request: SectionCreate,
    user: User = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    name = request.name.strip()
    if db.query(Section).filter(Section.name == name).first():
        raise ErrorResponse(f"Section {name} already exists", 400)

    section = Section(name=name, student_count=request.student_count, created_by_id=user.id)
    db.add(section)
    db.commit()
    db.refresh(section)
    return {"success": True, "data": SectionResponse.model_validate(section)}

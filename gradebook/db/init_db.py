from sqlalchemy.orm import Session

# Import every model so the mappers are registered on Base.metadata
from gradebook.models.course import Course, Material, Recording  # noqa: F401
from gradebook.models.user import Role, RoleType, User  # noqa: F401
from gradebook.models.assignment import Assignment, AssignmentView  # noqa: F401
from gradebook.models.submission import Submission  # noqa: F401
from gradebook.models.notification import Notification  # noqa: F401
from gradebook.models.publication import Publication  # noqa: F401

def init_db(db: Session) -> None:
    """Initialize database with required data"""
    # Create roles if they don't exist
    for role_type in RoleType:
        existing_role = db.query(Role).filter(Role.role == role_type).first()
        if not existing_role:
            new_role = Role(role=role_type)
            db.add(new_role)

    try:
        db.commit()
    except Exception as e:
        db.rollback()
        raise e

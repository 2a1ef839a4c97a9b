"""Session (order), class, student and operator business logic."""

import logging
from typing import Iterable, List, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from fusion_edge.exceptions import ClientInputError, NotFoundError
from fusion_edge.models.order import Order
from fusion_edge.models.school import School, SchoolClass, Student
from fusion_edge.models.staff import Staff, UserRole
from fusion_edge.schemas.session import (
    ClassUpdateRequest,
    InitSessionRequest,
    SessionStatus,
    SessionUpdateRequest,
    StudentUpdateRequest,
)

logger = logging.getLogger(__name__)

# Session columns that may be explicitly cleared with null
_NULLABLE_SESSION_FIELDS = {
    "hosted_by",
    "assigned_operator_id",
    "current_class_name",
    "current_student_name",
    "device_used_mac",
    "scheduled_date",
}


class InvalidStatusError(ClientInputError):
    """Session status outside SessionStatus.ALL."""

    def __init__(self, value: str):
        super().__init__(
            f"Invalid status. Allowed values are: {', '.join(SessionStatus.ALL)}",
            details={"status": value},
        )


class NoUpdateFieldsError(ClientInputError):
    """Update request carried only the id."""

    def __init__(self):
        super().__init__("No update fields provided")


def collect_updates(
    request: BaseModel,
    exclude: Iterable[str] = ("id",),
    nullable: Iterable[str] = (),
) -> dict:
    """
    Build a column update from the fields the caller actually sent.

    Explicit nulls are kept only for ``nullable`` columns.

    Raises:
        NoUpdateFieldsError: If nothing is left to update
    """
    nullable = set(nullable)
    updates = {
        field: value
        for field, value in request.model_dump(exclude_unset=True, exclude=set(exclude)).items()
        if value is not None or field in nullable
    }
    if not updates:
        raise NoUpdateFieldsError()
    return updates


def get_operator(db: Session, operator_id: str) -> Staff:
    """
    Get an operator by public staff id.

    Raises:
        NotFoundError: If no OPERATOR staff row matches
    """
    operator = db.query(Staff).filter(
        Staff.staff_id == operator_id,
        Staff.role == UserRole.OPERATOR,
    ).first()
    if not operator:
        raise NotFoundError("Operator not found")
    return operator


def init_session(db: Session, request: InitSessionRequest) -> dict:
    """
    Resolve everything an operator needs to start serving a session.

    Args:
        db: Database session
        request: Operator staff id and the school's service passcode

    Returns:
        Dict with operator, session, school (or None) and classes by name

    Raises:
        NotFoundError: Unknown operator or passcode
    """
    operator = get_operator(db, request.operator_id)

    session = db.query(Order).filter(Order.external_ref == request.service_passcode).first()
    if not session:
        raise NotFoundError("Session not found")

    classes = (
        db.query(SchoolClass)
        .filter(SchoolClass.session_id == session.id)
        .order_by(SchoolClass.name.asc())
        .all()
    )
    school = db.query(School).filter(School.id == session.created_by_school).first()

    logger.info(f"Operator {operator.staff_id} opened session {session.id} ({len(classes)} classes)")
    return {
        "operator": operator,
        "session": session,
        "school": school,
        "classes": classes,
    }


def get_student(db: Session, student_id: str) -> Student:
    """
    Get a student by id.

    Raises:
        NotFoundError: If the student does not exist
    """
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise NotFoundError("Student not found")
    return student


def list_class_students(db: Session, class_id: str) -> List[Student]:
    """Students of a class ordered by full name."""
    return (
        db.query(Student)
        .filter(Student.class_id == class_id)
        .order_by(Student.full_name.asc())
        .all()
    )


def update_session(db: Session, request: SessionUpdateRequest) -> Order:
    """
    Apply a partial update to a session.

    Raises:
        InvalidStatusError: Status outside the allowed set
        NoUpdateFieldsError: Nothing to update
        NotFoundError: Unknown session id
    """
    if request.status is not None and request.status not in SessionStatus.ALL:
        raise InvalidStatusError(request.status)

    updates = collect_updates(request, nullable=_NULLABLE_SESSION_FIELDS)

    session = db.query(Order).filter(Order.id == request.id).first()
    if not session:
        raise NotFoundError("Session not found")

    for field, value in updates.items():
        setattr(session, field, value)
    db.commit()
    db.refresh(session)

    logger.info(f"Session {session.id} updated: {sorted(updates)}")
    return session


def update_class(db: Session, request: ClassUpdateRequest) -> SchoolClass:
    """
    Apply a partial update to a class.

    Raises:
        NoUpdateFieldsError: Nothing to update
        NotFoundError: Unknown class id
    """
    updates = collect_updates(request)

    school_class = db.query(SchoolClass).filter(SchoolClass.id == request.id).first()
    if not school_class:
        raise NotFoundError("Class not found")

    for field, value in updates.items():
        setattr(school_class, field, value)
    db.commit()
    db.refresh(school_class)
    return school_class


def update_student(db: Session, request: StudentUpdateRequest) -> Student:
    """
    Apply a partial update to a student.

    Raises:
        NoUpdateFieldsError: Nothing to update
        NotFoundError: Unknown student id
    """
    updates = collect_updates(request)

    student = get_student(db, request.id)
    for field, value in updates.items():
        setattr(student, field, value)
    db.commit()
    db.refresh(student)
    return student


def record_hosted_session(db: Session, operator_id: str, completed: Optional[bool]) -> Optional[Staff]:
    """
    Count a session the operator hosted to completion.

    Returns:
        The updated operator, or None when ``completed`` is not True

    Raises:
        NotFoundError: Unknown operator
    """
    if completed is not True:
        return None

    operator = get_operator(db, operator_id)
    operator.sessions_hosted = (operator.sessions_hosted or 0) + 1
    db.commit()
    db.refresh(operator)

    logger.info(f"Operator {operator.staff_id} sessions_hosted -> {operator.sessions_hosted}")
    return operator

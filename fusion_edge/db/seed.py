"""Database seeding script.

Creates the tables and a small demo dataset: one registered machine, a
referral agent with a promo code, a school that redeemed it, an operator and
a PENDING session with one class of students.
"""

from datetime import timedelta

from fusion_edge.config import get_settings
from fusion_edge.database import Base, create_db_engine, create_session_factory, utcnow
from fusion_edge.models import (
    Agent,
    Machine,
    Order,
    OrderItem,
    Profile,
    ReferralCode,
    School,
    SchoolClass,
    Staff,
    Student,
    UserRole,
)

DEMO_DEVICE_ID = "demo-printer-001"
DEMO_DEVICE_SECRET = "demo-device-secret"
DEMO_PASSCODE = "DEMO-2024"


def seed_database():
    """Seed database with initial data."""
    engine = create_db_engine(get_settings().database_url)
    Base.metadata.create_all(bind=engine)
    db = create_session_factory(engine)()

    try:
        existing = db.query(Machine).filter_by(device_id=DEMO_DEVICE_ID).first()
        if existing:
            print("Database already seeded. Skipping.")
            return

        machine = Machine(device_id=DEMO_DEVICE_ID, secret_key=DEMO_DEVICE_SECRET, model="Fusion DTF-1")
        db.add(machine)
        print(f"Created machine: {machine.device_id}")

        agent_user_id = "00000000-0000-0000-0000-00000000a9e1"
        agent = Agent(business_name="Demo Referrals Ltd", country="Tanzania", region="Dar es Salaam",
                      user_id=agent_user_id)
        db.add(agent)
        db.flush()
        db.add(Staff(staff_id="AG001", user_id=agent_user_id, email="agent@example.com",
                     full_name="Demo Agent", role=UserRole.AGENT))
        code = ReferralCode(code="FUSION-DEMO", agent_id=agent.id, credit_worth_factor=1.5, is_used=True)
        db.add(code)
        print(f"Created agent {agent.business_name} with code {code.code}")

        school = School(
            name="Demo Secondary School",
            email="school@example.com",
            country="Tanzania",
            region="Dar es Salaam",
            district="Kinondoni",
            referral_code_used=code.code,
            referred_by_agent_id=agent.id,
            referred_at=utcnow(),
        )
        db.add(school)
        db.flush()
        print(f"Created school: {school.name}")

        operator_user_id = "00000000-0000-0000-0000-0000000000e1"
        db.add(Profile(id=operator_user_id, full_name="Demo Operator", role=UserRole.OPERATOR))
        db.add(Staff(staff_id="OP001", user_id=operator_user_id, email="operator@example.com",
                     full_name="Demo Operator", role=UserRole.OPERATOR))

        session = Order(
            created_by_school=school.id,
            external_ref=DEMO_PASSCODE,
            status="PENDING",
            school_name=school.name,
            total_amount=150000.0,
            submission_time=utcnow() - timedelta(hours=1),
        )
        db.add(session)
        db.flush()

        school_class = SchoolClass(name="Form 1A", school_id=school.id, session_id=session.id,
                                   total_students_to_serve_in_class=2)
        db.add(school_class)
        db.flush()

        for name in ("Amina Juma", "Baraka Mushi"):
            student = Student(full_name=name, class_id=school_class.id, school_id=school.id,
                              session_id=session.id, total_dark_garment_count=2, total_light_garment_count=1)
            db.add(student)
            db.flush()
            db.add(OrderItem(order_id=session.id, student_id=student.id, dark_count=2, light_count=1))
        print(f"Created session {session.external_ref} with class {school_class.name}")

        db.commit()
        print("\n✓ Database seeded successfully!")

    except Exception as e:
        db.rollback()
        print(f"Error seeding database: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    print("Starting database seeding...")
    seed_database()

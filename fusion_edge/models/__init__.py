"""SQLAlchemy models."""

from fusion_edge.database import Base
from fusion_edge.models.machine import Machine, MachineLocation
from fusion_edge.models.print_event import PrintEvent
from fusion_edge.models.referral import Agent, ReferralCode
from fusion_edge.models.school import School, SchoolClass, Student
from fusion_edge.models.order import Order, OrderItem
from fusion_edge.models.staff import Profile, Staff, UserRole, UserRoleAssignment
from fusion_edge.models.activity import AuditEvent, Notification, StaffMetric, StaffTask

__all__ = [
    "Base",
    "Machine",
    "MachineLocation",
    "PrintEvent",
    "Agent",
    "ReferralCode",
    "School",
    "SchoolClass",
    "Student",
    "Order",
    "OrderItem",
    "Profile",
    "Staff",
    "UserRole",
    "UserRoleAssignment",
    "AuditEvent",
    "Notification",
    "StaffMetric",
    "StaffTask",
]

"""
Agent factories for candidates, faculty and departments.
"""

from .factories import (
    build_faculty_roster,
    create_agents,
    create_candidate,
    create_candidates,
    create_department,
    create_departments,
    create_faculty,
    create_faculty_members,
)

__all__ = [
    "build_faculty_roster",
    "create_agents",
    "create_candidate",
    "create_candidates",
    "create_department",
    "create_departments",
    "create_faculty",
    "create_faculty_members",
]

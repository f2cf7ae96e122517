"""
API Services Layer.

Lifecycle components for jobs, applications and interviews. Each takes the
request's ``AsyncSession`` in its constructor.
"""

from api.services.jobs import JobLifecycleManager, build_job_filters

from api.services.applications import (
    ApplicationStateMachine,
    check_status_transition,
    parse_application_status,
)

from api.services.interviews import InterviewScheduler

__all__ = [
    # Jobs
    "JobLifecycleManager",
    "build_job_filters",
    # Applications
    "ApplicationStateMachine",
    "check_status_transition",
    "parse_application_status",
    # Interviews
    "InterviewScheduler",
]
